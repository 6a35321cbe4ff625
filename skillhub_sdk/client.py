"""Async SkillHub API client using httpx.

Every endpoint method goes through `SkillHubClient._request`, which owns the
header policy, the per-call deadline, caller cancellation and the mapping of
every failure onto `SkillHubError`. No retries, no caching.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from .agents import DEFAULT_AGENTS
from .cancellation import CancellationToken
from .errors import NETWORK_ERROR, TIMEOUT, UNAUTHORIZED, UNKNOWN, SkillHubError, from_error_body
from .models import (
    CatalogQuery,
    CatalogResponse,
    Category,
    InstallInfo,
    SearchMethod,
    SearchRequest,
    SearchResponse,
    SearchResult,
    Skill,
    SkillDetail,
    User,
    count_categories,
)
from .settings import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, Settings, get_settings

logger = logging.getLogger(__name__)

# Sends a fully built request and returns the (already read) response.
Transport = Callable[[httpx.Request], Awaitable[httpx.Response]]

DEFAULT_LISTING_LIMIT = 10
CATEGORY_SCAN_LIMIT = 500  # Skills fetched to build category counts


@dataclass
class RequestOptions:
    """Per-call overrides. `timeout` is in seconds; None means client default."""

    timeout: float | None = None
    headers: dict[str, str] | None = None
    signal: CancellationToken | None = None


class _Cancelled(Exception):
    """The call's cancellation token fired before the transport settled."""


def _discard_outcome(task: asyncio.Future) -> None:
    # Late result of an abandoned transport call; retrieve it so asyncio
    # doesn't report it as never retrieved.
    if not task.cancelled():
        task.exception()


def _segment(value: str) -> str:
    """Escape an id or slug for use as a single URL path segment."""
    return quote(value, safe="")


class SkillHubClient:
    """Client for the SkillHub skill catalog API.

    The optional `transport` replaces the HTTP layer: any async callable that
    takes an `httpx.Request` and returns an `httpx.Response`. Without one the
    client owns an `httpx.AsyncClient`; close it with `aclose()` or use the
    client as an async context manager.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        transport: Transport | None = None,
    ):
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._token = token
        self.timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
        self._default_headers = dict(headers or {})
        self._http: httpx.AsyncClient | None = None
        if transport is None:
            # The per-call deadline is the only clock; httpx's own timeouts stay off.
            self._http = httpx.AsyncClient(timeout=None)
            transport = self._http.send
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> "SkillHubClient":
        """Build a client from SKILLHUB_* environment settings.

        Keyword arguments override the corresponding setting.
        """
        settings = settings or get_settings()
        kwargs.setdefault("base_url", settings.base_url)
        kwargs.setdefault("token", settings.token)
        kwargs.setdefault("timeout", settings.timeout)
        return cls(**kwargs)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        if self._http is not None:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def set_token(self, token: str | None) -> None:
        """Set or clear the bearer token used by subsequent calls."""
        self._token = token

    def is_authenticated(self) -> bool:
        return bool(self._token)

    def _require_token(self) -> None:
        if not self._token:
            raise SkillHubError("Authentication required", 401, UNAUTHORIZED)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _compose_headers(self, extra: dict[str, str] | None) -> httpx.Headers:
        headers = httpx.Headers({"Content-Type": "application/json"})
        headers.update(self._default_headers)
        if extra:
            headers.update(extra)
        token = self._token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        body=None,
        params: dict[str, str] | None = None,
        options: RequestOptions | None = None,
        parse: Callable | None = None,
        text: bool = False,
    ):
        """Run one API call and return its decoded payload.

        Returns `parse(json)` (or the raw JSON when `parse` is None), or the
        response text when `text` is set. Raises SkillHubError on any failure.
        """
        options = options or RequestOptions()
        ep = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        url = f"{self.base_url}{ep}"
        headers = self._compose_headers(options.headers)

        timeout = options.timeout if options.timeout is not None else self.timeout
        deadline = CancellationToken()
        timer = asyncio.get_running_loop().call_later(timeout, deadline.cancel, "timeout")
        signal = deadline if options.signal is None else CancellationToken.merge(deadline, options.signal)

        logger.debug("%s %s (timeout %ss)", method, url, timeout)
        try:
            request = httpx.Request(
                method,
                url,
                params=params,
                headers=headers,
                content=json.dumps(body) if body is not None else None,
            )
            response = await self._send(request, signal)
            timer.cancel()

            if not response.is_success:
                if text:
                    raise SkillHubError("Failed to fetch skill content", response.status_code)
                raise self._error_from_response(response)

            if text:
                return response.text
            data = response.json() if response.content else None
            return parse(data) if parse is not None else data
        except SkillHubError as exc:
            logger.debug("%s %s failed: %r", method, url, exc)
            raise
        except _Cancelled:
            if signal.source is deadline:
                logger.debug("%s %s timed out after %ss", method, url, timeout)
                raise SkillHubError("Request timeout", 408, TIMEOUT) from None
            logger.debug("%s %s cancelled by caller", method, url)
            raise SkillHubError("Request cancelled", 0, NETWORK_ERROR) from None
        except (httpx.RequestError, OSError) as exc:
            logger.debug("%s %s transport error: %s", method, url, exc)
            raise SkillHubError(str(exc) or type(exc).__name__, 0, NETWORK_ERROR) from exc
        except Exception as exc:
            logger.debug("%s %s unexpected error", method, url, exc_info=True)
            raise SkillHubError(
                "Unknown error",
                0,
                UNKNOWN,
                {"exception": type(exc).__name__, "message": str(exc)},
            ) from exc
        finally:
            timer.cancel()
            if signal is not deadline:
                signal.close()

    async def _send(self, request: httpx.Request, signal: CancellationToken) -> httpx.Response:
        """Race the transport against `signal`; the loser is cancelled."""
        if signal.cancelled:
            raise _Cancelled()

        sending = asyncio.ensure_future(self._transport(request))
        waiting = asyncio.ensure_future(signal.wait())
        try:
            done, _ = await asyncio.wait({sending, waiting}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiting.cancel()
            if not sending.done():
                sending.cancel()
                sending.add_done_callback(_discard_outcome)

        if sending not in done:
            raise _Cancelled()
        return sending.result()

    @staticmethod
    def _error_from_response(response: httpx.Response) -> SkillHubError:
        try:
            data = response.json()
        except ValueError:
            data = None
        return from_error_body(response.status_code, data)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        *,
        limit: int | None = None,
        method: SearchMethod | None = None,
        mmr: bool | None = None,
        mmr_lambda: float | None = None,
        category: str | None = None,
        min_score: float | None = None,
        exclude_ids: list[str] | None = None,
        include_content: bool | None = None,
        options: RequestOptions | None = None,
    ) -> list[SearchResult]:
        """Search skills with a natural-language query."""
        request = SearchRequest(
            query=query,
            limit=limit,
            method=method,
            mmr=mmr,
            mmr_lambda=mmr_lambda,
            category=category,
            min_score=min_score,
            exclude_ids=exclude_ids,
            include_content=include_content,
        )
        response = await self.search_with_meta(request, options)
        return response.results

    async def search_with_meta(
        self, request: SearchRequest, options: RequestOptions | None = None
    ) -> SearchResponse:
        """Search and return results together with method and latency metadata."""
        return await self._request(
            "POST",
            "/skills/search",
            body=request.to_dict(),
            options=options,
            parse=SearchResponse.from_dict,
        )

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def get_catalog(
        self, query: CatalogQuery | None = None, options: RequestOptions | None = None
    ) -> CatalogResponse:
        """Browse the catalog with filters, sorting and pagination."""
        params = query.to_params() if query is not None else {}
        return await self._request(
            "GET",
            "/skills/catalog",
            params=params or None,
            options=options,
            parse=CatalogResponse.from_dict,
        )

    async def get_popular(
        self, limit: int = DEFAULT_LISTING_LIMIT, options: RequestOptions | None = None
    ) -> list[Skill]:
        response = await self.get_catalog(
            CatalogQuery(sort="composite", limit=limit, status="published"), options
        )
        return response.skills

    async def get_recent(
        self, limit: int = DEFAULT_LISTING_LIMIT, options: RequestOptions | None = None
    ) -> list[Skill]:
        response = await self.get_catalog(
            CatalogQuery(sort="recent", limit=limit, status="published"), options
        )
        return response.skills

    async def get_categories(self, options: RequestOptions | None = None) -> list[Category]:
        """Count published skills per category, largest category first."""
        response = await self.get_catalog(
            CatalogQuery(limit=CATEGORY_SCAN_LIMIT, status="published"), options
        )
        return count_categories(response.skills)

    # ------------------------------------------------------------------
    # Skill detail and install
    # ------------------------------------------------------------------

    async def get_skill(
        self,
        id_or_slug: str,
        include_content: bool = False,
        options: RequestOptions | None = None,
    ) -> SkillDetail:
        params = {"include_content": "true"} if include_content else None
        return await self._request(
            "GET",
            f"/skills/{_segment(id_or_slug)}",
            params=params,
            options=options,
            parse=SkillDetail.from_dict,
        )

    async def get_install_info(
        self,
        id_or_slug: str,
        agents: str | Sequence[str] = DEFAULT_AGENTS,
        options: RequestOptions | None = None,
    ) -> InstallInfo:
        """Get install scripts and paths for the given agents (default: claude).

        A single agent id may be passed as a plain string.
        """
        if isinstance(agents, str):
            agents = (agents,)
        return await self._request(
            "GET",
            f"/skills/{_segment(id_or_slug)}/install",
            params={"agents": ",".join(agents), "format": "json"},
            options=options,
            parse=InstallInfo.from_dict,
        )

    async def get_skill_content(self, id_or_slug: str, options: RequestOptions | None = None) -> str:
        """Get the raw SKILL.md text for a skill."""
        return await self._request(
            "GET",
            f"/skills/{_segment(id_or_slug)}/install",
            params={"format": "raw"},
            options=options,
            text=True,
        )

    # ------------------------------------------------------------------
    # User (authenticated)
    # ------------------------------------------------------------------

    async def get_current_user(self, options: RequestOptions | None = None) -> User:
        self._require_token()
        return await self._request("GET", "/user/me", options=options, parse=User.from_dict)

    async def get_favorites(self, options: RequestOptions | None = None) -> list[Skill]:
        self._require_token()
        return await self._request(
            "GET",
            "/user/favorites",
            options=options,
            parse=lambda data: [Skill.from_dict(s) for s in data["skills"]],
        )

    async def add_favorite(self, skill_id: str, options: RequestOptions | None = None) -> None:
        self._require_token()
        await self._request("POST", f"/user/favorites/{_segment(skill_id)}", options=options)

    async def remove_favorite(self, skill_id: str, options: RequestOptions | None = None) -> None:
        self._require_token()
        await self._request("DELETE", f"/user/favorites/{_segment(skill_id)}", options=options)


def create_client(**kwargs) -> SkillHubClient:
    """Create a SkillHub client; see SkillHubClient for the accepted options."""
    return SkillHubClient(**kwargs)
