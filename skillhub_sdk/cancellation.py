"""Cooperative cancellation tokens for in-flight requests.

A token is cancelled at most once. Listeners run exactly once, in
registration order, either when the token is cancelled or immediately if it
already was. Tokens are bound to a single asyncio event loop; cancel them
from that loop (use `loop.call_soon_threadsafe(token.cancel)` from threads).
"""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """A cancel-once signal that callers pass into client requests."""

    def __init__(self):
        self._cancelled = False
        self._reason: str | None = None
        self._source: CancellationToken | None = None
        self._listeners: list[Callable[["CancellationToken"], None]] = []
        self._event: asyncio.Event | None = None
        self._unlinks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def source(self) -> "CancellationToken | None":
        """The token whose cancellation triggered this one.

        For a token cancelled directly this is the token itself; for a merged
        token it is whichever input fired first.
        """
        return self._source

    def cancel(self, reason: str = "cancelled") -> None:
        self._trigger(reason, self)

    def _trigger(self, reason: str, source: "CancellationToken") -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        self._source = source
        if self._event is not None:
            self._event.set()
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                # Remaining listeners still have to see the cancellation.
                logger.exception("Cancellation listener %r failed", listener)

    def add_listener(self, listener: Callable[["CancellationToken"], None]) -> Callable[[], None]:
        """Register a callback; returns a function that removes it again."""
        if self._cancelled:
            listener(self)
            return lambda: None
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        await self._event.wait()

    @classmethod
    def merge(cls, *tokens: "CancellationToken") -> "CancellationToken":
        """Return a token that fires as soon as any of `tokens` fires.

        If one of them is already cancelled the merged token is cancelled
        before this returns. Call `close()` on the result once it is no
        longer needed so the inputs drop their references to it.
        """
        merged = cls()
        for token in tokens:
            if token.cancelled:
                merged._trigger(token.reason, token.source or token)
                merged.close()
                return merged

            def forward(fired: CancellationToken, _token=token):
                merged._trigger(fired.reason, _token.source or _token)

            merged._unlinks.append(token.add_listener(forward))
        return merged

    def close(self) -> None:
        """Detach this token from any tokens it was merged from."""
        unlinks, self._unlinks = self._unlinks, []
        for unlink in unlinks:
            unlink()

    def __repr__(self):
        state = f"cancelled, reason={self._reason!r}" if self._cancelled else "active"
        return f"<CancellationToken {state}>"
