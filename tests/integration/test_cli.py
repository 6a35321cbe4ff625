"""Integration tests for the skillhub CLI.

The client is real; only its transport is replaced.
"""

import json
from unittest.mock import patch

import httpx
import pytest

from skillhub_sdk.cli import main
from skillhub_sdk.client import SkillHubClient


def _skill(id, category=None):
    return {
        "id": id,
        "name": f"Skill {id}",
        "slug": f"skill-{id}",
        "author": "alice",
        "repo_url": f"https://github.com/alice/{id}",
        "category": category,
    }


class FakeApi:
    """Transport double answering a few SkillHub endpoints."""

    def __init__(self, status=200):
        self.status = status
        self.requests = []

    async def __call__(self, request):
        self.requests.append(request)
        path = request.url.path
        if self.status != 200:
            return httpx.Response(self.status, json={"error": {"code": "BOOM", "message": "server exploded"}})
        if path.endswith("/skills/search"):
            return httpx.Response(
                200,
                json={
                    "results": [{"id": "a", "name": "A", "slug": "a", "similarity_score": 0.9}],
                    "meta": {"method_used": "hybrid", "search_latency_ms": 5},
                },
            )
        if path.endswith("/skills/catalog"):
            return httpx.Response(
                200,
                json={
                    "skills": [_skill("a", "pdf"), _skill("b", "pdf"), _skill("c")],
                    "pagination": {"total": 3, "limit": 10, "offset": 0, "has_more": False},
                },
            )
        if path.endswith("/install") and request.url.params.get("format") == "raw":
            return httpx.Response(200, text="# PDF skill")
        if path.endswith("/install"):
            return httpx.Response(
                200,
                json={
                    "skill": {"id": "1", "slug": "pdf", "name": "PDF", "repo_url": "https://x"},
                    "install": {"agents": [], "content": "# PDF", "content_url": "https://x/raw"},
                    "scripts": {"bash": "mkdir -p ~/.claude/skills/pdf", "powershell": "New-Item"},
                    "one_liners": {"unix": "curl", "windows": "irm"},
                },
            )
        if path.startswith("/api/v1/user/favorites/"):
            return httpx.Response(204)
        return httpx.Response(404)


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def from_settings(api):
    client = SkillHubClient("https://skillhub.test/api/v1", transport=api)
    with patch.object(SkillHubClient, "from_settings", return_value=client) as mock:
        yield mock


class TestCliCommands:
    def test_search_prints_results(self, from_settings, api, capsys):
        with patch("sys.argv", ["skillhub", "search", "pdf", "--limit", "3"]):
            main()

        out = json.loads(capsys.readouterr().out)
        assert out[0]["id"] == "a"
        assert json.loads(api.requests[0].content) == {"query": "pdf", "limit": 3}

    def test_search_meta(self, from_settings, capsys):
        with patch("sys.argv", ["skillhub", "search", "pdf", "--meta"]):
            main()

        out = json.loads(capsys.readouterr().out)
        assert out["meta"]["method_used"] == "hybrid"

    def test_catalog_filters(self, from_settings, api, capsys):
        with patch("sys.argv", ["skillhub", "catalog", "--tag", "pdf", "--tag", "ocr", "--sort", "stars"]):
            main()

        out = json.loads(capsys.readouterr().out)
        assert out["pagination"]["total"] == 3
        assert dict(api.requests[0].url.params) == {"tags": "pdf,ocr", "sort": "stars"}

    def test_categories(self, from_settings, capsys):
        with patch("sys.argv", ["skillhub", "categories"]):
            main()

        out = json.loads(capsys.readouterr().out)
        assert out[0] == {"name": "pdf", "count": 2}

    def test_install_script_only(self, from_settings, api, capsys):
        with patch("sys.argv", ["skillhub", "install", "pdf", "--agent", "codex", "--script", "bash"]):
            main()

        assert capsys.readouterr().out == "mkdir -p ~/.claude/skills/pdf\n"
        assert api.requests[0].url.params["agents"] == "codex"

    def test_content_prints_raw_text(self, from_settings, capsys):
        with patch("sys.argv", ["skillhub", "content", "pdf"]):
            main()

        assert capsys.readouterr().out == "# PDF skill\n"

    def test_agents_needs_no_client(self, from_settings, capsys):
        with patch("sys.argv", ["skillhub", "agents"]):
            main()

        out = json.loads(capsys.readouterr().out)
        assert [a["id"] for a in out] == ["claude", "codex", "gemini", "opencode"]
        from_settings.assert_not_called()

    def test_global_flags_override_settings(self, from_settings):
        with patch("sys.argv", ["skillhub", "--token", "abc", "--timeout", "2", "popular"]):
            main()

        from_settings.assert_called_once_with(token="abc", timeout=2.0)

    def test_no_command_prints_help(self, from_settings, capsys):
        with patch("sys.argv", ["skillhub"]):
            main()

        assert "usage:" in capsys.readouterr().out
        from_settings.assert_not_called()


class TestCliErrors:
    def test_favorites_without_token_exits_1(self, from_settings, api, capsys):
        with patch("sys.argv", ["skillhub", "favorites"]):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert "error: Authentication required (status 401, code UNAUTHORIZED)" in capsys.readouterr().err
        assert api.requests == []

    def test_server_error_is_reported(self, capsys):
        client = SkillHubClient("https://skillhub.test/api/v1", transport=FakeApi(status=500))
        with patch.object(SkillHubClient, "from_settings", return_value=client):
            with patch("sys.argv", ["skillhub", "recent"]):
                with pytest.raises(SystemExit):
                    main()

        assert "server exploded (status 500, code BOOM)" in capsys.readouterr().err

    def test_favorite_add_with_token(self, api, capsys):
        client = SkillHubClient("https://skillhub.test/api/v1", token="tok", transport=api)
        with patch.object(SkillHubClient, "from_settings", return_value=client):
            with patch("sys.argv", ["skillhub", "favorite-add", "s1"]):
                main()

        assert capsys.readouterr().out == "Added s1 to favorites\n"
        assert api.requests[0].method == "POST"
