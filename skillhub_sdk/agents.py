"""Coding agents that SkillHub can generate install instructions for."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

AgentId = Literal["claude", "codex", "gemini", "opencode"]

DEFAULT_AGENTS: tuple[AgentId, ...] = ("claude",)


@dataclass(frozen=True)
class Agent:
    id: AgentId
    name: str
    short_name: str
    install_path: str  # Unix, relative to $HOME
    win_install_path: str


SUPPORTED_AGENTS = MappingProxyType(
    {
        "claude": Agent(
            id="claude",
            name="Claude Code",
            short_name="Claude",
            install_path="~/.claude/skills/",
            win_install_path="%USERPROFILE%\\.claude\\skills\\",
        ),
        "codex": Agent(
            id="codex",
            name="Codex CLI",
            short_name="Codex",
            install_path="~/.codex/skills/",
            win_install_path="%USERPROFILE%\\.codex\\skills\\",
        ),
        "gemini": Agent(
            id="gemini",
            name="Gemini CLI",
            short_name="Gemini",
            install_path="~/.gemini/skills/",
            win_install_path="%USERPROFILE%\\.gemini\\skills\\",
        ),
        "opencode": Agent(
            id="opencode",
            name="OpenCode",
            short_name="OpenCode",
            install_path="~/.opencode/skill/",
            win_install_path="%USERPROFILE%\\.opencode\\skill\\",
        ),
    }
)


def get_agent(agent_id: str) -> Agent:
    """Look up a supported agent, raising KeyError with the valid ids."""
    try:
        return SUPPORTED_AGENTS[agent_id]
    except KeyError:
        raise KeyError(
            f"Unknown agent {agent_id!r}. Supported: {', '.join(SUPPORTED_AGENTS)}"
        ) from None
