"""Agent session storage.

All reads and writes of authentication state go through a
:class:`SessionRepository`; services receive the resolved
:class:`AgentSession` explicitly instead of looking tokens up themselves.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from agent_portal.schemas.auth import AgentProfile


@dataclass(frozen=True)
class AgentSession:
    access_token: str
    refresh_token: Optional[str]
    agent: AgentProfile

    @property
    def agent_id(self) -> str:
        return self.agent.id


class SessionRepository(Protocol):
    """Read/write boundary for agent sessions."""

    def save(self, session: AgentSession) -> None:
        """Store a session under its access token."""

    def get(self, access_token: str) -> Optional[AgentSession]:
        """Return the session for a token, or ``None``."""

    def delete(self, access_token: str) -> None:
        """Forget a session; unknown tokens are ignored."""

    def has_agent(self, agent_id: str) -> bool:
        """Return whether any live session belongs to the agent."""


class InMemorySessionRepository:
    def __init__(self) -> None:
        self._sessions: Dict[str, AgentSession] = {}

    def save(self, session: AgentSession) -> None:
        self._sessions[session.access_token] = session

    def get(self, access_token: str) -> Optional[AgentSession]:
        return self._sessions.get(access_token)

    def delete(self, access_token: str) -> None:
        self._sessions.pop(access_token, None)

    def has_agent(self, agent_id: str) -> bool:
        return any(session.agent_id == agent_id for session in self._sessions.values())


_session_repository: Optional[InMemorySessionRepository] = None


def get_session_repository() -> InMemorySessionRepository:
    global _session_repository
    if _session_repository is None:
        _session_repository = InMemorySessionRepository()
    return _session_repository


def reset_session_repository() -> None:
    global _session_repository
    _session_repository = None
