from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from agent_portal.bulk.batch import BatchRepository, get_batch_repository
from agent_portal.clients.backend import BookingBackendClient
from agent_portal.schemas.auth import AgentProfile, LoginRequest
from agent_portal.services.exceptions import AuthenticationError, DownstreamServiceError, ServiceError
from agent_portal.services.mock_store import AgentRepository, get_mock_store
from agent_portal.session import AgentSession, SessionRepository, get_session_repository

logger = logging.getLogger(__name__)


class AuthService:
    """Logs agents in and out; the only writer to the session repository."""

    def __init__(
        self,
        client: BookingBackendClient,
        *,
        sessions: SessionRepository | None = None,
        batches: BatchRepository | None = None,
        repository: AgentRepository | None = None,
    ) -> None:
        self._client = client
        self._sessions = sessions or get_session_repository()
        self._batches = batches or get_batch_repository()
        self._repository = repository
        if self._client.use_mock_data:
            self._repository = repository or get_mock_store().agents

    async def login(self, request: LoginRequest) -> AgentSession:
        logger.info("Login attempt for %s", request.email)
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            if not self._repository:
                raise RuntimeError("Mock agent repository not configured")
            body: Any = await self._repository.login(request.email, request.password)
        else:
            try:
                body = await self._client.post("/auth/login", request.model_dump())
            except DownstreamServiceError as exc:
                if exc.status_code in (400, 401, 403):
                    raise AuthenticationError(
                        exc.backend_message or "Invalid email or password", cause=exc
                    ) from exc
                raise

        if not isinstance(body, dict) or not body.get("success"):
            message = body.get("message") if isinstance(body, dict) else None
            raise AuthenticationError(message or "Invalid email or password")

        data = body.get("data") or {}
        if not isinstance(data, dict) or not isinstance(data.get("tokens") or {}, dict):
            raise DownstreamServiceError("Booking backend returned a malformed login response")
        tokens = data.get("tokens") or {}
        access_token = tokens.get("accessToken")
        if not access_token:
            raise AuthenticationError("Login response did not include an access token")
        try:
            agent = AgentProfile.model_validate(data.get("agent") or {})
        except ValidationError as exc:
            raise ServiceError("Login response did not include an agent profile", cause=exc) from exc

        session = AgentSession(
            access_token=access_token,
            refresh_token=tokens.get("refreshToken"),
            agent=agent,
        )
        self._sessions.save(session)
        logger.info("Agent %s logged in", agent.id)
        return session

    async def logout(self, session: AgentSession) -> None:
        try:
            if self._client.use_mock_data:
                await self._client.simulate_latency()
                if not self._repository:
                    raise RuntimeError("Mock agent repository not configured")
                await self._repository.logout(session.refresh_token)
            else:
                await self._client.post(
                    "/auth/logout",
                    {"refreshToken": session.refresh_token},
                    token=session.access_token,
                )
        except DownstreamServiceError as exc:
            logger.warning("Backend logout failed for agent %s: %s", session.agent_id, exc)
        finally:
            self._sessions.delete(session.access_token)
            # The batch is shared by the agent's sessions.
            if not self._sessions.has_agent(session.agent_id):
                self._batches.discard(session.agent_id)
        logger.info("Agent %s logged out", session.agent_id)

    def resolve(self, access_token: str) -> AgentSession:
        session = self._sessions.get(access_token)
        if session is None:
            raise AuthenticationError("Not authenticated")
        return session
