from __future__ import annotations

import logging
from typing import Any

from agent_portal.clients.backend import BookingBackendClient
from agent_portal.schemas.report import Report, ReportListResponse, ReportRequest
from agent_portal.services.envelope import missing_record, parse_record, parse_records, unwrap
from agent_portal.services.exceptions import DownstreamServiceError
from agent_portal.services.mock_store import ReportRepository, get_mock_store
from agent_portal.session import AgentSession

logger = logging.getLogger(__name__)


class ReportService:
    """Thin pass-through to the backend's report generation endpoints."""

    def __init__(
        self,
        client: BookingBackendClient,
        *,
        repository: ReportRepository | None = None,
    ) -> None:
        self._client = client
        self._repository = repository
        if self._client.use_mock_data:
            self._repository = repository or get_mock_store().reports

    def _mock_repository(self) -> ReportRepository:
        if not self._repository:
            raise RuntimeError("Mock report repository not configured")
        return self._repository

    async def generate(self, request: ReportRequest, session: AgentSession) -> Report:
        logger.info(
            "Generating %s report for %s to %s", request.type, request.date_from, request.date_to
        )
        payload = request.model_dump(by_alias=True, mode="json")
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            body: Any = await self._mock_repository().generate(payload)
        else:
            body = await self._client.post("/reports/generate", payload, token=session.access_token)
        return parse_record(
            Report, unwrap(body, action="Report generation"), action="Report generation"
        )

    async def list(self, session: AgentSession) -> ReportListResponse:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            body: Any = await self._mock_repository().list()
        else:
            body = await self._client.get("/reports", token=session.access_token)
        items = parse_records(
            Report, unwrap(body, action="Report listing"), action="Report listing"
        )
        return ReportListResponse(total=len(items), items=items)

    async def get(self, report_id: str, session: AgentSession) -> Report:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            body: Any = await self._mock_repository().get(report_id)
        else:
            body = await self._fetch("GET", report_id, session)
        return parse_record(Report, unwrap(body, action="Report lookup"), action="Report lookup")

    async def delete(self, report_id: str, session: AgentSession) -> None:
        logger.info("Deleting report %s", report_id)
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            body: Any = await self._mock_repository().delete(report_id)
        else:
            body = await self._fetch("DELETE", report_id, session)
        unwrap(body, action="Report deletion")

    async def _fetch(self, method: str, report_id: str, session: AgentSession) -> Any:
        path = f"/reports/{report_id}"
        try:
            if method == "DELETE":
                return await self._client.delete(path, token=session.access_token)
            return await self._client.get(path, token=session.access_token)
        except DownstreamServiceError as exc:
            missing = missing_record(exc, "Report not found")
            if missing is not None:
                raise missing from exc
            raise
