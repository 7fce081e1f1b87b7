from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from agent_portal.clients.backend import BookingBackendClient
from agent_portal.schemas.doctor import Doctor, DoctorSearchRequest, DoctorSearchResponse
from agent_portal.services.envelope import parse_records, unwrap
from agent_portal.services.exceptions import ServiceError
from agent_portal.services.mock_store import DoctorRepository, get_mock_store
from agent_portal.session import AgentSession

logger = logging.getLogger(__name__)

# Shown when the backend directory is empty or unreachable.
DEFAULT_DOCTORS = (
    Doctor(name="Dr. Saman Perera", specialty="Cardiology", hospital="Asiri Central Hospital", fee=3000.0),
    Doctor(name="Dr. Nimal Fernando", specialty="Neurology", hospital="Nawaloka Hospital", fee=3000.0),
    Doctor(name="Dr. Kamala Silva", specialty="Pediatrics", hospital="Lanka Hospital", fee=3000.0),
    Doctor(name="Dr. Rajesh Gupta", specialty="Orthopedics", hospital="Durdans Hospital", fee=3000.0),
)


def _search_params(request: DoctorSearchRequest) -> Optional[Dict[str, str]]:
    params = {}
    if request.query.strip():
        params["query"] = request.query.strip()
    if request.specialty not in ("", "all"):
        params["specialty"] = request.specialty
    if request.hospital not in ("", "all"):
        params["hospital"] = request.hospital
    return params or None


def _matches(doctor: Doctor, request: DoctorSearchRequest) -> bool:
    query = request.query.strip().lower()
    if query and query not in doctor.name.lower() and query not in doctor.specialty.lower():
        return False
    if request.specialty not in ("", "all") and doctor.specialty != request.specialty:
        return False
    if request.hospital not in ("", "all") and doctor.hospital != request.hospital:
        return False
    return True


class DoctorDirectoryService:
    """Doctor search backed by the booking backend, with a static fallback list."""

    def __init__(
        self,
        client: BookingBackendClient,
        *,
        repository: DoctorRepository | None = None,
    ) -> None:
        self._client = client
        self._repository = repository
        if self._client.use_mock_data:
            self._repository = repository or get_mock_store().doctors

    async def search(
        self, request: DoctorSearchRequest, session: AgentSession | None = None
    ) -> DoctorSearchResponse:
        logger.info("Searching doctors for query '%s'", request.query)
        doctors, source = await self._load(session, _search_params(request))
        # The backend filters too; the local pass covers the fallback list.
        items = [doctor for doctor in doctors if _matches(doctor, request)]
        return DoctorSearchResponse(total=len(items), items=items, source=source)

    async def doctor_names(self, session: AgentSession | None = None) -> List[str]:
        doctors, _ = await self._load(session)
        return [doctor.name for doctor in doctors]

    async def _load(
        self,
        session: AgentSession | None,
        params: Optional[Dict[str, str]] = None,
    ) -> tuple[List[Doctor], str]:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            if not self._repository:
                raise RuntimeError("Mock doctor repository not configured")
            return self._parse(await self._repository.search()), "mock"

        try:
            body = await self._client.get(
                "/doctors", params, token=session.access_token if session else None
            )
            doctors = self._parse(unwrap(body, action="Doctor search"))
        except ServiceError as exc:
            logger.warning("Doctor search failed, using default doctor list: %s", exc)
            doctors = []

        if not doctors:
            return list(DEFAULT_DOCTORS), "fallback"
        return doctors, "backend"

    @staticmethod
    def _parse(records: Any) -> List[Doctor]:
        return parse_records(Doctor, records, action="Doctor search")
