from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from agent_portal.clients.backend import BookingBackendClient
from agent_portal.schemas.appointment import (
    Appointment,
    AppointmentFilter,
    AppointmentListResponse,
    QueueUpdateResponse,
)
from agent_portal.schemas.common import Notification
from agent_portal.services.envelope import missing_record, parse_records, unwrap
from agent_portal.services.exceptions import DownstreamServiceError, InvalidRequestError, ServiceError
from agent_portal.services.mock_store import AppointmentRepository, get_mock_store
from agent_portal.session import AgentSession

logger = logging.getLogger(__name__)

_TAB_STATUSES = {
    "upcoming": {"confirmed", "pending"},
    "completed": {"completed"},
    "cancelled": {"cancelled"},
}

# Last pending-confirmation queue seen per agent, used for tentative updates.
_queue_snapshots: Dict[str, List[Appointment]] = {}


def reset_queue_snapshots() -> None:
    _queue_snapshots.clear()


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in value.lower()


class AppointmentService:
    def __init__(
        self,
        client: BookingBackendClient,
        *,
        repository: AppointmentRepository | None = None,
    ) -> None:
        self._client = client
        self._repository = repository
        if self._client.use_mock_data:
            self._repository = repository or get_mock_store().appointments

    def _mock_repository(self) -> AppointmentRepository:
        if not self._repository:
            raise RuntimeError("Mock appointment repository not configured")
        return self._repository

    async def list(
        self, filters: AppointmentFilter, session: AgentSession
    ) -> AppointmentListResponse:
        logger.info("Listing %s appointments for agent %s", filters.tab, session.agent_id)
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            body: Any = await self._mock_repository().list()
        else:
            body = await self._client.get("/appointments", token=session.access_token)

        appointments = self._parse(
            unwrap(body, action="Appointment listing"), "Appointment listing"
        )
        search = filters.search.strip().lower()
        statuses = _TAB_STATUSES[filters.tab]
        items = [
            appointment
            for appointment in appointments
            if (
                not search
                or _contains(appointment.patient_name, search)
                or _contains(appointment.doctor_name, search)
            )
            and (filters.doctor in ("", "all") or appointment.doctor_name == filters.doctor)
            and (filters.hospital in ("", "all") or appointment.hospital == filters.hospital)
            and appointment.status in statuses
        ]
        return AppointmentListResponse(total=len(items), items=items)

    async def pending_confirmations(
        self, session: AgentSession, search: str = ""
    ) -> List[Appointment]:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            body: Any = await self._mock_repository().list_unpaid()
        else:
            body = await self._client.get("/appointments/unpaid", token=session.access_token)

        pending = [
            appointment
            for appointment in self._parse(
                unwrap(body, action="Pending appointment listing"), "Pending appointment listing"
            )
            if appointment.status == "pending"
        ]
        _queue_snapshots[session.agent_id] = pending

        needle = search.strip().lower()
        if not needle:
            return list(pending)
        return [
            appointment
            for appointment in pending
            if _contains(appointment.patient_name, needle)
            or _contains(appointment.doctor_name, needle)
            or _contains(appointment.hospital, needle)
        ]

    async def confirm(self, appointment_id: str, session: AgentSession) -> QueueUpdateResponse:
        logger.info("Confirming appointment %s", appointment_id)
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            body: Any = await self._mock_repository().confirm(appointment_id)
        else:
            body = await self._post_action(
                f"/appointments/{appointment_id}/confirm", None, session
            )
        unwrap(body, action="Confirmation")
        return await self._reconcile(
            appointment_id,
            "confirmed",
            session,
            Notification(
                title="Appointment Confirmed",
                description=f"Appointment {appointment_id} has been confirmed. Email notification sent.",
            ),
        )

    async def cancel(
        self, appointment_id: str, reason: str, session: AgentSession
    ) -> QueueUpdateResponse:
        reason = reason.strip()
        if not reason:
            raise InvalidRequestError("Cancellation reason required")

        logger.info("Cancelling appointment %s", appointment_id)
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            body: Any = await self._mock_repository().cancel(appointment_id, reason)
        else:
            body = await self._post_action(
                f"/appointments/{appointment_id}/cancel", {"reason": reason}, session
            )
        unwrap(body, action="Cancellation")
        return await self._reconcile(
            appointment_id,
            "cancelled",
            session,
            Notification(
                title="Appointment Cancelled",
                description=f"Appointment {appointment_id} has been cancelled. Email notification sent.",
            ),
        )

    async def _reconcile(
        self,
        appointment_id: str,
        action: str,
        session: AgentSession,
        notification: Notification,
    ) -> QueueUpdateResponse:
        # Drop the item locally first, then replace with whatever the backend reports.
        tentative = [
            appointment
            for appointment in _queue_snapshots.get(session.agent_id, [])
            if appointment.id != appointment_id
        ]
        _queue_snapshots[session.agent_id] = tentative
        try:
            remaining = await self.pending_confirmations(session)
            reconciled = True
        except ServiceError as exc:
            logger.warning("Could not refresh pending queue after %s: %s", action, exc)
            remaining = tentative
            reconciled = False

        return QueueUpdateResponse(
            appointment_id=appointment_id,
            action=action,
            remaining=remaining,
            reconciled=reconciled,
            notification=notification,
        )

    async def _post_action(self, path: str, payload: Any, session: AgentSession) -> Any:
        try:
            return await self._client.post(path, payload, token=session.access_token)
        except DownstreamServiceError as exc:
            missing = missing_record(exc, "Appointment not found")
            if missing is not None:
                raise missing from exc
            raise

    @staticmethod
    def _parse(records: Any, action: str) -> List[Appointment]:
        return parse_records(Appointment, records, action=action)
