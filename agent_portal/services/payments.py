from __future__ import annotations

import csv
import logging
from datetime import date, datetime
from io import StringIO
from typing import Any, Dict, List, Tuple

from agent_portal.clients.backend import BookingBackendClient
from agent_portal.schemas.payment import (
    Payment,
    PaymentListRequest,
    PaymentListResponse,
    PaymentStatsResponse,
)
from agent_portal.services.envelope import parse_records, unwrap
from agent_portal.services.exceptions import DownstreamServiceError
from agent_portal.services.mock_store import PaymentRepository, get_mock_store
from agent_portal.session import AgentSession

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = (
    "Transaction ID",
    "Patient Name",
    "Doctor Name",
    "Hospital",
    "Amount",
    "Method",
    "Status",
    "Date",
)


def _timestamp(value: str) -> float:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


def _display_date(value: str) -> str:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%b %d, %Y %I:%M %p")


class PaymentService:
    def __init__(
        self,
        client: BookingBackendClient,
        *,
        repository: PaymentRepository | None = None,
    ) -> None:
        self._client = client
        self._repository = repository
        if self._client.use_mock_data:
            self._repository = repository or get_mock_store().payments

    async def list(
        self, request: PaymentListRequest, session: AgentSession
    ) -> PaymentListResponse:
        params: Dict[str, Any] = {}
        if request.status != "all":
            params["status"] = request.status
        if request.method != "all":
            params["method"] = request.method

        logger.info("Listing payments with filters %s", params)
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            if not self._repository:
                raise RuntimeError("Mock payment repository not configured")
            body: Any = await self._repository.list(params)
        else:
            body = await self._client.get("/payments", params, token=session.access_token)

        payments = parse_records(
            Payment, unwrap(body, action="Payment listing"), action="Payment listing"
        )
        needle = request.search.strip().lower()
        if needle:
            payments = [
                payment
                for payment in payments
                if needle in payment.patient_name.lower()
                or needle in payment.doctor_name.lower()
                or needle in payment.transaction_id.lower()
                or needle in payment.id.lower()
            ]

        if request.sort_by == "date":
            payments.sort(key=lambda payment: _timestamp(payment.date), reverse=request.order == "desc")
        else:
            payments.sort(key=lambda payment: payment.amount, reverse=request.order == "desc")
        return PaymentListResponse(total=len(payments), items=payments)

    async def stats(self, session: AgentSession) -> PaymentStatsResponse:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            if not self._repository:
                raise RuntimeError("Mock payment repository not configured")
            body: Any = await self._repository.stats()
        else:
            body = await self._client.get("/payments/stats", token=session.access_token)
        stats = unwrap(body, action="Payment stats") or {}
        if not isinstance(stats, dict):
            raise DownstreamServiceError("Payment stats returned a malformed response")
        return PaymentStatsResponse(stats=stats)

    async def export_csv(
        self, request: PaymentListRequest, session: AgentSession
    ) -> Tuple[str, str]:
        """Return ``(filename, csv_text)`` for the filtered payment list."""

        listing = await self.list(request, session)
        buffer = StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(EXPORT_COLUMNS)
        rows: List[List[str]] = [
            [
                payment.transaction_id,
                payment.patient_name,
                payment.doctor_name,
                payment.hospital,
                f"{payment.amount:g}",
                payment.method,
                payment.status,
                _display_date(payment.date),
            ]
            for payment in listing.items
        ]
        writer.writerows(rows)
        return f"payments-{date.today().isoformat()}.csv", buffer.getvalue()
