from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from agent_portal.bulk.batch import BatchRepository, BulkBatch, get_batch_repository
from agent_portal.bulk.ingest import parse_bulk_csv
from agent_portal.bulk.template import build_template_csv
from agent_portal.bulk.validator import validate_rows
from agent_portal.clients.backend import BookingBackendClient
from agent_portal.config import Settings
from agent_portal.schemas.bulk import (
    TIME_SLOTS,
    BatchSubmissionResult,
    BatchView,
    BulkAppointmentPayload,
    BulkBookingOptions,
    BulkRow,
    BulkRowUpdate,
    IngestionResult,
    PaymentMethod,
    SubmissionOutcome,
    ValidationSummary,
)
from agent_portal.schemas.common import Notification
from agent_portal.services.envelope import describe
from agent_portal.services.exceptions import (
    BulkSubmissionError,
    CsvIngestionError,
    DownstreamServiceError,
    NoValidRowsError,
    SubmissionInProgressError,
)
from agent_portal.services.mock_store import AppointmentRepository, get_mock_store
from agent_portal.session import AgentSession

logger = logging.getLogger(__name__)


class BulkBookingService:
    """Bulk CSV booking pipeline: ingest, validate, submit, reconcile."""

    def __init__(
        self,
        client: BookingBackendClient,
        settings: Settings,
        *,
        batches: BatchRepository | None = None,
        repository: AppointmentRepository | None = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self._batches = batches or get_batch_repository()
        self._repository = repository
        if self._client.use_mock_data:
            self._repository = repository or get_mock_store().appointments

    def _batch(self, session: AgentSession) -> BulkBatch:
        return self._batches.get(session.agent_id)

    def _view(self, batch: BulkBatch) -> BatchView:
        return batch.view(
            consultation_fee=self._settings.consultation_fee,
            currency=self._settings.currency,
        )

    def view(self, session: AgentSession) -> BatchView:
        return self._view(self._batch(session))

    def add_row(self, session: AgentSession) -> BulkRow:
        return self._batch(session).add_row()

    def update_row(self, session: AgentSession, row_id: str, update: BulkRowUpdate) -> BulkRow:
        return self._batch(session).update_row(row_id, update)

    def remove_row(self, session: AgentSession, row_id: str) -> BatchView:
        batch = self._batch(session)
        batch.remove_row(row_id)
        return self._view(batch)

    def options(self, doctor_names: List[str]) -> BulkBookingOptions:
        return BulkBookingOptions(
            doctors=doctor_names,
            time_slots=list(TIME_SLOTS),
            payment_methods=list(PaymentMethod),
            consultation_fee=self._settings.consultation_fee,
            currency=self._settings.currency,
        )

    def template(self) -> str:
        return build_template_csv()

    async def ingest_csv(
        self, session: AgentSession, filename: str | None, content: bytes
    ) -> IngestionResult:
        if not filename or not filename.lower().endswith(".csv"):
            raise CsvIngestionError("Only CSV files are allowed")
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CsvIngestionError("Unable to read CSV file", cause=exc) from exc

        parsed = parse_bulk_csv(text, max_rows=self._settings.max_csv_rows)
        batch = self._batch(session)
        batch.replace_rows(parsed.rows)
        logger.info(
            "Imported %s bulk rows for agent %s (%s skipped, %s rejected)",
            len(parsed.rows),
            session.agent_id,
            parsed.skipped_lines,
            len(parsed.rejected_lines),
        )

        description = f"{len(parsed.rows)} rows imported"
        if parsed.rejected_lines:
            description += f", {len(parsed.rejected_lines)} rejected"
        return IngestionResult(
            imported=len(parsed.rows),
            skipped_lines=parsed.skipped_lines,
            rejected_lines=parsed.rejected_lines,
            batch=self._view(batch),
            notification=Notification(title="CSV Loaded", description=description),
        )

    async def validate(self, session: AgentSession) -> ValidationSummary:
        if self._settings.validation_delay_seconds:
            await asyncio.sleep(self._settings.validation_delay_seconds)
        batch = self._batch(session)
        valid, invalid = validate_rows(batch.rows)
        return ValidationSummary(
            valid=valid,
            invalid=invalid,
            batch=self._view(batch),
            notification=Notification(
                title="Validation Complete",
                description=f"{valid} valid, {invalid} invalid entries",
            ),
        )

    async def submit(self, session: AgentSession) -> SubmissionOutcome:
        batch = self._batch(session)
        if batch.submitting:
            raise SubmissionInProgressError("A bulk booking is already in progress")

        valid_rows = batch.valid_rows()
        if not valid_rows:
            raise NoValidRowsError("No valid entries. Please validate your data first")

        payload = [
            BulkAppointmentPayload.from_row(row).model_dump(
                by_alias=True, exclude_none=True, mode="json"
            )
            for row in valid_rows
        ]
        logger.info(
            "Submitting %s bulk appointments for agent %s", len(payload), session.agent_id
        )

        batch.submitting = True
        try:
            body = await self._send(payload, session)
        finally:
            batch.submitting = False

        result = self._parse_result(body)
        created = len(result.created)
        failed = len(result.failed)
        if created + failed != len(payload):
            logger.warning(
                "Bulk booking response accounts for %s of %s submitted rows",
                created + failed,
                len(payload),
            )

        if failed:
            logger.warning("Failed bulk appointments: %s", [item.model_dump() for item in result.failed])
            status = "partial"
            notification = Notification(
                title="Bulk Booking Partially Complete",
                description=f"{created} created, {failed} failed. Failed entries were logged for review.",
            )
        else:
            status = "success"
            notification = Notification(
                title="Bulk Booking Complete",
                description=f"All {created} appointments created successfully! Confirmation emails sent.",
            )

        batch.reset()
        return SubmissionOutcome(
            status=status,
            submitted=len(payload),
            created=created,
            failed=failed,
            failed_rows=result.failed,
            batch=self._view(batch),
            notification=notification,
        )

    async def _send(self, payload: List[Dict[str, Any]], session: AgentSession) -> Any:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            if not self._repository:
                raise RuntimeError("Mock appointment repository not configured")
            return await self._repository.bulk_create(payload)

        try:
            return await self._client.post(
                "/appointments/bulk", payload, token=session.access_token
            )
        except DownstreamServiceError as exc:
            raise BulkSubmissionError(
                describe(exc, "Network or server error"), cause=exc
            ) from exc

    @staticmethod
    def _parse_result(body: Any) -> BatchSubmissionResult:
        if not isinstance(body, dict):
            logger.error("Bulk booking failed: %r", body)
            raise BulkSubmissionError("Unknown error")
        if body.get("success") is False:
            logger.error("Bulk booking failed: %s", body)
            raise BulkSubmissionError(body.get("message") or "Unknown error")

        data = body.get("data")
        if not isinstance(data, dict):
            raise BulkSubmissionError("Malformed bulk booking response")
        try:
            return BatchSubmissionResult.model_validate(data)
        except ValidationError as exc:
            logger.exception("Malformed bulk booking response")
            raise BulkSubmissionError("Malformed bulk booking response", cause=exc) from exc
