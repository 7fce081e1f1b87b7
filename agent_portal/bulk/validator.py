from __future__ import annotations

import re
from typing import Iterable, Optional, Tuple

from agent_portal.schemas.bulk import BulkRow, PaymentMethod

REQUIRED_FIELDS_ERROR = "All fields required"
SLT_PHONE_REQUIRED_ERROR = "SLT phone number required for Bill to Phone"
INVALID_EMAIL_ERROR = "Invalid email"

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_REQUIRED_FIELDS = (
    "doctor_name",
    "patient_name",
    "patient_nic",
    "patient_email",
    "patient_phone",
    "date",
    "time",
)


def row_error(row: BulkRow) -> Optional[str]:
    """Return the first rule the row breaks, or ``None`` when it is valid."""

    if any(not getattr(row, field).strip() for field in _REQUIRED_FIELDS):
        return REQUIRED_FIELDS_ERROR
    if row.payment_method is PaymentMethod.BILL_TO_PHONE and not row.slt_phone_number.strip():
        return SLT_PHONE_REQUIRED_ERROR
    if not EMAIL_PATTERN.match(row.patient_email.strip()):
        return INVALID_EMAIL_ERROR
    return None


def validate_rows(rows: Iterable[BulkRow]) -> Tuple[int, int]:
    """Classify every row in place and return ``(valid, invalid)`` counts."""

    valid = invalid = 0
    for row in rows:
        error = row_error(row)
        if error is None:
            row.status = "valid"
            row.error = None
            valid += 1
        else:
            row.status = "invalid"
            row.error = error
            invalid += 1
    return valid, invalid
