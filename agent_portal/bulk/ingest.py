"""Parse uploaded bulk-booking CSV files into batch rows."""
from __future__ import annotations

import csv
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from agent_portal.schemas.bulk import BulkRow, PaymentMethod, RejectedLine
from agent_portal.services.exceptions import CsvIngestionError

CSV_COLUMNS = (
    "Doctor Name",
    "Patient Name",
    "Patient NIC",
    "Patient Email",
    "Patient Phone",
    "Payment Method",
    "SLT Phone Number",
    "Employee NIC",
    "Date",
    "Time",
)

REQUIRED_COLUMNS = (
    "Doctor Name",
    "Patient Name",
    "Patient NIC",
    "Patient Email",
    "Patient Phone",
    "Payment Method",
    "Date",
    "Time",
)

_COLUMN_FIELDS: Dict[str, str] = {
    "Doctor Name": "doctor_name",
    "Patient Name": "patient_name",
    "Patient NIC": "patient_nic",
    "Patient Email": "patient_email",
    "Patient Phone": "patient_phone",
    "SLT Phone Number": "slt_phone_number",
    "Employee NIC": "employee_nic",
    "Date": "date",
    "Time": "time",
}


@dataclass
class ParsedCsv:
    rows: List[BulkRow]
    skipped_lines: int = 0
    rejected_lines: List[RejectedLine] = field(default_factory=list)


def _split(line: str) -> List[str]:
    return [value.strip() for value in next(csv.reader([line]))]


def parse_bulk_csv(text: str, *, max_rows: Optional[int] = None) -> ParsedCsv:
    """Turn CSV text into pending rows.

    Raises :class:`CsvIngestionError` when the file has no data rows, lacks a
    required column, exceeds ``max_rows`` or yields no usable row. Lines with
    fewer fields than the header are skipped; lines with an unknown payment
    method are reported in ``rejected_lines`` and left out.
    """

    lines = [
        (number, line)
        for number, line in enumerate(text.lstrip("\ufeff").splitlines(), start=1)
        if line.strip()
    ]
    if len(lines) < 2:
        raise CsvIngestionError("CSV file must contain a header row and at least one data row")

    headers = _split(lines[0][1])
    missing = [column for column in REQUIRED_COLUMNS if column not in headers]
    if missing:
        raise CsvIngestionError(
            f"Missing required columns: {', '.join(missing)}",
            missing_columns=missing,
        )

    rows: List[BulkRow] = []
    skipped = 0
    rejected: List[RejectedLine] = []
    for number, line in lines[1:]:
        values = _split(line)
        if len(values) < len(headers):
            skipped += 1
            continue
        record = dict(zip(headers, values))

        raw_method = record["Payment Method"]
        try:
            method = PaymentMethod(raw_method.upper())
        except ValueError:
            rejected.append(
                RejectedLine(
                    line_number=number,
                    reason=f"Invalid payment method '{raw_method}'",
                )
            )
            continue

        fields = {
            attr: record.get(column, "")
            for column, attr in _COLUMN_FIELDS.items()
        }
        rows.append(BulkRow(id=f"csv-{number}", payment_method=method, **fields))

    if not rows:
        raise CsvIngestionError(
            "No valid rows found in CSV",
            rejected_lines=[f"line {item.line_number}: {item.reason}" for item in rejected],
        )
    if max_rows is not None and len(rows) > max_rows:
        raise CsvIngestionError(f"Maximum {max_rows} appointments allowed per upload")

    return ParsedCsv(rows=rows, skipped_lines=skipped, rejected_lines=rejected)
