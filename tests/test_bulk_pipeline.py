import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from agent_portal.bulk.batch import BulkBatch
from agent_portal.bulk.ingest import CSV_COLUMNS, parse_bulk_csv
from agent_portal.bulk.template import TEMPLATE_FILENAME, build_template_csv
from agent_portal.bulk.validator import (
    INVALID_EMAIL_ERROR,
    REQUIRED_FIELDS_ERROR,
    SLT_PHONE_REQUIRED_ERROR,
    validate_rows,
)
from agent_portal.schemas.bulk import BulkRow, BulkRowUpdate, PaymentMethod
from agent_portal.services.exceptions import CsvIngestionError, NotFoundError

HEADER = ",".join(CSV_COLUMNS)


def _row(**overrides) -> BulkRow:
    values = {
        "id": "row-1",
        "doctor_name": "Dr. Saman Perera",
        "patient_name": "John Smith",
        "patient_nic": "199012345678",
        "patient_email": "john@example.com",
        "patient_phone": "+94771234567",
        "payment_method": PaymentMethod.DEDUCT_FROM_SALARY,
        "date": "2025-11-15",
        "time": "09:00",
    }
    values.update(overrides)
    return BulkRow(**values)


def test_template_round_trip_produces_two_valid_rows() -> None:
    parsed = parse_bulk_csv(build_template_csv())

    assert len(parsed.rows) == 2
    assert {row.payment_method for row in parsed.rows} == set(PaymentMethod)
    assert all(row.status == "pending" for row in parsed.rows)

    assert validate_rows(parsed.rows) == (2, 0)
    assert all(row.status == "valid" and row.error is None for row in parsed.rows)


def test_template_header_lists_every_column_in_order() -> None:
    first_line = build_template_csv().splitlines()[0]

    assert first_line == HEADER
    assert TEMPLATE_FILENAME == "bulk-booking-template.csv"


def test_missing_required_columns_are_reported() -> None:
    header = "Doctor Name,Patient Name,Patient Email,Patient Phone,Payment Method,Date"
    text = header + "\nDr. Saman Perera,John,john@example.com,+9477,BILL_TO_PHONE,2025-11-15\n"

    with pytest.raises(CsvIngestionError) as excinfo:
        parse_bulk_csv(text)

    assert excinfo.value.missing_columns == ["Patient NIC", "Time"]
    assert "Patient NIC" in str(excinfo.value)


def test_header_only_file_is_rejected() -> None:
    with pytest.raises(CsvIngestionError):
        parse_bulk_csv(HEADER + "\n\n")


def test_optional_columns_may_be_absent() -> None:
    header = "Doctor Name,Patient Name,Patient NIC,Patient Email,Patient Phone,Payment Method,Date,Time"
    text = (
        header
        + "\nDr. Kamala Silva , Amal Perera ,200012345678,amal@example.com,+94770000001, deduct_from_salary ,2025-11-20,11:00"
    )

    parsed = parse_bulk_csv(text)

    row = parsed.rows[0]
    assert row.doctor_name == "Dr. Kamala Silva"
    assert row.patient_name == "Amal Perera"
    assert row.payment_method is PaymentMethod.DEDUCT_FROM_SALARY
    assert row.slt_phone_number == ""
    assert row.employee_nic == ""


def test_short_lines_are_skipped_and_bad_payment_methods_rejected() -> None:
    lines = [
        HEADER,
        "Dr. Saman Perera,John,1990,john@example.com,+9477,bill_to_phone,+9411,,2025-11-15,09:00",
        "Dr. Saman Perera,Short Line",
        "Dr. Nimal Fernando,Jane,1985,jane@example.com,+9478,CASH,,,2025-11-15,10:00",
    ]

    parsed = parse_bulk_csv("\n".join(lines))

    assert len(parsed.rows) == 1
    assert parsed.rows[0].payment_method is PaymentMethod.BILL_TO_PHONE
    assert parsed.skipped_lines == 1
    assert len(parsed.rejected_lines) == 1
    assert parsed.rejected_lines[0].line_number == 4
    assert "CASH" in parsed.rejected_lines[0].reason


def test_file_without_usable_rows_is_rejected() -> None:
    text = HEADER + "\nDr. Nimal Fernando,Jane,1985,jane@example.com,+9478,CARD,,,2025-11-15,10:00"

    with pytest.raises(CsvIngestionError) as excinfo:
        parse_bulk_csv(text)

    assert "No valid rows" in str(excinfo.value)
    assert excinfo.value.rejected_lines


def test_row_limit_is_enforced() -> None:
    with pytest.raises(CsvIngestionError):
        parse_bulk_csv(build_template_csv(), max_rows=1)


def test_missing_field_wins_over_other_failures() -> None:
    row = _row(
        patient_phone="   ",
        patient_email="not-an-email",
        payment_method=PaymentMethod.BILL_TO_PHONE,
    )

    assert validate_rows([row]) == (0, 1)
    assert row.status == "invalid"
    assert row.error == REQUIRED_FIELDS_ERROR


def test_bill_to_phone_requires_slt_number() -> None:
    row = _row(payment_method=PaymentMethod.BILL_TO_PHONE, patient_email="broken")

    validate_rows([row])

    assert row.error == SLT_PHONE_REQUIRED_ERROR


@pytest.mark.parametrize("email", ["john.example.com", "john@example", "john@example.", "jo hn@example.com"])
def test_invalid_email_is_flagged(email: str) -> None:
    row = _row(patient_email=email)

    validate_rows([row])

    assert row.status == "invalid"
    assert row.error == INVALID_EMAIL_ERROR


def test_employee_nic_is_optional_for_salary_deduction() -> None:
    row = _row(employee_nic="")

    validate_rows([row])

    assert row.status == "valid"


def test_validation_is_idempotent() -> None:
    rows = [
        _row(id="a"),
        _row(id="b", patient_name=""),
        _row(id="c", payment_method=PaymentMethod.BILL_TO_PHONE),
        _row(id="d", patient_email="bad"),
    ]

    first = validate_rows(rows)
    snapshot = [(row.status, row.error) for row in rows]
    second = validate_rows(rows)

    assert first == second == (1, 3)
    assert [(row.status, row.error) for row in rows] == snapshot


def test_revalidation_clears_previous_error() -> None:
    row = _row(patient_email="bad")
    validate_rows([row])
    row.patient_email = "john@example.com"

    validate_rows([row])

    assert row.status == "valid"
    assert row.error is None


def test_batch_edit_resets_row_to_pending() -> None:
    batch = BulkBatch([_row()])
    validate_rows(batch.rows)
    assert batch.rows[0].status == "valid"

    updated = batch.update_row("row-1", BulkRowUpdate(patient_name="Johnny Smith"))

    assert updated.patient_name == "Johnny Smith"
    assert updated.status == "pending"
    assert updated.error is None


def test_batch_reset_leaves_single_blank_row() -> None:
    batch = BulkBatch()
    batch.add_row()
    batch.add_row()
    assert len(batch.rows) == 3
    assert len({row.id for row in batch.rows}) == 3

    batch.reset()

    assert len(batch.rows) == 1
    assert batch.rows[0].status == "pending"
    assert batch.rows[0].patient_name == ""


def test_batch_view_estimates_fee_from_valid_rows() -> None:
    batch = BulkBatch([_row(id="a"), _row(id="b"), _row(id="c", patient_name="")])
    validate_rows(batch.rows)

    view = batch.view(consultation_fee=3000.0, currency="LKR")

    assert view.valid_count == 2
    assert view.invalid_count == 1
    assert view.pending_count == 0
    assert view.estimated_total == 6000.0


def test_batch_unknown_row_raises_not_found() -> None:
    batch = BulkBatch()

    with pytest.raises(NotFoundError):
        batch.remove_row("missing")
