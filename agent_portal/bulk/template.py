import csv
from io import StringIO

from agent_portal.bulk.ingest import CSV_COLUMNS

TEMPLATE_FILENAME = "bulk-booking-template.csv"

# One example per payment method.
TEMPLATE_ROWS = (
    (
        "Dr. Saman Perera",
        "John Smith",
        "199012345678",
        "john@example.com",
        "+94771234567",
        "BILL_TO_PHONE",
        "+94112345678",
        "",
        "2025-11-15",
        "09:00",
    ),
    (
        "Dr. Nimal Fernando",
        "Jane Doe",
        "198598765432",
        "jane@example.com",
        "+94771234568",
        "DEDUCT_FROM_SALARY",
        "",
        "200011223344",
        "2025-11-15",
        "10:00",
    ),
)


def build_template_csv() -> str:
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    writer.writerows(TEMPLATE_ROWS)
    return buffer.getvalue()
