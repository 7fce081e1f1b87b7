from __future__ import annotations

import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from agent_portal.bulk.batch import reset_batch_repository
from agent_portal.clients.backend import BookingBackendClient
from agent_portal.dependencies.services import get_backend_client
from agent_portal.main import app
from agent_portal.services.appointments import reset_queue_snapshots
from agent_portal.services.mock_store import reset_mock_store
from agent_portal.session import reset_session_repository


@pytest.fixture(autouse=True)
def _mock_backend() -> None:
    reset_mock_store()
    reset_session_repository()
    reset_batch_repository()
    reset_queue_snapshots()
    app.dependency_overrides[get_backend_client] = lambda: BookingBackendClient(
        None, use_mock_data=True
    )
    yield
    app.dependency_overrides.clear()


def _login(client: TestClient) -> dict:
    response = client.post(
        "/auth/login", json={"email": "agent@corporate.lk", "password": "password123"}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_health_reports_mock_mode() -> None:
    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "mode": "mock"}


def test_login_rejects_bad_credentials() -> None:
    client = TestClient(app)

    response = client.post(
        "/auth/login", json={"email": "agent@corporate.lk", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_bulk_endpoints_require_a_session() -> None:
    client = TestClient(app)

    assert client.get("/bulk-booking").status_code == 401
    assert client.post("/bulk-booking/submit").status_code == 401
    assert client.get(
        "/bulk-booking", headers={"Authorization": "Bearer unknown"}
    ).status_code == 401


def test_template_download_is_public_csv() -> None:
    client = TestClient(app)

    response = client.get("/bulk-booking/template")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "bulk-booking-template.csv" in response.headers["content-disposition"]
    assert response.text.splitlines()[0].startswith("Doctor Name,Patient Name,Patient NIC")


def test_bulk_booking_flow_from_template_to_submission() -> None:
    client = TestClient(app)
    headers = _login(client)

    initial = client.get("/bulk-booking", headers=headers).json()
    assert len(initial["rows"]) == 1
    assert initial["rows"][0]["status"] == "pending"

    template = client.get("/bulk-booking/template").content
    upload = client.post(
        "/bulk-booking/upload",
        headers=headers,
        files={"file": ("bulk.csv", template, "text/csv")},
    )
    assert upload.status_code == 200
    assert upload.json()["imported"] == 2
    assert upload.json()["notification"]["title"] == "CSV Loaded"

    summary = client.post("/bulk-booking/validate", headers=headers).json()
    assert summary["valid"] == 2
    assert summary["invalid"] == 0
    assert summary["batch"]["estimated_total"] == 6000.0

    submitted = client.post("/bulk-booking/submit", headers=headers)
    assert submitted.status_code == 200
    outcome = submitted.json()
    assert outcome["status"] == "success"
    assert outcome["created"] == 2
    assert len(outcome["batch"]["rows"]) == 1

    pending = client.get("/appointments/pending", headers=headers).json()
    assert {"John Smith", "Jane Doe"} <= {item["patientName"] for item in pending}


def test_submit_without_validation_is_rejected() -> None:
    client = TestClient(app)
    headers = _login(client)

    response = client.post("/bulk-booking/submit", headers=headers)

    assert response.status_code == 400
    assert "No valid entries" in response.json()["detail"]


def test_upload_with_missing_columns_returns_details() -> None:
    client = TestClient(app)
    headers = _login(client)

    response = client.post(
        "/bulk-booking/upload",
        headers=headers,
        files={"file": ("bulk.csv", b"Doctor Name,Patient Name\nDr. A,John\n", "text/csv")},
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert "Patient NIC" in detail["missing_columns"]
    assert detail["message"].startswith("Missing required columns")


def test_upload_rejects_non_csv_filename() -> None:
    client = TestClient(app)
    headers = _login(client)

    response = client.post(
        "/bulk-booking/upload",
        headers=headers,
        files={"file": ("bulk.txt", b"anything", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Only CSV files are allowed"


def test_manual_rows_can_be_edited_and_removed() -> None:
    client = TestClient(app)
    headers = _login(client)

    row = client.post("/bulk-booking/rows", headers=headers).json()
    patched = client.patch(
        f"/bulk-booking/rows/{row['id']}",
        headers=headers,
        json={"patient_name": "Amal Perera", "payment_method": "DEDUCT_FROM_SALARY"},
    )
    assert patched.status_code == 200
    assert patched.json()["patient_name"] == "Amal Perera"
    assert patched.json()["status"] == "pending"

    removed = client.delete(f"/bulk-booking/rows/{row['id']}", headers=headers)
    assert removed.status_code == 200
    assert len(removed.json()["rows"]) == 1

    missing = client.delete("/bulk-booking/rows/row-999", headers=headers)
    assert missing.status_code == 404


def test_options_list_doctors_and_slots() -> None:
    client = TestClient(app)
    headers = _login(client)

    options = client.get("/bulk-booking/options", headers=headers).json()

    assert "Dr. Saman Perera" in options["doctors"]
    assert options["time_slots"][0] == "09:00"
    assert options["payment_methods"] == ["BILL_TO_PHONE", "DEDUCT_FROM_SALARY"]
    assert options["consultation_fee"] == 3000.0


def test_cancel_without_reason_is_bad_request() -> None:
    client = TestClient(app)
    headers = _login(client)

    response = client.post(
        "/appointments/APT-00001/cancel", headers=headers, json={"reason": " "}
    )

    assert response.status_code == 400


def test_logout_invalidates_token() -> None:
    client = TestClient(app)
    headers = _login(client)

    assert client.get("/auth/me", headers=headers).json()["email"] == "agent@corporate.lk"
    assert client.post("/auth/logout", headers=headers).json() == {"status": "logged_out"}
    assert client.get("/auth/me", headers=headers).status_code == 401


def test_unknown_report_and_appointment_return_404() -> None:
    client = TestClient(app)
    headers = _login(client)

    report = client.get("/reports/RPT-99999", headers=headers)
    assert report.status_code == 404
    assert report.json()["detail"] == "Report not found"

    assert client.delete("/reports/RPT-99999", headers=headers).status_code == 404
    assert client.post("/appointments/APT-99999/confirm", headers=headers).status_code == 404
    assert client.post(
        "/appointments/APT-99999/cancel", headers=headers, json={"reason": "No show"}
    ).status_code == 404


def test_logging_out_one_session_keeps_the_other_sessions_batch() -> None:
    client = TestClient(app)
    first = _login(client)
    second = _login(client)

    client.post("/bulk-booking/rows", headers=first)
    client.post("/bulk-booking/rows", headers=first)
    assert len(client.get("/bulk-booking", headers=first).json()["rows"]) == 3

    assert client.post("/auth/logout", headers=second).status_code == 200

    assert len(client.get("/bulk-booking", headers=first).json()["rows"]) == 3
