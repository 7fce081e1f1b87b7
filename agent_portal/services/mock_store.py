"""In-memory stand-in for the booking backend.

Repositories answer with the same JSON shapes the real backend returns so the
services parse both modes through one code path.
"""
from __future__ import annotations

import itertools
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class _BaseRepository:
    def __init__(self, prefix: str) -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def _next_id(self) -> str:
        return f"{self._prefix}-{next(self._counter):05d}"


class DoctorRepository:
    def __init__(self) -> None:
        self._doctors: List[Dict[str, Any]] = [
            {
                "id": "DOC-001",
                "name": "Dr. Saman Perera",
                "specialty": "Cardiology",
                "hospital": "Asiri Central Hospital",
                "fee": 3000.0,
                "rating": 4.8,
            },
            {
                "id": "DOC-002",
                "name": "Dr. Nimal Fernando",
                "specialty": "Neurology",
                "hospital": "Nawaloka Hospital",
                "fee": 3000.0,
                "rating": 4.6,
            },
            {
                "id": "DOC-003",
                "name": "Dr. Kamala Silva",
                "specialty": "Pediatrics",
                "hospital": "Lanka Hospital",
                "fee": 3000.0,
                "rating": 4.9,
            },
            {
                "id": "DOC-004",
                "name": "Dr. Rajesh Gupta",
                "specialty": "Orthopedics",
                "hospital": "Durdans Hospital",
                "fee": 3000.0,
                "rating": 4.5,
            },
        ]

    async def search(self) -> List[Dict[str, Any]]:
        return [dict(doctor) for doctor in self._doctors]

    def get_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        return next((doctor for doctor in self._doctors if doctor["name"] == name), None)


class AgentRepository:
    def __init__(self) -> None:
        self._accounts: Dict[str, Dict[str, Any]] = {
            "agent@corporate.lk": {
                "password": "password123",
                "agent": {
                    "id": "AGT-001",
                    "companyName": "Ceylon Telecom Corporate",
                    "email": "agent@corporate.lk",
                    "phone": "+94112000000",
                    "type": "corporate",
                    "status": "active",
                },
            }
        }
        self._refresh_tokens: Dict[str, str] = {}

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        account = self._accounts.get(email.lower())
        if account is None or account["password"] != password:
            return {"success": False, "message": "Invalid email or password"}
        access_token = f"mock-access-{uuid.uuid4().hex}"
        refresh_token = f"mock-refresh-{uuid.uuid4().hex}"
        self._refresh_tokens[refresh_token] = email.lower()
        return {
            "success": True,
            "data": {
                "tokens": {"accessToken": access_token, "refreshToken": refresh_token},
                "agent": dict(account["agent"]),
            },
        }

    async def logout(self, refresh_token: Optional[str]) -> Dict[str, Any]:
        if refresh_token:
            self._refresh_tokens.pop(refresh_token, None)
        return {"success": True, "message": "Logged out"}


class AppointmentRepository(_BaseRepository):
    def __init__(self, doctors: DoctorRepository) -> None:
        super().__init__("APT")
        self._doctors = doctors
        self._appointments: Dict[str, Dict[str, Any]] = {}
        self._seed_defaults()

    def _seed_defaults(self) -> None:
        seeds = [
            ("Dr. Saman Perera", "Kasun Jayasuriya", "2025-11-10", "09:00", "pending", "pending"),
            ("Dr. Kamala Silva", "Nadeesha Wijeratne", "2025-11-11", "10:00", "confirmed", "paid"),
            ("Dr. Nimal Fernando", "Ruwan Bandara", "2025-10-02", "11:00", "completed", "paid"),
            ("Dr. Rajesh Gupta", "Ishara Madushani", "2025-10-05", "14:00", "cancelled", "failed"),
            ("Dr. Nimal Fernando", "Dilan Perera", "2025-11-12", "15:00", "pending", "pending"),
        ]
        for doctor_name, patient_name, date, time, status, payment_status in seeds:
            doctor = self._doctors.get_by_name(doctor_name) or {}
            appointment_id = self._next_id()
            self._appointments[appointment_id] = {
                "id": appointment_id,
                "doctorName": doctor_name,
                "patientName": patient_name,
                "patientEmail": f"{patient_name.split()[0].lower()}@example.com",
                "patientPhone": "+94770000000",
                "hospital": doctor.get("hospital", ""),
                "specialty": doctor.get("specialty"),
                "date": date,
                "time": time,
                "status": status,
                "paymentStatus": payment_status,
                "amount": doctor.get("fee", 0.0),
                "createdAt": _utc_now_iso(),
            }

    async def list(self) -> List[Dict[str, Any]]:
        return [dict(record) for record in self._appointments.values()]

    async def list_unpaid(self) -> Dict[str, Any]:
        items = [
            dict(record)
            for record in self._appointments.values()
            if record["paymentStatus"] == "pending"
        ]
        return {"success": True, "data": items}

    async def confirm(self, appointment_id: str) -> Dict[str, Any]:
        record = self._appointments.get(appointment_id)
        if record is None:
            return {"success": False, "message": "Appointment not found"}
        record["status"] = "confirmed"
        return {"success": True, "data": dict(record)}

    async def cancel(self, appointment_id: str, reason: str) -> Dict[str, Any]:
        record = self._appointments.get(appointment_id)
        if record is None:
            return {"success": False, "message": "Appointment not found"}
        record["status"] = "cancelled"
        record["cancellationReason"] = reason
        return {"success": True, "data": dict(record)}

    async def bulk_create(self, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        created: List[Dict[str, Any]] = []
        failed: List[Dict[str, Any]] = []
        for row in rows:
            doctor = self._doctors.get_by_name(row.get("doctorName", ""))
            if doctor is None:
                failed.append({**row, "reason": "Doctor not found"})
                continue
            appointment_id = self._next_id()
            record = {
                "id": appointment_id,
                "doctorName": doctor["name"],
                "patientName": row.get("patientName"),
                "patientEmail": row.get("patientEmail"),
                "patientPhone": row.get("patientPhone"),
                "hospital": doctor["hospital"],
                "specialty": doctor["specialty"],
                "date": row.get("date"),
                "time": row.get("time"),
                "status": "pending",
                "paymentStatus": "pending",
                "paymentMethod": row.get("paymentMethod"),
                "amount": doctor["fee"],
                "createdAt": _utc_now_iso(),
            }
            self._appointments[appointment_id] = record
            created.append(dict(record))
        return {
            "success": True,
            "message": f"{len(created)} created, {len(failed)} failed",
            "data": {"created": created, "failed": failed},
        }


class PaymentRepository(_BaseRepository):
    def __init__(self) -> None:
        super().__init__("PAY")
        self._payments: Dict[str, Dict[str, Any]] = {}
        seeds = [
            ("APT-00002", "Nadeesha Wijeratne", "Dr. Kamala Silva", "Lanka Hospital", 3000.0, "card", "paid", "2025-11-01T09:15:00+05:30"),
            ("APT-00003", "Ruwan Bandara", "Dr. Nimal Fernando", "Nawaloka Hospital", 3500.0, "bank_transfer", "paid", "2025-09-28T14:40:00+05:30"),
            ("APT-00004", "Ishara Madushani", "Dr. Rajesh Gupta", "Durdans Hospital", 2500.0, "wallet", "failed", "2025-10-03T11:05:00+05:30"),
        ]
        for appointment_id, patient, doctor, hospital, amount, method, status, date in seeds:
            payment_id = self._next_id()
            self._payments[payment_id] = {
                "id": payment_id,
                "appointmentId": appointment_id,
                "patientName": patient,
                "doctorName": doctor,
                "hospital": hospital,
                "amount": amount,
                "method": method,
                "status": status,
                "transactionId": f"TXN-{payment_id[-5:]}",
                "date": date,
            }

    async def list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        items = [
            dict(record)
            for record in self._payments.values()
            if ("status" not in params or record["status"] == params["status"])
            and ("method" not in params or record["method"] == params["method"])
        ]
        return {"success": True, "data": items}

    async def stats(self) -> Dict[str, Any]:
        records = list(self._payments.values())
        paid = [record for record in records if record["status"] == "paid"]
        return {
            "success": True,
            "data": {
                "totalPayments": len(records),
                "paidCount": len(paid),
                "totalRevenue": sum(record["amount"] for record in paid),
                "failedCount": sum(1 for record in records if record["status"] == "failed"),
            },
        }


class ReportRepository(_BaseRepository):
    def __init__(self, appointments: AppointmentRepository) -> None:
        super().__init__("RPT")
        self._appointments = appointments
        self._reports: Dict[str, Dict[str, Any]] = {}

    async def generate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        date_from = str(payload["dateFrom"])
        date_to = str(payload["dateTo"])
        in_range = [
            record
            for record in await self._appointments.list()
            if date_from <= record["date"] <= date_to
        ]
        key = {
            "appointments": "status",
            "revenue": "paymentStatus",
            "doctors": "doctorName",
            "hospitals": "hospital",
        }[payload["type"]]
        breakdown: Dict[str, Any] = {}
        for record in in_range:
            bucket = breakdown.setdefault(record[key], {"count": 0, "amount": 0.0})
            bucket["count"] += 1
            bucket["amount"] += float(record.get("amount") or 0.0)

        report_id = self._next_id()
        report = {
            "id": report_id,
            "type": payload["type"],
            "dateFrom": date_from,
            "dateTo": date_to,
            "data": {"total": len(in_range), "breakdown": breakdown},
            "generatedAt": _utc_now_iso(),
        }
        self._reports[report_id] = report
        return {"success": True, "data": dict(report)}

    async def list(self) -> Dict[str, Any]:
        return {"success": True, "data": [dict(report) for report in self._reports.values()]}

    async def get(self, report_id: str) -> Dict[str, Any]:
        report = self._reports.get(report_id)
        if report is None:
            return {"success": False, "message": "Report not found"}
        return {"success": True, "data": dict(report)}

    async def delete(self, report_id: str) -> Dict[str, Any]:
        if self._reports.pop(report_id, None) is None:
            return {"success": False, "message": "Report not found"}
        return {"success": True, "message": "Report deleted"}


@dataclass
class MockDataStore:
    doctors: DoctorRepository
    agents: AgentRepository
    appointments: AppointmentRepository
    payments: PaymentRepository
    reports: ReportRepository


_mock_store: Optional[MockDataStore] = None


def get_mock_store() -> MockDataStore:
    global _mock_store
    if _mock_store is None:
        doctors = DoctorRepository()
        appointments = AppointmentRepository(doctors)
        _mock_store = MockDataStore(
            doctors=doctors,
            agents=AgentRepository(),
            appointments=appointments,
            payments=PaymentRepository(),
            reports=ReportRepository(appointments),
        )
    return _mock_store


def reset_mock_store() -> None:
    global _mock_store
    _mock_store = None
