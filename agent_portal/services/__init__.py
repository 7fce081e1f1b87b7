"""Service package public API definitions.

Service implementations depend on ``agent_portal.clients.backend``, which in
turn imports ``agent_portal.services.exceptions``. Importing the services
eagerly here would make that a circular import, so they are resolved lazily
on first attribute access.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "AppointmentService",
    "AuthService",
    "BulkBookingService",
    "DoctorDirectoryService",
    "PaymentService",
    "ReportService",
]

_SERVICE_MODULES = {
    "AppointmentService": "appointments",
    "AuthService": "auth",
    "BulkBookingService": "bulk_booking",
    "DoctorDirectoryService": "doctors",
    "PaymentService": "payments",
    "ReportService": "reports",
}


def __getattr__(name: str) -> Any:
    if name not in _SERVICE_MODULES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(f".{_SERVICE_MODULES[name]}", __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .appointments import AppointmentService as AppointmentService
    from .auth import AuthService as AuthService
    from .bulk_booking import BulkBookingService as BulkBookingService
    from .doctors import DoctorDirectoryService as DoctorDirectoryService
    from .payments import PaymentService as PaymentService
    from .reports import ReportService as ReportService
