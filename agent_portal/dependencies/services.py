from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from agent_portal.clients.backend import BookingBackendClient
from agent_portal.config import Settings, get_settings
from agent_portal.services import (
    AppointmentService,
    AuthService,
    BulkBookingService,
    DoctorDirectoryService,
    PaymentService,
    ReportService,
)
from agent_portal.services.exceptions import AuthenticationError
from agent_portal.session import AgentSession

_bearer = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def get_backend_client_cached() -> BookingBackendClient:
    settings = get_settings()
    return BookingBackendClient(
        settings.backend_base_url,
        timeout=settings.backend_timeout,
        use_mock_data=settings.use_mock_data,
    )


def get_backend_client(settings: Settings = Depends(get_settings)) -> BookingBackendClient:
    return get_backend_client_cached()


def get_auth_service(
    client: BookingBackendClient = Depends(get_backend_client),
) -> AuthService:
    return AuthService(client)


def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    auth: AuthService = Depends(get_auth_service),
) -> AgentSession:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return auth.resolve(credentials.credentials)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_bulk_booking_service(
    client: BookingBackendClient = Depends(get_backend_client),
    settings: Settings = Depends(get_settings),
) -> BulkBookingService:
    return BulkBookingService(client, settings)


def get_doctor_directory_service(
    client: BookingBackendClient = Depends(get_backend_client),
) -> DoctorDirectoryService:
    return DoctorDirectoryService(client)


def get_appointment_service(
    client: BookingBackendClient = Depends(get_backend_client),
) -> AppointmentService:
    return AppointmentService(client)


def get_payment_service(
    client: BookingBackendClient = Depends(get_backend_client),
) -> PaymentService:
    return PaymentService(client)


def get_report_service(
    client: BookingBackendClient = Depends(get_backend_client),
) -> ReportService:
    return ReportService(client)
