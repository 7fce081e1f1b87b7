from typing import List

from fastapi import APIRouter, Depends, HTTPException

from agent_portal.dependencies.services import get_appointment_service, get_current_session
from agent_portal.schemas.appointment import (
    Appointment,
    AppointmentFilter,
    AppointmentListResponse,
    AppointmentTab,
    CancelRequest,
    QueueUpdateResponse,
)
from agent_portal.services import AppointmentService
from agent_portal.services.exceptions import InvalidRequestError, NotFoundError, ServiceError
from agent_portal.session import AgentSession

router = APIRouter()


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
    search: str = "",
    doctor: str = "all",
    hospital: str = "all",
    tab: AppointmentTab = "upcoming",
    session: AgentSession = Depends(get_current_session),
    service: AppointmentService = Depends(get_appointment_service),
):
    filters = AppointmentFilter(search=search, doctor=doctor, hospital=hospital, tab=tab)
    try:
        return await service.list(filters, session)
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get("/pending", response_model=List[Appointment])
async def pending_confirmations(
    search: str = "",
    session: AgentSession = Depends(get_current_session),
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.pending_confirmations(session, search)
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/{appointment_id}/confirm", response_model=QueueUpdateResponse)
async def confirm_appointment(
    appointment_id: str,
    session: AgentSession = Depends(get_current_session),
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.confirm(appointment_id, session)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/{appointment_id}/cancel", response_model=QueueUpdateResponse)
async def cancel_appointment(
    appointment_id: str,
    req: CancelRequest,
    session: AgentSession = Depends(get_current_session),
    service: AppointmentService = Depends(get_appointment_service),
):
    try:
        return await service.cancel(appointment_id, req.reason, session)
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
