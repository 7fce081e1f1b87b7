from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from agent_portal.dependencies.services import get_current_session, get_payment_service
from agent_portal.schemas.payment import (
    PaymentListRequest,
    PaymentListResponse,
    PaymentStatsResponse,
)
from agent_portal.services import PaymentService
from agent_portal.services.exceptions import ServiceError
from agent_portal.session import AgentSession

router = APIRouter()


def _list_request(
    status: str = "all",
    method: str = "all",
    search: str = "",
    sort_by: Literal["date", "amount"] = "date",
    order: Literal["asc", "desc"] = "desc",
) -> PaymentListRequest:
    return PaymentListRequest(
        status=status, method=method, search=search, sort_by=sort_by, order=order
    )


@router.get("", response_model=PaymentListResponse)
async def list_payments(
    req: PaymentListRequest = Depends(_list_request),
    session: AgentSession = Depends(get_current_session),
    service: PaymentService = Depends(get_payment_service),
):
    try:
        return await service.list(req, session)
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get("/stats", response_model=PaymentStatsResponse)
async def payment_stats(
    session: AgentSession = Depends(get_current_session),
    service: PaymentService = Depends(get_payment_service),
):
    try:
        return await service.stats(session)
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get("/export")
async def export_payments(
    req: PaymentListRequest = Depends(_list_request),
    session: AgentSession = Depends(get_current_session),
    service: PaymentService = Depends(get_payment_service),
):
    try:
        filename, content = await service.export_csv(req, session)
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
