from fastapi import APIRouter, Depends, HTTPException

from agent_portal.dependencies.services import get_current_session, get_report_service
from agent_portal.schemas.report import Report, ReportListResponse, ReportRequest
from agent_portal.services import ReportService
from agent_portal.services.exceptions import NotFoundError, ServiceError
from agent_portal.session import AgentSession

router = APIRouter()


@router.post("/generate", response_model=Report)
async def generate_report(
    req: ReportRequest,
    session: AgentSession = Depends(get_current_session),
    service: ReportService = Depends(get_report_service),
):
    try:
        return await service.generate(req, session)
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get("", response_model=ReportListResponse)
async def list_reports(
    session: AgentSession = Depends(get_current_session),
    service: ReportService = Depends(get_report_service),
):
    try:
        return await service.list(session)
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get("/{report_id}", response_model=Report)
async def get_report(
    report_id: str,
    session: AgentSession = Depends(get_current_session),
    service: ReportService = Depends(get_report_service),
):
    try:
        return await service.get(report_id, session)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.delete("/{report_id}")
async def delete_report(
    report_id: str,
    session: AgentSession = Depends(get_current_session),
    service: ReportService = Depends(get_report_service),
):
    try:
        await service.delete(report_id, session)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"status": "deleted", "report_id": report_id}
