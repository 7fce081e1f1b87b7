from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from agent_portal.bulk.template import TEMPLATE_FILENAME
from agent_portal.dependencies.services import (
    get_bulk_booking_service,
    get_current_session,
    get_doctor_directory_service,
)
from agent_portal.schemas.bulk import (
    BatchView,
    BulkBookingOptions,
    BulkRow,
    BulkRowUpdate,
    IngestionResult,
    SubmissionOutcome,
    ValidationSummary,
)
from agent_portal.services import BulkBookingService, DoctorDirectoryService
from agent_portal.services.exceptions import (
    CsvIngestionError,
    NoValidRowsError,
    NotFoundError,
    ServiceError,
    SubmissionInProgressError,
)
from agent_portal.session import AgentSession

router = APIRouter()


@router.get("", response_model=BatchView)
async def get_batch(
    session: AgentSession = Depends(get_current_session),
    service: BulkBookingService = Depends(get_bulk_booking_service),
):
    return service.view(session)


@router.get("/options", response_model=BulkBookingOptions)
async def get_options(
    session: AgentSession = Depends(get_current_session),
    service: BulkBookingService = Depends(get_bulk_booking_service),
    doctors: DoctorDirectoryService = Depends(get_doctor_directory_service),
):
    return service.options(await doctors.doctor_names(session))


@router.get("/template")
async def download_template(
    service: BulkBookingService = Depends(get_bulk_booking_service),
):
    return Response(
        content=service.template(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )


@router.post("/rows", response_model=BulkRow)
async def add_row(
    session: AgentSession = Depends(get_current_session),
    service: BulkBookingService = Depends(get_bulk_booking_service),
):
    return service.add_row(session)


@router.patch("/rows/{row_id}", response_model=BulkRow)
async def update_row(
    row_id: str,
    update: BulkRowUpdate,
    session: AgentSession = Depends(get_current_session),
    service: BulkBookingService = Depends(get_bulk_booking_service),
):
    try:
        return service.update_row(session, row_id, update)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/rows/{row_id}", response_model=BatchView)
async def remove_row(
    row_id: str,
    session: AgentSession = Depends(get_current_session),
    service: BulkBookingService = Depends(get_bulk_booking_service),
):
    try:
        return service.remove_row(session, row_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("/upload", response_model=IngestionResult)
async def upload_csv(
    file: UploadFile = File(...),
    session: AgentSession = Depends(get_current_session),
    service: BulkBookingService = Depends(get_bulk_booking_service),
):
    content = await file.read()
    try:
        return await service.ingest_csv(session, file.filename, content)
    except CsvIngestionError as exc:
        raise HTTPException(
            status_code=400,
            detail={
                "message": str(exc),
                "missing_columns": exc.missing_columns,
                "rejected_lines": exc.rejected_lines,
            },
        ) from exc


@router.post("/validate", response_model=ValidationSummary)
async def validate_batch(
    session: AgentSession = Depends(get_current_session),
    service: BulkBookingService = Depends(get_bulk_booking_service),
):
    return await service.validate(session)


@router.post("/submit", response_model=SubmissionOutcome)
async def submit_batch(
    session: AgentSession = Depends(get_current_session),
    service: BulkBookingService = Depends(get_bulk_booking_service),
):
    try:
        return await service.submit(session)
    except NoValidRowsError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SubmissionInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
