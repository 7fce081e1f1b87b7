from fastapi import APIRouter, Depends

from agent_portal.dependencies.services import get_current_session, get_doctor_directory_service
from agent_portal.schemas.doctor import DoctorSearchRequest, DoctorSearchResponse
from agent_portal.services import DoctorDirectoryService
from agent_portal.session import AgentSession

router = APIRouter()


@router.get("", response_model=DoctorSearchResponse)
async def search_doctors(
    query: str = "",
    specialty: str = "all",
    hospital: str = "all",
    session: AgentSession = Depends(get_current_session),
    service: DoctorDirectoryService = Depends(get_doctor_directory_service),
):
    request = DoctorSearchRequest(query=query, specialty=specialty, hospital=hospital)
    return await service.search(request, session)
