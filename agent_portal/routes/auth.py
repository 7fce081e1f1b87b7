from fastapi import APIRouter, Depends, HTTPException

from agent_portal.dependencies.services import get_auth_service, get_current_session
from agent_portal.schemas.auth import AgentProfile, LoginRequest, LoginResponse
from agent_portal.services import AuthService
from agent_portal.services.exceptions import AuthenticationError, ServiceError
from agent_portal.session import AgentSession

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    try:
        session = await service.login(req)
    except AuthenticationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except ServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return LoginResponse(access_token=session.access_token, agent=session.agent)


@router.post("/logout")
async def logout(
    session: AgentSession = Depends(get_current_session),
    service: AuthService = Depends(get_auth_service),
):
    await service.logout(session)
    return {"status": "logged_out"}


@router.get("/me", response_model=AgentProfile)
async def current_agent(session: AgentSession = Depends(get_current_session)):
    return session.agent
