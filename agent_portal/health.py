# agent_portal/health.py
from fastapi import APIRouter, Depends

from agent_portal.clients.backend import BookingBackendClient
from agent_portal.dependencies.services import get_backend_client

router = APIRouter()


@router.get("/health")
def health(client: BookingBackendClient = Depends(get_backend_client)):
    return {"ok": True, "mode": "mock" if client.use_mock_data else "live"}
