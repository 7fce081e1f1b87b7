from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agent_portal.config import get_settings
from agent_portal.dependencies.services import get_backend_client_cached

# Import routers directly from submodules
from agent_portal.routes.appointments import router as appointments_router
from agent_portal.routes.auth import router as auth_router
from agent_portal.routes.bulk_booking import router as bulk_booking_router
from agent_portal.routes.doctors import router as doctors_router
from agent_portal.routes.payments import router as payments_router
from agent_portal.routes.reports import router as reports_router
from agent_portal.health import router as health_router


def configure_logging() -> None:
    """Ensure application logs use the INFO level by default."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root_logger.setLevel(logging.INFO)

# Configure logging as soon as the module is loaded
configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    # --- Startup Logic ---
    settings = get_settings()
    logger.info("Application settings on startup: %s", settings.model_dump(mode="json"))

    # Initialize shared resources
    client = get_backend_client_cached()
    logger.info(
        "Booking backend mode: %s", "mock" if client.use_mock_data else settings.backend_base_url
    )
    logger.info("Application startup complete.")

    try:
        yield  # The application is now running
    finally:
        # --- Shutdown Logic ---
        logger.info("Closing booking backend client.")
        await client.close()
        logger.info("Application shutdown complete.")


# --- Application Setup ---

settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    redirect_slashes=False
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include Routers ---

app.include_router(auth_router, prefix="/auth")
app.include_router(doctors_router, prefix="/doctors")
app.include_router(bulk_booking_router, prefix="/bulk-booking")
app.include_router(appointments_router, prefix="/appointments")
app.include_router(payments_router, prefix="/payments")
app.include_router(reports_router, prefix="/reports")
app.include_router(health_router)
