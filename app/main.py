"""Meeting Police: agenda and RSVP policy service."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.calendar.client import has_valid_credentials
from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.scheduler import shutdown_scheduler, start_scheduler
from app.notifications.slack import get_slack_client
from app.routes import admin, agenda, events, users, webhooks

# Configure logging
log_dir = Path(settings.log_dir).expanduser()
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting Meeting Police")
    create_db_and_tables()
    if settings.scheduler_enabled:
        start_scheduler()
    yield
    # Shutdown
    if settings.scheduler_enabled:
        shutdown_scheduler()
    logger.info("Meeting Police shut down")


app = FastAPI(
    title=settings.app_name,
    description="Enforces meeting agendas, RSVP reminders and room hygiene on top of Google Calendar and Slack",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(events.router)
app.include_router(users.router)
app.include_router(agenda.router)
app.include_router(admin.router)
app.include_router(webhooks.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "calendar_configured": has_valid_credentials(),
        "slack_configured": get_slack_client() is not None,
    }
