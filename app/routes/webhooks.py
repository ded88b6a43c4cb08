"""Google Calendar push notification endpoint."""
import logging

from fastapi import APIRouter, Depends, Header
from sqlmodel import Session

from app.core.database import get_session
from app.core.exceptions import ExternalServiceError
from app.core.scheduler import run_guarded
from app.routes.deps import get_effects
from app.services.effects import SideEffects

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/calendar")
async def calendar_push(
    x_goog_resource_state: str | None = Header(default=None),
    x_goog_channel_id: str | None = Header(default=None),
    session: Session = Depends(get_session),
    effects: SideEffects = Depends(get_effects),
):
    """
    Handle a Google Calendar push notification.

    The initial "sync" handshake is acknowledged without work. Any other
    change runs the calendar sync pass, which is skipped if a sync is
    already in progress.
    """
    logger.info(f"Calendar push received: state={x_goog_resource_state} channel={x_goog_channel_id}")
    if x_goog_resource_state == "sync":
        return {"status": "ok"}

    try:
        stats = run_guarded("sync", session, effects)
    except ExternalServiceError as e:
        logger.error(f"Calendar sync after push failed: {e}")
        return {"status": "error", "detail": str(e)}
    if stats is None:
        return {"status": "skipped"}
    return {"status": "synced", "stats": stats}
