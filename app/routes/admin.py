"""Admin routes for triggering passes and maintaining stats."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from app.core.database import get_session
from app.core.exceptions import ExternalServiceError, NotFoundError
from app.core.scheduler import PASSES, run_guarded
from app.routes.deps import get_effects
from app.routes.users import stats_summary
from app.services.badges import evaluate_all_users
from app.services.effects import SideEffects
from app.services.gamification import reset_user_stats
from app.services.maintenance import meetings_needing_attention, system_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/trigger/{pass_name}")
async def trigger_pass(
    pass_name: str,
    session: Session = Depends(get_session),
    effects: SideEffects = Depends(get_effects),
):
    """
    Manually run a periodic pass.

    Uses the same single-flight guard as the scheduler: if the pass is
    already running the request returns "skipped" instead of waiting.
    """
    if pass_name not in PASSES:
        raise HTTPException(status_code=404, detail=f"Unknown pass: {pass_name}")

    try:
        stats = run_guarded(pass_name, session, effects)
    except ExternalServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if stats is None:
        return {"pass": pass_name, "status": "skipped"}
    logger.info(f"Admin triggered {pass_name}: {stats}")
    return {"pass": pass_name, "status": "completed", "stats": stats}


@router.post("/users/{email}/reset")
async def reset_stats(email: str, session: Session = Depends(get_session)):
    """Zero a user's counters and remove their badges."""
    try:
        return stats_summary(reset_user_stats(session, email))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/badges/evaluate")
async def evaluate_badges(session: Session = Depends(get_session)):
    return {"users_evaluated": evaluate_all_users(session)}


@router.post("/slack/sync-users")
async def sync_slack_users(effects: SideEffects = Depends(get_effects)):
    """Refresh the email to Slack user cache from the workspace directory."""
    try:
        synced = effects.notifier.sync_all_users()
    except ExternalServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"synced": synced}


@router.get("/stats")
async def admin_stats(session: Session = Depends(get_session)):
    return system_stats(session)


@router.get("/meetings/attention")
async def attention(session: Session = Depends(get_session)):
    """Upcoming meetings with low RSVP rates, no agenda or pending mandatory attendees."""
    return meetings_needing_attention(session)
