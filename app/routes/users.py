"""User stats, leaderboard and badge routes."""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from app.core.database import get_session
from app.core.exceptions import NotFoundError
from app.models import UserStats
from app.notifications.messages import stats_message
from app.routes.deps import get_effects
from app.services.badges import badge_catalog
from app.services.effects import SideEffects
from app.services.gamification import get_global_stats, get_leaderboard, get_user_stats

router = APIRouter(tags=["users"])


def stats_summary(stats: UserStats) -> dict:
    return {
        "email": stats.email,
        "name": stats.name,
        "agenda_score": stats.agenda_score,
        "rsvp_score": stats.rsvp_score,
        "ghost_score": stats.ghost_score,
        "overall_score": round(stats.overall_score, 1),
        "meetings_organized": stats.meetings_organized,
        "meetings_with_agenda": stats.meetings_with_agenda,
        "meetings_attended": stats.meetings_attended,
        "rsvps_on_time": stats.rsvps_on_time,
        "rsvps_ignored": stats.rsvps_ignored,
        "current_rsvp_streak": stats.current_rsvp_streak,
        "best_rsvp_streak": stats.best_rsvp_streak,
        "badges": [b.badge_type for b in stats.badges],
    }


@router.get("/users/{email}")
async def user_stats(email: str, session: Session = Depends(get_session)):
    try:
        return stats_summary(get_user_stats(session, email))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/users/{email}/notify")
async def send_stats(
    email: str,
    session: Session = Depends(get_session),
    effects: SideEffects = Depends(get_effects),
):
    """DM a user their current stats and badges."""
    try:
        stats = get_user_stats(session, email)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    result = effects.notify(stats.email, stats_message(stats))
    return {"delivered": result.delivered, "error": result.error}


@router.get("/leaderboard")
async def leaderboard(
    limit: int = Query(default=10, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """Top users by agenda score, then RSVP score."""
    return [
        {"rank": rank, **stats_summary(stats)}
        for rank, stats in enumerate(get_leaderboard(session, limit), start=1)
    ]


@router.get("/stats/global")
async def global_stats(session: Session = Depends(get_session)):
    return get_global_stats(session)


@router.get("/badges")
async def badges():
    return badge_catalog()
