"""Score ledger: per-user counters driven by discrete behavior events."""
import logging
from datetime import datetime
from enum import StrEnum
from typing import assert_never

from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.exceptions import UserNotFoundError
from app.core.timeutils import utcnow
from app.models import Badge, UserStats
from app.services.badges import reconcile_badges

logger = logging.getLogger(__name__)


class ScoreEvent(StrEnum):
    AGENDA_ADDED = "AGENDA_ADDED"
    GHOST = "GHOST"
    REMINDER_IGNORED = "REMINDER_IGNORED"
    RSVP_ON_TIME = "RSVP_ON_TIME"
    MEETING_ORGANIZED = "MEETING_ORGANIZED"
    MEETING_ATTENDED = "MEETING_ATTENDED"


COUNTER_FIELDS = (
    "agenda_score",
    "rsvp_score",
    "ghost_score",
    "meetings_organized",
    "meetings_with_agenda",
    "meetings_attended",
    "rsvps_on_time",
    "rsvps_ignored",
    "current_rsvp_streak",
    "best_rsvp_streak",
)


# A response counts as on time until the second reminder has gone out.
ON_TIME_REMINDER_LIMIT = 1


def is_on_time_response(previous_status: str, reminder_count: int) -> bool:
    """First response to an invitation, given before the second reminder."""
    return previous_status == "needsAction" and reminder_count <= ON_TIME_REMINDER_LIMIT


def _increments(event: ScoreEvent, now: datetime) -> dict:
    """SET clause for an event. Right-hand sides see the pre-update row."""
    match event:
        case ScoreEvent.AGENDA_ADDED:
            return {
                "agenda_score": UserStats.agenda_score + 10,
                "meetings_with_agenda": UserStats.meetings_with_agenda + 1,
            }
        case ScoreEvent.GHOST:
            return {
                "ghost_score": UserStats.ghost_score + 5,
                "rsvps_ignored": UserStats.rsvps_ignored + 1,
            }
        case ScoreEvent.REMINDER_IGNORED:
            return {
                "ghost_score": UserStats.ghost_score + 1,
                "rsvps_ignored": UserStats.rsvps_ignored + 1,
            }
        case ScoreEvent.RSVP_ON_TIME:
            streak = UserStats.current_rsvp_streak + 1
            return {
                "rsvp_score": UserStats.rsvp_score + 5,
                "rsvps_on_time": UserStats.rsvps_on_time + 1,
                "current_rsvp_streak": streak,
                "best_rsvp_streak": case(
                    (streak > UserStats.best_rsvp_streak, streak),
                    else_=UserStats.best_rsvp_streak,
                ),
                "last_rsvp_date": now,
            }
        case ScoreEvent.MEETING_ORGANIZED:
            return {"meetings_organized": UserStats.meetings_organized + 1}
        case ScoreEvent.MEETING_ATTENDED:
            return {"meetings_attended": UserStats.meetings_attended + 1}
        case _:
            assert_never(event)


def find_user_stats(session: Session, email: str) -> UserStats | None:
    statement = select(UserStats).where(UserStats.email == email.lower())
    return session.exec(statement).first()


def get_or_create_stats(session: Session, email: str, name: str | None = None) -> UserStats:
    """Fetch the stats row for ``email``, creating it on first use."""
    stats = find_user_stats(session, email)
    if stats:
        return stats

    stats = UserStats(email=email.lower(), name=name or email.split("@")[0])
    session.add(stats)
    try:
        session.commit()
    except IntegrityError:
        # Created concurrently by another pass
        session.rollback()
        return find_user_stats(session, email)
    session.refresh(stats)
    return stats


def apply_event(
    session: Session,
    email: str,
    event: ScoreEvent,
    metadata: dict | None = None,
) -> UserStats:
    """
    Record a behavior event for ``email`` and reconcile badges.

    Args:
        session: Database session
        email: Address the event belongs to
        event: Kind of event
        metadata: Optional extras; ``name`` seeds the display name of a new record

    Returns:
        The refreshed UserStats row.
    """
    event = ScoreEvent(event)
    metadata = metadata or {}
    stats = get_or_create_stats(session, email, metadata.get("name"))

    statement = (
        update(UserStats)
        .where(UserStats.id == stats.id)
        .values(**_increments(event, utcnow()))
        .execution_options(synchronize_session=False)
    )
    session.exec(statement)
    session.commit()
    session.refresh(stats)

    delta = reconcile_badges(session, stats)
    logger.info(
        f"{event} recorded for {stats.email} "
        f"(agenda={stats.agenda_score}, rsvp={stats.rsvp_score}, ghost={stats.ghost_score}, "
        f"earned={delta.earned}, lost={delta.lost})"
    )
    return stats


def get_user_stats(session: Session, email: str) -> UserStats:
    stats = find_user_stats(session, email)
    if stats is None:
        raise UserNotFoundError(email)
    return stats


def get_leaderboard(session: Session, limit: int = 10) -> list[UserStats]:
    """Users ranked by agenda score, then RSVP score."""
    statement = (
        select(UserStats)
        .order_by(UserStats.agenda_score.desc(), UserStats.rsvp_score.desc(), UserStats.email)
        .limit(limit)
    )
    return list(session.exec(statement).all())


def reset_user_stats(session: Session, email: str) -> UserStats:
    """Zero every counter and clear badges."""
    stats = get_user_stats(session, email)
    for name in COUNTER_FIELDS:
        setattr(stats, name, 0)
    stats.last_rsvp_date = None
    for badge in list(stats.badges):
        session.delete(badge)
    session.add(stats)
    session.commit()
    session.refresh(stats)
    logger.info(f"Reset stats for {stats.email}")
    return stats


def get_global_stats(session: Session) -> dict:
    """Organization-wide totals."""
    row = session.exec(
        select(
            func.count(UserStats.id),
            func.coalesce(func.sum(UserStats.meetings_organized), 0),
            func.coalesce(func.sum(UserStats.meetings_with_agenda), 0),
            func.coalesce(func.sum(UserStats.rsvps_on_time), 0),
            func.coalesce(func.sum(UserStats.rsvps_ignored), 0),
        )
    ).one()
    total_users, total_meetings, with_agenda, rsvps, ghosts = row
    badge_count = session.exec(select(func.count(Badge.id))).one()
    return {
        "total_users": total_users,
        "total_meetings": total_meetings,
        "total_with_agenda": with_agenda,
        "total_rsvps": rsvps,
        "total_ghosts": ghosts,
        "total_badges": badge_count,
        "agenda_rate": round(with_agenda / total_meetings * 100, 1) if total_meetings else 0.0,
    }
