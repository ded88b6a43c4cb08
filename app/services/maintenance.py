"""Completion, retention cleanup, and admin queries."""
import logging
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlmodel import Session, select

from app.core.config import settings
from app.core.timeutils import utcnow
from app.models import (
    CANCELLED_STATUSES,
    Attendee,
    Badge,
    IdentityMapping,
    Meeting,
    MeetingStatus,
    ResponseStatus,
    UserStats,
)
from app.services import store
from app.services.gamification import ScoreEvent, apply_event

logger = logging.getLogger(__name__)

LOW_RSVP_RATE = 50.0
ATTENTION_WINDOW = timedelta(days=7)


def complete_past_meetings(session: Session, now: datetime | None = None) -> dict:
    """Mark ended scheduled meetings completed and credit accepted attendees."""
    now = now or utcnow()
    stats = {"completed": 0, "attended": 0, "failed": 0}

    statement = (
        select(Meeting)
        .where(Meeting.status == MeetingStatus.SCHEDULED)
        .where(Meeting.end_time < now)
    )
    for meeting in session.exec(statement).all():
        event_id = meeting.event_id
        try:
            accepted = [
                (a.email, a.display_name) for a in meeting.attendees
                if a.response_status == ResponseStatus.ACCEPTED
            ]
            if not store.complete_meeting(session, meeting):
                continue
            stats["completed"] += 1
            for email, name in accepted:
                apply_event(session, email, ScoreEvent.MEETING_ATTENDED, {"name": name})
                stats["attended"] += 1
        except Exception as e:
            session.rollback()
            stats["failed"] += 1
            logger.error(f"Error completing meeting {event_id}: {e}")

    logger.info(f"Completion pass finished: {stats}")
    return stats


def cleanup_old_meetings(
    session: Session,
    days_old: int = settings.retention_days,
    now: datetime | None = None,
) -> int:
    """
    Delete completed and cancelled meetings that ended before the cutoff.

    Scheduled meetings are never deleted, however old. Attendees go with
    their meeting.

    Returns:
        Number of meetings deleted
    """
    cutoff = (now or utcnow()) - timedelta(days=days_old)
    statement = (
        select(Meeting)
        .where(Meeting.status.in_([MeetingStatus.COMPLETED, *CANCELLED_STATUSES]))
        .where(Meeting.end_time < cutoff)
    )
    meetings = session.exec(statement).all()
    for meeting in meetings:
        session.delete(meeting)
    session.commit()

    logger.info(f"Cleaned up {len(meetings)} meetings older than {days_old} days")
    return len(meetings)


def meetings_needing_attention(session: Session, now: datetime | None = None) -> list[dict]:
    """Upcoming scheduled meetings with a low RSVP rate, no agenda, or pending mandatory attendees."""
    now = now or utcnow()
    statement = (
        select(Meeting)
        .where(Meeting.status == MeetingStatus.SCHEDULED)
        .where(Meeting.start_time >= now)
        .where(Meeting.start_time <= now + ATTENTION_WINDOW)
        .order_by(Meeting.start_time)
    )

    flagged = []
    for meeting in session.exec(statement).all():
        issues = []
        if meeting.attendees and meeting.rsvp_rate < LOW_RSVP_RATE:
            issues.append(f"Low RSVP rate ({meeting.rsvp_rate:.0f}%)")
        if meeting.attendees and meeting.agenda_length == 0:
            issues.append("No agenda")
        pending = [
            a.email for a in meeting.mandatory_attendee_records()
            if a.response_status == ResponseStatus.NEEDS_ACTION
        ]
        if pending:
            issues.append(f"Mandatory attendees pending: {', '.join(pending)}")
        if issues:
            flagged.append({
                "event_id": meeting.event_id,
                "title": meeting.title,
                "start_time": meeting.start_time,
                "creator": meeting.creator,
                "issues": issues,
            })
    return flagged


def system_stats(session: Session) -> dict:
    """Row counts for the admin overview."""
    status_counts = dict(
        session.exec(select(Meeting.status, func.count(Meeting.id)).group_by(Meeting.status)).all()
    )
    return {
        "meetings": sum(status_counts.values()),
        "meetings_by_status": {status.value: status_counts.get(status.value, 0) for status in MeetingStatus},
        "attendees": session.exec(select(func.count(Attendee.id))).one(),
        "users": session.exec(select(func.count(UserStats.id))).one(),
        "badges": session.exec(select(func.count(Badge.id))).one(),
        "identity_mappings": session.exec(select(func.count(IdentityMapping.id))).one(),
    }
