"""Mandatory-attendee enforcement and room reclaim."""
import logging
from datetime import datetime, timedelta

from sqlmodel import Session, select

from app.core.timeutils import utcnow
from app.models import Meeting, MeetingStatus, ResponseStatus
from app.notifications.messages import mandatory_cancel_message, room_release_message
from app.services import store
from app.services.effects import SideEffects

logger = logging.getLogger(__name__)

MANDATORY_WINDOW = timedelta(hours=24)
ROOM_RELEASE_WINDOW = timedelta(minutes=15)

MANDATORY_DECLINED_REASON = "Mandatory attendee declined"
ROOM_RELEASED_REASON = "Auto-released: No RSVPs"


def declined_mandatory_attendees(meeting: Meeting) -> list[str]:
    return [
        a.email for a in meeting.mandatory_attendee_records()
        if a.response_status == ResponseStatus.DECLINED
    ]


def _upcoming(now: datetime, window: timedelta):
    return (
        select(Meeting)
        .where(Meeting.status == MeetingStatus.SCHEDULED)
        .where(Meeting.start_time >= now)
        .where(Meeting.start_time <= now + window)
        .order_by(Meeting.start_time)
    )


def run_mandatory_check(
    session: Session,
    effects: SideEffects,
    now: datetime | None = None,
) -> dict:
    """Cancel meetings within 24h where a mandatory attendee declined."""
    now = now or utcnow()
    stats = {"checked": 0, "cancelled": 0, "failed": 0}

    meetings = [m for m in session.exec(_upcoming(now, MANDATORY_WINDOW)).all() if m.mandatory_attendees]

    for meeting in meetings:
        stats["checked"] += 1
        event_id = meeting.event_id
        try:
            declined = declined_mandatory_attendees(meeting)
            if not declined:
                continue

            logger.warning(f"Mandatory attendees {declined} declined {event_id}, cancelling")
            effects.cancel_event(meeting, MANDATORY_DECLINED_REASON)
            if not store.cancel_meeting(session, meeting, MANDATORY_DECLINED_REASON):
                logger.info(f"Meeting {event_id} no longer scheduled, skipping")
                continue

            stats["cancelled"] += 1
            effects.notify(meeting.creator, mandatory_cancel_message(meeting))
        except Exception as e:
            session.rollback()
            stats["failed"] += 1
            logger.error(f"Error checking mandatory attendees for {event_id}: {e}")

    logger.info(f"Mandatory attendee check completed: {stats}")
    return stats


def run_room_reclaim(
    session: Session,
    effects: SideEffects,
    now: datetime | None = None,
) -> dict:
    """Release rooms for meetings starting soon that nobody accepted."""
    now = now or utcnow()
    stats = {"checked": 0, "released": 0, "failed": 0}

    statement = (
        _upcoming(now, ROOM_RELEASE_WINDOW)
        .where(Meeting.location != None)  # noqa: E711
        .where(Meeting.location != "")
        .where(Meeting.was_room_released == False)  # noqa: E712
    )
    meetings = session.exec(statement).all()

    for meeting in meetings:
        stats["checked"] += 1
        event_id = meeting.event_id
        try:
            accepted = [a for a in meeting.attendees if a.response_status == ResponseStatus.ACCEPTED]
            if accepted:
                continue

            logger.warning(f"No accepted attendees for {event_id} in {meeting.location}, releasing room")
            effects.cancel_event(meeting, ROOM_RELEASED_REASON)
            if not store.cancel_meeting(session, meeting, ROOM_RELEASED_REASON, release_room=True):
                logger.info(f"Room for {event_id} already released")
                continue

            stats["released"] += 1
            effects.notify(meeting.creator, room_release_message(meeting))
        except Exception as e:
            session.rollback()
            stats["failed"] += 1
            logger.error(f"Error reclaiming room for {event_id}: {e}")

    logger.info(f"Room reclaim completed: {stats}")
    return stats
