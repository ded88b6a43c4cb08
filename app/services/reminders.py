"""Escalating RSVP reminders.

Non-responders get at most three kinds of nudge as the meeting approaches:

    gentle  first reminder,  24-48h before start
    firm    second reminder, 12-24h before start, 6h after the previous one
    cheeky  later reminders, under 12h before start, 4h after the previous one

A cheeky reminder also counts against the attendee's ghost score.
"""
import logging
import math
from datetime import datetime, timedelta
from enum import StrEnum

from sqlmodel import Session, select

from app.core.config import settings
from app.core.timeutils import hours_between, utcnow
from app.models import Attendee, Meeting, MeetingStatus
from app.notifications.messages import reminder_message
from app.services import store
from app.services.effects import SideEffects
from app.services.gamification import ScoreEvent, apply_event

logger = logging.getLogger(__name__)


class ReminderTier(StrEnum):
    GENTLE = "gentle"
    FIRM = "firm"
    CHEEKY = "cheeky"


def select_reminder_tier(
    reminder_count: int,
    hours_until: float,
    hours_since_last: float,
) -> ReminderTier | None:
    """
    Pick the reminder to send now, if any.

    Args:
        reminder_count: Reminders already sent to this attendee
        hours_until: Hours until the meeting starts
        hours_since_last: Hours since the last reminder (``math.inf`` if none)

    Returns:
        The tier to send, or None when nothing is due.
    """
    if hours_until <= 0:
        return None
    if reminder_count == 0 and 24 < hours_until <= 48:
        return ReminderTier.GENTLE
    if reminder_count == 1 and 12 < hours_until <= 24 and hours_since_last >= 6:
        return ReminderTier.FIRM
    if reminder_count >= 2 and hours_until <= 12 and hours_since_last >= 4:
        return ReminderTier.CHEEKY
    return None


def _hours_since_last(attendee: Attendee, now: datetime) -> float:
    if attendee.last_reminded is None:
        return math.inf
    return hours_between(attendee.last_reminded, now)


def remind_attendee(
    session: Session,
    effects: SideEffects,
    meeting: Meeting,
    attendee: Attendee,
    now: datetime,
) -> ReminderTier | None:
    """Send the due reminder to one attendee. Returns the tier sent."""
    tier = select_reminder_tier(
        attendee.reminder_count,
        hours_between(now, meeting.start_time),
        _hours_since_last(attendee, now),
    )
    if tier is None:
        return None

    result = effects.notify(attendee.email, reminder_message(meeting, tier))
    if not result.delivered:
        logger.warning(f"{tier} reminder to {attendee.email} for {meeting.event_id} not sent: {result.error}")
        return None

    if not store.record_reminder(session, attendee, now):
        logger.info(f"Reminder for {attendee.email} on {meeting.event_id} already recorded")
        return None

    if tier == ReminderTier.CHEEKY:
        apply_event(session, attendee.email, ScoreEvent.REMINDER_IGNORED, {"name": attendee.display_name})

    logger.info(f"Sent {tier} reminder to {attendee.email} for {meeting.event_id}")
    return tier


def run_reminder_batch(
    session: Session,
    effects: SideEffects,
    now: datetime | None = None,
) -> dict:
    """Remind every pending attendee of upcoming scheduled meetings."""
    now = now or utcnow()
    stats = {"meetings": 0, "sent": 0, "failed": 0}
    stats.update({tier.value: 0 for tier in ReminderTier})

    statement = (
        select(Meeting)
        .where(Meeting.status == MeetingStatus.SCHEDULED)
        .where(Meeting.start_time >= now)
        .where(Meeting.start_time <= now + timedelta(hours=settings.reminder_lookahead_hours))
        .order_by(Meeting.start_time)
    )
    meetings = session.exec(statement).all()
    logger.info(f"Checking {len(meetings)} meetings for RSVP reminders")

    for meeting in meetings:
        stats["meetings"] += 1
        event_id = meeting.event_id
        try:
            for attendee in meeting.non_responders():
                tier = remind_attendee(session, effects, meeting, attendee, now)
                if tier:
                    stats["sent"] += 1
                    stats[tier.value] += 1
        except Exception as e:
            session.rollback()
            stats["failed"] += 1
            logger.error(f"Error sending reminders for {event_id}: {e}")

    logger.info(f"Reminder batch completed: {stats}")
    return stats
