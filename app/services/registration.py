"""Meeting registration, RSVP intake, and the new-meeting scan."""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlmodel import Session, select

from app.calendar.sync import meeting_from_event
from app.core.exceptions import (
    AttendeeNotFoundError,
    MeetingClosedError,
    MeetingNotFoundError,
    RegistrationError,
)
from app.core.timeutils import utcnow
from app.models import Meeting, MeetingStatus, ResponseStatus
from app.services import store
from app.services.effects import SideEffects
from app.services.gamification import ScoreEvent, apply_event, is_on_time_response
from app.services.validator import MeetingValidator, ValidationAction

logger = logging.getLogger(__name__)

RSVP_STATUSES = {ResponseStatus.ACCEPTED, ResponseStatus.DECLINED, ResponseStatus.TENTATIVE}


@dataclass
class RegistrationResult:
    meeting: Meeting
    action: ValidationAction
    reason: str
    agenda_score: int
    already_registered: bool = False


@dataclass
class RsvpResult:
    event_id: str
    email: str
    status: str
    on_time: bool
    calendar_synced: bool


def find_meeting(session: Session, event_id: str) -> Meeting | None:
    statement = select(Meeting).where(Meeting.event_id == event_id)
    return session.exec(statement).first()


def get_meeting(session: Session, event_id: str) -> Meeting:
    meeting = find_meeting(session, event_id)
    if meeting is None:
        raise MeetingNotFoundError(event_id)
    return meeting


def _existing_action(meeting: Meeting) -> ValidationAction:
    if meeting.is_cancelled:
        return ValidationAction.CANCELLED
    if meeting.warning_count:
        return ValidationAction.APPROVED_WITH_WARNING
    return ValidationAction.APPROVED


def register_meeting(
    session: Session,
    effects: SideEffects,
    event_id: str,
    agenda_text: str | None,
    mandatory_attendees: list[str] | None,
    creator: str,
) -> RegistrationResult:
    """
    Register a calendar event with its agenda and validate it.

    The event snapshot is fetched from the calendar, stored with its parsed
    and scored agenda, and run through the validator straight away.
    Registering the same event twice returns the stored state.

    Raises:
        RegistrationError: event_id or creator missing.
        CalendarError: the event could not be fetched.
    """
    if not event_id or not event_id.strip() or not creator or not creator.strip():
        raise RegistrationError("event_id and creator are required")

    existing = find_meeting(session, event_id)
    if existing:
        return RegistrationResult(
            existing,
            _existing_action(existing),
            existing.cancellation_reason or "Already registered",
            existing.agenda_quality_score or 0,
            already_registered=True,
        )

    event = effects.calendar.get_event(event_id)
    meeting = meeting_from_event(
        event,
        agenda_text=agenda_text or "",
        creator=creator,
        mandatory_attendees=mandatory_attendees or [],
    )
    session.add(meeting)
    session.commit()
    session.refresh(meeting)
    logger.info(f"Meeting registered: {event_id} by {creator} (agenda score {meeting.agenda_quality_score})")

    apply_event(session, creator, ScoreEvent.MEETING_ORGANIZED, {"name": meeting.creator_name})

    validator = MeetingValidator(session, effects)
    outcome = validator.validate_and_enforce(meeting)

    if outcome.valid and outcome.agenda_length >= validator.min_agenda_length:
        apply_event(session, creator, ScoreEvent.AGENDA_ADDED)

    session.refresh(meeting)
    return RegistrationResult(
        meeting,
        outcome.action,
        outcome.reason,
        meeting.agenda_quality_score or 0,
    )


def submit_rsvp(
    session: Session,
    effects: SideEffects,
    event_id: str,
    email: str,
    status: str,
) -> RsvpResult:
    """
    Record an attendee's response and credit on-time RSVPs.

    The response is written back to the calendar on a best-effort basis;
    the local record is updated either way. A first response given before
    the second reminder earns RSVP_ON_TIME.

    Raises:
        RegistrationError: unknown or missing status.
        MeetingNotFoundError / AttendeeNotFoundError: nothing to update.
        MeetingClosedError: the meeting is cancelled or completed.
    """
    if not event_id or not email or status not in RSVP_STATUSES:
        raise RegistrationError(
            f"event_id, email and a status in {sorted(RSVP_STATUSES)} are required"
        )

    meeting = get_meeting(session, event_id)
    if meeting.status != MeetingStatus.SCHEDULED:
        raise MeetingClosedError(event_id, meeting.status)

    attendee = next((a for a in meeting.attendees if a.email.lower() == email.lower()), None)
    if attendee is None:
        raise AttendeeNotFoundError(event_id, email)

    on_time = is_on_time_response(attendee.response_status, attendee.reminder_count)

    synced = effects.update_rsvp(meeting, attendee.email, status)
    if not store.set_response_status(session, meeting, attendee, status):
        session.refresh(meeting)
        raise MeetingClosedError(event_id, meeting.status)

    if on_time:
        apply_event(session, attendee.email, ScoreEvent.RSVP_ON_TIME, {"name": attendee.display_name})

    logger.info(f"RSVP updated: {email} {status} for {event_id} (on_time={on_time})")
    return RsvpResult(event_id, attendee.email, status, on_time, synced.delivered)


def scan_unvalidated_meetings(
    session: Session,
    effects: SideEffects,
    now: datetime | None = None,
) -> dict:
    """
    Validate upcoming scheduled meetings that were never validated.

    Meetings first seen through calendar sync land here. A meeting whose
    validation raises is left approved and retried on the next scan.
    """
    now = now or utcnow()
    stats = {"scanned": 0, "approved": 0, "warned": 0, "cancelled": 0, "failed": 0}

    statement = (
        select(Meeting)
        .where(Meeting.status == MeetingStatus.SCHEDULED)
        .where(Meeting.validated_at == None)  # noqa: E711
        .where(Meeting.start_time >= now)
        .order_by(Meeting.start_time)
    )
    meetings = session.exec(statement).all()
    validator = MeetingValidator(session, effects)

    for meeting in meetings:
        stats["scanned"] += 1
        event_id = meeting.event_id
        try:
            outcome = validator.validate_and_enforce(meeting)
        except Exception as e:
            session.rollback()
            stats["failed"] += 1
            logger.error(f"Error validating meeting {event_id}, defaulting to allow: {e}")
            continue

        if outcome.action == ValidationAction.CANCELLED:
            stats["cancelled"] += 1
        elif outcome.action == ValidationAction.APPROVED_WITH_WARNING:
            stats["warned"] += 1
        else:
            stats["approved"] += 1

    logger.info(f"New meeting scan completed: {stats}")
    return stats
