"""Calendar synchronization service."""
import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import update
from sqlmodel import Session, select

from app.agenda.parser import parse_agenda_sections
from app.agenda.scorer import score_agenda_sections
from app.calendar.client import GoogleCalendarProvider
from app.core.config import settings
from app.core.timeutils import as_utc, utcnow
from app.models import Attendee, Meeting, MeetingStatus, ResponseStatus
from app.services import store
from app.services.gamification import ScoreEvent, apply_event, is_on_time_response

logger = logging.getLogger(__name__)

CALENDAR_CANCELLED_REASON = "Cancelled in Google Calendar"


def _parse_datetime(dt_dict: dict) -> datetime:
    """Parse datetime from Google Calendar format."""
    dt_str = dt_dict.get("dateTime") or dt_dict.get("date")
    if "T" in dt_str:
        # DateTime with timezone
        return as_utc(datetime.fromisoformat(dt_str.replace("Z", "+00:00")))
    else:
        # All-day event (date only)
        return datetime.strptime(dt_str, "%Y-%m-%d").replace(tzinfo=UTC)


def _guest_entries(google_attendees: list) -> list[dict]:
    """Invited people, without the organizer's own entry or room resources."""
    return [
        att for att in google_attendees
        if att.get("email") and not att.get("organizer") and not att.get("resource")
    ]


def _organizer(google_event: dict) -> dict:
    return google_event.get("organizer") or google_event.get("creator") or {}


def meeting_from_event(
    google_event: dict,
    agenda_text: str | None = None,
    creator: str | None = None,
    mandatory_attendees: list[str] | None = None,
) -> Meeting:
    """
    Build an unsaved Meeting from a Google Calendar event.

    Args:
        google_event: Event resource as returned by the Calendar API
        agenda_text: Agenda to store; defaults to the event description
        creator: Organizer address; defaults to the event organizer
        mandatory_attendees: Addresses whose decline cancels the meeting

    The agenda is parsed into sections and scored; attendees keep the
    order of the invitation list.
    """
    organizer = _organizer(google_event)
    agenda = agenda_text if agenda_text is not None else google_event.get("description") or ""
    sections = parse_agenda_sections(agenda)

    meeting = Meeting(
        event_id=google_event["id"],
        calendar_id=organizer.get("email") or settings.google_calendar_id,
        title=google_event.get("summary", "Untitled"),
        agenda_raw=agenda,
        agenda_purpose=sections.purpose,
        agenda_outcomes=sections.outcomes,
        agenda_decisions=sections.decisions,
        agenda_prereads=sections.prereads,
        agenda_quality_score=score_agenda_sections(sections),
        creator=(creator or organizer.get("email") or "").lower(),
        creator_name=organizer.get("displayName"),
        mandatory_attendees=[email.lower() for email in mandatory_attendees or []],
        start_time=_parse_datetime(google_event["start"]),
        end_time=_parse_datetime(google_event["end"]),
        location=google_event.get("location") or None,
        meeting_link=google_event.get("hangoutLink"),
        recurring_event_id=google_event.get("recurringEventId"),
    )
    meeting.attendees = [
        Attendee(
            position=position,
            email=att["email"].lower(),
            display_name=att.get("displayName"),
            response_status=att.get("responseStatus", ResponseStatus.NEEDS_ACTION),
        )
        for position, att in enumerate(_guest_entries(google_event.get("attendees", [])))
    ]
    meeting.rsvp_rate = meeting.calculate_rsvp_rate()
    return meeting


def sync_meeting_rsvps(session: Session, meeting: Meeting, google_event: dict) -> int:
    """
    Pull response changes for one meeting from its calendar event.

    Newly invited guests are added. A first response from an attendee who
    had at most one reminder earns RSVP_ON_TIME. Meetings that are no
    longer scheduled are left untouched.

    Returns:
        Number of attendees whose response changed
    """
    if meeting.status != MeetingStatus.SCHEDULED:
        return 0

    local = {a.email.lower(): a for a in meeting.attendees}
    changed = 0

    for att in _guest_entries(google_event.get("attendees", [])):
        email = att["email"].lower()
        status = att.get("responseStatus", ResponseStatus.NEEDS_ACTION)
        attendee = local.get(email)

        if attendee is None:
            session.add(Attendee(
                meeting_id=meeting.id,
                position=len(local),
                email=email,
                display_name=att.get("displayName"),
                response_status=status,
            ))
            session.commit()
            session.refresh(meeting)
            local = {a.email.lower(): a for a in meeting.attendees}
            continue

        if attendee.response_status == status:
            continue

        on_time = is_on_time_response(attendee.response_status, attendee.reminder_count)
        name = attendee.display_name
        if not store.set_response_status(session, meeting, attendee, status):
            break
        changed += 1
        logger.info(f"RSVP synced from calendar: {email} {status} for {meeting.event_id}")
        if on_time:
            apply_event(session, email, ScoreEvent.RSVP_ON_TIME, {"name": name})

    return changed


def _refresh_schedule(session: Session, meeting: Meeting, google_event: dict) -> None:
    """Carry over title, time and place changes while the meeting is scheduled."""
    statement = (
        update(Meeting)
        .where(Meeting.id == meeting.id, Meeting.status == MeetingStatus.SCHEDULED)
        .values(
            title=google_event.get("summary", "Untitled"),
            start_time=_parse_datetime(google_event["start"]),
            end_time=_parse_datetime(google_event["end"]),
            location=google_event.get("location") or None,
        )
        .execution_options(synchronize_session=False)
    )
    session.exec(statement)
    session.commit()


def _handle_cancelled_event(session: Session, google_id: str) -> bool:
    """Handle event cancellation in Google. Returns True if a meeting was cancelled."""
    statement = select(Meeting).where(Meeting.event_id == google_id)
    meeting = session.exec(statement).first()
    if meeting is None:
        return False
    return store.cancel_meeting(
        session, meeting, CALENDAR_CANCELLED_REASON, status=MeetingStatus.CANCELLED
    )


def import_upcoming_events(
    session: Session,
    calendar: GoogleCalendarProvider,
    now: datetime | None = None,
) -> dict:
    """
    Sync upcoming events from Google Calendar.

    Events seen for the first time become unvalidated meetings (the
    new-meeting scan validates them). Known meetings get schedule and RSVP
    updates; events cancelled in the calendar cancel their meeting.
    All-day events are ignored.

    Returns dict with sync statistics.
    """
    now = now or utcnow()
    time_max = now + timedelta(hours=settings.reminder_lookahead_hours)
    stats = {"created": 0, "updated": 0, "cancelled": 0, "rsvps": 0, "skipped": 0, "failed": 0}

    for google_event in calendar.list_events(now, time_max):
        google_id = google_event.get("id")
        try:
            if google_event.get("status") == "cancelled":
                if _handle_cancelled_event(session, google_id):
                    stats["cancelled"] += 1
                continue

            if "dateTime" not in google_event.get("start", {}):
                stats["skipped"] += 1
                continue

            existing = session.exec(select(Meeting).where(Meeting.event_id == google_id)).first()
            if existing:
                if existing.status == MeetingStatus.SCHEDULED:
                    _refresh_schedule(session, existing, google_event)
                    stats["rsvps"] += sync_meeting_rsvps(session, existing, google_event)
                stats["updated"] += 1
                continue

            meeting = meeting_from_event(google_event)
            if not meeting.creator:
                stats["skipped"] += 1
                continue
            session.add(meeting)
            session.commit()
            stats["created"] += 1
            logger.info(f"Imported meeting from calendar: {meeting.title} ({google_id})")
        except Exception as e:
            session.rollback()
            stats["failed"] += 1
            logger.error(f"Error syncing event {google_id}: {e}")

    logger.info(f"Sync completed: {stats}")
    return stats
