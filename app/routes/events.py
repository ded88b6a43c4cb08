"""Event routes for registering meetings and recording RSVPs."""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from app.core.database import get_session
from app.core.exceptions import CalendarError, MeetingClosedError, NotFoundError, RegistrationError
from app.models import Meeting
from app.routes.deps import get_effects
from app.schemas import RegisterMeetingRequest, RsvpRequest
from app.services.effects import SideEffects
from app.services.registration import get_meeting, register_meeting, submit_rsvp

router = APIRouter(prefix="/events", tags=["events"])


def meeting_detail(meeting: Meeting) -> dict:
    return {
        "event_id": meeting.event_id,
        "title": meeting.title,
        "creator": meeting.creator,
        "start_time": meeting.start_time,
        "end_time": meeting.end_time,
        "location": meeting.location,
        "status": meeting.status,
        "cancellation_reason": meeting.cancellation_reason,
        "agenda": {
            "raw": meeting.agenda_raw,
            "purpose": meeting.agenda_purpose,
            "outcomes": meeting.agenda_outcomes,
            "decisions": meeting.agenda_decisions,
            "prereads": meeting.agenda_prereads,
            "quality_score": meeting.agenda_quality_score,
        },
        "mandatory_attendees": meeting.mandatory_attendees,
        "rsvp_rate": meeting.rsvp_rate,
        "warning_count": meeting.warning_count,
        "was_room_released": meeting.was_room_released,
        "attendees": [
            {
                "email": a.email,
                "display_name": a.display_name,
                "response_status": a.response_status,
                "reminder_count": a.reminder_count,
            }
            for a in meeting.attendees
        ],
    }


@router.post("/register")
async def register(
    body: RegisterMeetingRequest,
    session: Session = Depends(get_session),
    effects: SideEffects = Depends(get_effects),
):
    """
    Register a calendar event with its agenda.

    The meeting is validated immediately: it is approved, approved with a
    quality warning, or cancelled for an insufficient agenda. Registering
    an already known event returns its current state.
    """
    try:
        result = register_meeting(
            session,
            effects,
            body.event_id,
            body.agenda_text,
            body.mandatory_attendees,
            body.creator,
        )
    except RegistrationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CalendarError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "event_id": result.meeting.event_id,
        "action": result.action,
        "reason": result.reason,
        "agenda_score": result.agenda_score,
        "status": result.meeting.status,
        "already_registered": result.already_registered,
    }


@router.post("/rsvp")
async def rsvp(
    body: RsvpRequest,
    session: Session = Depends(get_session),
    effects: SideEffects = Depends(get_effects),
):
    """Record an attendee's response to a meeting."""
    try:
        result = submit_rsvp(session, effects, body.event_id, body.email, body.status)
    except RegistrationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MeetingClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {
        "event_id": result.event_id,
        "email": result.email,
        "status": result.status,
        "on_time": result.on_time,
        "calendar_synced": result.calendar_synced,
    }


@router.get("/{event_id}")
async def event_detail(event_id: str, session: Session = Depends(get_session)):
    """Meeting state, agenda sections and attendee responses."""
    try:
        meeting = get_meeting(session, event_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return meeting_detail(meeting)
