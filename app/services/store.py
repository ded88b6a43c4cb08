"""Field-scoped, conditional writes for meeting state.

Each periodic pass owns a few fields of a meeting. Instead of saving whole
records, passes issue narrow UPDATE statements guarded by the value they
observed (``WHERE status = 'scheduled'``, ``WHERE reminder_count = n``), so a
reminder increment and a room release on the same meeting never clobber
each other. Every helper returns whether its guarded update applied.
"""
from datetime import datetime

from sqlalchemy import update
from sqlmodel import Session, select

from app.core.timeutils import utcnow
from app.models import Attendee, Meeting, MeetingStatus


def _apply(session: Session, statement) -> bool:
    result = session.exec(statement.execution_options(synchronize_session=False))
    session.commit()
    return result.rowcount == 1


def cancel_meeting(
    session: Session,
    meeting: Meeting,
    reason: str,
    status: str = MeetingStatus.AUTO_CANCELLED,
    release_room: bool = False,
) -> bool:
    """Move a scheduled meeting to a cancelled status with its reason."""
    values = {"status": status, "cancellation_reason": reason}
    statement = update(Meeting).where(
        Meeting.id == meeting.id,
        Meeting.status == MeetingStatus.SCHEDULED,
    )
    if release_room:
        statement = statement.where(Meeting.was_room_released == False)  # noqa: E712
        values["was_room_released"] = True
    return _apply(session, statement.values(**values))


def complete_meeting(session: Session, meeting: Meeting) -> bool:
    statement = (
        update(Meeting)
        .where(Meeting.id == meeting.id, Meeting.status == MeetingStatus.SCHEDULED)
        .values(status=MeetingStatus.COMPLETED)
    )
    return _apply(session, statement)


def mark_validated(session: Session, meeting: Meeting, **fields) -> bool:
    """Claim an unvalidated meeting: stamp ``validated_at`` and write any agenda fields."""
    statement = (
        update(Meeting)
        .where(
            Meeting.id == meeting.id,
            Meeting.status == MeetingStatus.SCHEDULED,
            Meeting.validated_at == None,  # noqa: E711
        )
        .values(validated_at=utcnow(), **fields)
    )
    return _apply(session, statement)


def record_reminder(session: Session, attendee: Attendee, sent_at: datetime) -> bool:
    """Count a reminder, unless another pass already counted one."""
    observed = attendee.reminder_count
    history = list(attendee.reminded_at or []) + [sent_at.isoformat()]
    statement = (
        update(Attendee)
        .where(Attendee.id == attendee.id, Attendee.reminder_count == observed)
        .values(
            reminder_count=Attendee.reminder_count + 1,
            last_reminded=sent_at,
            reminded_at=history,
        )
    )
    return _apply(session, statement)


def set_response_status(session: Session, meeting: Meeting, attendee: Attendee, status: str) -> bool:
    """Write an attendee's response while the meeting is still open."""
    still_scheduled = select(Meeting.id).where(
        Meeting.id == meeting.id, Meeting.status == MeetingStatus.SCHEDULED
    )
    statement = (
        update(Attendee)
        .where(Attendee.id == attendee.id, Attendee.meeting_id.in_(still_scheduled))
        .values(response_status=status)
    )
    if not _apply(session, statement):
        return False
    rate_update = (
        update(Meeting)
        .where(Meeting.id == meeting.id)
        .values(rsvp_rate=meeting.calculate_rsvp_rate())
    )
    _apply(session, rate_update)
    return True
