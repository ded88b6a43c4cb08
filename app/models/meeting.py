"""Meeting model for calendar events under agenda and RSVP policy.

This module defines the Meeting model which represents a calendar event
registered with the policy engine, together with its parsed agenda, its
attendees and its lifecycle status. Meetings are the central entity that
the validator, the reminder scheduler and the enforcement passes act upon.
"""

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel

from app.core.timeutils import utcnow

if TYPE_CHECKING:
    from app.models.attendee import Attendee


class MeetingStatus(StrEnum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    AUTO_CANCELLED = "auto-cancelled"


CANCELLED_STATUSES = (MeetingStatus.CANCELLED, MeetingStatus.AUTO_CANCELLED)


class Meeting(SQLModel, table=True):
    """A calendar event tracked by the policy engine.

    Meetings are created on explicit registration or on first sighting during
    calendar sync. The validator decides whether they may proceed; the
    periodic passes later remind attendees, enforce mandatory attendance and
    release unused rooms.

    Status only moves forward: once a meeting is cancelled or auto-cancelled
    its agenda and attendees are frozen. Status changes go through the
    conditional updates in ``app.services.store`` so concurrent passes never
    overwrite each other.

    Attributes:
        id: Unique identifier (UUID).
        event_id: The event ID from Google Calendar (unique).
        calendar_id: Calendar that owns the event (the organizer's address).
        title: Event title/summary.
        agenda_raw: Agenda text as written by the organizer.
        agenda_purpose: "Purpose" section parsed from the agenda.
        agenda_outcomes: "Expected Outcomes" section.
        agenda_decisions: "Decisions Needed" section.
        agenda_prereads: "Pre-reads" section.
        agenda_quality_score: 0-100 score, None until the agenda is scored.
        creator: Organizer's email address.
        creator_name: Organizer's display name.
        mandatory_attendees: Addresses whose decline cancels the meeting.
        start_time: When the meeting starts.
        end_time: When the meeting ends.
        location: Room or place; empty when the meeting has no room.
        status: One of "scheduled", "cancelled", "completed" or
            "auto-cancelled".
        cancellation_reason: Set if and only if status is a cancelled variant.
        was_room_released: True once the room reclaimer has released the room.
        warning_count: Number of quality warnings sent to the creator.
        rsvp_rate: Percentage of attendees who responded.
        validated_at: When the validator last decided on this meeting.
        attendees: Invited participants, in invitation order.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: str = Field(index=True, unique=True)
    calendar_id: str
    title: str

    agenda_raw: str = ""
    agenda_purpose: str = ""
    agenda_outcomes: str = ""
    agenda_decisions: str = ""
    agenda_prereads: str = ""
    agenda_quality_score: int | None = Field(default=None, ge=0, le=100)

    creator: str = Field(index=True)
    creator_name: str | None = None
    mandatory_attendees: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    start_time: datetime = Field(index=True)
    end_time: datetime
    location: str | None = None
    meeting_link: str | None = None
    recurring_event_id: str | None = None

    status: str = Field(default=MeetingStatus.SCHEDULED, index=True)
    cancellation_reason: str | None = None
    was_room_released: bool = Field(default=False)
    warning_count: int = Field(default=0)
    rsvp_rate: float = Field(default=0.0)

    validated_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)

    # Relationships
    attendees: list["Attendee"] = Relationship(
        back_populates="meeting",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "Attendee.position",
        },
    )

    @property
    def is_cancelled(self) -> bool:
        return self.status in CANCELLED_STATUSES

    @property
    def is_solo(self) -> bool:
        return not self.attendees

    @property
    def agenda_length(self) -> int:
        return len((self.agenda_raw or "").strip())

    def calculate_rsvp_rate(self) -> float:
        if not self.attendees:
            return 0.0
        responded = [a for a in self.attendees if a.response_status != "needsAction"]
        return len(responded) / len(self.attendees) * 100

    def non_responders(self) -> list["Attendee"]:
        return [a for a in self.attendees if a.response_status == "needsAction"]

    def mandatory_attendee_records(self) -> list["Attendee"]:
        mandatory = {email.lower() for email in self.mandatory_attendees or []}
        return [a for a in self.attendees if a.email.lower() in mandatory]
