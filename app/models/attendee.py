"""Attendee model for meeting participants and their reminder history.

This module defines the Attendee model which represents people invited
to a meeting. Response status is synced from Google Calendar or submitted
through the RSVP endpoint; reminder bookkeeping is written by the reminder
scheduler.
"""

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.meeting import Meeting


class ResponseStatus(StrEnum):
    NEEDS_ACTION = "needsAction"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    TENTATIVE = "tentative"


class Attendee(SQLModel, table=True):
    """A person invited to a meeting.

    Attributes:
        id: Unique identifier (UUID).
        meeting_id: Foreign key to the parent Meeting.
        position: Order of the attendee in the invitation list.
        email: Email address of the attendee.
        display_name: Human-readable name, if available.
        response_status: One of "accepted", "declined", "tentative", or
            "needsAction" (not yet responded).
        reminder_count: Number of RSVP reminders sent. Only ever increases.
        last_reminded: When the most recent reminder was sent.
        reminded_at: ISO timestamps of every reminder sent.
        meeting: Reference to the parent Meeting object.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    meeting_id: UUID = Field(foreign_key="meeting.id", index=True)
    position: int = Field(default=0)
    email: str = Field(index=True)
    display_name: str | None = None
    response_status: str = Field(default=ResponseStatus.NEEDS_ACTION)
    reminder_count: int = Field(default=0)
    last_reminded: datetime | None = None
    reminded_at: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Relationship
    meeting: Optional["Meeting"] = Relationship(back_populates="attendees")
