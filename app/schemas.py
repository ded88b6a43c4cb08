"""Request bodies for the JSON API."""
from sqlmodel import Field, SQLModel


class RegisterMeetingRequest(SQLModel):
    event_id: str
    creator: str
    agenda_text: str = ""
    mandatory_attendees: list[str] = Field(default_factory=list)


class RsvpRequest(SQLModel):
    event_id: str
    email: str
    status: str


class AnalyzeAgendaRequest(SQLModel):
    text: str | None = None


class SuggestAgendaRequest(SQLModel):
    title: str
    attendee_count: int = 0
    duration: int | None = None
    meeting_type: str | None = None
