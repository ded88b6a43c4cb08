"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.database import get_session
from app.core.exceptions import CalendarError, NotificationError
from app.main import app
from app.models import CANCELLED_STATUSES, Attendee, Meeting, MeetingStatus
from app.routes.deps import get_effects
from app.services.effects import SideEffects

GOOD_AGENDA = """📍 Purpose:
Align on the Q3 roadmap priorities for the platform team

🎯 Expected Outcomes:
- Agreed list of top three initiatives with owners

⚡ Decisions Needed:
- Whether to delay the billing migration to Q4

📌 Pre-reads:
- Q3 roadmap draft in the shared drive
"""

# Long enough to pass the length floor, but with no recognizable sections.
LOW_QUALITY_AGENDA = "We will talk about a number of things that came up during the last week."

SHORT_AGENDA = "Sync up"


class FakeCalendar:
    """In-memory stand-in for GoogleCalendarProvider."""

    def __init__(self):
        self.events: dict[str, dict] = {}
        self.cancelled: list[tuple[str, str]] = []
        self.rsvps: list[tuple[str, str, str]] = []
        self.fail = False

    def add_event(self, event: dict) -> dict:
        self.events[event["id"]] = event
        return event

    def _check(self):
        if self.fail:
            raise CalendarError("Calendar unavailable", status_code=503)

    def get_event(self, event_id: str, calendar_id: str | None = None) -> dict:
        self._check()
        if event_id not in self.events:
            raise CalendarError(f"Event {event_id} not found", status_code=404)
        return self.events[event_id]

    def list_events(self, time_min: datetime, time_max: datetime) -> list[dict]:
        self._check()
        return list(self.events.values())

    def patch_description(self, event_id: str, text: str, calendar_id: str | None = None) -> dict:
        event = self.get_event(event_id)
        event["description"] = text
        return event

    def cancel_event(self, event_id: str, calendar_id: str | None, reason: str) -> None:
        self._check()
        self.cancelled.append((event_id, reason))

    def update_rsvp(self, event_id: str, email: str, status: str, calendar_id: str | None = None) -> bool:
        self._check()
        self.rsvps.append((event_id, email, status))
        return True


class FakeNotifier:
    """In-memory stand-in for SlackNotifier."""

    def __init__(self):
        self.sent: list[dict] = []
        self.unknown: set[str] = set()
        self.fail = False

    @property
    def is_configured(self) -> bool:
        return True

    def resolve_identity(self, email: str) -> str | None:
        if email.lower() in self.unknown:
            return None
        return f"U_{email.split('@')[0].upper()}"

    def send_direct_message(self, user_id: str, blocks: list[dict], text: str = "") -> bool:
        if self.fail:
            raise NotificationError("Slack unavailable")
        self.sent.append({"user_id": user_id, "blocks": blocks, "text": text})
        return True

    def sync_all_users(self) -> int:
        return 0

    def sent_to(self, email: str) -> list[dict]:
        user_id = self.resolve_identity(email)
        return [m for m in self.sent if m["user_id"] == user_id]


def make_google_event(
    event_id: str = "evt_1",
    title: str = "Roadmap Review",
    start: datetime | None = None,
    duration: timedelta = timedelta(hours=1),
    attendees: dict[str, str] | None = None,
    organizer: str = "organizer@example.com",
    description: str = "",
    location: str | None = None,
    status: str = "confirmed",
) -> dict:
    """Build a Google Calendar event resource."""
    start = start or datetime.now(UTC) + timedelta(hours=36)
    if attendees is None:
        attendees = {"alice@example.com": "needsAction", "bob@example.com": "needsAction"}
    event = {
        "id": event_id,
        "status": status,
        "summary": title,
        "description": description,
        "start": {"dateTime": start.isoformat()},
        "end": {"dateTime": (start + duration).isoformat()},
        "organizer": {"email": organizer, "displayName": "Olivia Organizer"},
        "attendees": [{"email": organizer, "organizer": True, "responseStatus": "accepted"}]
        + [{"email": email, "responseStatus": response} for email, response in attendees.items()],
    }
    if location:
        event["location"] = location
    return event


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="calendar")
def calendar_fixture() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture(name="notifier")
def notifier_fixture() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture(name="effects")
def effects_fixture(calendar: FakeCalendar, notifier: FakeNotifier) -> SideEffects:
    return SideEffects(calendar, notifier)


@pytest.fixture(name="client")
def client_fixture(session: Session, effects: SideEffects):
    """Create a test client with the test database session and fake collaborators."""

    def get_session_override():
        return session

    def get_effects_override():
        return effects

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_effects] = get_effects_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="now")
def now_fixture() -> datetime:
    return datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


@pytest.fixture(name="make_meeting")
def make_meeting_fixture(session: Session, now: datetime):
    """Factory for meetings stored directly in the database."""

    def _make(
        event_id: str = "evt_1",
        attendees: dict[str, str] | None = None,
        agenda: str = GOOD_AGENDA,
        starts_in: timedelta = timedelta(hours=36),
        status: str = MeetingStatus.SCHEDULED,
        location: str | None = None,
        mandatory: list[str] | None = None,
        score: int | None = 100,
        creator: str = "organizer@example.com",
    ) -> Meeting:
        if attendees is None:
            attendees = {"alice@example.com": "needsAction"}
        start = now + starts_in
        meeting = Meeting(
            event_id=event_id,
            calendar_id=creator,
            title=f"Meeting {event_id}",
            agenda_raw=agenda,
            agenda_quality_score=score,
            creator=creator,
            mandatory_attendees=mandatory or [],
            start_time=start,
            end_time=start + timedelta(hours=1),
            location=location,
            status=status,
            cancellation_reason="Cancelled earlier" if status in CANCELLED_STATUSES else None,
        )
        meeting.attendees = [
            Attendee(position=i, email=email, response_status=response)
            for i, (email, response) in enumerate(attendees.items())
        ]
        meeting.rsvp_rate = meeting.calculate_rsvp_rate()
        session.add(meeting)
        session.commit()
        session.refresh(meeting)
        return meeting

    return _make
