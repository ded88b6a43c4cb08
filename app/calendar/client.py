"""Google Calendar API client using pre-authorized credentials."""
import logging
from datetime import datetime

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.core.config import settings
from app.core.exceptions import CalendarError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
]

# Cached credentials and service
_credentials: Credentials | None = None
_service = None


def get_credentials() -> Credentials | None:
    """Get credentials using pre-authorized refresh token from environment."""
    global _credentials

    if not settings.google_refresh_token:
        logger.warning("No GOOGLE_REFRESH_TOKEN configured")
        return None

    if _credentials and not _credentials.expired:
        return _credentials

    _credentials = Credentials(
        token=None,
        refresh_token=settings.google_refresh_token,
        token_uri="https://oauth2.googleapis.com/token",
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        scopes=SCOPES,
    )

    if _credentials.expired or not _credentials.token:
        try:
            _credentials.refresh(Request())
            logger.info("Refreshed Google API credentials")
        except RefreshError as e:
            logger.error(f"Failed to refresh credentials: {e}")
            _credentials = None
            return None

    return _credentials


def get_calendar_service():
    """Build authenticated Calendar API service."""
    global _service

    creds = get_credentials()
    if not creds:
        raise CalendarError(
            "No valid credentials. Run 'python scripts/setup_integrations.py google-token' "
            "to set up authentication."
        )

    if _service and not creds.expired:
        return _service

    _service = build("calendar", "v3", credentials=creds)
    return _service


def has_valid_credentials() -> bool:
    """Check if valid credentials are configured."""
    return bool(settings.google_refresh_token)


def _to_rfc3339(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


class GoogleCalendarProvider:
    """Calendar operations needed by the policy engine.

    Every method raises ``CalendarError`` on failure. Callers in the policy
    layer go through ``app.services.effects`` which turns those failures into
    logged, non-blocking results.
    """

    def __init__(self, service_factory=get_calendar_service, default_calendar_id: str | None = None):
        self._service_factory = service_factory
        self.default_calendar_id = default_calendar_id or settings.google_calendar_id

    def _events(self):
        return self._service_factory().events()

    def _execute(self, request, action: str):
        try:
            return request.execute()
        except HttpError as e:
            logger.error(f"Calendar {action} failed: {e}")
            raise CalendarError(f"Calendar {action} failed: {e}", status_code=e.resp.status) from e

    def get_event(self, event_id: str, calendar_id: str | None = None) -> dict:
        """Fetch an event snapshot."""
        return self._execute(
            self._events().get(calendarId=calendar_id or self.default_calendar_id, eventId=event_id),
            "get",
        )

    def list_events(self, time_min: datetime, time_max: datetime) -> list[dict]:
        """List single events starting in the window, following pagination."""
        calendar_id = self.default_calendar_id
        items = []
        page_token = None
        while True:
            result = self._execute(
                self._events().list(
                    calendarId=calendar_id,
                    timeMin=_to_rfc3339(time_min),
                    timeMax=_to_rfc3339(time_max),
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                ),
                "list",
            )
            items.extend(result.get("items", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                return items

    def patch_description(self, event_id: str, text: str, calendar_id: str | None = None) -> dict:
        """Replace the event description."""
        return self._execute(
            self._events().patch(
                calendarId=calendar_id or self.default_calendar_id,
                eventId=event_id,
                body={"description": text},
            ),
            "patch",
        )

    def cancel_event(self, event_id: str, calendar_id: str | None, reason: str) -> None:
        """Delete the event and notify its guests."""
        self._execute(
            self._events().delete(
                calendarId=calendar_id or self.default_calendar_id,
                eventId=event_id,
                sendUpdates="all",
            ),
            "cancel",
        )
        logger.info(f"Event {event_id} cancelled in Google Calendar: {reason}")

    def update_rsvp(
        self, event_id: str, email: str, status: str, calendar_id: str | None = None
    ) -> bool:
        """Write an attendee's response status back to the event.

        Returns False when the address is not on the event's guest list.
        """
        calendar_id = calendar_id or self.default_calendar_id
        event = self.get_event(event_id, calendar_id)
        attendees = event.get("attendees", [])
        target = next((a for a in attendees if a.get("email", "").lower() == email.lower()), None)
        if target is None:
            return False

        target["responseStatus"] = status
        self._execute(
            self._events().patch(
                calendarId=calendar_id,
                eventId=event_id,
                body={"attendees": attendees},
                sendUpdates="all",
            ),
            "rsvp update",
        )
        return True


def get_calendar_provider() -> GoogleCalendarProvider:
    """Dependency for the calendar collaborator."""
    return GoogleCalendarProvider()
