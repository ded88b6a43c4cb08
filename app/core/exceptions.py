"""Exceptions raised by the policy engine and its collaborators."""


class MeetingPoliceError(Exception):
    """Base class for all application errors."""


class ExternalServiceError(MeetingPoliceError):
    """A call to Google Calendar or Slack failed."""

    def __init__(self, message: str, service: str, status_code: int | None = None):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class CalendarError(ExternalServiceError):
    """Raised when the Google Calendar API call fails or is not configured."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, service="calendar", status_code=status_code)


class NotificationError(ExternalServiceError):
    """Raised when Slack rejects a message or lookup."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, service="slack", status_code=status_code)


class NotFoundError(MeetingPoliceError):
    """Base class for missing records."""


class MeetingNotFoundError(NotFoundError):
    def __init__(self, event_id: str):
        super().__init__(f"Meeting not found: {event_id}")
        self.event_id = event_id


class AttendeeNotFoundError(NotFoundError):
    def __init__(self, event_id: str, email: str):
        super().__init__(f"{email} is not an attendee of {event_id}")
        self.event_id = event_id
        self.email = email


class UserNotFoundError(NotFoundError):
    def __init__(self, email: str):
        super().__init__(f"User not found: {email}")
        self.email = email


class RegistrationError(MeetingPoliceError, ValueError):
    """Raised when a registration or RSVP request is missing required fields."""


class MeetingClosedError(MeetingPoliceError):
    """Raised when a cancelled or completed meeting would be mutated."""

    def __init__(self, event_id: str, status: str):
        super().__init__(f"Meeting {event_id} is {status} and can no longer change")
        self.event_id = event_id
        self.status = status
