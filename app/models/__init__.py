from app.models.attendee import Attendee, ResponseStatus
from app.models.identity import IdentityMapping
from app.models.meeting import CANCELLED_STATUSES, Meeting, MeetingStatus
from app.models.user_stats import Badge, UserStats

__all__ = [
    "Meeting",
    "MeetingStatus",
    "CANCELLED_STATUSES",
    "Attendee",
    "ResponseStatus",
    "UserStats",
    "Badge",
    "IdentityMapping",
]
