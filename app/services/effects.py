"""Best-effort calls to Google Calendar and Slack.

The policy layer decides locally and then asks for side effects here. Every
call returns an ``EffectResult`` instead of raising, so a failed cancel or an
undelivered DM never changes or rolls back a policy decision.
"""
import logging
from dataclasses import dataclass

from sqlmodel import Session

from app.calendar.client import GoogleCalendarProvider, get_calendar_provider
from app.core.exceptions import ExternalServiceError
from app.models import Meeting
from app.notifications.messages import Message
from app.notifications.slack import SlackNotifier, build_notifier

logger = logging.getLogger(__name__)


@dataclass
class EffectResult:
    delivered: bool
    error: str | None = None


class SideEffects:
    """Calendar and notification collaborators behind a non-raising boundary."""

    def __init__(self, calendar: GoogleCalendarProvider, notifier: SlackNotifier):
        self.calendar = calendar
        self.notifier = notifier

    def cancel_event(self, meeting: Meeting, reason: str) -> EffectResult:
        try:
            self.calendar.cancel_event(meeting.event_id, meeting.calendar_id, reason)
        except ExternalServiceError as e:
            logger.error(f"Could not cancel {meeting.event_id} in calendar: {e}")
            return EffectResult(False, str(e))
        return EffectResult(True)

    def update_description(self, meeting: Meeting, text: str) -> EffectResult:
        try:
            self.calendar.patch_description(meeting.event_id, text, meeting.calendar_id)
        except ExternalServiceError as e:
            logger.error(f"Could not update description of {meeting.event_id}: {e}")
            return EffectResult(False, str(e))
        return EffectResult(True)

    def update_rsvp(self, meeting: Meeting, email: str, status: str) -> EffectResult:
        try:
            updated = self.calendar.update_rsvp(meeting.event_id, email, status, meeting.calendar_id)
        except ExternalServiceError as e:
            logger.error(f"Could not write RSVP for {email} on {meeting.event_id}: {e}")
            return EffectResult(False, str(e))
        if not updated:
            return EffectResult(False, f"{email} not on calendar guest list")
        return EffectResult(True)

    def notify(self, email: str, message: Message) -> EffectResult:
        """DM the Slack user behind ``email``."""
        try:
            user_id = self.notifier.resolve_identity(email)
            if not user_id:
                logger.warning(f"No Slack ID for {email}, skipping notification")
                return EffectResult(False, "identity not found")
            delivered = self.notifier.send_direct_message(user_id, message.blocks, message.text)
        except ExternalServiceError as e:
            logger.error(f"Error notifying {email}: {e}")
            return EffectResult(False, str(e))
        return EffectResult(delivered, None if delivered else "not delivered")


def build_effects(session: Session) -> SideEffects:
    """Side effects wired to the configured Google and Slack clients."""
    return SideEffects(get_calendar_provider(), build_notifier(session))
