"""Agenda policy for newly registered meetings.

Rules are evaluated in order and the first match decides:

    1. No attendees          -> approved (solo events get a default agenda)
    2. Agenda under 50 chars -> cancelled, organizer told how to fix it
    3. Quality score < 40    -> approved with a warning DM
    4. Otherwise             -> approved

The length floor blocks; the quality score only warns. Calendar and Slack
failures are logged and never change the decision.
"""
import logging
from dataclasses import dataclass
from enum import StrEnum

from sqlmodel import Session

from app.agenda.analyzer import analyze_agenda
from app.agenda.scorer import score_agenda_text
from app.core.config import settings
from app.models import Meeting, MeetingStatus
from app.notifications.messages import cancellation_message, quality_warning_message
from app.services import store
from app.services.effects import SideEffects

logger = logging.getLogger(__name__)

SOLO_AGENDA = {
    "agenda_raw": "📍 SELF (reminder)\n\nPersonal task - no detailed agenda required",
    "agenda_purpose": "Personal reminder",
    "agenda_outcomes": "Complete task",
    "agenda_decisions": "None",
}


class ValidationAction(StrEnum):
    APPROVED = "approved"
    APPROVED_WITH_WARNING = "approved_with_warning"
    CANCELLED = "cancelled"


@dataclass
class ValidationOutcome:
    action: ValidationAction
    reason: str
    agenda_length: int
    notified: bool = False

    @property
    def valid(self) -> bool:
        return self.action != ValidationAction.CANCELLED


def insufficient_agenda_reason(agenda_length: int, min_length: int) -> str:
    return (
        f"Meeting cancelled by Meeting Police: Agenda required (minimum {min_length} characters). "
        f"Your agenda had only {agenda_length} characters."
    )


class MeetingValidator:
    """Decide whether a meeting may proceed and carry out the decision."""

    def __init__(
        self,
        session: Session,
        effects: SideEffects,
        min_agenda_length: int = settings.min_agenda_length,
        solo_agenda_min_length: int = settings.solo_agenda_min_length,
        quality_threshold: int = settings.quality_warning_threshold,
    ):
        self.session = session
        self.effects = effects
        self.min_agenda_length = min_agenda_length
        self.solo_agenda_min_length = solo_agenda_min_length
        self.quality_threshold = quality_threshold

    def validate_and_enforce(self, meeting: Meeting) -> ValidationOutcome:
        """
        Apply the agenda rules to a scheduled meeting.

        Stamping ``validated_at`` claims the meeting. If another validation
        claimed it first, nothing is sent and the stored decision is returned.
        """
        agenda_length = meeting.agenda_length
        logger.info(
            f"Validating meeting {meeting.event_id}: "
            f"{len(meeting.attendees)} attendees, agenda length {agenda_length}"
        )

        if meeting.status != MeetingStatus.SCHEDULED:
            logger.info(f"Meeting {meeting.event_id} is {meeting.status}, not re-validating")
            action = ValidationAction.CANCELLED if meeting.is_cancelled else ValidationAction.APPROVED
            return ValidationOutcome(action, f"Meeting already {meeting.status}", agenda_length)

        if meeting.is_solo:
            return self._approve_solo(meeting, agenda_length)

        if agenda_length < self.min_agenda_length:
            return self._cancel_for_agenda(meeting, agenda_length)

        fields = {}
        score = meeting.agenda_quality_score
        if score is None:
            score = score_agenda_text(meeting.agenda_raw)
            fields["agenda_quality_score"] = score
        warn = score < self.quality_threshold
        if warn:
            fields["warning_count"] = Meeting.warning_count + 1
        if not store.mark_validated(self.session, meeting, **fields):
            return self._stored_outcome(meeting, agenda_length)

        if warn:
            return self._warn_low_quality(meeting, agenda_length)

        logger.info(f"Meeting {meeting.event_id} approved - good agenda")
        return ValidationOutcome(ValidationAction.APPROVED, "Meeting approved", agenda_length)

    def _stored_outcome(self, meeting: Meeting, agenda_length: int) -> ValidationOutcome:
        self.session.refresh(meeting)
        logger.info(f"Meeting {meeting.event_id} already validated, skipping")
        if meeting.is_cancelled:
            return ValidationOutcome(ValidationAction.CANCELLED, meeting.cancellation_reason or "", agenda_length)
        if meeting.warning_count:
            return ValidationOutcome(
                ValidationAction.APPROVED_WITH_WARNING, "Approved with quality warning", agenda_length
            )
        return ValidationOutcome(ValidationAction.APPROVED, "Meeting approved", agenda_length)

    def _approve_solo(self, meeting: Meeting, agenda_length: int) -> ValidationOutcome:
        fields = {}
        if agenda_length < self.solo_agenda_min_length:
            fields = dict(SOLO_AGENDA, agenda_quality_score=settings.solo_agenda_score)
        if not store.mark_validated(self.session, meeting, **fields):
            return self._stored_outcome(meeting, agenda_length)
        if fields:
            logger.info(f"Added SELF agenda for solo meeting {meeting.event_id}")
            self.effects.update_description(meeting, SOLO_AGENDA["agenda_raw"])
        logger.info(f"Solo meeting {meeting.event_id} auto-approved")
        return ValidationOutcome(ValidationAction.APPROVED, "Solo meeting auto-approved", agenda_length)

    def _cancel_for_agenda(self, meeting: Meeting, agenda_length: int) -> ValidationOutcome:
        reason = insufficient_agenda_reason(agenda_length, self.min_agenda_length)
        if not store.mark_validated(self.session, meeting):
            return self._stored_outcome(meeting, agenda_length)

        logger.warning(
            f"Meeting {meeting.event_id} blocked: insufficient agenda "
            f"({agenda_length} chars, need {self.min_agenda_length}+)"
        )
        if not store.cancel_meeting(self.session, meeting, reason):
            return self._stored_outcome(meeting, agenda_length)

        self.effects.cancel_event(meeting, reason)
        notified = self.effects.notify(
            meeting.creator,
            cancellation_message(meeting, reason, self.min_agenda_length),
        )
        return ValidationOutcome(ValidationAction.CANCELLED, reason, agenda_length, notified.delivered)

    def _warn_low_quality(self, meeting: Meeting, agenda_length: int) -> ValidationOutcome:
        logger.info(f"Low quality agenda for {meeting.event_id} - sending warning")
        feedback = [item.message for item in analyze_agenda(meeting.agenda_raw).feedback
                    if item.type != "success"]
        notified = self.effects.notify(meeting.creator, quality_warning_message(meeting, feedback))
        return ValidationOutcome(
            ValidationAction.APPROVED_WITH_WARNING,
            "Approved with quality warning",
            agenda_length,
            notified.delivered,
        )
