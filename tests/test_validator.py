"""Tests for the agenda policy applied to new meetings."""

from sqlmodel import Session

from app.models import Meeting, MeetingStatus
from app.services.validator import MeetingValidator, ValidationAction, insufficient_agenda_reason
from conftest import GOOD_AGENDA, LOW_QUALITY_AGENDA, SHORT_AGENDA


class TestSoloMeetings:
    def test_solo_meeting_without_agenda_gets_default(self, session: Session, effects, make_meeting, notifier):
        meeting = make_meeting(attendees={}, agenda="", score=None)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.APPROVED
        session.refresh(meeting)
        assert meeting.status == MeetingStatus.SCHEDULED
        assert meeting.agenda_raw.startswith("📍 SELF (reminder)")
        assert meeting.agenda_quality_score == 50
        assert meeting.validated_at is not None
        assert notifier.sent == []

    def test_solo_meeting_keeps_own_agenda(self, session: Session, effects, make_meeting):
        meeting = make_meeting(attendees={}, agenda="Write the Q3 report", score=None)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.valid
        session.refresh(meeting)
        assert meeting.agenda_raw == "Write the Q3 report"
        assert meeting.agenda_quality_score is None

    def test_solo_meeting_with_short_agenda_is_approved(self, session: Session, effects, make_meeting, calendar):
        meeting = make_meeting(attendees={}, agenda=SHORT_AGENDA)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.APPROVED
        assert calendar.cancelled == []


class TestInsufficientAgenda:
    def test_short_agenda_cancels(self, session: Session, effects, make_meeting, calendar, notifier):
        meeting = make_meeting(agenda=SHORT_AGENDA)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.CANCELLED
        assert outcome.reason == insufficient_agenda_reason(7, 50)
        assert "only 7 characters" in outcome.reason
        assert outcome.notified is True

        session.refresh(meeting)
        assert meeting.status == MeetingStatus.AUTO_CANCELLED
        assert meeting.cancellation_reason == outcome.reason
        assert calendar.cancelled == [("evt_1", outcome.reason)]
        assert len(notifier.sent_to("organizer@example.com")) == 1

    def test_count_uses_stripped_agenda(self, session: Session, effects, make_meeting):
        meeting = make_meeting(agenda="   Sync up   \n")

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.agenda_length == 7
        assert "only 7 characters" in outcome.reason

    def test_fifty_characters_is_enough(self, session: Session, effects, make_meeting):
        meeting = make_meeting(agenda="x" * 50, score=None)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.valid

    def test_calendar_failure_does_not_change_decision(self, session: Session, effects, make_meeting, calendar):
        calendar.fail = True
        meeting = make_meeting(agenda=SHORT_AGENDA)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.CANCELLED
        session.refresh(meeting)
        assert meeting.status == MeetingStatus.AUTO_CANCELLED

    def test_slack_failure_does_not_change_decision(self, session: Session, effects, make_meeting, notifier):
        notifier.fail = True
        meeting = make_meeting(agenda=SHORT_AGENDA)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.CANCELLED
        assert outcome.notified is False

    def test_unknown_creator_is_not_notified(self, session: Session, effects, make_meeting, notifier):
        notifier.unknown.add("organizer@example.com")
        meeting = make_meeting(agenda=SHORT_AGENDA)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.CANCELLED
        assert notifier.sent == []


class TestQualityWarning:
    def test_low_quality_agenda_warns_once(self, session: Session, effects, make_meeting, notifier, calendar):
        meeting = make_meeting(agenda=LOW_QUALITY_AGENDA, score=None)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.APPROVED_WITH_WARNING
        session.refresh(meeting)
        assert meeting.status == MeetingStatus.SCHEDULED
        assert meeting.agenda_quality_score == 0
        assert meeting.warning_count == 1
        assert len(notifier.sent) == 1
        assert calendar.cancelled == []

    def test_stored_score_is_used(self, session: Session, effects, make_meeting):
        meeting = make_meeting(agenda=LOW_QUALITY_AGENDA, score=80)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.APPROVED

    def test_threshold_is_exclusive(self, session: Session, effects, make_meeting):
        meeting = make_meeting(agenda=LOW_QUALITY_AGENDA, score=40)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.APPROVED


class TestApproval:
    def test_good_agenda_is_approved(self, session: Session, effects, make_meeting, notifier):
        meeting = make_meeting(agenda=GOOD_AGENDA)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.APPROVED
        assert notifier.sent == []
        session.refresh(meeting)
        assert meeting.validated_at is not None
        assert meeting.warning_count == 0

    def test_cancelled_meeting_is_not_revalidated(self, session: Session, effects, make_meeting, calendar, notifier):
        meeting = make_meeting(agenda=SHORT_AGENDA, status=MeetingStatus.CANCELLED)

        outcome = MeetingValidator(session, effects).validate_and_enforce(meeting)

        assert outcome.action == ValidationAction.CANCELLED
        assert calendar.cancelled == []
        assert notifier.sent == []
        session.refresh(meeting)
        assert meeting.status == MeetingStatus.CANCELLED
        assert meeting.validated_at is None


class TestConcurrentValidation:
    """Two workers holding the same unvalidated meeting act on it once."""

    def _validate_twice(self, engine, session: Session, effects, meeting):
        with Session(engine) as other:
            stale = other.get(Meeting, meeting.id)
            first = MeetingValidator(session, effects).validate_and_enforce(meeting)
            second = MeetingValidator(other, effects).validate_and_enforce(stale)
        return first, second

    def test_low_quality_warning_is_sent_once(self, engine, session: Session, effects, make_meeting, notifier):
        meeting = make_meeting(agenda=LOW_QUALITY_AGENDA, score=None)

        first, second = self._validate_twice(engine, session, effects, meeting)

        assert first.action == ValidationAction.APPROVED_WITH_WARNING
        assert second.action == ValidationAction.APPROVED_WITH_WARNING
        assert second.notified is False
        assert len(notifier.sent) == 1
        session.refresh(meeting)
        assert meeting.warning_count == 1

    def test_short_agenda_is_cancelled_once(
        self, engine, session: Session, effects, make_meeting, calendar, notifier
    ):
        meeting = make_meeting(agenda=SHORT_AGENDA)

        first, second = self._validate_twice(engine, session, effects, meeting)

        assert first.action == ValidationAction.CANCELLED
        assert second.action == ValidationAction.CANCELLED
        assert second.reason == first.reason
        assert len(calendar.cancelled) == 1
        assert len(notifier.sent) == 1

    def test_good_agenda_second_pass_is_quiet(self, engine, session: Session, effects, make_meeting, notifier):
        meeting = make_meeting(agenda=GOOD_AGENDA)

        first, second = self._validate_twice(engine, session, effects, meeting)

        assert first.action == ValidationAction.APPROVED
        assert second.action == ValidationAction.APPROVED
        assert notifier.sent == []
