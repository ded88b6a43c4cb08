"""Tests for escalating RSVP reminders."""

import math
from datetime import timedelta

import pytest
from sqlmodel import Session

from app.models import Attendee, MeetingStatus
from app.services import store
from app.services.gamification import find_user_stats
from app.services.reminders import ReminderTier, run_reminder_batch, select_reminder_tier


class TestSelectReminderTier:
    @pytest.mark.parametrize(
        "count, hours_until, hours_since, expected",
        [
            (0, 36, math.inf, ReminderTier.GENTLE),
            (0, 48, math.inf, ReminderTier.GENTLE),
            (0, 48.5, math.inf, None),
            (0, 24, math.inf, None),
            (1, 20, 6, ReminderTier.FIRM),
            (1, 24, math.inf, ReminderTier.FIRM),
            (1, 20, 5.9, None),
            (1, 12, 10, None),
            (2, 10, 5, ReminderTier.CHEEKY),
            (5, 1, 4, ReminderTier.CHEEKY),
            (2, 10, 3.9, None),
            (2, 13, 10, None),
            (0, 10, math.inf, None),
        ],
    )
    def test_tiers(self, count, hours_until, hours_since, expected):
        assert select_reminder_tier(count, hours_until, hours_since) == expected

    @pytest.mark.parametrize("hours_until", [0, -0.5, -24])
    def test_nothing_after_start(self, hours_until):
        for count in range(4):
            assert select_reminder_tier(count, hours_until, math.inf) is None


def _set_reminders(session: Session, attendee: Attendee, count: int, last_reminded):
    attendee.reminder_count = count
    attendee.last_reminded = last_reminded
    session.add(attendee)
    session.commit()


class TestRunReminderBatch:
    def test_gentle_reminder_to_non_responders(self, session: Session, effects, make_meeting, notifier, now):
        meeting = make_meeting(
            attendees={"alice@example.com": "needsAction", "bob@example.com": "accepted"},
            starts_in=timedelta(hours=36),
        )

        stats = run_reminder_batch(session, effects, now=now)

        assert stats["sent"] == 1
        assert stats["gentle"] == 1
        assert len(notifier.sent_to("alice@example.com")) == 1
        assert notifier.sent_to("bob@example.com") == []

        session.refresh(meeting)
        alice = meeting.attendees[0]
        assert alice.reminder_count == 1
        assert alice.last_reminded is not None
        assert len(alice.reminded_at) == 1

    def test_rerun_inside_cooldown_is_noop(self, session: Session, effects, make_meeting, notifier, now):
        make_meeting(starts_in=timedelta(hours=36))

        run_reminder_batch(session, effects, now=now)
        stats = run_reminder_batch(session, effects, now=now + timedelta(hours=1))

        assert stats["sent"] == 0
        assert len(notifier.sent) == 1

    def test_firm_reminder(self, session: Session, effects, make_meeting, now):
        meeting = make_meeting(starts_in=timedelta(hours=20))
        _set_reminders(session, meeting.attendees[0], 1, now - timedelta(hours=7))

        stats = run_reminder_batch(session, effects, now=now)

        assert stats["firm"] == 1
        session.refresh(meeting)
        assert meeting.attendees[0].reminder_count == 2

    def test_firm_waits_for_cooldown(self, session: Session, effects, make_meeting, now):
        meeting = make_meeting(starts_in=timedelta(hours=20))
        _set_reminders(session, meeting.attendees[0], 1, now - timedelta(hours=2))

        stats = run_reminder_batch(session, effects, now=now)

        assert stats["sent"] == 0

    def test_cheeky_reminder_counts_as_ignored(self, session: Session, effects, make_meeting, notifier, now):
        meeting = make_meeting(starts_in=timedelta(hours=10))
        _set_reminders(session, meeting.attendees[0], 2, now - timedelta(hours=5))

        stats = run_reminder_batch(session, effects, now=now)

        assert stats["cheeky"] == 1
        assert len(notifier.sent_to("alice@example.com")) == 1
        user = find_user_stats(session, "alice@example.com")
        assert user.ghost_score == 1
        assert user.rsvps_ignored == 1

    def test_gentle_and_firm_do_not_touch_ghost_score(self, session: Session, effects, make_meeting, now):
        make_meeting(starts_in=timedelta(hours=36))

        run_reminder_batch(session, effects, now=now)

        assert find_user_stats(session, "alice@example.com") is None

    def test_skips_meetings_outside_window(self, session: Session, effects, make_meeting, notifier, now):
        make_meeting(event_id="later", starts_in=timedelta(hours=80))
        make_meeting(event_id="started", starts_in=timedelta(hours=-1))

        stats = run_reminder_batch(session, effects, now=now)

        assert stats["meetings"] == 0
        assert notifier.sent == []

    def test_skips_cancelled_meetings(self, session: Session, effects, make_meeting, notifier, now):
        make_meeting(starts_in=timedelta(hours=36), status=MeetingStatus.AUTO_CANCELLED)

        run_reminder_batch(session, effects, now=now)

        assert notifier.sent == []

    def test_missing_identity_is_skipped(self, session: Session, effects, make_meeting, notifier, now):
        notifier.unknown.add("alice@example.com")
        meeting = make_meeting(starts_in=timedelta(hours=36))

        stats = run_reminder_batch(session, effects, now=now)

        assert stats["sent"] == 0
        session.refresh(meeting)
        assert meeting.attendees[0].reminder_count == 0

    def test_slack_failure_does_not_count(self, session: Session, effects, make_meeting, notifier, now):
        notifier.fail = True
        meeting = make_meeting(starts_in=timedelta(hours=36))

        stats = run_reminder_batch(session, effects, now=now)

        assert stats["sent"] == 0
        assert stats["failed"] == 0
        session.refresh(meeting)
        assert meeting.attendees[0].reminder_count == 0


class TestRecordReminder:
    def test_stale_count_is_not_applied(self, engine, session: Session, make_meeting, now):
        meeting = make_meeting()
        attendee_id = meeting.attendees[0].id

        with Session(engine) as other:
            stale = other.get(Attendee, attendee_id)
            assert stale.reminder_count == 0

            assert store.record_reminder(session, meeting.attendees[0], now) is True
            assert store.record_reminder(other, stale, now) is False

        session.refresh(meeting)
        assert meeting.attendees[0].reminder_count == 1
