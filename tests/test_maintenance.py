"""Tests for completion, retention cleanup and admin queries."""

from datetime import timedelta

from sqlmodel import Session, select

from app.models import Attendee, Meeting, MeetingStatus
from app.services.gamification import ScoreEvent, apply_event, find_user_stats
from app.services.maintenance import (
    cleanup_old_meetings,
    complete_past_meetings,
    meetings_needing_attention,
    system_stats,
)


class TestCompletePastMeetings:
    def test_ended_meeting_is_completed(self, session: Session, make_meeting, now):
        meeting = make_meeting(
            attendees={"alice@example.com": "accepted", "bob@example.com": "declined"},
            starts_in=timedelta(hours=-3),
        )

        stats = complete_past_meetings(session, now=now)

        assert stats == {"completed": 1, "attended": 1, "failed": 0}
        session.refresh(meeting)
        assert meeting.status == MeetingStatus.COMPLETED
        assert find_user_stats(session, "alice@example.com").meetings_attended == 1
        assert find_user_stats(session, "bob@example.com") is None

    def test_running_and_cancelled_meetings_are_left_alone(self, session: Session, make_meeting, now):
        running = make_meeting(event_id="running", starts_in=timedelta(minutes=-30))
        cancelled = make_meeting(
            event_id="cancelled", starts_in=timedelta(hours=-3), status=MeetingStatus.AUTO_CANCELLED
        )

        stats = complete_past_meetings(session, now=now)

        assert stats["completed"] == 0
        session.refresh(running)
        session.refresh(cancelled)
        assert running.status == MeetingStatus.SCHEDULED
        assert cancelled.status == MeetingStatus.AUTO_CANCELLED


class TestCleanupOldMeetings:
    def test_removes_closed_meetings_past_retention(self, session: Session, make_meeting, now):
        make_meeting(event_id="old-completed", starts_in=timedelta(days=-100), status=MeetingStatus.COMPLETED)
        make_meeting(event_id="old-cancelled", starts_in=timedelta(days=-100), status=MeetingStatus.CANCELLED)
        make_meeting(event_id="old-scheduled", starts_in=timedelta(days=-100))
        make_meeting(event_id="recent", starts_in=timedelta(days=-10), status=MeetingStatus.COMPLETED)

        deleted = cleanup_old_meetings(session, days_old=90, now=now)

        assert deleted == 2
        remaining = session.exec(select(Meeting.event_id).order_by(Meeting.event_id)).all()
        assert remaining == ["old-scheduled", "recent"]
        assert len(session.exec(select(Attendee)).all()) == 2


class TestMeetingsNeedingAttention:
    def test_flags_problems(self, session: Session, make_meeting, now):
        make_meeting(
            event_id="messy",
            agenda="",
            mandatory=["alice@example.com"],
            starts_in=timedelta(days=2),
        )
        make_meeting(
            event_id="healthy",
            attendees={"alice@example.com": "accepted"},
            starts_in=timedelta(days=2),
        )
        make_meeting(event_id="far-away", agenda="", starts_in=timedelta(days=10))

        flagged = meetings_needing_attention(session, now=now)

        assert [m["event_id"] for m in flagged] == ["messy"]
        assert flagged[0]["issues"] == [
            "Low RSVP rate (0%)",
            "No agenda",
            "Mandatory attendees pending: alice@example.com",
        ]

    def test_solo_meetings_are_not_flagged(self, session: Session, make_meeting, now):
        make_meeting(attendees={}, agenda="", starts_in=timedelta(days=1))
        assert meetings_needing_attention(session, now=now) == []


class TestSystemStats:
    def test_counts(self, session: Session, make_meeting):
        make_meeting(event_id="a")
        make_meeting(event_id="b", status=MeetingStatus.COMPLETED)
        apply_event(session, "ghost@example.com", ScoreEvent.GHOST)

        data = system_stats(session)

        assert data["meetings"] == 2
        assert data["meetings_by_status"] == {
            "scheduled": 1,
            "cancelled": 0,
            "completed": 1,
            "auto-cancelled": 0,
        }
        assert data["attendees"] == 2
        assert data["users"] == 1
        assert data["badges"] == 1
        assert data["identity_mappings"] == 0
