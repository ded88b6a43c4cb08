"""Badge criteria and reconciliation.

Badges are a live view of the counters, not trophies: every evaluation
awards the badges whose criteria hold and removes the ones whose criteria
no longer hold (a reformed ghost loses "serial-ghost").
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlmodel import Session, select

from app.core.timeutils import utcnow
from app.models import Badge, UserStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeCriteria:
    name: str
    emoji: str
    description: str
    check: Callable[[UserStats], bool]


BADGE_CRITERIA: dict[str, BadgeCriteria] = {
    "agenda-ninja": BadgeCriteria(
        "Agenda Ninja", "🥷", "Created 10+ meetings with agendas",
        lambda s: s.meetings_with_agenda >= 10,
    ),
    "rsvp-champion": BadgeCriteria(
        "RSVP Champion", "⚡", "Earned 20+ RSVP points",
        lambda s: s.rsvp_score >= 20,
    ),
    "serial-ghost": BadgeCriteria(
        "Serial RSVP Ghost", "👻", "Ignored RSVP requests repeatedly",
        lambda s: s.ghost_score >= 5,
    ),
    "meeting-monk": BadgeCriteria(
        "Meeting Monk", "🧘", "Overall excellence in meeting etiquette",
        lambda s: s.agenda_score >= 15 and s.rsvp_score >= 15 and s.ghost_score < 3,
    ),
    "streak-master": BadgeCriteria(
        "Streak Master", "🔥", "10+ on-time RSVPs in a row",
        lambda s: s.current_rsvp_streak >= 10,
    ),
    "punctuality-pro": BadgeCriteria(
        "Punctuality Pro", "⏰", "Responded on time to 20+ meetings",
        lambda s: s.rsvps_on_time >= 20,
    ),
}


@dataclass
class BadgeDelta:
    earned: list[str] = field(default_factory=list)
    lost: list[str] = field(default_factory=list)


def qualifying_badges(stats: UserStats) -> set[str]:
    """Badge types whose criteria hold for the given counters."""
    return {badge_type for badge_type, criteria in BADGE_CRITERIA.items() if criteria.check(stats)}


def reconcile_badges(session: Session, stats: UserStats) -> BadgeDelta:
    """Award and revoke badges so they match the current counters."""
    should_have = qualifying_badges(stats)
    held = {badge.badge_type: badge for badge in stats.badges}
    delta = BadgeDelta()

    for badge_type in sorted(should_have - held.keys()):
        session.add(Badge(
            user_id=stats.id,
            badge_type=badge_type,
            earned_at=utcnow(),
            description=BADGE_CRITERIA[badge_type].description,
        ))
        delta.earned.append(badge_type)
        logger.info(f"Awarded badge {badge_type} to {stats.email}")

    for badge_type in sorted(held.keys() - should_have):
        session.delete(held[badge_type])
        delta.lost.append(badge_type)
        logger.info(f"Removed badge {badge_type} from {stats.email}")

    if delta.earned or delta.lost:
        session.commit()
        session.refresh(stats)
    return delta


def evaluate_all_users(session: Session) -> int:
    """Reconcile badges for every user. Returns the number of users evaluated."""
    users = session.exec(select(UserStats)).all()
    for stats in users:
        reconcile_badges(session, stats)
    logger.info(f"Evaluated badges for {len(users)} users")
    return len(users)


def badge_catalog() -> list[dict]:
    return [
        {
            "type": badge_type,
            "name": criteria.name,
            "emoji": criteria.emoji,
            "description": criteria.description,
        }
        for badge_type, criteria in BADGE_CRITERIA.items()
    ]
