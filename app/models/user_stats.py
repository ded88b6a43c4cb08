"""Per-user gamification counters and badges.

UserStats rows are created lazily the first time a scorable event is
recorded for an address. Counters are changed only through atomic SQL
increments in ``app.services.gamification``; badges are reconciled against
the counters after every change by ``app.services.badges``.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from app.core.timeutils import utcnow


class UserStats(SQLModel, table=True):
    """Accumulated meeting-etiquette counters for one address.

    Attributes:
        id: Unique identifier (UUID).
        email: Address the counters belong to (unique).
        name: Display name, defaults to the local part of the address.
        agenda_score: +10 per agenda added.
        rsvp_score: +5 per on-time RSVP.
        ghost_score: Grows when invitations are ignored.
        meetings_organized: Meetings registered by this user.
        meetings_with_agenda: Meetings registered with an accepted agenda.
        meetings_attended: Completed meetings the user had accepted.
        rsvps_on_time: RSVPs given before the second reminder.
        rsvps_ignored: Invitations ignored past the final reminder tier.
        current_rsvp_streak: Consecutive on-time RSVPs.
        best_rsvp_streak: Longest streak so far; never below the current one.
        last_rsvp_date: When the last on-time RSVP was recorded.
        badges: Badges currently held.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str | None = None

    agenda_score: int = Field(default=0, index=True)
    rsvp_score: int = Field(default=0, index=True)
    ghost_score: int = Field(default=0, index=True)

    meetings_organized: int = Field(default=0)
    meetings_with_agenda: int = Field(default=0)
    meetings_attended: int = Field(default=0)
    rsvps_on_time: int = Field(default=0)
    rsvps_ignored: int = Field(default=0)

    current_rsvp_streak: int = Field(default=0)
    best_rsvp_streak: int = Field(default=0)
    last_rsvp_date: datetime | None = None

    created_at: datetime = Field(default_factory=utcnow)

    # Relationship
    badges: list["Badge"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def overall_score(self) -> float:
        return (
            self.agenda_score * 0.3
            + self.rsvp_score * 0.4
            + (100 - self.ghost_score) * 0.3
        )


class Badge(SQLModel, table=True):
    """A badge held by a user.

    Badges mirror the current counters: they are awarded when their
    threshold is reached and removed again when it no longer holds.

    Attributes:
        id: Unique identifier (UUID).
        user_id: Foreign key to the owning UserStats row.
        badge_type: Badge key, e.g. "agenda-ninja". At most one per user.
        earned_at: When the badge was (most recently) awarded.
        description: Human-readable criteria at award time.
    """
    __table_args__ = (UniqueConstraint("user_id", "badge_type"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="userstats.id", index=True)
    badge_type: str
    earned_at: datetime = Field(default_factory=utcnow)
    description: str | None = None

    # Relationship
    user: Optional[UserStats] = Relationship(back_populates="badges")
