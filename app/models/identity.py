"""Cached mapping from email addresses to Slack user IDs."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from app.core.timeutils import utcnow


class IdentityMapping(SQLModel, table=True):
    """A resolved Slack identity for an email address.

    This table is a cache only. Losing a row costs one extra
    ``users.lookupByEmail`` call; the lookup is idempotent.

    Attributes:
        id: Unique identifier (UUID).
        email: Email address (unique).
        slack_user_id: Slack user ID used as the DM channel.
        name: Slack real name, if known.
        last_synced: When the mapping was last fetched from Slack.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(index=True, unique=True)
    slack_user_id: str = Field(index=True)
    name: str | None = None
    last_synced: datetime = Field(default_factory=utcnow)
