"""Email to Slack identity cache."""
import logging
from collections.abc import Callable

from sqlmodel import Session, select

from app.core.timeutils import utcnow
from app.models import IdentityMapping

logger = logging.getLogger(__name__)

# Resolver returns (slack_user_id, real_name) or None when the address is unknown.
Resolver = Callable[[str], tuple[str, str | None] | None]


class IdentityCache:
    """Get-or-resolve cache backed by the ``identitymapping`` table.

    The cache is owned by whoever constructs it and is passed explicitly to
    the notifier; there is no module-level state. Entries never expire, and
    a missing entry is simply resolved again.
    """

    def __init__(self, session: Session, resolver: Resolver | None = None):
        self.session = session
        self.resolver = resolver

    def get(self, email: str) -> str | None:
        mapping = self._find(email)
        return mapping.slack_user_id if mapping else None

    def get_or_resolve(self, email: str) -> str | None:
        """Return the cached Slack ID, resolving and storing it on a miss."""
        cached = self.get(email)
        if cached:
            return cached
        if self.resolver is None:
            return None

        resolved = self.resolver(email)
        if resolved is None:
            return None

        slack_user_id, name = resolved
        self.store(email, slack_user_id, name)
        return slack_user_id

    def store(self, email: str, slack_user_id: str, name: str | None = None) -> IdentityMapping:
        """Insert or refresh a mapping."""
        mapping = self._find(email)
        if mapping is None:
            mapping = IdentityMapping(email=email.lower(), slack_user_id=slack_user_id)
        mapping.slack_user_id = slack_user_id
        mapping.name = name
        mapping.last_synced = utcnow()
        self.session.add(mapping)
        self.session.commit()
        return mapping

    def _find(self, email: str) -> IdentityMapping | None:
        statement = select(IdentityMapping).where(IdentityMapping.email == email.lower())
        return self.session.exec(statement).first()
