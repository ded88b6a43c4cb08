"""Slack direct-message channel."""
import logging

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from sqlmodel import Session

from app.core.config import settings
from app.core.exceptions import NotificationError
from app.notifications.identity import IdentityCache

logger = logging.getLogger(__name__)


def get_slack_client() -> WebClient | None:
    """Get authenticated Slack client, or None when no bot token is set."""
    if not settings.slack_bot_token:
        return None
    return WebClient(token=settings.slack_bot_token)


class SlackNotifier:
    """Resolve Slack identities and send DMs.

    Without a client every operation is a logged no-op, so the policy passes
    keep working in environments where Slack is not configured.
    """

    def __init__(self, client: WebClient | None, identities: IdentityCache):
        self.client = client
        self.identities = identities
        if identities.resolver is None:
            identities.resolver = self.lookup_by_email

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def lookup_by_email(self, email: str) -> tuple[str, str | None] | None:
        """Ask Slack for the user behind an address."""
        if not self.is_configured:
            return None
        try:
            response = self.client.users_lookupByEmail(email=email)
        except SlackApiError as e:
            if e.response["error"] == "users_not_found":
                logger.warning(f"No Slack user found for {email}")
                return None
            raise NotificationError(f"Slack lookup failed for {email}: {e.response['error']}") from e
        user = response["user"]
        return user["id"], user.get("real_name")

    def resolve_identity(self, email: str) -> str | None:
        """Slack user ID for ``email``, or None if the address is unknown."""
        if not self.is_configured:
            return None
        return self.identities.get_or_resolve(email)

    def send_direct_message(self, user_id: str, blocks: list[dict], text: str = "") -> bool:
        """Post a Block Kit message to the user's DM channel."""
        if not self.is_configured:
            logger.warning("Slack not configured, skipping DM")
            return False
        try:
            response = self.client.chat_postMessage(channel=user_id, blocks=blocks, text=text)
        except SlackApiError as e:
            raise NotificationError(f"Slack DM to {user_id} failed: {e.response['error']}") from e
        return bool(response["ok"])

    def sync_all_users(self) -> int:
        """Cache the Slack identity of every active human user.

        Returns:
            Number of mappings written.
        """
        if not self.is_configured:
            logger.warning("Slack not configured, cannot sync users")
            return 0

        synced = 0
        cursor = None
        while True:
            try:
                response = self.client.users_list(cursor=cursor, limit=200)
            except SlackApiError as e:
                raise NotificationError(f"Slack user sync failed: {e.response['error']}") from e

            for user in response.get("members", []):
                email = user.get("profile", {}).get("email")
                if user.get("deleted") or user.get("is_bot") or not email:
                    continue
                self.identities.store(email, user["id"], user.get("real_name"))
                synced += 1

            cursor = response.get("response_metadata", {}).get("next_cursor")
            if not cursor:
                break

        logger.info(f"Synced {synced} Slack users")
        return synced


def build_notifier(session: Session, client: WebClient | None = None) -> SlackNotifier:
    """Notifier with a session-scoped identity cache."""
    if client is None:
        client = get_slack_client()
    return SlackNotifier(client, IdentityCache(session))
