#!/usr/bin/env python3
"""
One-time setup for the Google Calendar and Slack integrations.

Usage:
    python scripts/setup_integrations.py google-token [--client-id=XXX --client-secret=YYY]
    python scripts/setup_integrations.py slack-users

google-token walks through the OAuth consent flow and prints the refresh
token to put in .env as GOOGLE_REFRESH_TOKEN.

slack-users caches the Slack user ID of every workspace member in the
database so reminders do not need a lookup per address. Requires
SLACK_BOT_TOKEN.
"""
import argparse
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from google_auth_oauthlib.flow import InstalledAppFlow

SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
]


def google_token(args):
    client_id = args.client_id or os.getenv("GOOGLE_CLIENT_ID")
    client_secret = args.client_secret or os.getenv("GOOGLE_CLIENT_SECRET")

    if not client_id or not client_secret:
        print("Error: GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are required.")
        print()
        print("Either set them in .env or pass them as arguments:")
        print("  python scripts/setup_integrations.py google-token --client-id=XXX --client-secret=YYY")
        sys.exit(1)

    # Create OAuth flow for installed/desktop app (no redirect URI needed)
    client_config = {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["urn:ietf:wg:oauth:2.0:oob", "http://localhost"],
        }
    }

    flow = InstalledAppFlow.from_client_config(client_config, SCOPES)

    # Allow HTTP for localhost (required for manual copy-paste flow)
    os.environ["OAUTHLIB_INSECURE_TRANSPORT"] = "1"
    flow.redirect_uri = "http://localhost:8080/"

    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")

    print("=" * 60)
    print("Google Calendar OAuth Setup")
    print("=" * 60)
    print()
    print("Open this URL in a browser, authorize, then paste the full")
    print("localhost URL you are redirected to.")
    print()
    print(auth_url)
    print()

    redirect_response = input("Paste the full redirect URL here: ").strip()
    flow.fetch_token(authorization_response=redirect_response)

    print()
    print("SUCCESS! Add the following to your .env file:")
    print()
    print(f"GOOGLE_REFRESH_TOKEN={flow.credentials.refresh_token}")


def slack_users(args):
    from sqlmodel import Session

    from app.core.database import create_db_and_tables, engine
    from app.notifications.slack import build_notifier

    create_db_and_tables()
    with Session(engine) as session:
        notifier = build_notifier(session)
        if not notifier.is_configured:
            print("Error: SLACK_BOT_TOKEN is not set.")
            sys.exit(1)
        synced = notifier.sync_all_users()

    print(f"Cached {synced} Slack users")


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Set up Google Calendar and Slack access")
    subparsers = parser.add_subparsers(dest="command", required=True)

    token_parser = subparsers.add_parser("google-token", help="Get a Google OAuth refresh token")
    token_parser.add_argument("--client-id", help="Google OAuth Client ID")
    token_parser.add_argument("--client-secret", help="Google OAuth Client Secret")
    token_parser.set_defaults(func=google_token)

    users_parser = subparsers.add_parser("slack-users", help="Cache Slack user IDs by email")
    users_parser.set_defaults(func=slack_users)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
