"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Meeting Police"
    debug: bool = False
    log_dir: str = "~/.logs/meeting_police"
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./meeting_police.db"

    # Google Calendar API
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""  # Obtained via scripts/setup_integrations.py
    google_calendar_id: str = "primary"

    # Slack
    slack_bot_token: str = ""

    # Agenda policy
    min_agenda_length: int = 50
    solo_agenda_min_length: int = 10
    quality_warning_threshold: int = 40
    solo_agenda_score: int = 50

    # Reminder windows
    reminder_lookahead_hours: int = 72

    # Job intervals
    scheduler_enabled: bool = True
    reminder_interval_hours: int = 4
    mandatory_check_interval_minutes: int = 60
    room_reclaim_interval_minutes: int = 15
    new_meeting_scan_interval_minutes: int = 5
    sync_interval_minutes: int = 5
    cleanup_interval_hours: int = 24

    # Retention
    retention_days: int = 90


settings = Settings()
