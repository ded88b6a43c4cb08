"""Database configuration and session management for SQLite.

The policy passes (reminders, mandatory check, room reclaim) run in the
scheduler's worker threads while the API serves registrations and RSVPs, so
the engine is configured for concurrent access:

    - **WAL (Write-Ahead Logging)**: readers are not blocked while a pass
      writes reminder counters or status changes.

    - **Foreign Keys**: attendees and badges must reference an existing
      meeting or user record.

    - **check_same_thread=False**: sessions are created in one thread and
      used in another by FastAPI and APScheduler.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
