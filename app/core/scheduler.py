"""Background job scheduler for the periodic policy passes."""
import logging
from collections.abc import Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from app.calendar.client import has_valid_credentials
from app.calendar.sync import import_upcoming_events
from app.core.config import settings
from app.core.database import engine
from app.core.single_flight import SingleFlight
from app.services.effects import SideEffects, build_effects
from app.services.enforcement import run_mandatory_check, run_room_reclaim
from app.services.maintenance import cleanup_old_meetings, complete_past_meetings
from app.services.registration import scan_unvalidated_meetings
from app.services.reminders import run_reminder_batch

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def _sync(session: Session, effects: SideEffects) -> dict:
    stats = import_upcoming_events(session, effects.calendar)
    stats["completed"] = complete_past_meetings(session)["completed"]
    return stats


def _cleanup(session: Session, effects: SideEffects) -> dict:
    return {"deleted": cleanup_old_meetings(session)}


# Pass name -> work. Admin triggers use the same names.
PASSES: dict[str, Callable[[Session, SideEffects], dict]] = {
    "reminders": run_reminder_batch,
    "mandatory": run_mandatory_check,
    "rooms": run_room_reclaim,
    "scan": scan_unvalidated_meetings,
    "sync": _sync,
    "cleanup": _cleanup,
}

PASS_GUARDS = {name: SingleFlight(name) for name in PASSES}


def run_guarded(name: str, session: Session, effects: SideEffects) -> dict | None:
    """Run a pass unless it is already in progress. Returns None when skipped."""
    return PASS_GUARDS[name].run(PASSES[name], session, effects)


def run_pass_job(name: str):
    """Background job body: own session, own side-effect boundary."""
    if name == "sync" and not has_valid_credentials():
        logger.warning("No valid credentials, skipping sync")
        return
    try:
        with Session(engine) as session:
            stats = run_guarded(name, session, build_effects(session))
            if stats is not None:
                logger.info(f"Background {name} pass completed: {stats}")
    except Exception as e:
        logger.error(f"Background {name} pass failed: {e}")


def _job_intervals() -> dict[str, IntervalTrigger]:
    return {
        "reminders": IntervalTrigger(hours=settings.reminder_interval_hours),
        "mandatory": IntervalTrigger(minutes=settings.mandatory_check_interval_minutes),
        "rooms": IntervalTrigger(minutes=settings.room_reclaim_interval_minutes),
        "scan": IntervalTrigger(minutes=settings.new_meeting_scan_interval_minutes),
        "sync": IntervalTrigger(minutes=settings.sync_interval_minutes),
        "cleanup": IntervalTrigger(hours=settings.cleanup_interval_hours),
    }


def start_scheduler():
    """Start the background scheduler."""
    for name, trigger in _job_intervals().items():
        scheduler.add_job(
            run_pass_job,
            trigger=trigger,
            args=[name],
            id=f"{name}_pass",
            replace_existing=True,
            max_instances=1,
        )
    scheduler.start()
    logger.info(f"Scheduler started with passes: {', '.join(PASSES)}")


def shutdown_scheduler():
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
