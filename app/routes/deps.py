"""Shared route dependencies."""
from fastapi import Depends
from sqlmodel import Session

from app.core.database import get_session
from app.services.effects import SideEffects, build_effects


def get_effects(session: Session = Depends(get_session)) -> SideEffects:
    """Dependency for the calendar and Slack side-effect boundary."""
    return build_effects(session)
