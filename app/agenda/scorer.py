"""Tiered agenda score used on the registration path."""
from app.agenda.parser import AgendaSections, parse_agenda_sections


def _tier(text: str, full: int, partial: int) -> int:
    if len(text) > 20:
        return full
    if len(text) > 10:
        return partial
    return 0


def score_agenda_sections(sections: AgendaSections) -> int:
    """
    Score parsed agenda sections from 0 to 100.

    Purpose and outcomes are worth 30 each, decisions 25 and pre-reads 15.
    A section over 20 characters earns its full weight, one over 10 earns
    about half. Pre-reads only count once they exceed 10 characters.
    """
    score = 0
    score += _tier(sections.purpose or "", 30, 15)
    score += _tier(sections.outcomes or "", 30, 15)
    score += _tier(sections.decisions or "", 25, 12)
    if len(sections.prereads or "") > 10:
        score += 15
    return score


def score_agenda_text(text: str | None) -> int:
    """Parse ``text`` and score its sections."""
    return score_agenda_sections(parse_agenda_sections(text))
