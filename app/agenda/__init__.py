from app.agenda.analyzer import (
    AgendaAnalysis,
    AgendaSuggestion,
    analyze_agenda,
    suggest_agenda,
    suggest_improvements,
)
from app.agenda.parser import AgendaSections, format_agenda_template, parse_agenda_sections
from app.agenda.scorer import score_agenda_sections, score_agenda_text

__all__ = [
    "AgendaAnalysis",
    "AgendaSuggestion",
    "AgendaSections",
    "analyze_agenda",
    "suggest_agenda",
    "suggest_improvements",
    "parse_agenda_sections",
    "format_agenda_template",
    "score_agenda_sections",
    "score_agenda_text",
]
