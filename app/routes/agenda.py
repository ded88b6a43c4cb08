"""Agenda analysis and suggestion routes."""
from dataclasses import asdict

from fastapi import APIRouter

from app.agenda import analyze_agenda, format_agenda_template, suggest_agenda, suggest_improvements
from app.schemas import AnalyzeAgendaRequest, SuggestAgendaRequest

router = APIRouter(prefix="/agenda", tags=["agenda"])


@router.post("/analyze")
async def analyze(body: AnalyzeAgendaRequest):
    """Score an agenda and list what it is missing."""
    result = analyze_agenda(body.text).to_dict()
    result["suggestions"] = suggest_improvements(body.text)
    return result


@router.post("/suggest")
async def suggest(body: SuggestAgendaRequest):
    """Suggested agenda content for a meeting title."""
    return asdict(suggest_agenda(body.title, body.attendee_count, body.duration, body.meeting_type))


@router.get("/template")
async def template():
    """Blank agenda template with the recognized section headers."""
    return {"template": format_agenda_template()}
