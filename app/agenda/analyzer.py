"""Heuristic agenda quality analysis and agenda suggestions.

Scoring is keyword and pattern based. Four categories add up to 100:

    clarity        30  purpose language, length, low jargon
    completeness   30  outcomes, decisions, attendee and time context
    actionability  25  action verbs, bullet or numbered items
    structure      15  section headers, multi-line layout

An agenda passes at 70 or more. Nothing here touches the database or the
network.
"""
import re
from dataclasses import asdict, dataclass, field

PASSING_SCORE = 70

JARGON_PATTERN = re.compile(r"synergy|leverage|circle back|touch base|deep dive", re.IGNORECASE)
ACTION_VERBS = ("discuss", "decide", "review", "approve", "plan", "align")
BULLET_PATTERN = re.compile(r"^\s*(?:[•\-*]|\d+[.)])\s*\S", re.MULTILINE)


@dataclass
class Feedback:
    type: str  # "warning", "info" or "success"
    message: str


@dataclass
class ScoreBreakdown:
    clarity: int = 0
    completeness: int = 0
    actionability: int = 0
    structure: int = 0

    @property
    def total(self) -> int:
        return self.clarity + self.completeness + self.actionability + self.structure


@dataclass
class AgendaAnalysis:
    score: int
    breakdown: ScoreBreakdown
    feedback: list[Feedback] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.score >= PASSING_SCORE

    def to_dict(self) -> dict:
        data = asdict(self)
        data["passed"] = self.passed
        return data


def _has(pattern: str, text: str) -> bool:
    return re.search(pattern, text, re.IGNORECASE) is not None


def check_clarity(text: str) -> int:
    score = 0
    if _has(r"purpose|objective|goal|why", text):
        score += 10
    if len(text) > 100:
        score += 10
    if len(JARGON_PATTERN.findall(text)) < 3:
        score += 10
    return score


def check_completeness(text: str) -> int:
    score = 0
    if _has(r"outcome|result|deliverable|output", text):
        score += 10
    if _has(r"decision|decide|approve|choose", text):
        score += 10
    if _has(r"attendee|participant|who|team", text):
        score += 5
    if _has(r"time|duration|minute|hour", text):
        score += 5
    return score


def check_actionability(text: str) -> int:
    found = sum(1 for verb in ACTION_VERBS if _has(verb, text))
    score = min(found * 5, 15)
    if BULLET_PATTERN.search(text):
        score += 10
    return score


def check_structure(text: str) -> int:
    score = 0
    if _has(r"purpose:|outcome:|decision:", text):
        score += 10
    if "\n" in text:
        score += 5
    return score


def generate_feedback(breakdown: ScoreBreakdown) -> list[Feedback]:
    feedback = []
    if breakdown.clarity < 20:
        feedback.append(Feedback("warning", "💡 Make your purpose clearer. Add \"Purpose: [why are we meeting?]\""))
    if breakdown.completeness < 20:
        feedback.append(Feedback("warning", "📋 Add expected outcomes. What should we accomplish?"))
    if breakdown.actionability < 15:
        feedback.append(Feedback("warning", "⚡ Be more specific. List concrete discussion points."))
    if breakdown.structure < 10:
        feedback.append(Feedback("info", "📝 Use our template for better structure."))
    if breakdown.clarity >= 25:
        feedback.append(Feedback("success", "✨ Great clarity! Purpose is well-defined."))
    return feedback


def analyze_agenda(text: str | None) -> AgendaAnalysis:
    """Score an agenda and explain what is missing."""
    text = text or ""
    breakdown = ScoreBreakdown(
        clarity=check_clarity(text),
        completeness=check_completeness(text),
        actionability=check_actionability(text),
        structure=check_structure(text),
    )
    return AgendaAnalysis(
        score=breakdown.total,
        breakdown=breakdown,
        feedback=generate_feedback(breakdown),
    )


def suggest_improvements(text: str | None) -> list[str]:
    """List the missing agenda elements, independent of the score."""
    text = text or ""
    suggestions = []
    if not _has(r"purpose|objective", text):
        suggestions.append("Add a clear purpose statement")
    if not _has(r"outcome|result|deliverable", text):
        suggestions.append("Define expected outcomes")
    if not _has(r"decision|approve", text):
        suggestions.append("List decisions that need to be made")
    if len(text) < 100:
        suggestions.append(f"Provide more detail (current: {len(text)} chars)")
    if ":" not in text:
        suggestions.append("Use sections: Purpose, Outcomes, Decisions")
    return suggestions


# Meeting archetypes, matched against the title in this order.
ARCHETYPES = [
    ("standup", re.compile(r"standup|stand-up|daily|sync", re.IGNORECASE)),
    ("review", re.compile(r"review|retro", re.IGNORECASE)),
    ("planning", re.compile(r"\bplan", re.IGNORECASE)),
    ("demo", re.compile(r"demo|showcase", re.IGNORECASE)),
    ("one_on_one", re.compile(r"1:1|one-on-one|1-on-1", re.IGNORECASE)),
    ("all_hands", re.compile(r"all-hands|all hands|town hall", re.IGNORECASE)),
]

PURPOSES = {
    "standup": ["Daily team sync to align on priorities and blockers",
                "Quick status update and coordination"],
    "review": ["Review progress and identify improvements",
               "Reflect on what worked and what didn't"],
    "planning": ["Plan upcoming work and set priorities",
                 "Align on goals and roadmap"],
    "demo": ["Demonstrate completed work and gather feedback",
             "Show progress and celebrate achievements"],
    "one_on_one": ["One-on-one check-in and feedback session",
                   "Discuss progress, challenges, and career development"],
    "all_hands": ["Company-wide update and Q&A",
                  "Share important announcements and gather feedback"],
}

OUTCOMES = {
    "standup": ["Team aligned on daily priorities",
                "Blockers identified and assigned owners",
                "Action items for the day"],
    "review": ["Action items for improvement",
               "Key learnings documented",
               "Next sprint goals defined"],
    "planning": ["Prioritized backlog items",
                 "Timeline and milestones agreed upon",
                 "Resource allocation decided"],
    "demo": ["Feedback collected and documented",
             "Next steps for iteration"],
}

DISCUSSION_POINTS = {
    "standup": ["What did you complete yesterday?",
                "What are you working on today?",
                "Any blockers or dependencies?"],
    "review": ["What went well?",
               "What could be improved?",
               "Action items for next iteration"],
    "planning": ["Priorities and goals",
                 "Timeline and milestones",
                 "Resource requirements",
                 "Risks and dependencies"],
    "one_on_one": ["Progress on goals",
                   "Challenges and support needed",
                   "Career development",
                   "Feedback exchange"],
}

PREREADS = {
    "review": ["Review demo materials or documentation",
               "Prepare questions and feedback"],
    "demo": ["Review demo materials or documentation",
             "Prepare questions and feedback"],
    "planning": ["Review relevant documents and data",
                 "Come prepared with ideas and priorities"],
    "all_hands": ["Review previous meeting notes",
                  "Prepare questions for Q&A"],
}


@dataclass
class AgendaSuggestion:
    purpose: list[str]
    outcomes: list[str]
    discussion_points: list[str]
    prereads: list[str]
    template: str


def detect_archetype(title: str, meeting_type: str | None = None) -> str | None:
    """Return the archetype key for a meeting, or None for generic meetings."""
    basis = f"{meeting_type} {title}" if meeting_type else title
    for name, pattern in ARCHETYPES:
        if pattern.search(basis):
            return name
    return None


def _bullets(lines: list[str]) -> str:
    return "\n".join(f"• {line}" for line in lines)


def suggest_agenda(
    title: str,
    attendee_count: int = 0,
    duration: int | None = None,
    meeting_type: str | None = None,
) -> AgendaSuggestion:
    """
    Suggest agenda content for a meeting.

    Args:
        title: Meeting title, matched against known archetypes.
        attendee_count: Number of invitees. Large generic meetings get a
            breakout discussion point.
        duration: Length in minutes, added to the template when given.
        meeting_type: Optional explicit archetype hint, e.g. "planning".

    Returns:
        AgendaSuggestion with suggested sections and a ready-to-paste template.
    """
    archetype = detect_archetype(title, meeting_type)

    purpose = PURPOSES.get(archetype) or [
        f"Discuss {title} and align on next steps",
        f"Review {title} and make decisions",
        f"Plan and coordinate {title}",
    ]
    outcomes = OUTCOMES.get(archetype) or [
        "Clear action items assigned",
        "Decisions documented",
        "Next steps defined",
    ]
    discussion_points = list(DISCUSSION_POINTS.get(archetype) or [
        "Current status and context",
        "Key decisions needed",
        "Action items and owners",
    ])
    if archetype not in DISCUSSION_POINTS and attendee_count > 5:
        discussion_points.append("Breakout discussions if needed")
    prereads = PREREADS.get(archetype) or [
        "Review meeting context and background",
        "Come prepared with relevant information",
    ]

    template = (
        f"📍 Purpose:\n{purpose[0]}\n\n"
        f"🎯 Expected Outcomes:\n{_bullets(outcomes)}\n\n"
        f"⚡ Discussion Points:\n{_bullets(discussion_points)}\n\n"
        f"📌 Pre-reads:\n{_bullets(prereads)}"
    )
    if duration:
        template += f"\n\n⏱ Duration: {duration} minutes"

    return AgendaSuggestion(
        purpose=list(purpose),
        outcomes=list(outcomes),
        discussion_points=discussion_points,
        prereads=list(prereads),
        template=template,
    )
