"""Parse agenda sections from meeting descriptions."""
import re
from dataclasses import dataclass

SECTION_HEADERS = {
    "purpose": ("📍", "Purpose"),
    "outcomes": ("🎯", "Expected Outcomes"),
    "decisions": ("⚡", "Decisions Needed"),
    "prereads": ("📌", "Pre-reads"),
}

# Header aliases -> section key. None marks headers that only end a section.
_HEADER_KEYS = {
    "purpose": "purpose",
    "objective": "purpose",
    "expected outcomes": "outcomes",
    "outcomes": "outcomes",
    "decisions needed": "decisions",
    "decisions": "decisions",
    "pre-reads": "prereads",
    "prereads": "prereads",
    "pre reads": "prereads",
    "discussion points": None,
    "agenda": None,
    "notes": None,
}

_HEADER_PATTERN = re.compile(
    r"^[^\w\n]*("
    + "|".join(re.escape(h) for h in sorted(_HEADER_KEYS, key=len, reverse=True))
    + r")\s*:",
    re.IGNORECASE | re.MULTILINE,
)


@dataclass
class AgendaSections:
    """Structured view of an agenda."""
    purpose: str = ""
    outcomes: str = ""
    decisions: str = ""
    prereads: str = ""


def parse_agenda_sections(text: str | None) -> AgendaSections:
    """
    Split agenda text into purpose / outcomes / decisions / pre-reads.

    Expected format (emoji prefixes are optional):
        📍 Purpose:
        Why we meet
        🎯 Expected Outcomes:
        - What we leave with
        ⚡ Decisions Needed:
        - What must be decided
        📌 Pre-reads:
        - Links

    Content may also follow the colon on the header line itself. A repeated
    header appends to the earlier section.
    """
    sections = AgendaSections()
    if not text:
        return sections

    matches = list(_HEADER_PATTERN.finditer(text))
    for i, match in enumerate(matches):
        key = _HEADER_KEYS[match.group(1).lower()]
        if key is None:
            continue
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        content = text[match.end():end].strip()
        existing = getattr(sections, key)
        setattr(sections, key, f"{existing}\n{content}".strip() if existing else content)

    return sections


def format_agenda_template(sections: AgendaSections | None = None) -> str:
    """
    Format sections back into agenda text using the standard headers.

    With no sections this yields the empty template sent to organizers.
    """
    sections = sections or AgendaSections()
    blocks = []
    for key, (emoji, header) in SECTION_HEADERS.items():
        content = getattr(sections, key)
        blocks.append(f"{emoji} {header}:\n{content}" if content else f"{emoji} {header}:")
    return "\n\n".join(blocks)
