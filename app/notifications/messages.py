"""Slack Block Kit messages sent by the policy engine."""
import random
from dataclasses import dataclass

from app.agenda.parser import format_agenda_template
from app.core.timeutils import as_utc
from app.models import Meeting, UserStats
from app.services.badges import BADGE_CRITERIA

REMINDER_TEMPLATES = {
    "gentle": [
        "👋 Hey! Quick reminder to RSVP for *{title}* on {date}.",
        "🙏 Would love to know if you're joining *{title}* on {date}!",
        "📅 Friendly nudge: Please RSVP for *{title}* happening {date}.",
    ],
    "firm": [
        "⚠️ Second reminder: Your RSVP for *{title}* is still pending. The host needs to plan accordingly!",
        "🔔 This is your second nudge for *{title}* on {date}. Please respond!",
        "⏰ Getting close! We need your RSVP for *{title}* by EOD.",
    ],
    "cheeky": [
        "🕵️ Your RSVP status for *{title}* is still MIA. The meeting will proceed with or without you, "
        "but don't make us guess! 🤷",
        "👻 Are you ghosting this meeting? *{title}* on {date} needs your response. Last chance!",
        "🚨 FINAL CALL: *{title}* is happening {date}. Your non-response is now a conversation topic in itself. 😅",
        "💀 You've officially joined the 'Serial RSVP Ghost' club for *{title}*. Embrace the badge or respond now!",
    ],
}

AGENDA_PREVIEW_CHARS = 300


@dataclass
class Message:
    blocks: list[dict]
    text: str


def _section(text: str) -> dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _badge_emoji(badge_type: str) -> str:
    criteria = BADGE_CRITERIA.get(badge_type)
    return criteria.emoji if criteria else "⭐"


def _format_date(meeting: Meeting) -> str:
    return as_utc(meeting.start_time).strftime("%b %d, %Y %H:%M UTC")


def cancellation_message(meeting: Meeting, reason: str, min_length: int) -> Message:
    """Why the meeting was blocked and how to fix it."""
    blocks = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "⛔ Meeting Cancelled by Meeting Police", "emoji": True},
        },
        _section(f"Your meeting *\"{meeting.title}\"* was automatically cancelled."),
        _section(f"*Reason:*\n{reason}"),
        {"type": "divider"},
        _section(
            "*📋 How to fix:*\n\n"
            "1. Create the meeting again\n"
            "2. Add a proper agenda with:\n"
            "   • 📍 Purpose (Why are we meeting?)\n"
            "   • 🎯 Expected Outcomes (What should we achieve?)\n"
            "   • ⚡ Decisions Needed (What needs to be decided?)\n\n"
            f"*Minimum {min_length} characters of meaningful content required!*"
        ),
        _section(f"💡 *Quick Template:*\n```{format_agenda_template()}```"),
    ]
    return Message(blocks, "Meeting cancelled - agenda required")


def quality_warning_message(meeting: Meeting, feedback: list[str]) -> Message:
    """Non-blocking nudge for an agenda that scored low."""
    tips = "\n".join(f"• {line}" for line in feedback) or (
        "• Be more specific about the purpose\n"
        "• Define clear expected outcomes\n"
        "• List concrete decisions needed"
    )
    blocks = [
        _section(
            f"⚠️ Your meeting *\"{meeting.title}\"* has a low-quality agenda "
            f"(score: {meeting.agenda_quality_score}/100).\n\nConsider improving it:\n{tips}"
        ),
    ]
    return Message(blocks, "Low quality agenda warning")


def reminder_message(meeting: Meeting, tier: str, rng: random.Random | None = None) -> Message:
    """RSVP reminder with Accept / Tentative / Decline buttons."""
    templates = REMINDER_TEMPLATES.get(tier, REMINDER_TEMPLATES["gentle"])
    template = (rng or random).choice(templates)
    text = template.format(title=meeting.title, date=_format_date(meeting))

    agenda = meeting.agenda_raw or ""
    preview = agenda[:AGENDA_PREVIEW_CHARS] + ("..." if len(agenda) > AGENDA_PREVIEW_CHARS else "")

    blocks = [
        _section(text),
        _section(f"*📋 Agenda:*\n{preview}"),
        {"type": "divider"},
        {
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "✅ Accept", "emoji": True},
                    "style": "primary",
                    "action_id": "rsvp_accept",
                    "value": meeting.event_id,
                },
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "❓ Tentative", "emoji": True},
                    "action_id": "rsvp_tentative",
                    "value": meeting.event_id,
                },
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "❌ Decline", "emoji": True},
                    "style": "danger",
                    "action_id": "rsvp_decline",
                    "value": meeting.event_id,
                },
            ],
        },
    ]
    return Message(blocks, text)


def mandatory_cancel_message(meeting: Meeting) -> Message:
    return Message(
        [_section(
            f"❌ Your meeting *\"{meeting.title}\"* was auto-cancelled because a mandatory attendee declined."
        )],
        "Meeting auto-cancelled",
    )


def room_release_message(meeting: Meeting) -> Message:
    return Message(
        [_section(
            f"🏢 Meeting room auto-released for *\"{meeting.title}\"* ({meeting.location}) - no RSVPs received."
        )],
        "Room auto-released",
    )


def stats_message(stats: UserStats) -> Message:
    """A user's counters and current badges."""
    blocks = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "📊 Your Calendar Etiquette Stats", "emoji": True},
        },
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Agenda Score:* {stats.agenda_score}"},
                {"type": "mrkdwn", "text": f"*RSVP Score:* {stats.rsvp_score}"},
                {"type": "mrkdwn", "text": f"*Ghost Score:* {stats.ghost_score}"},
                {"type": "mrkdwn", "text": f"*Current Streak:* {stats.current_rsvp_streak}"},
            ],
        },
    ]
    if stats.badges:
        emojis = " ".join(_badge_emoji(b.badge_type) for b in stats.badges)
        blocks.append(_section(f"*🏆 Badges:* {emojis}"))
    return Message(blocks, "Your calendar stats")
