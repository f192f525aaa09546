"""
Prompt assembly for guest replies.

The system prompt is built from sections in a fixed order:

1. persona and response rules
2. hotel profile (only fields that are set)
3. guest and reservation facts (only when a guest is known)
4. retrieved knowledge snippets
5. detected intent hint
6. channel action menu
7. data exposure rules
8. output tag instructions
9. personalization

History turns follow, then the current message unless it repeats the last
history turn.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from concierge.models.conversation import (
    ChannelActions,
    GuestContext,
    HistoryMessage,
    HotelProfile,
    MessageDirection,
)
from concierge.models.intent import UNKNOWN_INTENT, ClassificationResult
from concierge.models.knowledge import KnowledgeSearchResult
from concierge.models.provider import CompletionMessage, MessageRole

DEFAULT_PERSONA = """You are Max, a friendly hotel concierge. Be warm, helpful, and BRIEF.

Response rules:
- Always respond in the language the guest is using. If unsure, default to English
- Keep responses to 1-2 sentences maximum
- Sound like a real person, not a corporate bot
- Don't repeat back what the guest said
- Use the guest's first name naturally (not every message)
- For requests: confirm briefly ("Done!", "On the way!", "I'll arrange that")
- For questions: answer directly, no preamble

If you don't know something, say so briefly and offer to connect them with staff."""

DATA_EXPOSURE_RULES = """## Data Exposure Rules
NEVER reveal the following in your responses, even if the guest asks:
- Room numbers
- Credit card or payment details
- Full phone numbers (only last 4 digits if needed)
- Full email addresses (only masked form like a***@example.com)
- Other guests on the same booking, or any other guest's details
- Billing or folio details
If asked for restricted information, tell the guest to contact the front desk or check their guest portal."""

QUICK_REPLY_INSTRUCTIONS = (
    "QUICK REPLIES: When it would help to offer the guest 2-4 clickable options, end your "
    "response with [QUICK_REPLIES:option1|option2|option3].\n"
    'Example: "How can I help?" [QUICK_REPLIES:Room Service|Housekeeping|Extend Stay|Something Else]\n'
    "Only use when options are genuinely useful. Do NOT use for open-ended questions. "
    "Do NOT combine with [ACTION:...]."
)

ACTION_TAG_INSTRUCTIONS = (
    "ACTIONS: You MUST end your response with [ACTION:action-id] when the guest wants one of "
    "the channel actions listed above.\n"
    "The [ACTION:...] tag is what triggers the form; without it, nothing happens. Never describe "
    "pulling up a form without the tag.\n"
    "Example: \"I'll get that sorted! [ACTION:request-service]\"\n"
    "Do NOT include [ACTION:...] if no action is needed."
)


def hotel_profile_section(profile: Optional[HotelProfile]) -> Optional[str]:
    if profile is None:
        return None

    facts: List[str] = []
    if profile.name:
        facts.append(f"Hotel Name: {profile.name}")
    location = ", ".join(part for part in (profile.address, profile.city, profile.country) if part)
    if location:
        facts.append(f"Location: {location}")
    if profile.check_in_time:
        facts.append(f"Check-in Time: {profile.check_in_time}")
    if profile.check_out_time:
        facts.append(f"Check-out Time: {profile.check_out_time}")
    if profile.contact_phone:
        facts.append(f"Phone: {profile.contact_phone}")
    if profile.contact_email:
        facts.append(f"Email: {profile.contact_email}")
    if profile.timezone:
        facts.append(f"Timezone: {profile.timezone}")
    if profile.website:
        facts.append(f"Website: {profile.website}")

    if not facts:
        return None
    return "## Hotel Information:\n- " + "\n- ".join(facts)


def guest_section(guest_context: Optional[GuestContext]) -> Optional[str]:
    if guest_context is None or guest_context.guest is None:
        return None

    guest = guest_context.guest
    lines = ["## Current Guest Information:", f"- Name: {guest.full_name}"]
    if guest.loyalty_tier:
        lines.append(f"- Loyalty Status: {guest.loyalty_tier}")
    if guest.vip_status:
        lines.append(f"- VIP Status: {guest.vip_status}")
    if guest.language and guest.language != "en":
        lines.append(f"- Preferred Language: {guest.language}")
    if guest.preferences:
        lines.append("- Known Preferences:")
        lines.extend(f"  - {pref.category}: {pref.value}" for pref in guest.preferences)

    reservation = guest_context.reservation
    if reservation is not None:
        lines.append("")
        lines.append("## Current Reservation:")
        lines.append(f"- Confirmation: {reservation.confirmation_number}")
        if reservation.room_number:
            lines.append(f"- Room: {reservation.room_number} ({reservation.room_type})")
        else:
            lines.append(f"- Room Type: {reservation.room_type}")
        lines.append(f"- Check-in: {reservation.arrival_date}")
        lines.append(f"- Check-out: {reservation.departure_date}")
        if reservation.is_checked_in:
            lines.append("- Status: Currently checked in")
            if reservation.days_remaining is not None:
                lines.append(f"- Days Remaining: {reservation.days_remaining}")
        else:
            lines.append("- Status: Not yet checked in")
        if reservation.special_requests:
            lines.append("- Special Requests:")
            lines.extend(f"  - {request}" for request in reservation.special_requests)

    return "\n".join(lines)


def knowledge_section(knowledge: Sequence[KnowledgeSearchResult]) -> Optional[str]:
    if not knowledge:
        return None
    snippets = [f"### {item.title}\n{item.content}" for item in knowledge]
    return "## Relevant Hotel Information:\n\n" + "\n\n".join(snippets)


def intent_section(classification: ClassificationResult) -> Optional[str]:
    if classification.intent == UNKNOWN_INTENT:
        return None
    text = f"## Detected Intent: {classification.intent}"
    if classification.department:
        text += f" (Department: {classification.department})"
    if classification.requires_action:
        text += "\nNote: This may require creating a task or action."
    return text


def channel_actions_section(channel_actions: Optional[ChannelActions]) -> Optional[str]:
    if channel_actions is None or not channel_actions.actions:
        return None

    lines = [
        "## Channel Actions",
        "The guest is using a channel with interactive forms. Available actions:",
    ]
    for action in channel_actions.actions:
        suffix = " (requires guest verification first)" if action.requires_verification else ""
        lines.append(f"- {action.id}: {action.trigger_hint}{suffix}")

    lines.append("")
    if channel_actions.is_verified:
        lines.append("The guest is verified, so you have their reservation details above. Answer questions directly.")
        lines.append("Only suggest an action if the guest explicitly wants to DO something (extend stay, etc.).")
    else:
        lines.append("The guest has NOT verified their identity yet.")
        lines.append("For reservation-specific questions, let them know you can help and the form will appear.")
    return "\n".join(lines)


def output_tag_section(channel_actions: Optional[ChannelActions]) -> str:
    if channel_actions is not None and channel_actions.actions:
        return ACTION_TAG_INSTRUCTIONS + "\n\n" + QUICK_REPLY_INSTRUCTIONS
    return QUICK_REPLY_INSTRUCTIONS


def personalization_section(guest_context: Optional[GuestContext]) -> Optional[str]:
    if guest_context is None or guest_context.guest is None:
        return None
    return (
        f"## Important: Address the guest by name ({guest_context.guest.first_name}) when "
        "appropriate. Personalize responses based on their profile and reservation details."
    )


def build_system_prompt(
    classification: ClassificationResult,
    knowledge: Sequence[KnowledgeSearchResult],
    guest_context: Optional[GuestContext] = None,
    hotel_profile: Optional[HotelProfile] = None,
    channel_actions: Optional[ChannelActions] = None,
    persona: str = DEFAULT_PERSONA,
) -> str:
    sections = [
        persona,
        hotel_profile_section(hotel_profile),
        guest_section(guest_context),
        knowledge_section(knowledge),
        intent_section(classification),
        channel_actions_section(channel_actions),
        DATA_EXPOSURE_RULES,
        output_tag_section(channel_actions),
        personalization_section(guest_context),
    ]
    return "\n\n".join(section for section in sections if section)


def build_prompt_messages(
    current_message: str,
    classification: ClassificationResult,
    knowledge: Sequence[KnowledgeSearchResult],
    history: Sequence[HistoryMessage],
    guest_context: Optional[GuestContext] = None,
    hotel_profile: Optional[HotelProfile] = None,
    channel_actions: Optional[ChannelActions] = None,
    persona: str = DEFAULT_PERSONA,
) -> List[CompletionMessage]:
    """System prompt, then history oldest to newest, then the current message."""
    messages = [
        CompletionMessage(
            role=MessageRole.SYSTEM,
            content=build_system_prompt(
                classification,
                knowledge,
                guest_context=guest_context,
                hotel_profile=hotel_profile,
                channel_actions=channel_actions,
                persona=persona,
            ),
        )
    ]

    for turn in history:
        role = MessageRole.USER if turn.direction == MessageDirection.INBOUND else MessageRole.ASSISTANT
        messages.append(CompletionMessage(role=role, content=turn.content))

    # The channel layer usually stores the inbound message before we run.
    if not history or history[-1].content.strip() != current_message.strip():
        messages.append(CompletionMessage(role=MessageRole.USER, content=current_message))

    return messages
