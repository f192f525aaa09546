"""
Structured signals embedded in model output.

The responder prompt asks the model to end a reply with ``[ACTION:<id>]``
and/or ``[QUICK_REPLIES:a|b|c]``. Tags are only honoured at the end of the
text; they are peeled off one at a time so either order works. Malformed or
repeated tags yield no signal instead of raising.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

ACTION_TAG_RE = re.compile(r"\[ACTION:([a-z0-9-]+)\]\s*$")
QUICK_REPLY_TAG_RE = re.compile(r"\[QUICK_REPLIES:([^\[\]]*)\]\s*$")

_ANY_ACTION_RE = re.compile(r"\[ACTION:[^\]]*\]")
_ANY_QUICK_REPLY_RE = re.compile(r"\[QUICK_REPLIES:[^\]]*\]")

# One action tag plus one quick-reply tag, plus one repeat of each to detect duplicates.
_MAX_TRAILING_TAGS = 4


@dataclass
class ExtractedSignals:
    content: str
    suggested_action: Optional[str] = None
    quick_replies: Optional[List[str]] = None


def parse_quick_replies(payload: str) -> List[str]:
    return [option.strip() for option in payload.split("|") if option.strip()]


def extract_signals(raw: str) -> ExtractedSignals:
    """Strip trailing tags from ``raw`` and return the visible text plus signals."""
    content = (raw or "").rstrip()
    actions: List[str] = []
    reply_sets: List[List[str]] = []

    for _ in range(_MAX_TRAILING_TAGS):
        match = ACTION_TAG_RE.search(content)
        if match:
            actions.append(match.group(1))
            content = content[: match.start()].rstrip()
            continue
        match = QUICK_REPLY_TAG_RE.search(content)
        if match:
            reply_sets.append(parse_quick_replies(match.group(1)))
            content = content[: match.start()].rstrip()
            continue
        break

    suggested_action = actions[0] if len(actions) == 1 else None
    if suggested_action and _ANY_ACTION_RE.search(content):
        suggested_action = None

    quick_replies = reply_sets[0] if len(reply_sets) == 1 and reply_sets[0] else None
    if quick_replies and _ANY_QUICK_REPLY_RE.search(content):
        quick_replies = None

    return ExtractedSignals(
        content=content,
        suggested_action=suggested_action,
        quick_replies=quick_replies,
    )
