"""
Warm-container wiring shared by the handlers.

The responder is built on first use and reused across invocations so the
response cache and database pool survive between requests.
"""

from typing import Optional

from concierge.services.responder_service import ResponderService

_responder: Optional[ResponderService] = None


def get_responder() -> ResponderService:
    """Lazy-load the ResponderService."""
    global _responder
    if _responder is None:
        from concierge.services.factory import build_responder

        _responder = build_responder()
    return _responder


def set_responder(responder: Optional[ResponderService]) -> None:
    """Swap the wired responder (tests, custom bootstraps)."""
    global _responder
    _responder = responder
