"""
Reply generation handler for POST /messages/respond.

The channel layer posts the conversation, the inbound message and (when it
resolved one) the guest context. Retrieval and completion outages come back
as 502 so the channel can send its own apology.
"""

from __future__ import annotations

import json
import uuid
from typing import Dict

from pydantic import ValidationError as PydanticValidationError

from concierge.handlers import dependencies
from concierge.models.conversation import Conversation, GuestContext, InboundMessage
from concierge.utils.error_handling import AppError, json_response, to_response
from concierge.utils.logging_config import get_logger

logger = get_logger(__name__)


def lambda_handler(event, context) -> Dict:
    """Validate the payload and run the responder."""
    correlation_id = str(uuid.uuid4())
    try:
        payload_body = event.get("body")
        payload = json.loads(payload_body) if payload_body else event
        conversation = Conversation.model_validate(payload.get("conversation") or {})
        message = InboundMessage.model_validate(payload.get("message") or {})
        raw_guest = payload.get("guest_context")
        guest_context = GuestContext.model_validate(raw_guest) if raw_guest else None
    except (json.JSONDecodeError, AttributeError, PydanticValidationError) as exc:
        logger.warning("Invalid respond payload", extra={"cid": correlation_id, "error": str(exc)})
        return json_response(
            400,
            {"message": "Invalid payload", "error": str(exc), "correlation_id": correlation_id},
        )

    try:
        response = dependencies.get_responder().generate(conversation, message, guest_context)
    except AppError as exc:
        logger.error(
            "Response generation failed",
            extra={"cid": correlation_id, "conversation_id": conversation.id, "error": str(exc)},
        )
        return to_response(exc, correlation_id)
    except Exception:
        logger.exception("Response generation crashed", extra={"cid": correlation_id})
        return json_response(
            500, {"message": "Response generation failed", "correlation_id": correlation_id}
        )

    logger.info(
        "Response delivered",
        extra={
            "cid": correlation_id,
            "conversation_id": conversation.id,
            "intent": response.intent,
            "cached": response.metadata.cached,
        },
    )
    return json_response(200, response.model_dump_json())
