"""
Intent classification handler for POST /intents/classify.

Thin wrapper over the responder's classifier, which never raises; only a bad
payload produces an error response.
"""

from __future__ import annotations

import json
import uuid
from typing import Dict

from concierge.handlers import dependencies
from concierge.utils.error_handling import ValidationError, json_response, to_response
from concierge.utils.logging_config import get_logger
from concierge.utils.validators import ensure_present

logger = get_logger(__name__)


def lambda_handler(event, context) -> Dict:
    correlation_id = str(uuid.uuid4())
    try:
        payload_body = event.get("body")
        payload = json.loads(payload_body) if payload_body else event
        text = payload.get("text")
        ensure_present(text, "text")
        if not isinstance(text, str):
            raise ValidationError("text must be a string")
    except ValidationError as exc:
        return to_response(exc, correlation_id)
    except (json.JSONDecodeError, AttributeError) as exc:
        return json_response(
            400, {"message": "Invalid JSON body", "error": str(exc), "correlation_id": correlation_id}
        )

    result = dependencies.get_responder().classifier.classify(text)
    logger.info(
        "Message classified",
        extra={"correlation_id": correlation_id, "intent": result.intent},
    )
    return json_response(200, result.model_dump_json())
