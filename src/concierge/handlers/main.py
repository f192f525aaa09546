"""
Single entrypoint Lambda that routes HTTP API requests to thin handler modules.

One Lambda keeps the response cache and database pool warm across routes.
"""

from typing import Callable, Tuple

from concierge.handlers import classification, health_check, knowledge, respond
from concierge.utils.error_handling import json_response


def lambda_handler(event, context):
    """
    Entry point invoked by API Gateway HTTP API.

    The event contains the HTTP method and path; we route it to the correct
    handler while keeping shared setup (logging, error handling) centralized.
    """
    method = event.get("requestContext", {}).get("http", {}).get("method", "")
    path = event.get("requestContext", {}).get("http", {}).get("path", "")
    route_key = f"{method.upper()} {path}"

    # Prefix match; knowledge sub-routes are dispatched inside the module.
    route_table: Tuple[Tuple[str, Callable], ...] = (
        ("GET /health", health_check.lambda_handler),
        ("POST /messages/respond", respond.lambda_handler),
        ("POST /intents/classify", classification.lambda_handler),
        ("GET /knowledge", knowledge.lambda_handler),
        ("POST /knowledge", knowledge.lambda_handler),
        ("PUT /knowledge/", knowledge.lambda_handler),
        ("DELETE /knowledge/", knowledge.lambda_handler),
    )

    for prefix, handler in route_table:
        if route_key.startswith(prefix):
            return handler(event, context)

    return json_response(404, {"message": "Route not found", "route": route_key})
