"""
Knowledge administration handler.

Routes (all under /knowledge):
- GET    /knowledge            list active entries (?category=)
- GET    /knowledge/stats      counts by category and embeddings
- GET    /knowledge/{id}       one entry
- POST   /knowledge            create and embed
- POST   /knowledge/search     similarity search
- POST   /knowledge/reindex    regenerate embeddings (?missing_only=true)
- PUT    /knowledge/{id}       partial update
- DELETE /knowledge/{id}       delete entry and embedding
"""

from __future__ import annotations

import json
import uuid
from typing import Dict, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from concierge.handlers import dependencies
from concierge.models.knowledge import (
    KnowledgeCategory,
    KnowledgeItem,
    KnowledgeItemCreate,
    KnowledgeItemUpdate,
    KnowledgeSearchResult,
    SearchOptions,
)
from concierge.services.knowledge_service import KnowledgeService
from concierge.utils.error_handling import AppError, NotFoundError, json_response, to_response
from concierge.utils.logging_config import get_logger

logger = get_logger(__name__)

PREFIX = "/knowledge"

_items_adapter = TypeAdapter(list[KnowledgeItem])
_results_adapter = TypeAdapter(list[KnowledgeSearchResult])


def _knowledge() -> KnowledgeService:
    return dependencies.get_responder().knowledge


def _body(event) -> dict:
    payload_body = event.get("body")
    return json.loads(payload_body) if payload_body else {}


def _query(event) -> dict:
    return event.get("queryStringParameters") or {}


def _list(event, item_id: Optional[str]) -> Dict:
    raw_category = _query(event).get("category")
    category = KnowledgeCategory(raw_category) if raw_category else None
    items = _knowledge().list(category)
    return json_response(200, _items_adapter.dump_json(items).decode())


def _stats(event, item_id: Optional[str]) -> Dict:
    return json_response(200, _knowledge().get_stats().model_dump_json())


def _get(event, item_id: Optional[str]) -> Dict:
    item = _knowledge().find_by_id(item_id)
    if not item:
        raise NotFoundError("Entry not found")
    return json_response(200, item.model_dump_json())


def _create(event, item_id: Optional[str]) -> Dict:
    payload = KnowledgeItemCreate.model_validate(_body(event))
    item = _knowledge().add(payload)
    return json_response(201, item.model_dump_json())


def _search(event, item_id: Optional[str]) -> Dict:
    options = SearchOptions.model_validate(_body(event))
    results = _knowledge().search(
        options.query,
        limit=options.limit,
        category=options.category,
        min_similarity=options.min_similarity,
    )
    return json_response(200, _results_adapter.dump_json(results).decode())


def _reindex(event, item_id: Optional[str]) -> Dict:
    missing_only = str(_query(event).get("missing_only", "false")).lower() == "true"
    embedded = _knowledge().reindex(missing_only=missing_only)
    return json_response(200, {"embedded": embedded, "missing_only": missing_only})


def _update(event, item_id: Optional[str]) -> Dict:
    updates = KnowledgeItemUpdate.model_validate(_body(event))
    item = _knowledge().update(item_id, updates)
    return json_response(200, item.model_dump_json())


def _delete(event, item_id: Optional[str]) -> Dict:
    if not _knowledge().delete(item_id):
        raise NotFoundError("Entry not found")
    return json_response(200, {"id": item_id, "status": "deleted"})


# Sub-path None matches /knowledge/{id}.
_ROUTES = {
    ("GET", ""): _list,
    ("GET", "stats"): _stats,
    ("GET", None): _get,
    ("POST", ""): _create,
    ("POST", "search"): _search,
    ("POST", "reindex"): _reindex,
    ("PUT", None): _update,
    ("DELETE", None): _delete,
}


def _resolve(method: str, path: str):
    tail = path[len(PREFIX):].strip("/") if path.startswith(PREFIX) else path.strip("/")
    if "/" in tail:
        return None, None
    handler = _ROUTES.get((method, tail))
    if handler:
        return handler, None
    if tail:
        return _ROUTES.get((method, None)), tail
    return None, None


def lambda_handler(event, context) -> Dict:
    """Dispatch a /knowledge request."""
    correlation_id = str(uuid.uuid4())
    http = event.get("requestContext", {}).get("http", {})
    method = http.get("method", "").upper()
    path = http.get("path", "")

    handler, item_id = _resolve(method, path)
    if handler is None:
        return json_response(404, {"message": "Route not found", "route": f"{method} {path}"})

    try:
        return handler(event, item_id)
    except (json.JSONDecodeError, PydanticValidationError, ValueError) as exc:
        return json_response(
            400, {"message": "Invalid request", "error": str(exc), "correlation_id": correlation_id}
        )
    except AppError as exc:
        logger.warning(
            "Knowledge request failed",
            extra={"cid": correlation_id, "route": f"{method} {path}", "error": str(exc)},
        )
        return to_response(exc, correlation_id)
