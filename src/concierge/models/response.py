"""Reply returned to the channel layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from concierge.models.intent import ClassificationResult
from concierge.models.provider import TokenUsage


class KnowledgeHit(BaseModel):
    """Knowledge entry that grounded the reply."""

    id: str
    title: str
    similarity: float


class GuestReference(BaseModel):
    """Identifiers of the guest the reply was personalised for."""

    guest_id: str
    guest_name: str
    reservation_id: Optional[str] = None
    room_number: Optional[str] = None


class ResponseMetadata(BaseModel):
    """Signals and diagnostics attached to a reply."""

    classification: Optional[ClassificationResult] = None
    knowledge_context: List[KnowledgeHit] = Field(default_factory=list)
    usage: Optional[TokenUsage] = None
    suggested_action: Optional[str] = None
    quick_replies: Optional[List[str]] = None
    guest_context: Optional[GuestReference] = None
    cached: bool = False
    cached_at: Optional[datetime] = None


class Response(BaseModel):
    """One reply per inbound message."""

    content: str
    confidence: float = Field(ge=0, le=1)
    intent: str
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class CachedResponse(BaseModel):
    """Cache hit payload."""

    response: str
    intent: Optional[str] = None
    created_at: datetime
