"""Knowledge base models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class KnowledgeCategory(str, Enum):
    """Categories an entry can be filed under."""

    FAQ = "faq"
    POLICY = "policy"
    AMENITY = "amenity"
    SERVICE = "service"
    DINING = "dining"
    ROOM_TYPE = "room_type"
    LOCAL_INFO = "local_info"
    CONTACT = "contact"
    OTHER = "other"


class KnowledgeStatus(str, Enum):
    """Archived entries are kept but never surfaced."""

    ACTIVE = "active"
    ARCHIVED = "archived"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _require_text(value: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError("title and content must be provided")
    return cleaned


class KnowledgeItemCreate(BaseModel):
    """Payload for a new knowledge entry."""

    category: KnowledgeCategory
    title: str = Field(min_length=1, max_length=500)
    content: str = Field(min_length=1)
    keywords: List[str] = Field(default_factory=list)
    priority: int = Field(default=5, ge=1, le=10)
    status: KnowledgeStatus = KnowledgeStatus.ACTIVE

    @field_validator("title", "content")
    @classmethod
    def validate_required(cls, value: str) -> str:
        """Reject whitespace-only text so nothing blank gets embedded."""
        return _require_text(value)


class KnowledgeItemUpdate(BaseModel):
    """Partial update; ``None`` fields are left untouched."""

    category: Optional[KnowledgeCategory] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    content: Optional[str] = Field(default=None, min_length=1)
    keywords: Optional[List[str]] = None
    priority: Optional[int] = Field(default=None, ge=1, le=10)
    status: Optional[KnowledgeStatus] = None

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _require_text(value)


class KnowledgeItem(KnowledgeItemCreate):
    """Stored knowledge entry."""

    id: str
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class KnowledgeEmbedding(BaseModel):
    """Vector for a single knowledge entry (same id as the entry)."""

    id: str
    vector: List[float]
    embedding_model: str
    dimensions: int


class KnowledgeSearchResult(KnowledgeItem):
    """Knowledge entry with the similarity score that ranked it."""

    similarity: float


class KnowledgeStats(BaseModel):
    """Counts used by the admin surface."""

    total_items: int
    by_category: Dict[str, int] = Field(default_factory=dict)
    has_embeddings: int


class SearchOptions(BaseModel):
    """Search request used by the HTTP surface."""

    query: str = Field(min_length=1)
    limit: int = Field(default=5, ge=1, le=50)
    category: Optional[KnowledgeCategory] = None
    min_similarity: float = Field(default=0.5, ge=-1, le=1)
