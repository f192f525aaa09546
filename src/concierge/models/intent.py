"""Intent classification models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

UNKNOWN_INTENT = "unknown"


class IntentPriority(str, Enum):
    """Routing urgency attached to each intent."""

    LOW = "low"
    STANDARD = "standard"
    HIGH = "high"
    URGENT = "urgent"


class IntentDefinition(BaseModel):
    """Taxonomy entry: description, examples and routing metadata."""

    description: str
    examples: List[str] = Field(default_factory=list)
    department: Optional[str] = None
    requires_action: bool = False
    priority: IntentPriority = IntentPriority.LOW


class ClassificationResult(BaseModel):
    """Structured classification output; computed per call, never stored."""

    intent: str
    confidence: float = Field(ge=0, le=1)
    department: Optional[str] = None
    requires_action: bool = False
    reasoning: Optional[str] = None

    @classmethod
    def unknown(cls) -> "ClassificationResult":
        """Degraded result used whenever classification cannot be trusted."""
        return cls(
            intent=UNKNOWN_INTENT,
            confidence=0.0,
            department=None,
            requires_action=False,
        )
