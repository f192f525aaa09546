"""Payloads exchanged with the completion and embedding providers."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Chat roles understood by the completion provider."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class CompletionMessage(BaseModel):
    """Single chat turn."""

    role: MessageRole
    content: str


class TokenUsage(BaseModel):
    """Token accounting reported by the provider."""

    input_tokens: int = 0
    output_tokens: int = 0


class CompletionRequest(BaseModel):
    """Prompt plus sampling controls."""

    messages: List[CompletionMessage]
    max_tokens: int = Field(default=1024, ge=1, le=8192)
    temperature: float = Field(default=0.7, ge=0, le=2)


class CompletionResponse(BaseModel):
    """Raw completion text and usage."""

    content: str
    usage: Optional[TokenUsage] = None


class EmbeddingRequest(BaseModel):
    """Text to embed."""

    text: str


class EmbeddingResponse(BaseModel):
    """Vector returned by the embedding model."""

    embedding: List[float]
    usage: Optional[TokenUsage] = None
