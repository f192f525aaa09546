"""
Pytest configuration and shared fakes.

src/ is put on sys.path so ``import concierge`` works without an install,
and boto3 gets offline-friendly defaults so no test needs AWS access.
Providers are replaced by deterministic fakes: a hashing bag-of-words
embedder and a scripted completion provider.
"""

import os
import re
import sys
import zlib
from pathlib import Path
from typing import List, Optional

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add src/ to sys.path if missing."""
    src_root = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("BEDROCK_REGION", "eu-west-2")

boto3.setup_default_session(region_name="eu-west-2")

from concierge.models.conversation import HistoryMessage, HotelProfile  # noqa: E402
from concierge.models.knowledge import KnowledgeCategory, KnowledgeItemCreate  # noqa: E402
from concierge.models.provider import (  # noqa: E402
    CompletionRequest,
    CompletionResponse,
    EmbeddingRequest,
    EmbeddingResponse,
    TokenUsage,
)

_STOPWORDS = {
    "a", "an", "and", "are", "at", "be", "can", "do", "does", "for", "from", "i",
    "in", "is", "it", "me", "my", "of", "on", "the", "to", "until", "what", "you",
}
_TOKEN_RE = re.compile(r"[a-z0-9]+")


class HashingEmbedder:
    """Bag-of-words vectors: one crc32 bucket per token, counts as weights."""

    name = "hashing-test"

    def __init__(self, dimensions: int = 4096):
        self.dimensions = dimensions
        self.calls: List[str] = []
        self.fail = False

    def embed(self, request: EmbeddingRequest) -> EmbeddingResponse:
        self.calls.append(request.text)
        if self.fail:
            raise RuntimeError("embedding service unavailable")
        vector = [0.0] * self.dimensions
        for token in _TOKEN_RE.findall(request.text.lower()):
            if token not in _STOPWORDS:
                vector[zlib.crc32(token.encode()) % self.dimensions] += 1.0
        return EmbeddingResponse(embedding=vector, usage=TokenUsage(input_tokens=len(request.text.split())))


class ScriptedProvider:
    """Completion provider replaying canned replies; exceptions are raised."""

    name = "scripted-test"

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests: List[CompletionRequest] = []

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return CompletionResponse(content=reply, usage=TokenUsage(input_tokens=120, output_tokens=18))

    @property
    def calls(self) -> int:
        return len(self.requests)


class StaticHistory:
    def __init__(self, messages: Optional[List[HistoryMessage]] = None):
        self.messages = messages or []
        self.requested: List[tuple] = []

    def get_messages(self, conversation_id: str, limit: int = 10) -> List[HistoryMessage]:
        self.requested.append((conversation_id, limit))
        return self.messages[-limit:]


class StaticSettings:
    def __init__(self, profile: Optional[HotelProfile] = None, error: Optional[Exception] = None):
        self.profile = profile
        self.error = error

    def get_hotel_profile(self) -> Optional[HotelProfile]:
        if self.error:
            raise self.error
        return self.profile


SAMPLE_KNOWLEDGE = [
    KnowledgeItemCreate(
        category=KnowledgeCategory.POLICY,
        title="Check-out time",
        content="Checkout is at 11am. Late checkout until 1pm can be requested at the front desk.",
        keywords=["checkout", "late checkout"],
        priority=8,
    ),
    KnowledgeItemCreate(
        category=KnowledgeCategory.AMENITY,
        title="Pool hours",
        content="The rooftop pool is open daily from 7am to 10pm.",
        keywords=["pool", "swimming"],
    ),
    KnowledgeItemCreate(
        category=KnowledgeCategory.DINING,
        title="Breakfast",
        content="Breakfast is served in the lobby restaurant from 6:30am to 10:30am.",
        keywords=["breakfast"],
        priority=6,
    ),
]


@pytest.fixture
def embedder():
    return HashingEmbedder()


@pytest.fixture
def scripted_provider():
    """Factory: ``scripted_provider("reply", RuntimeError("down"), ...)``."""
    return ScriptedProvider


@pytest.fixture
def static_history():
    return StaticHistory


@pytest.fixture
def static_settings():
    return StaticSettings


@pytest.fixture
def sample_knowledge():
    return [item.model_copy(deep=True) for item in SAMPLE_KNOWLEDGE]


@pytest.fixture
def knowledge_service(embedder, sample_knowledge):
    """In-memory knowledge service seeded with the sample entries."""
    from concierge.services.knowledge_service import KnowledgeService

    service = KnowledgeService(embedder)
    service.add_batch(sample_knowledge)
    return service


@pytest.fixture
def sqlite_engine():
    from concierge.repositories.sql_repo import create_db_engine

    engine = create_db_engine("sqlite:///:memory:")
    yield engine
    engine.dispose()
