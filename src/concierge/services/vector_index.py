"""
Vector scoring for knowledge retrieval.

``VectorIndex`` is the seam between the retriever and the scoring strategy.
``ExactScanIndex`` scores every stored vector; it is fine for a few thousand
entries and can be replaced by an approximate index without touching
``KnowledgeService``.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Protocol, Sequence, Tuple

from concierge.models.knowledge import KnowledgeEmbedding


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Dot product over product of magnitudes; 0.0 for mismatched or zero vectors."""
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    similarity = dot / (norm_a * norm_b)
    # NaN or inf components would otherwise clamp to a perfect match.
    if not math.isfinite(similarity):
        return 0.0
    # Clamp float drift so callers can rely on [-1, 1].
    return max(-1.0, min(1.0, similarity))


class VectorIndex(Protocol):
    def rank(
        self,
        query: Sequence[float],
        embeddings: Iterable[KnowledgeEmbedding],
        min_similarity: float,
    ) -> List[Tuple[str, float]]:
        """Return ``(id, similarity)`` pairs at or above the threshold, best first."""
        ...


class ExactScanIndex:
    """Linear scan over every stored embedding."""

    def rank(
        self,
        query: Sequence[float],
        embeddings: Iterable[KnowledgeEmbedding],
        min_similarity: float,
    ) -> List[Tuple[str, float]]:
        scored: List[Tuple[str, float]] = []
        for embedding in embeddings:
            similarity = cosine_similarity(query, embedding.vector)
            if similarity >= min_similarity:
                scored.append((embedding.id, similarity))
        # sort() is stable, so ties keep scan order.
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored
