"""
Knowledge Service.

Manages the hotel knowledge base used to ground replies: FAQ, policies,
amenities and local information stored with vector embeddings.

Retrieval is a full scan behind ``VectorIndex``; an embedding outage raises
``RetrievalError`` because there is no safe default for missing context.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from concierge.models.knowledge import (
    KnowledgeCategory,
    KnowledgeEmbedding,
    KnowledgeItem,
    KnowledgeItemCreate,
    KnowledgeItemUpdate,
    KnowledgeSearchResult,
    KnowledgeStats,
    KnowledgeStatus,
)
from concierge.models.provider import EmbeddingRequest
from concierge.repositories.knowledge_repo import (
    InMemoryKnowledgeRepository,
    KnowledgeRepository,
)
from concierge.services.providers import EmbeddingProvider
from concierge.services.vector_index import ExactScanIndex, VectorIndex
from concierge.utils.error_handling import NotFoundError, RetrievalError
from concierge.utils.logging_config import get_logger, preview
from concierge.utils.validators import ensure_present

logger = get_logger(__name__)


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


class KnowledgeService:
    """Store, embed and search knowledge entries."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        repository: Optional[KnowledgeRepository] = None,
        index: Optional[VectorIndex] = None,
    ) -> None:
        self.embedding_provider = embedding_provider
        self.embedding_model = getattr(embedding_provider, "name", "unknown")
        self.repository = repository if repository is not None else InMemoryKnowledgeRepository()
        self.index = index or ExactScanIndex()
        logger.info("Knowledge service initialized", extra={"provider": self.embedding_model})

    def add(self, item: KnowledgeItemCreate) -> KnowledgeItem:
        """Store an entry, then embed it. Embedding failures propagate."""
        created = KnowledgeItem(id=generate_id("knowledge"), **item.model_dump())
        self.repository.insert_item(created)
        self._generate_embedding(created.id, created.content)

        logger.info(
            "Knowledge item added",
            extra={"id": created.id, "category": created.category.value, "title": created.title},
        )
        return created

    def add_batch(self, items: List[KnowledgeItemCreate]) -> List[KnowledgeItem]:
        results = [self.add(item) for item in items]
        logger.info("Knowledge items batch added", extra={"count": len(results)})
        return results

    def find_by_id(self, item_id: str) -> Optional[KnowledgeItem]:
        return self.repository.get_item(item_id)

    def update(self, item_id: str, updates: KnowledgeItemUpdate) -> KnowledgeItem:
        """Apply a partial update; a content change regenerates the embedding."""
        existing = self.repository.get_item(item_id)
        if not existing:
            raise NotFoundError(f"Knowledge item not found: {item_id}")

        changes = updates.model_dump(exclude_none=True)
        updated = existing.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        content_changed = "content" in changes and changes["content"] != existing.content
        if content_changed:
            # The old vector must not outlive the old content, even if re-embedding fails.
            self.repository.delete_embedding(item_id)
        self.repository.update_item(updated)

        if content_changed:
            self._generate_embedding(item_id, updated.content)

        logger.info("Knowledge item updated", extra={"id": item_id, "fields": sorted(changes)})
        return updated

    def delete(self, item_id: str) -> bool:
        """Remove the entry and its embedding. Returns False if it did not exist."""
        deleted = self.repository.delete_item(item_id)
        logger.info("Knowledge item deleted", extra={"id": item_id, "existed": deleted})
        return deleted

    def list(self, category: Optional[KnowledgeCategory] = None) -> List[KnowledgeItem]:
        """Active entries, highest priority first."""
        items = self.repository.list_items(category=category, status=KnowledgeStatus.ACTIVE)
        return sorted(items, key=lambda item: item.priority, reverse=True)

    def search(
        self,
        query: str,
        limit: int = 5,
        category: Optional[KnowledgeCategory] = None,
        min_similarity: float = 0.5,
    ) -> List[KnowledgeSearchResult]:
        """Embed the query once and return the best active matches."""
        ensure_present(query, "query")
        start = time.perf_counter()

        try:
            query_embedding = self.embedding_provider.embed(EmbeddingRequest(text=query))
        except Exception as exc:
            logger.error(
                "Query embedding failed",
                extra={"query": preview(query), "error": str(exc)},
            )
            raise RetrievalError(f"Knowledge retrieval failed: {exc}") from exc

        ranked = self.index.rank(
            query_embedding.embedding,
            self.repository.list_embeddings(),
            min_similarity,
        )
        if not ranked:
            return []

        items = {item.id: item for item in self.repository.get_items(i for i, _ in ranked)}
        results: List[KnowledgeSearchResult] = []
        for item_id, similarity in ranked:
            item = items.get(item_id)
            if item is None or item.status != KnowledgeStatus.ACTIVE:
                continue
            if category is not None and item.category != KnowledgeCategory(category):
                continue
            results.append(KnowledgeSearchResult(**item.model_dump(), similarity=similarity))
            if len(results) >= limit:
                break

        logger.debug(
            "Knowledge search complete",
            extra={
                "query": preview(query),
                "result_count": len(results),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return results

    def get_stats(self) -> KnowledgeStats:
        items = self.repository.list_items()
        by_category: Dict[str, int] = {}
        for item in items:
            key = KnowledgeCategory(item.category).value
            by_category[key] = by_category.get(key, 0) + 1
        return KnowledgeStats(
            total_items=len(items),
            by_category=by_category,
            has_embeddings=len(self.repository.embedding_ids()),
        )

    def reindex(self, missing_only: bool = False) -> int:
        """
        Regenerate embeddings, e.g. after switching embedding models.

        Per-item failures are logged and skipped so one bad entry does not
        block the rest. Returns the number of entries embedded.
        """
        indexed = self.repository.embedding_ids() if missing_only else set()
        embedded = 0
        failed = 0
        for item in self.repository.list_items():
            if item.id in indexed:
                continue
            try:
                self._generate_embedding(item.id, item.content)
                embedded += 1
            except RetrievalError:
                failed += 1

        logger.info(
            "Knowledge reindex complete",
            extra={"embedded": embedded, "failed": failed, "missing_only": missing_only},
        )
        return embedded

    def _generate_embedding(self, item_id: str, content: str) -> None:
        try:
            response = self.embedding_provider.embed(EmbeddingRequest(text=content))
        except Exception as exc:
            logger.error(
                "Embedding generation failed",
                extra={"id": item_id, "error": str(exc)},
            )
            raise RetrievalError(f"Embedding failed for {item_id}: {exc}") from exc

        self.repository.put_embedding(
            KnowledgeEmbedding(
                id=item_id,
                vector=response.embedding,
                embedding_model=self.embedding_model,
                dimensions=len(response.embedding),
            )
        )
