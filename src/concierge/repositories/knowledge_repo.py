"""
Embedding store for knowledge entries.

Two interchangeable backends: an in-memory store (tests, local runs) and a
SQL store built on ``SqlRepository``. Both keep items and embeddings
one-to-one and remove the embedding whenever the item goes away.
"""

from __future__ import annotations

import json
from datetime import datetime
from threading import Lock
from typing import Dict, Iterable, List, Optional, Protocol, Set

from sqlalchemy.engine import Engine

from concierge.models.knowledge import (
    KnowledgeCategory,
    KnowledgeEmbedding,
    KnowledgeItem,
    KnowledgeStatus,
)
from concierge.repositories.sql_repo import SqlRepository


class KnowledgeRepository(Protocol):
    def insert_item(self, item: KnowledgeItem) -> None: ...

    def get_item(self, item_id: str) -> Optional[KnowledgeItem]: ...

    def get_items(self, item_ids: Iterable[str]) -> List[KnowledgeItem]: ...

    def update_item(self, item: KnowledgeItem) -> None: ...

    def delete_item(self, item_id: str) -> bool: ...

    def list_items(
        self,
        category: Optional[KnowledgeCategory] = None,
        status: Optional[KnowledgeStatus] = None,
    ) -> List[KnowledgeItem]: ...

    def put_embedding(self, embedding: KnowledgeEmbedding) -> None: ...

    def delete_embedding(self, item_id: str) -> None: ...

    def list_embeddings(self) -> List[KnowledgeEmbedding]: ...

    def embedding_ids(self) -> Set[str]: ...


def _matches(
    item: KnowledgeItem,
    category: Optional[KnowledgeCategory],
    status: Optional[KnowledgeStatus],
) -> bool:
    if category is not None and item.category != category:
        return False
    if status is not None and item.status != status:
        return False
    return True


class InMemoryKnowledgeRepository:
    """Dict-backed store; iteration follows insertion order."""

    def __init__(self) -> None:
        self._items: Dict[str, KnowledgeItem] = {}
        self._embeddings: Dict[str, KnowledgeEmbedding] = {}
        self._lock = Lock()

    def insert_item(self, item: KnowledgeItem) -> None:
        with self._lock:
            self._items[item.id] = item.model_copy(deep=True)

    def get_item(self, item_id: str) -> Optional[KnowledgeItem]:
        with self._lock:
            item = self._items.get(item_id)
            return item.model_copy(deep=True) if item else None

    def get_items(self, item_ids: Iterable[str]) -> List[KnowledgeItem]:
        with self._lock:
            return [
                self._items[item_id].model_copy(deep=True)
                for item_id in item_ids
                if item_id in self._items
            ]

    def update_item(self, item: KnowledgeItem) -> None:
        with self._lock:
            if item.id in self._items:
                self._items[item.id] = item.model_copy(deep=True)

    def delete_item(self, item_id: str) -> bool:
        with self._lock:
            self._embeddings.pop(item_id, None)
            return self._items.pop(item_id, None) is not None

    def list_items(
        self,
        category: Optional[KnowledgeCategory] = None,
        status: Optional[KnowledgeStatus] = None,
    ) -> List[KnowledgeItem]:
        with self._lock:
            return [
                item.model_copy(deep=True)
                for item in self._items.values()
                if _matches(item, category, status)
            ]

    def put_embedding(self, embedding: KnowledgeEmbedding) -> None:
        with self._lock:
            if embedding.id not in self._items:
                return
            # Replace rather than update so the old vector never lingers.
            self._embeddings.pop(embedding.id, None)
            self._embeddings[embedding.id] = embedding.model_copy(deep=True)

    def delete_embedding(self, item_id: str) -> None:
        with self._lock:
            self._embeddings.pop(item_id, None)

    def list_embeddings(self) -> List[KnowledgeEmbedding]:
        with self._lock:
            return list(self._embeddings.values())

    def embedding_ids(self) -> Set[str]:
        with self._lock:
            return set(self._embeddings)


SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS knowledge_base (
        id VARCHAR(64) PRIMARY KEY,
        category VARCHAR(32) NOT NULL,
        title VARCHAR(500) NOT NULL,
        content TEXT NOT NULL,
        keywords TEXT NOT NULL DEFAULT '[]',
        priority INTEGER NOT NULL DEFAULT 5,
        status VARCHAR(16) NOT NULL DEFAULT 'active',
        created_at VARCHAR(40) NOT NULL,
        updated_at VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS knowledge_embeddings (
        id VARCHAR(64) PRIMARY KEY REFERENCES knowledge_base(id) ON DELETE CASCADE,
        embedding TEXT NOT NULL,
        model VARCHAR(200) NOT NULL,
        dimensions INTEGER NOT NULL
    )
    """,
)

_ITEM_COLUMNS = "id, category, title, content, keywords, priority, status, created_at, updated_at"


class SqlKnowledgeRepository:
    """SQL-backed store; vectors are stored as JSON text."""

    def __init__(self, engine: Engine, create_schema: bool = True):
        self.db = SqlRepository(engine)
        if create_schema:
            self.create_schema()

    def create_schema(self) -> None:
        self.db.execute_many([(stmt, None) for stmt in SCHEMA_STATEMENTS])

    def insert_item(self, item: KnowledgeItem) -> None:
        self.db.execute(
            f"INSERT INTO knowledge_base ({_ITEM_COLUMNS}) VALUES "
            "(:id, :category, :title, :content, :keywords, :priority, :status, "
            ":created_at, :updated_at)",
            _item_params(item),
        )

    def get_item(self, item_id: str) -> Optional[KnowledgeItem]:
        row = self.db.fetch_one(
            f"SELECT {_ITEM_COLUMNS} FROM knowledge_base WHERE id = :id", {"id": item_id}
        )
        return _row_to_item(row) if row else None

    def get_items(self, item_ids: Iterable[str]) -> List[KnowledgeItem]:
        ids = list(item_ids)
        if not ids:
            return []
        placeholders = ", ".join(f":id{i}" for i in range(len(ids)))
        rows = self.db.fetch_all(
            f"SELECT {_ITEM_COLUMNS} FROM knowledge_base WHERE id IN ({placeholders})",
            {f"id{i}": item_id for i, item_id in enumerate(ids)},
        )
        by_id = {row["id"]: _row_to_item(row) for row in rows}
        return [by_id[item_id] for item_id in ids if item_id in by_id]

    def update_item(self, item: KnowledgeItem) -> None:
        self.db.execute(
            "UPDATE knowledge_base SET category = :category, title = :title, "
            "content = :content, keywords = :keywords, priority = :priority, "
            "status = :status, updated_at = :updated_at WHERE id = :id",
            _item_params(item),
        )

    def delete_item(self, item_id: str) -> bool:
        existed = self.get_item(item_id) is not None
        # Explicit embedding delete: SQLite ignores ON DELETE CASCADE unless
        # foreign keys are switched on per connection.
        self.db.execute_many(
            [
                ("DELETE FROM knowledge_embeddings WHERE id = :id", {"id": item_id}),
                ("DELETE FROM knowledge_base WHERE id = :id", {"id": item_id}),
            ]
        )
        return existed

    def list_items(
        self,
        category: Optional[KnowledgeCategory] = None,
        status: Optional[KnowledgeStatus] = None,
    ) -> List[KnowledgeItem]:
        clauses = []
        params: dict = {}
        if category is not None:
            clauses.append("category = :category")
            params["category"] = KnowledgeCategory(category).value
        if status is not None:
            clauses.append("status = :status")
            params["status"] = KnowledgeStatus(status).value
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self.db.fetch_all(
            f"SELECT {_ITEM_COLUMNS} FROM knowledge_base{where} ORDER BY created_at, id",
            params,
        )
        return [_row_to_item(row) for row in rows]

    def put_embedding(self, embedding: KnowledgeEmbedding) -> None:
        self.db.execute_many(
            [
                ("DELETE FROM knowledge_embeddings WHERE id = :id", {"id": embedding.id}),
                (
                    "INSERT INTO knowledge_embeddings (id, embedding, model, dimensions) "
                    "VALUES (:id, :embedding, :model, :dimensions)",
                    {
                        "id": embedding.id,
                        "embedding": json.dumps(embedding.vector),
                        "model": embedding.embedding_model,
                        "dimensions": embedding.dimensions,
                    },
                ),
            ]
        )

    def delete_embedding(self, item_id: str) -> None:
        self.db.execute("DELETE FROM knowledge_embeddings WHERE id = :id", {"id": item_id})

    def list_embeddings(self) -> List[KnowledgeEmbedding]:
        rows = self.db.fetch_all(
            "SELECT e.id, e.embedding, e.model, e.dimensions FROM knowledge_embeddings e "
            "JOIN knowledge_base k ON k.id = e.id ORDER BY k.created_at, k.id"
        )
        return [
            KnowledgeEmbedding(
                id=row["id"],
                vector=json.loads(row["embedding"]),
                embedding_model=row["model"],
                dimensions=row["dimensions"],
            )
            for row in rows
        ]

    def embedding_ids(self) -> Set[str]:
        rows = self.db.fetch_all("SELECT id FROM knowledge_embeddings")
        return {row["id"] for row in rows}


def _item_params(item: KnowledgeItem) -> dict:
    return {
        "id": item.id,
        "category": KnowledgeCategory(item.category).value,
        "title": item.title,
        "content": item.content,
        "keywords": json.dumps(item.keywords),
        "priority": item.priority,
        "status": KnowledgeStatus(item.status).value,
        "created_at": item.created_at.isoformat(),
        "updated_at": item.updated_at.isoformat(),
    }


def _row_to_item(row: dict) -> KnowledgeItem:
    return KnowledgeItem(
        id=row["id"],
        category=row["category"],
        title=row["title"],
        content=row["content"],
        keywords=json.loads(row["keywords"] or "[]"),
        priority=row["priority"],
        status=row["status"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )
