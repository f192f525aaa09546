"""SQL helpers using SQLAlchemy Core (SQLite locally, PostgreSQL in prod)."""

from pathlib import Path
from typing import Any, List, Optional

from sqlalchemy import create_engine, make_url, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool, StaticPool


def create_db_engine(db_url: str) -> Engine:
    """Build an engine with pooling suited to warm Lambda reuse."""
    if db_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        database = make_url(db_url).database
        if not database or database == ":memory:":
            # One shared connection, otherwise every checkout sees an empty DB.
            kwargs["poolclass"] = StaticPool
        else:
            Path(database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(db_url, **kwargs)

    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=1,
        max_overflow=2,
        pool_pre_ping=True,
        pool_recycle=300,
    )


class SqlRepository:
    """Thin wrapper to keep SQL organized and parameterized."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def fetch_one(self, query: str, params: Optional[dict] = None) -> Optional[dict]:
        """Execute a SELECT and return one row as dict."""
        stmt = text(query)
        with self.engine.connect() as conn:
            row = conn.execute(stmt, params or {}).fetchone()
            return dict(row._mapping) if row else None

    def fetch_all(self, query: str, params: Optional[dict] = None) -> List[dict]:
        """Execute a SELECT and return every row as dict."""
        stmt = text(query)
        with self.engine.connect() as conn:
            return [dict(row._mapping) for row in conn.execute(stmt, params or {})]

    def execute(self, query: str, params: Optional[dict] = None) -> Any:
        """Execute a parameterized statement in its own transaction."""
        stmt = text(query)
        with self.engine.begin() as conn:
            return conn.execute(stmt, params or {})

    def execute_many(self, statements: List[tuple]) -> None:
        """Run several ``(query, params)`` statements in one transaction."""
        with self.engine.begin() as conn:
            for query, params in statements:
                conn.execute(text(query), params or {})
