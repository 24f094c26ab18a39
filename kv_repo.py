# kv_repo.py
import json
import logging
from typing import Any, Iterable, List

from sqlalchemy import (
    create_engine, MetaData, Table, Column, String, Text, select, delete
)
from sqlalchemy.exc import SQLAlchemyError

from errors import StorageError

logger = logging.getLogger(__name__)

# -------------------------
# Engine
# -------------------------
def make_engine(database_url: str = "sqlite:///habit_tracker.db"):
    """Create and return a SQLAlchemy engine (SQLite by default)."""
    return create_engine(database_url, future=True)

# -------------------------
# Schema (module-level, shared)
# -------------------------
metadata = MetaData()

kv = Table(
    "kv", metadata,
    Column("key", String, primary_key=True),
    Column("value", Text, nullable=False),  # JSON-encoded
)

# -------------------------
# DB init
# -------------------------
def init_db(engine):
    """Create tables if they do not exist."""
    metadata.create_all(engine)

# -------------------------
# Store
# -------------------------
class SqlKeyValueStore:
    """Key-value store kept in a single SQL table.

    Values are JSON-encoded so booleans and strings come back with their
    original type. Each call runs in its own transaction.
    """

    def __init__(self, engine):
        self.engine = engine
        init_db(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SqlKeyValueStore":
        return cls(make_engine(database_url))

    def get(self, key: str, default: Any = None) -> Any:
        try:
            with self.engine.connect() as conn:
                raw = conn.execute(select(kv.c.value).where(kv.c.key == key)).scalar()
        except SQLAlchemyError as e:
            logger.error(f"Database error reading {key!r}: {e}")
            raise StorageError(f"Failed to read {key!r}: {e}")
        if raw is None:
            return default
        return json.loads(raw)

    def contains(self, key: str) -> bool:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(kv.c.key).where(kv.c.key == key)).first()
        except SQLAlchemyError as e:
            logger.error(f"Database error reading {key!r}: {e}")
            raise StorageError(f"Failed to read {key!r}: {e}")
        return row is not None

    def keys(self) -> List[str]:
        try:
            with self.engine.connect() as conn:
                return list(conn.execute(select(kv.c.key)).scalars())
        except SQLAlchemyError as e:
            logger.error(f"Database error listing keys: {e}")
            raise StorageError(f"Failed to list keys: {e}")

    def put(self, key: str, value: Any):
        payload = json.dumps(value, ensure_ascii=False)
        try:
            with self.engine.begin() as conn:  # ensures commit
                conn.execute(delete(kv).where(kv.c.key == key))
                conn.execute(kv.insert().values(key=key, value=payload))
        except SQLAlchemyError as e:
            logger.error(f"Database error writing {key!r}: {e}")
            raise StorageError(f"Failed to write {key!r}: {e}")

    def remove(self, key: str):
        self.remove_many([key])

    def remove_many(self, keys: Iterable[str]):
        doomed = list(keys)
        if not doomed:
            return
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(kv).where(kv.c.key.in_(doomed)))
        except SQLAlchemyError as e:
            logger.error(f"Database error deleting keys: {e}")
            raise StorageError(f"Failed to delete keys: {e}")

    def clear(self):
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(kv))
        except SQLAlchemyError as e:
            logger.error(f"Database error clearing store: {e}")
            raise StorageError(f"Failed to clear store: {e}")
