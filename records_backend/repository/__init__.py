"""Repository layer: DB access for records (SQLite / PostgreSQL).

Keep functions thin and focused, so routes never see SQL strings or raw
driver errors.
"""
from __future__ import annotations

from .base import RecordRepository
from .record_repo import SqliteRecordRepository
from .pg_record_repo import PostgresRecordRepository
from ..db import DBConfig, connect_sqlite, open_postgres_pool


def open_repository(cfg: DBConfig) -> RecordRepository:
    """Build the repository for the configured engine and make sure its table exists."""
    if cfg.driver == "postgres":
        repo: RecordRepository = PostgresRecordRepository(open_postgres_pool(cfg))
    else:
        repo = SqliteRecordRepository(connect_sqlite(cfg.path))
    repo.ensure_schema()
    return repo


__all__ = [
    "RecordRepository",
    "SqliteRecordRepository",
    "PostgresRecordRepository",
    "open_repository",
]
