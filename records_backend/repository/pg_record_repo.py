"""
PostgreSQL engine for the records repository.

Uses a psycopg ``ConnectionPool`` opened once at startup with autocommit
connections; each operation borrows a connection for one statement.
"""
from __future__ import annotations

import logging
from typing import List

import psycopg
from psycopg import sql
from psycopg_pool import ConnectionPool

from ..domain.errors import NotFoundError, StorageError
from ..domain.records import PostRecordInput, Record, UpdateRecordInput
from .base import RecordRepository

logger = logging.getLogger(__name__)

DDL = """
CREATE TABLE IF NOT EXISTS records (
    id BIGSERIAL PRIMARY KEY,
    title TEXT NOT NULL,
    artist TEXT NOT NULL,
    price INTEGER NOT NULL
)
"""

_RETURNING = " RETURNING id, title, artist, price"


class PostgresRecordRepository(RecordRepository):
    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def _fetchone(self, query, params=(), action: str = "query"):
        try:
            with self.pool.connection() as conn:
                return conn.execute(query, params).fetchone()
        except (psycopg.errors.InvalidTextRepresentation, psycopg.errors.NumericValueOutOfRange):
            # an id that cannot be cast to the key type matches no row
            return None
        except psycopg.Error as e:
            logger.error(f"Failed to {action}: {e}")
            raise StorageError(str(e)) from e

    def ensure_schema(self) -> None:
        try:
            with self.pool.connection() as conn:
                conn.execute(DDL)
        except psycopg.Error as e:
            logger.error(f"Failed to ensure records schema: {e}")
            raise StorageError(str(e)) from e

    def create(self, data: PostRecordInput) -> Record:
        row = self._fetchone(
            "INSERT INTO records (title, artist, price) VALUES (%s, %s, %s)" + _RETURNING,
            (data.title, data.artist, data.price),
            action="create record",
        )
        if row is None:
            raise StorageError("insert returned no row")
        rec = Record.from_row(row)
        logger.info(f"Created record #{rec.id}")
        return rec

    def read(self) -> List[Record]:
        try:
            with self.pool.connection() as conn:
                rows = conn.execute("SELECT id, title, artist, price FROM records ORDER BY id").fetchall()
        except psycopg.Error as e:
            logger.error(f"Failed to list records: {e}")
            raise StorageError(str(e)) from e
        return [Record.from_row(r) for r in rows]

    def read_one(self, record_id: str) -> Record:
        row = self._fetchone(
            "SELECT id, title, artist, price FROM records WHERE id = %s",
            (record_id,),
            action=f"read record {record_id}",
        )
        if row is None:
            raise NotFoundError(record_id)
        return Record.from_row(row)

    def update(self, record_id: str, data: UpdateRecordInput) -> Record:
        changes = data.changes()
        if not changes:
            return self.read_one(record_id)
        query = sql.SQL("UPDATE records SET {} WHERE id = %s" + _RETURNING).format(
            sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(col)) for col in changes
            )
        )
        row = self._fetchone(
            query,
            [*changes.values(), record_id],
            action=f"update record {record_id}",
        )
        if row is None:
            raise NotFoundError(record_id)
        logger.info(f"Updated record #{record_id}: {sorted(changes)}")
        return Record.from_row(row)

    def delete(self, record_id: str) -> str:
        row = self._fetchone(
            "DELETE FROM records WHERE id = %s RETURNING id",
            (record_id,),
            action=f"delete record {record_id}",
        )
        if row is None:
            raise NotFoundError(record_id)
        logger.info(f"Deleted record #{record_id}")
        return str(row[0])

    def close(self) -> None:
        self.pool.close()
