from __future__ import annotations

import logging
import sqlite3
from sqlite3 import Connection
from typing import List

from ..domain.errors import NotFoundError, StorageError
from ..domain.records import PostRecordInput, Record, UpdateRecordInput
from .base import RecordRepository

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, artist, price"


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS records (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            artist TEXT NOT NULL,
            price INTEGER NOT NULL
        )
        """
    )


def insert(conn: Connection, title: str, artist: str, price: int):
    # fetchall drains the RETURNING cursor so the autocommit statement completes
    rows = conn.execute(
        f"INSERT INTO records(title, artist, price) VALUES(?,?,?) RETURNING {_COLUMNS}",
        (title, artist, price),
    ).fetchall()
    return rows[0]


def list_all(conn: Connection):
    return conn.execute(f"SELECT {_COLUMNS} FROM records ORDER BY id").fetchall()


def get_one(conn: Connection, record_id: str):
    return conn.execute(f"SELECT {_COLUMNS} FROM records WHERE id=?", (record_id,)).fetchone()


def update_fields(conn: Connection, record_id: str, changes: dict):
    """UPDATE only the given columns; returns the updated row or None.

    Column names come from ``UpdateRecordInput.changes()`` (a fixed whitelist),
    values and the id are always bound parameters.
    """
    sets = ", ".join(f"{col}=?" for col in changes)
    params = list(changes.values()) + [record_id]
    rows = conn.execute(f"UPDATE records SET {sets} WHERE id=? RETURNING {_COLUMNS}", params).fetchall()
    return rows[0] if rows else None


def delete_by_id(conn: Connection, record_id: str) -> int:
    cur = conn.execute("DELETE FROM records WHERE id=?", (record_id,))
    return cur.rowcount


class SqliteRecordRepository(RecordRepository):
    """Repository over a single process-scoped SQLite connection (autocommit)."""

    def __init__(self, conn: Connection):
        self.conn = conn

    def ensure_schema(self) -> None:
        try:
            ensure_schema(self.conn)
        except sqlite3.Error as e:
            logger.error(f"Failed to ensure records schema: {e}")
            raise StorageError(str(e)) from e

    def create(self, data: PostRecordInput) -> Record:
        try:
            row = insert(self.conn, data.title, data.artist, data.price)
        except sqlite3.Error as e:
            logger.error(f"Failed to create record: {e}")
            raise StorageError(str(e)) from e
        rec = Record.from_row(row)
        logger.info(f"Created record #{rec.id}")
        return rec

    def read(self) -> List[Record]:
        try:
            rows = list_all(self.conn)
        except sqlite3.Error as e:
            logger.error(f"Failed to list records: {e}")
            raise StorageError(str(e)) from e
        return [Record.from_row(r) for r in rows]

    def read_one(self, record_id: str) -> Record:
        try:
            row = get_one(self.conn, record_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to read record {record_id}: {e}")
            raise StorageError(str(e)) from e
        if row is None:
            raise NotFoundError(record_id)
        return Record.from_row(row)

    def update(self, record_id: str, data: UpdateRecordInput) -> Record:
        changes = data.changes()
        if not changes:
            return self.read_one(record_id)
        try:
            row = update_fields(self.conn, record_id, changes)
        except sqlite3.Error as e:
            logger.error(f"Failed to update record {record_id}: {e}")
            raise StorageError(str(e)) from e
        if row is None:
            raise NotFoundError(record_id)
        logger.info(f"Updated record #{record_id}: {sorted(changes)}")
        return Record.from_row(row)

    def delete(self, record_id: str) -> str:
        try:
            affected = delete_by_id(self.conn, record_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to delete record {record_id}: {e}")
            raise StorageError(str(e)) from e
        if affected == 0:
            raise NotFoundError(record_id)
        logger.info(f"Deleted record #{record_id}")
        return record_id

    def close(self) -> None:
        self.conn.close()
