"""
Storage-agnostic contract for record persistence.

Routes only depend on this interface, so the engine behind it (SQLite,
PostgreSQL, or a stub in tests) can be swapped without touching them.
"""
from __future__ import annotations

import abc
from typing import List

from ..domain.records import PostRecordInput, Record, UpdateRecordInput


class RecordRepository(abc.ABC):
    """
    CRUD over the ``records`` table.

    Every operation issues a single auto-committed statement and raises
    ``NotFoundError`` or ``StorageError`` from ``domain.errors``; raw driver
    errors never escape.
    """

    @abc.abstractmethod
    def create(self, data: PostRecordInput) -> Record:
        """Insert a row and return it with its store-generated id."""

    @abc.abstractmethod
    def read(self) -> List[Record]:
        """All records ordered by id; empty list for an empty table."""

    @abc.abstractmethod
    def read_one(self, record_id: str) -> Record:
        ...

    @abc.abstractmethod
    def update(self, record_id: str, data: UpdateRecordInput) -> Record:
        """Apply the fields present in ``data`` and return the updated row."""

    @abc.abstractmethod
    def delete(self, record_id: str) -> str:
        """Remove the row and return its id."""

    def ensure_schema(self) -> None:
        pass

    def close(self) -> None:
        pass
