"""Error taxonomy shared by the repository and route layers.

Repositories translate raw driver errors into these kinds; routes only ever
look at the kind to pick a status code.
"""
from __future__ import annotations


class RecordError(Exception):
    status_code = 500


class ValidationError(RecordError):
    """Malformed or incomplete request body."""

    status_code = 400


class NotFoundError(RecordError):
    """No row matches the requested id."""

    status_code = 404

    def __init__(self, record_id: str | None = None, msg: str = "record not found"):
        super().__init__(msg)
        self.record_id = record_id


class StorageError(RecordError):
    """Connection or query failure in the underlying store."""

    status_code = 500
