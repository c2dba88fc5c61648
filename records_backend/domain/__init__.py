from .errors import NotFoundError, RecordError, StorageError, ValidationError
from .records import PostRecordInput, Record, UpdateRecordInput, UPDATABLE_FIELDS

__all__ = [
    "NotFoundError",
    "RecordError",
    "StorageError",
    "ValidationError",
    "PostRecordInput",
    "Record",
    "UpdateRecordInput",
    "UPDATABLE_FIELDS",
]
