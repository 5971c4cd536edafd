"""
Record store implementations and their error types.
"""

from .errors import ConstraintError, DuplicateKeyError, StoreError, StoreUnavailable
from .memory_store import InMemoryRecordStore
from .store import BaseRecordStore, RecordSnapshot, check_storage_constraints

__all__ = [
    "BaseRecordStore",
    "RecordSnapshot",
    "InMemoryRecordStore",
    "check_storage_constraints",
    "StoreError",
    "DuplicateKeyError",
    "ConstraintError",
    "StoreUnavailable",
]
