"""
Database layer.

Connection acquisition, argument validation and the awaitable collection
operations.
"""

from .connection import connect, connect_from_config
from .operations import (
    delete_many,
    delete_one,
    find,
    find_many,
    find_one,
    insert_many,
    insert_one,
    update_many,
    update_one,
)
from .validation import is_valid_update, validate_update

__all__ = [
    # Connection
    "connect",
    "connect_from_config",
    # Insertion
    "insert_one",
    "insert_many",
    # Lookup
    "find_one",
    "find",
    "find_many",
    # Update
    "update_one",
    "update_many",
    # Deletion
    "delete_one",
    "delete_many",
    # Validation
    "is_valid_update",
    "validate_update",
]
