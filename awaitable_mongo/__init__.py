"""
awaitable-mongo - awaitable MongoDB CRUD helpers

Validates arguments up front and turns each Motor collection call into a
single asyncio task.
"""

from .config import AdapterConfig
from .constants import UPDATE_OPERATORS
from .database import (
    connect,
    connect_from_config,
    delete_many,
    delete_one,
    find,
    find_many,
    find_one,
    insert_many,
    insert_one,
    is_valid_update,
    update_many,
    update_one,
)
from .exceptions import (
    AwaitableMongoError,
    ConfigurationError,
    InvalidArgumentError,
    InvalidUpdateError,
)

__version__ = "0.1.0"

__all__ = [
    # Connection
    "connect",
    "connect_from_config",
    "AdapterConfig",
    # Operations
    "insert_one",
    "insert_many",
    "find_one",
    "find",
    "find_many",
    "update_one",
    "update_many",
    "delete_one",
    "delete_many",
    # Validation
    "UPDATE_OPERATORS",
    "is_valid_update",
    # Errors
    "AwaitableMongoError",
    "InvalidArgumentError",
    "InvalidUpdateError",
    "ConfigurationError",
]
