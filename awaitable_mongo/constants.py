"""
Constants for awaitable-mongo.

Shared defaults and the update-operator allow-list live here so every
operation reads them from a single place.
"""

from typing import Final

# ============================================================================
# CONNECTION CONSTANTS
# ============================================================================

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

DEFAULT_APP_NAME: Final[str] = "awaitable-mongo"
"""Application name reported to the server in the connection handshake."""

DEFAULT_CLIENT_OPTIONS: Final[dict] = {
    "serverSelectionTimeoutMS": DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    "appname": DEFAULT_APP_NAME,
    "retryWrites": True,
    "retryReads": True,
}
"""Client keyword arguments used when ``connect`` receives no options."""

PING_COMMAND: Final[str] = "ping"
"""Admin command used to verify a freshly created client."""

# ============================================================================
# DOCUMENT CONSTANTS
# ============================================================================

ID_FIELD: Final[str] = "_id"
"""Field holding a document's unique identifier."""

# ============================================================================
# UPDATE VALIDATION CONSTANTS
# ============================================================================

UPDATE_OPERATORS: Final[frozenset[str]] = frozenset(
    {
        "$set",
        "$setOrInsert",
        "$unset",
        "$currentDate",
        "$inc",
        "$min",
        "$max",
        "$mul",
        "$rename",
    }
)
"""Top-level keys accepted in an update expression."""

# ============================================================================
# METRICS CONSTANTS
# ============================================================================

MAX_METRICS: Final[int] = 10000
"""Maximum number of distinct metric keys kept before LRU eviction."""
