"""
Configuration management for awaitable-mongo.

Configuration is optional: ``connect`` can always be called with explicit
arguments. ``AdapterConfig`` only gathers them from the environment.
"""

import os
from typing import Any

from .constants import DEFAULT_APP_NAME, DEFAULT_SERVER_SELECTION_TIMEOUT_MS
from .exceptions import ConfigurationError


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            config_key=name,
            config_value=raw,
        ) from None


class AdapterConfig:
    """
    Connection configuration with environment variable support.

    Example:
        # Using environment variables
        config = AdapterConfig()
        db = await connect_from_config(config)

        # Or using direct parameters
        config = AdapterConfig(mongo_uri="mongodb://localhost:27017", db_name="my_db")
    """

    def __init__(
        self,
        mongo_uri: str | None = None,
        db_name: str | None = None,
        server_selection_timeout_ms: int | None = None,
        app_name: str | None = None,
    ):
        """
        Initialize configuration.

        Args:
            mongo_uri: MongoDB connection URI (defaults to MONGO_URI env var)
            db_name: Database name (defaults to DB_NAME env var)
            server_selection_timeout_ms: Server selection timeout in ms (defaults to
                MONGO_SERVER_SELECTION_TIMEOUT_MS or 5000)
            app_name: Application name sent to the server (defaults to
                MONGO_APP_NAME or "awaitable-mongo")
        """
        self.mongo_uri = mongo_uri if mongo_uri is not None else os.getenv("MONGO_URI", "")
        self.db_name = db_name if db_name is not None else os.getenv("DB_NAME", "")
        if server_selection_timeout_ms is None:
            server_selection_timeout_ms = _env_int(
                "MONGO_SERVER_SELECTION_TIMEOUT_MS", DEFAULT_SERVER_SELECTION_TIMEOUT_MS
            )
        self.server_selection_timeout_ms = server_selection_timeout_ms
        if app_name is None:
            app_name = os.getenv("MONGO_APP_NAME", DEFAULT_APP_NAME)
        self.app_name = app_name

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.mongo_uri:
            raise ConfigurationError(
                "mongo_uri is required (set MONGO_URI environment variable or pass directly)",
                config_key="mongo_uri",
            )

        if not self.db_name:
            raise ConfigurationError(
                "db_name is required (set DB_NAME environment variable or pass directly)",
                config_key="db_name",
            )

        if self.server_selection_timeout_ms < 1:
            raise ConfigurationError(
                f"server_selection_timeout_ms must be >= 1, got "
                f"{self.server_selection_timeout_ms}",
                config_key="server_selection_timeout_ms",
                config_value=self.server_selection_timeout_ms,
            )

    def client_options(self) -> dict[str, Any]:
        """Keyword arguments for ``AsyncIOMotorClient``."""
        return {
            "serverSelectionTimeoutMS": self.server_selection_timeout_ms,
            "appname": self.app_name,
            "retryWrites": True,
            "retryReads": True,
        }
