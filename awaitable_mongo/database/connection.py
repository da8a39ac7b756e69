"""
Connection acquisition for awaitable-mongo.

``connect`` creates a Motor client, verifies it with a ``ping`` and hands back
the named database. The adapter never pools, caches or closes that client;
the returned handle is the caller's to keep for the life of the process and
to close through ``db.client.close()``.

Usage:
    from awaitable_mongo import connect

    db = await connect("mongodb://localhost:27017", "my_database")
"""

import logging
import time
from collections.abc import Mapping
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ..config import AdapterConfig
from ..constants import DEFAULT_CLIENT_OPTIONS, PING_COMMAND
from ..exceptions import InvalidArgumentError
from ..observability import get_logger as get_contextual_logger
from ..observability import log_driver_call, timed_operation
from .validation import validate_options

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


@timed_operation("connection.connect")
async def connect(
    connection_url: str,
    database_name: str,
    options: Mapping[str, Any] | None = None,
) -> AsyncIOMotorDatabase:
    """
    Connect to MongoDB and return a handle scoped to ``database_name``.

    Args:
        connection_url: MongoDB connection URI
        database_name: Name of the database to scope the handle to
        options: Keyword arguments for ``AsyncIOMotorClient``. When omitted,
            ``DEFAULT_CLIENT_OPTIONS`` are used; when given they replace the
            defaults entirely.

    Returns:
        AsyncIOMotorDatabase for ``database_name``

    Raises:
        InvalidArgumentError: If the URL or database name is not a string
        pymongo.errors.PyMongoError: The driver's own error, unmodified, if the
            client cannot be created or the server cannot be reached

    Example:
        db = await connect("mongodb://mongo:27017/", "my_database")
    """
    if not isinstance(connection_url, str):
        raise InvalidArgumentError(
            "Provided 'connection_url' must be a string.", argument="connection_url"
        )
    if not isinstance(database_name, str):
        raise InvalidArgumentError(
            "Provided 'database_name' must be a string.", argument="database_name"
        )
    validate_options(options)

    client_options = dict(DEFAULT_CLIENT_OPTIONS) if options is None else dict(options)
    start_time = time.time()
    client: AsyncIOMotorClient | None = None

    try:
        client = AsyncIOMotorClient(connection_url, **client_options)
        await client.admin.command(PING_COMMAND)
    except PyMongoError as e:
        log_driver_call(
            contextual_logger,
            "connect",
            (time.time() - start_time) * 1000,
            e,
            failure_level=logging.CRITICAL,
            database=database_name,
        )
        if client is not None:
            client.close()
        raise

    log_driver_call(
        contextual_logger,
        "connect",
        (time.time() - start_time) * 1000,
        success_level=logging.INFO,
        database=database_name,
    )
    return client[database_name]


async def connect_from_config(config: AdapterConfig | None = None) -> AsyncIOMotorDatabase:
    """
    Connect using an ``AdapterConfig`` (read from the environment when omitted).

    Raises:
        ConfigurationError: If the configuration is incomplete or invalid
    """
    if config is None:
        config = AdapterConfig()
    config.validate()
    logger.debug(f"Connecting from configuration to database '{config.db_name}'")
    return await connect(config.mongo_uri, config.db_name, config.client_options())
