"""
Awaitable collection operations.

Each operation validates its arguments synchronously, then schedules exactly
one asyncio task that performs a single delegated Motor call and settles with
the driver's result or error. Callers await the returned task:

    db = await connect("mongodb://localhost:27017", "shop")
    result = await insert_one(db, "orders", {"sku": "A-1"})
    orders = await find_many(db, "orders", {"sku": "A-1"})

Bad arguments raise ``InvalidArgumentError`` at the call site, before any task
exists. Driver errors are re-raised from the awaited task unmodified.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from bson import ObjectId
from bson.errors import BSONError
from motor.motor_asyncio import (
    AsyncIOMotorCollection,
    AsyncIOMotorCursor,
    AsyncIOMotorDatabase,
)
from pymongo.errors import PyMongoError
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult, UpdateResult

from ..constants import ID_FIELD
from ..observability import get_logger as get_contextual_logger
from ..observability import log_driver_call, operation_scope, record_operation
from .validation import (
    validate_document,
    validate_documents,
    validate_id,
    validate_ids,
    validate_options,
    validate_selector,
    validate_target,
    validate_update,
)

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)

# Errors a delegated call may settle with; anything else is a bug and is not counted
_DRIVER_FAILURES = (PyMongoError, BSONError, TypeError, ValueError)


def _record(
    operation: str, collection_key: str, start_time: float, error: Exception | None = None
) -> None:
    duration_ms = (time.time() - start_time) * 1000
    record_operation(
        f"collection.{operation}", duration_ms, success=error is None, collection_key=collection_key
    )
    log_driver_call(contextual_logger, operation, duration_ms, error)


async def _settle(
    operation: str,
    database_name: str,
    collection_key: str,
    dispatch: Callable[[], Any],
) -> Any:
    """Run one delegated driver call, recording its outcome."""
    with operation_scope(operation, database_name, collection_key):
        start_time = time.time()
        try:
            result = dispatch()
            if inspect.isawaitable(result):
                result = await result
        except _DRIVER_FAILURES as e:
            _record(operation, collection_key, start_time, e)
            raise
        _record(operation, collection_key, start_time)
        return result


def _schedule(
    operation: str,
    db: AsyncIOMotorDatabase,
    collection_key: str,
    dispatch: Callable[[AsyncIOMotorCollection], Any],
) -> asyncio.Task:
    """
    Schedule ``dispatch`` against ``db[collection_key]`` as a single asyncio task.

    Must be called after validation and from inside a running event loop.
    """
    loop = asyncio.get_running_loop()
    collection = db[collection_key]
    logger.debug(f"Dispatching {operation} on collection '{collection_key}'")
    return loop.create_task(
        _settle(operation, db.name, collection_key, lambda: dispatch(collection)),
        name=f"awaitable_mongo.{operation}",
    )


def _driver_kwargs(options: Mapping[str, Any] | None) -> dict[str, Any]:
    return dict(options) if options is not None else {}


# ============================================================================
# INSERTION
# ============================================================================


def insert_one(
    db: AsyncIOMotorDatabase,
    collection_key: str,
    document: Mapping[str, Any],
    _id: ObjectId | None = None,
    options: Mapping[str, Any] | None = None,
) -> "asyncio.Task[InsertOneResult]":
    """
    Insert a single document.

    Args:
        db: Database handle returned by ``connect``
        collection_key: Name of the collection
        document: Document to insert
        _id: Optional identifier, written into ``document`` when the task runs
            (replacing any ``_id`` it already has)
        options: Keyword arguments for ``insert_one`` (e.g. ``session``)

    Returns:
        Task settling with the driver's ``InsertOneResult``

    Raises:
        InvalidArgumentError: If any argument has the wrong type

    Example:
        result = await insert_one(db, "users", {"name": "a"})
        print(result.inserted_id)
    """
    validate_target(db, collection_key)
    validate_id(_id)
    validate_document(document, writable=_id is not None)
    validate_options(options)
    kwargs = _driver_kwargs(options)

    def dispatch(collection: AsyncIOMotorCollection) -> Any:
        if _id is not None:
            document[ID_FIELD] = _id
        return collection.insert_one(document, **kwargs)

    return _schedule("insert_one", db, collection_key, dispatch)


def insert_many(
    db: AsyncIOMotorDatabase,
    collection_key: str,
    documents: Sequence[Mapping[str, Any]],
    _ids: Sequence[ObjectId | None] | None = None,
    options: Mapping[str, Any] | None = None,
) -> "asyncio.Task[InsertManyResult]":
    """
    Insert a batch of documents.

    Identifiers in ``_ids`` are assigned by position. Extra identifiers are
    ignored; a ``None`` entry, or a document past the end of ``_ids``, keeps
    whatever ``_id`` it has (the driver generates one if it has none).

    Args:
        db: Database handle returned by ``connect``
        collection_key: Name of the collection
        documents: List of documents to insert
        _ids: Optional list of ``ObjectId`` or ``None`` entries
        options: Keyword arguments for ``insert_many`` (e.g. ``ordered=False``)

    Returns:
        Task settling with the driver's ``InsertManyResult``

    Raises:
        InvalidArgumentError: If any argument has the wrong type
    """
    validate_target(db, collection_key)
    if _ids is not None:
        validate_ids(_ids)
    validate_documents(documents, _ids)
    validate_options(options)
    kwargs = _driver_kwargs(options)

    def dispatch(collection: AsyncIOMotorCollection) -> Any:
        for document, _id in zip(documents, _ids or ()):
            if _id is not None:
                document[ID_FIELD] = _id
        return collection.insert_many(list(documents), **kwargs)

    return _schedule("insert_many", db, collection_key, dispatch)


# ============================================================================
# LOOKUP
# ============================================================================


def _validate_lookup(db: Any, collection_key: Any, selector: Any, options: Any) -> None:
    validate_target(db, collection_key)
    validate_selector(selector, allow_none=True)
    validate_options(options)


def find_one(
    db: AsyncIOMotorDatabase,
    collection_key: str,
    selector: Mapping[str, Any] | None = None,
    options: Mapping[str, Any] | None = None,
) -> "asyncio.Task[dict[str, Any] | None]":
    """
    Find the first document matching ``selector``.

    Returns:
        Task settling with the document, or ``None`` if nothing matches
    """
    _validate_lookup(db, collection_key, selector, options)
    kwargs = _driver_kwargs(options)
    return _schedule(
        "find_one", db, collection_key, lambda collection: collection.find_one(selector, **kwargs)
    )


def find(
    db: AsyncIOMotorDatabase,
    collection_key: str,
    selector: Mapping[str, Any] | None = None,
    options: Mapping[str, Any] | None = None,
) -> "asyncio.Task[AsyncIOMotorCursor]":
    """
    Open a cursor over the documents matching ``selector``.

    The cursor is lazy: no documents are fetched until it is iterated or
    ``to_list`` is awaited.

    Args:
        options: Keyword arguments for ``find`` (``projection``, ``sort``,
            ``limit``, ``skip``, ...)

    Returns:
        Task settling with an ``AsyncIOMotorCursor``
    """
    _validate_lookup(db, collection_key, selector, options)
    kwargs = _driver_kwargs(options)
    return _schedule(
        "find", db, collection_key, lambda collection: collection.find(selector, **kwargs)
    )


async def _materialize(
    collection: AsyncIOMotorCollection,
    selector: Mapping[str, Any] | None,
    kwargs: dict[str, Any],
) -> list[dict[str, Any]]:
    # A failed find() raises here, so to_list() only ever runs on a real cursor.
    cursor = collection.find(selector, **kwargs)
    return await cursor.to_list(length=None)


def find_many(
    db: AsyncIOMotorDatabase,
    collection_key: str,
    selector: Mapping[str, Any] | None = None,
    options: Mapping[str, Any] | None = None,
) -> "asyncio.Task[list[dict[str, Any]]]":
    """
    Find every document matching ``selector`` and return them as a list.

    Opens a cursor exactly as ``find`` does and consumes it fully, in the
    driver's natural order (or the order given by a ``sort`` option). If the
    cursor cannot be opened the task fails with that error and nothing is read.

    Returns:
        Task settling with the list of matching documents
    """
    _validate_lookup(db, collection_key, selector, options)
    kwargs = _driver_kwargs(options)
    return _schedule(
        "find_many",
        db,
        collection_key,
        lambda collection: _materialize(collection, selector, kwargs),
    )


# ============================================================================
# UPDATE
# ============================================================================


def _validate_update_call(
    db: Any, collection_key: Any, selector: Any, update: Any, options: Any
) -> None:
    validate_target(db, collection_key)
    validate_selector(selector)
    validate_update(update)
    validate_options(options)


def update_one(
    db: AsyncIOMotorDatabase,
    collection_key: str,
    selector: Mapping[str, Any],
    update: Mapping[str, Any],
    options: Mapping[str, Any] | None = None,
) -> "asyncio.Task[UpdateResult]":
    """
    Update the first document matching ``selector``.

    Args:
        selector: Non-null filter, e.g. ``{"_id": some_id}``
        update: Update expression, e.g. ``{"$set": {"status": "active"}}``
        options: Keyword arguments for ``update_one`` (e.g. ``upsert=True``)

    Returns:
        Task settling with the driver's ``UpdateResult``

    Raises:
        InvalidArgumentError: If ``selector`` is not a mapping
        InvalidUpdateError: If ``update`` has no recognised operator
    """
    _validate_update_call(db, collection_key, selector, update, options)
    kwargs = _driver_kwargs(options)
    return _schedule(
        "update_one",
        db,
        collection_key,
        lambda collection: collection.update_one(selector, update, **kwargs),
    )


def update_many(
    db: AsyncIOMotorDatabase,
    collection_key: str,
    selector: Mapping[str, Any],
    update: Mapping[str, Any],
    options: Mapping[str, Any] | None = None,
) -> "asyncio.Task[UpdateResult]":
    """
    Update every document matching ``selector``.

    Same preconditions as ``update_one``.
    """
    _validate_update_call(db, collection_key, selector, update, options)
    kwargs = _driver_kwargs(options)
    return _schedule(
        "update_many",
        db,
        collection_key,
        lambda collection: collection.update_many(selector, update, **kwargs),
    )


# ============================================================================
# DELETION
# ============================================================================


def delete_one(
    db: AsyncIOMotorDatabase,
    collection_key: str,
    selector: Mapping[str, Any],
    options: Mapping[str, Any] | None = None,
) -> "asyncio.Task[DeleteResult]":
    """
    Delete the first document matching ``selector``.

    Returns:
        Task settling with the driver's ``DeleteResult``
    """
    validate_target(db, collection_key)
    validate_selector(selector)
    validate_options(options)
    kwargs = _driver_kwargs(options)
    return _schedule(
        "delete_one",
        db,
        collection_key,
        lambda collection: collection.delete_one(selector, **kwargs),
    )


def delete_many(
    db: AsyncIOMotorDatabase,
    collection_key: str,
    selector: Mapping[str, Any],
    options: Mapping[str, Any] | None = None,
) -> "asyncio.Task[DeleteResult]":
    """
    Delete every document matching ``selector``.

    Zero matches is not an error: the task settles with ``deleted_count == 0``.
    """
    validate_target(db, collection_key)
    validate_selector(selector)
    validate_options(options)
    kwargs = _driver_kwargs(options)
    return _schedule(
        "delete_many",
        db,
        collection_key,
        lambda collection: collection.delete_many(selector, **kwargs),
    )
