"""
Argument validation for awaitable-mongo operations.

Every check here runs synchronously, before an operation schedules its task,
so a bad argument surfaces as an exception at the call site and the driver is
never contacted.

Checks:
- the database handle is a Motor database
- the collection key is a string
- documents are mappings (mutable where an ``_id`` is supplied), document
  batches are sequences of them
- identifiers are ``ObjectId`` values (or ``None`` in a batch)
- selectors are mappings
- update expressions contain a recognised update operator
"""

import logging
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..constants import UPDATE_OPERATORS
from ..exceptions import InvalidArgumentError, InvalidUpdateError

logger = logging.getLogger(__name__)

_SEQUENCE_TYPES = (list, tuple)


def _type_name(value: Any) -> str:
    return type(value).__name__


def validate_database(db: Any) -> None:
    """
    Ensure ``db`` is a Motor database handle.

    Raises:
        InvalidArgumentError: If ``db`` is not an ``AsyncIOMotorDatabase``
    """
    if not isinstance(db, AsyncIOMotorDatabase):
        raise InvalidArgumentError(
            f"Provided argument 'db' is not an instance of AsyncIOMotorDatabase, "
            f"got {_type_name(db)}. Please provide a database obtained from connect().",
            argument="db",
        )


def validate_collection_key(collection_key: Any) -> None:
    """
    Ensure ``collection_key`` is a string.

    Raises:
        InvalidArgumentError: If ``collection_key`` is not a ``str``
    """
    if not isinstance(collection_key, str):
        raise InvalidArgumentError(
            f"Provided 'collection_key' must be a string, got {_type_name(collection_key)}.",
            argument="collection_key",
        )


def validate_target(db: Any, collection_key: Any) -> None:
    """Validate the database handle and collection key shared by all operations."""
    validate_database(db)
    validate_collection_key(collection_key)


def validate_document(document: Any, argument: str = "document", writable: bool = False) -> None:
    """
    Ensure ``document`` is a mapping, and a mutable one when ``writable``.

    Only documents that are about to receive a supplied ``_id`` need to be
    writable; anything else is handed to the driver as-is.

    Raises:
        InvalidArgumentError: If ``document`` is not a mapping, or cannot take
            an ``_id`` field when ``writable`` is set
    """
    if writable and not isinstance(document, MutableMapping):
        raise InvalidArgumentError(
            f"Provided argument '{argument}' must be a mutable mapping to receive an _id, "
            f"got {_type_name(document)}.",
            argument=argument,
        )
    if not isinstance(document, Mapping):
        raise InvalidArgumentError(
            f"Provided argument '{argument}' must be a mapping, got {_type_name(document)}.",
            argument=argument,
        )


def validate_documents(documents: Any, _ids: Sequence[Any] | None = None) -> None:
    """
    Ensure ``documents`` is a list (or tuple) of mappings.

    Entries paired with a non-``None`` identifier in ``_ids`` must be mutable.

    Raises:
        InvalidArgumentError: If ``documents`` is not a sequence of documents
    """
    if not isinstance(documents, _SEQUENCE_TYPES):
        raise InvalidArgumentError(
            f"Provided argument 'documents' is not a list, got {_type_name(documents)}.",
            argument="documents",
        )
    _ids = _ids or ()
    for idx, document in enumerate(documents):
        writable = idx < len(_ids) and _ids[idx] is not None
        validate_document(document, argument=f"documents[{idx}]", writable=writable)


def validate_id(_id: Any) -> None:
    """
    Ensure an optional identifier is an ``ObjectId``.

    ``None`` means "let the driver generate one" and is accepted.

    Raises:
        InvalidArgumentError: If ``_id`` is neither ``None`` nor an ``ObjectId``
    """
    if _id is not None and not isinstance(_id, ObjectId):
        raise InvalidArgumentError(
            f"Provided argument '_id' is not an instance of ObjectId, got {_type_name(_id)}.",
            argument="_id",
        )


def validate_ids(_ids: Any) -> None:
    """
    Ensure ``_ids`` is a list (or tuple) containing only ``ObjectId`` and ``None``.

    Raises:
        InvalidArgumentError: If ``_ids`` is not a sequence or holds another type
    """
    if not isinstance(_ids, _SEQUENCE_TYPES):
        raise InvalidArgumentError(
            f"Provided argument '_ids' is not a list of ObjectId, got {_type_name(_ids)}. "
            f"Please provide a list containing exclusively ObjectId instances and None.",
            argument="_ids",
        )
    for idx, _id in enumerate(_ids):
        if _id is not None and not isinstance(_id, ObjectId):
            raise InvalidArgumentError(
                f"Provided argument '_ids' is not a list containing exclusively "
                f"ObjectId instances and None: entry {idx} is {_type_name(_id)}.",
                argument="_ids",
                context={"index": idx},
            )


def validate_selector(selector: Any, allow_none: bool = False) -> None:
    """
    Ensure ``selector`` is a mapping.

    Args:
        selector: Query filter to check
        allow_none: Accept ``None`` as "match every document"

    Raises:
        InvalidArgumentError: If ``selector`` is not a mapping
    """
    if selector is None and allow_none:
        return
    if not isinstance(selector, Mapping):
        raise InvalidArgumentError(
            f"Provided 'selector' must be a non-null mapping, got {_type_name(selector)}.",
            argument="selector",
        )


def validate_options(options: Any) -> None:
    """
    Ensure driver options are a mapping of keyword arguments, or ``None``.

    Raises:
        InvalidArgumentError: If ``options`` is neither ``None`` nor a mapping
    """
    if options is not None and not isinstance(options, Mapping):
        raise InvalidArgumentError(
            f"Provided 'options' must be a mapping of driver keyword arguments, "
            f"got {_type_name(options)}.",
            argument="options",
        )


def is_valid_update(update: Any) -> bool:
    """
    Return True if ``update`` has at least one recognised operator with a mapping value.

    Unrecognised keys alongside a recognised one are left for the server to judge.
    """
    if not isinstance(update, Mapping):
        return False
    return any(
        key in UPDATE_OPERATORS and isinstance(value, Mapping) for key, value in update.items()
    )


def validate_update(update: Any) -> None:
    """
    Ensure ``update`` is an update expression the adapter will forward.

    Raises:
        InvalidUpdateError: If no top-level key is a recognised operator mapping
            to a non-null mapping
    """
    if not is_valid_update(update):
        operators = ", ".join(sorted(UPDATE_OPERATORS))
        logger.debug(f"Rejected update expression of type {_type_name(update)}")
        raise InvalidUpdateError(
            f"Provided 'update' must be a mapping with a key named as one of the valid "
            f"update operators ({operators}). The value of that key must be a non-null "
            f"mapping.",
            operators=UPDATE_OPERATORS,
        )
