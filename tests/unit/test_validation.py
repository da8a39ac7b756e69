"""
Unit tests for argument validation.

Tests handle, collection key, document, identifier, selector and update
expression checks.
"""

from collections import OrderedDict
from types import MappingProxyType
from unittest.mock import MagicMock

import bson
import pytest
from bson import ObjectId
from bson.raw_bson import RawBSONDocument

from awaitable_mongo.constants import UPDATE_OPERATORS
from awaitable_mongo.database.validation import (
    is_valid_update,
    validate_collection_key,
    validate_database,
    validate_document,
    validate_documents,
    validate_id,
    validate_ids,
    validate_options,
    validate_selector,
    validate_update,
)
from awaitable_mongo.exceptions import InvalidArgumentError, InvalidUpdateError


@pytest.mark.unit
class TestTargetValidation:
    """Test database handle and collection key checks."""

    def test_validate_database_accepts_motor_database(self, mock_database):
        """Test that a Motor database handle passes."""
        validate_database(mock_database)

    @pytest.mark.parametrize("db", [None, "test_db", {}, MagicMock()])
    def test_validate_database_rejects_other_types(self, db):
        """Test that anything other than a Motor database is rejected."""
        with pytest.raises(InvalidArgumentError, match="AsyncIOMotorDatabase") as exc_info:
            validate_database(db)

        assert exc_info.value.argument == "db"

    def test_validate_collection_key_accepts_string(self):
        """Test that string keys pass, including the empty string."""
        validate_collection_key("users")
        validate_collection_key("")

    @pytest.mark.parametrize("key", [None, 1, b"users", ["users"]])
    def test_validate_collection_key_rejects_non_strings(self, key):
        """Test that non-string keys are rejected."""
        with pytest.raises(InvalidArgumentError, match="must be a string"):
            validate_collection_key(key)


@pytest.mark.unit
class TestDocumentValidation:
    """Test document and identifier checks."""

    def test_validate_document_accepts_mappings(self):
        """Test that any mapping passes when no _id will be written."""
        validate_document({})
        validate_document(OrderedDict(name="a"))
        validate_document(MappingProxyType({"name": "a"}))
        validate_document(RawBSONDocument(bson.encode({"name": "a"})))

    @pytest.mark.parametrize("document", [None, [("name", "a")], "doc"])
    def test_validate_document_rejects_non_mappings(self, document):
        """Test that values that are not documents are rejected."""
        with pytest.raises(InvalidArgumentError, match="must be a mapping"):
            validate_document(document)

    def test_validate_document_writable_requires_mutable_mapping(self):
        """Test that a document receiving an _id must accept item assignment."""
        validate_document({"name": "a"}, writable=True)

        with pytest.raises(InvalidArgumentError, match="mutable mapping"):
            validate_document(MappingProxyType({"name": "a"}), writable=True)

    def test_validate_documents_accepts_list_and_tuple(self):
        """Test that lists and tuples of documents pass."""
        validate_documents([])
        validate_documents([{"name": "a"}, {"name": "b"}])
        validate_documents(({"name": "a"},))

    def test_validate_documents_rejects_non_sequence(self):
        """Test that a single document is not accepted as a batch."""
        with pytest.raises(InvalidArgumentError, match="is not a list") as exc_info:
            validate_documents({"name": "a"})

        assert exc_info.value.argument == "documents"

    def test_validate_documents_reports_bad_entry(self):
        """Test that the offending entry position is named."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_documents([{"name": "a"}, "b"])

        assert exc_info.value.argument == "documents[1]"

    def test_validate_documents_checks_mutability_by_position(self):
        """Test that only entries paired with an ObjectId must be mutable."""
        read_only = MappingProxyType({"name": "a"})

        validate_documents([read_only, {"name": "b"}], [None, ObjectId()])
        validate_documents([{"name": "b"}, read_only], [ObjectId()])

        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_documents([{"name": "b"}, read_only], [None, ObjectId()])

        assert exc_info.value.argument == "documents[1]"

    def test_validate_id(self):
        """Test that ObjectId and None pass and other identifiers do not."""
        validate_id(None)
        validate_id(ObjectId())

        with pytest.raises(InvalidArgumentError, match="ObjectId"):
            validate_id("507f1f77bcf86cd799439011")

    def test_validate_ids_accepts_object_ids_and_none(self):
        """Test that a list mixing ObjectId and None passes."""
        validate_ids([ObjectId(), None, ObjectId()])
        validate_ids([])

    def test_validate_ids_rejects_non_sequence(self):
        """Test that a bare ObjectId is not accepted as a list."""
        with pytest.raises(InvalidArgumentError, match="is not a list of ObjectId"):
            validate_ids(ObjectId())

    def test_validate_ids_rejects_foreign_entry(self):
        """Test that any entry other than ObjectId or None is rejected."""
        with pytest.raises(InvalidArgumentError, match="exclusively") as exc_info:
            validate_ids([ObjectId(), 42])

        assert exc_info.value.context["index"] == 1


@pytest.mark.unit
class TestSelectorAndOptionsValidation:
    """Test selector and driver option checks."""

    def test_validate_selector_accepts_mappings(self):
        """Test that mappings, including empty ones, pass."""
        validate_selector({})
        validate_selector({"status": "active"})

    def test_validate_selector_none_only_when_allowed(self):
        """Test that None is accepted only for lookups."""
        validate_selector(None, allow_none=True)

        with pytest.raises(InvalidArgumentError, match="non-null mapping"):
            validate_selector(None)

    @pytest.mark.parametrize("selector", ["status", 1, [("status", "active")]])
    def test_validate_selector_rejects_non_mappings(self, selector):
        """Test that non-mapping selectors are rejected."""
        with pytest.raises(InvalidArgumentError, match="selector"):
            validate_selector(selector, allow_none=True)

    def test_validate_options(self):
        """Test that options must be a mapping or None."""
        validate_options(None)
        validate_options({"upsert": True})

        with pytest.raises(InvalidArgumentError, match="options"):
            validate_options(["upsert"])


@pytest.mark.unit
class TestUpdateValidation:
    """Test update expression checks."""

    @pytest.mark.parametrize("operator", sorted(UPDATE_OPERATORS))
    def test_every_operator_is_accepted(self, operator):
        """Test that each allowed operator with a mapping value is accepted."""
        assert is_valid_update({operator: {"field": 1}})
        validate_update({operator: {"field": 1}})

    def test_operator_set_is_fixed(self):
        """Test the exact set of accepted operators."""
        assert UPDATE_OPERATORS == frozenset(
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

    @pytest.mark.parametrize(
        "update",
        [
            {"foo": {"bar": 1}},
            {"$push": {"tags": "x"}},
            {"$set": None},
            {"$set": 1},
            {"$set": "name"},
            {},
            None,
            [("$set", {"a": 1})],
        ],
    )
    def test_invalid_updates_are_rejected(self, update):
        """Test that expressions without an operator mapping to a mapping are rejected."""
        assert not is_valid_update(update)

        with pytest.raises(InvalidUpdateError) as exc_info:
            validate_update(update)

        for operator in UPDATE_OPERATORS:
            assert operator in exc_info.value.message
        assert exc_info.value.operators == sorted(UPDATE_OPERATORS)

    def test_one_valid_operator_is_enough(self):
        """Test that other keys are tolerated next to a valid operator."""
        assert is_valid_update({"$set": {"a": 1}, "foo": 1})
        assert is_valid_update({"$set": None, "$inc": {"count": 1}})

    def test_invalid_update_error_is_type_error(self):
        """Test that update failures can be caught as TypeError."""
        with pytest.raises(TypeError):
            validate_update({"foo": {"bar": 1}})
