"""
Unit tests for schema closing and validator building.
"""

import copy

import pytest

from mongoat.model import ValidationDescriptor, build_validator, close_schema


@pytest.mark.unit
class TestCloseSchema:
    """Test recursive closing of object nodes."""

    def test_closes_top_level_object(self):
        """Test that an object node gets additionalProperties False."""
        node = {"bsonType": "object", "properties": {"a": {"bsonType": "string"}}}
        close_schema(node)
        assert node["additionalProperties"] is False

    def test_leaves_scalar_nodes_untouched(self):
        """Test that non-object nodes gain no additionalProperties key."""
        node = {"bsonType": "object", "properties": {"a": {"bsonType": "string"}}}
        close_schema(node)
        assert "additionalProperties" not in node["properties"]["a"]

    def test_closes_nested_objects_at_every_depth(self, user_schema):
        """Test that nested objects are closed."""
        close_schema(user_schema)
        address = user_schema["properties"]["address"]
        assert address["additionalProperties"] is False
        assert address["properties"]["geo"]["additionalProperties"] is False

    def test_closes_array_item_objects(self, user_schema):
        """Test that object descriptors under items are closed."""
        close_schema(user_schema)
        assert user_schema["properties"]["tags"]["items"]["additionalProperties"] is False
        assert "additionalProperties" not in user_schema["properties"]["tags"]

    def test_closes_tuple_items(self):
        """Test that each descriptor of a list-valued items is visited."""
        node = {
            "bsonType": "array",
            "items": [{"bsonType": "object", "properties": {}}, {"bsonType": "int"}],
        }
        close_schema(node)
        assert node["items"][0]["additionalProperties"] is False
        assert "additionalProperties" not in node["items"][1]

    def test_bson_type_list_containing_object(self):
        """Test that a node typed ["object", "null"] is treated as an object."""
        node = {"bsonType": ["object", "null"], "properties": {}}
        close_schema(node)
        assert node["additionalProperties"] is False

    def test_explicitly_open_node_stays_open(self):
        """Test that additionalProperties True is preserved."""
        node = {
            "bsonType": "object",
            "properties": {"meta": {"bsonType": "object", "additionalProperties": True}},
        }
        close_schema(node)
        assert node["properties"]["meta"]["additionalProperties"] is True

    def test_returns_same_node(self):
        """Test that the node is mutated in place and returned."""
        node = {"bsonType": "object"}
        assert close_schema(node) is node

    def test_idempotent(self, user_schema):
        """Test that closing a closed schema changes nothing."""
        once = close_schema(copy.deepcopy(user_schema))
        twice = close_schema(copy.deepcopy(once))
        assert once == twice

    def test_node_without_type(self):
        """Test that an untyped node is left alone."""
        node = {"description": "anything"}
        close_schema(node)
        assert node == {"description": "anything"}


@pytest.mark.unit
class TestBuildValidator:
    """Test validator descriptor construction."""

    def test_returns_descriptor(self, user_schema):
        """Test the result type and pinned action/level."""
        descriptor = build_validator(user_schema)
        assert isinstance(descriptor, ValidationDescriptor)
        assert descriptor.validation_action == "error"
        assert descriptor.validation_level == "strict"

    def test_injects_identity_field(self, user_schema):
        """Test that _id is declared as objectId."""
        schema = build_validator(user_schema).json_schema
        assert schema["properties"]["_id"] == {
            "bsonType": "objectId",
            "description": "Unique identifier of the document in the database",
        }

    def test_identity_overrides_caller_descriptor(self):
        """Test that a caller-declared _id is replaced."""
        schema = build_validator(
            {"bsonType": "object", "properties": {"_id": {"bsonType": "string"}}}
        ).json_schema
        assert schema["properties"]["_id"]["bsonType"] == "objectId"

    def test_required_appends_identity(self, user_schema):
        """Test that _id is appended after the caller's required fields."""
        descriptor = build_validator(user_schema)
        assert descriptor.json_schema["required"] == ["username", "password", "mail", "_id"]
        assert descriptor.required == ["username", "password", "mail", "_id"]

    def test_required_without_caller_fields(self):
        """Test that a schema without required gets only _id."""
        schema = build_validator({"bsonType": "object", "properties": {}}).json_schema
        assert schema["required"] == ["_id"]

    def test_required_deduplicated(self):
        """Test that listing _id explicitly does not duplicate it."""
        schema = build_validator(
            {"bsonType": "object", "properties": {}, "required": ["_id", "name"]}
        ).json_schema
        assert schema["required"] == ["_id", "name"]

    def test_top_level_closed(self, user_schema):
        """Test that the top-level schema and nested objects are closed."""
        schema = build_validator(user_schema).json_schema
        assert schema["bsonType"] == "object"
        assert schema["additionalProperties"] is False
        assert schema["properties"]["address"]["additionalProperties"] is False

    def test_caller_schema_not_mutated(self, user_schema):
        """Test that the input schema is left as given."""
        original = copy.deepcopy(user_schema)
        build_validator(user_schema)
        assert user_schema == original

    def test_preserves_other_top_level_keys(self):
        """Test that keys such as description survive."""
        schema = build_validator(
            {"bsonType": "object", "description": "Users", "properties": {}}
        ).json_schema
        assert schema["description"] == "Users"

    def test_extra_validation_merged(self, user_schema):
        """Test that query expressions sit next to $jsonSchema."""
        extra = {"$expr": {"$gt": ["$age", 0]}}
        descriptor = build_validator(user_schema, extra_validation=extra)
        assert descriptor.validator["$expr"] == extra["$expr"]
        assert "$jsonSchema" in descriptor.validator

    def test_deterministic(self, user_schema):
        """Test that equal inputs build equal descriptors."""
        assert build_validator(user_schema) == build_validator(copy.deepcopy(user_schema))


@pytest.mark.unit
class TestValidationDescriptor:
    """Test rendering of the collMod command."""

    def test_to_command(self, user_schema):
        """Test the collMod document layout."""
        descriptor = build_validator(user_schema)
        command = descriptor.to_command("users")
        assert list(command) == ["collMod", "validator", "validationAction", "validationLevel"]
        assert command["collMod"] == "users"
        assert command["validator"] == descriptor.validator
        assert command["validationAction"] == "error"
        assert command["validationLevel"] == "strict"

    def test_to_command_returns_copy(self, user_schema):
        """Test that mutating the command leaves the descriptor intact."""
        descriptor = build_validator(user_schema)
        command = descriptor.to_command("users")
        command["validator"]["$jsonSchema"]["required"].append("extra")
        assert "extra" not in descriptor.json_schema["required"]

    def test_to_dict(self, user_schema):
        """Test the dictionary form used by the CLI."""
        data = build_validator(user_schema).to_dict()
        assert set(data) == {"validator", "validationAction", "validationLevel"}

    def test_frozen(self, user_schema):
        """Test that descriptor attributes cannot be reassigned."""
        descriptor = build_validator(user_schema)
        with pytest.raises(AttributeError):
            descriptor.validation_action = "warn"
        with pytest.raises(AttributeError):
            descriptor.validator = {}

    def test_returned_documents_do_not_alter_command(self, user_schema):
        """Test that mutating accessor results leaves the collMod command unchanged."""
        descriptor = build_validator(user_schema)
        expected = descriptor.to_command("users")

        descriptor.json_schema["additionalProperties"] = True
        descriptor.json_schema["properties"]["address"]["additionalProperties"] = True
        descriptor.validator["$expr"] = {"$eq": [1, 1]}
        descriptor.required.append("extra")

        command = descriptor.to_command("users")
        assert command == expected
        assert list(command["validator"]) == ["$jsonSchema"]
        assert command["validator"]["$jsonSchema"]["additionalProperties"] is False

    def test_input_validator_copied(self):
        """Test that the document passed to the constructor is not shared."""
        validator = {"$jsonSchema": {"bsonType": "object", "required": ["_id"]}}
        descriptor = ValidationDescriptor(validator, required=["_id"])
        validator["$jsonSchema"]["required"].append("name")
        assert descriptor.json_schema["required"] == ["_id"]

    def test_hashable_and_comparable(self, user_schema):
        first = build_validator(user_schema)
        second = build_validator(copy.deepcopy(user_schema))
        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1
        assert first != build_validator({"bsonType": "object", "properties": {}})
