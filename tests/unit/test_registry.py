"""
Unit tests for the model registry.
"""

import logging
import threading

import pytest

from mongoat import OperationKind
from mongoat.constants import VALIDITY_OPERATIONS
from mongoat.core import ModelRegistry
from mongoat.model import GatedModel


@pytest.mark.unit
class TestDefineModel:
    """Test model definition."""

    def test_returns_gated_model(self, registry, user_schema):
        model = registry.define_model("users", user_schema)
        assert isinstance(model, GatedModel)
        assert model.collection_name == "users"
        assert model.allowed_operations == frozenset()

    def test_validator_built_from_schema(self, registry, user_schema):
        model = registry.define_model("users", user_schema)
        assert model.validator.json_schema["required"][-1] == "_id"
        assert model.validator.json_schema["additionalProperties"] is False

    def test_validity_sets_standard_operations(self, registry, user_schema):
        """Test that validity overrides any explicit allow-list."""
        model = registry.define_model(
            "users",
            user_schema,
            allowed_operations=[OperationKind.BULK_WRITE],
            validity=True,
        )
        assert model.allowed_operations == VALIDITY_OPERATIONS
        assert OperationKind.BULK_WRITE not in model.allowed_operations
        assert OperationKind.AGGREGATE not in model.allowed_operations

    def test_indexes_and_defaults_kept(self, registry, user_schema):
        model = registry.define_model(
            "users",
            user_schema,
            indexes=[{"key": [("mail", 1)], "unique": True, "name": "mail_1"}],
            defaults={"active": True},
        )
        assert model.indexes == ({"key": [("mail", 1)], "unique": True, "name": "mail_1"},)
        assert model.defaults == {"active": True}

    def test_empty_name_rejected(self, registry, user_schema):
        with pytest.raises(ValueError):
            registry.define_model("", user_schema)

    def test_unknown_operation_rejected(self, registry, user_schema):
        with pytest.raises(ValueError):
            registry.define_model("users", user_schema, allowed_operations=["drop"])
        assert "users" not in registry

    def test_string_allow_list_rejected(self, registry, user_schema):
        """Test that a bare string is not iterated as operation names."""
        with pytest.raises(TypeError, match="collection of operation kinds"):
            registry.define_model("users", user_schema, allowed_operations="insert")
        assert "users" not in registry


@pytest.mark.unit
class TestRedefinition:
    """Test first-definition-wins semantics."""

    def test_same_instance_returned(self, registry, user_schema):
        first = registry.define_model("users", user_schema, validity=True)
        second = registry.define_model("users", user_schema)
        assert second is first
        assert second.allowed_operations == VALIDITY_OPERATIONS
        assert len(registry) == 1

    def test_differing_redefinition_logs_warning(self, registry, user_schema, caplog):
        registry.define_model("users", user_schema)
        with caplog.at_level(logging.WARNING, logger="mongoat.core.registry"):
            registry.define_model("users", {"bsonType": "object", "properties": {}})
        assert "already defined" in caplog.text

    @pytest.mark.parametrize(
        "changes, field",
        [
            ({"allowed_operations": [OperationKind.FIND]}, "allowed_operations"),
            ({"defaults": {"active": True}}, "defaults"),
            ({"indexes": [{"key": [("mail", 1)], "unique": True}]}, "indexes"),
            ({"validity": True}, "allowed_operations"),
        ],
    )
    def test_redefinition_with_same_schema_logs_differing_field(
        self, registry, user_schema, caplog, changes, field
    ):
        """Test that options other than the schema are compared too."""
        first = registry.define_model("users", user_schema)
        with caplog.at_level(logging.WARNING, logger="mongoat.core.registry"):
            second = registry.define_model("users", user_schema, **changes)
        assert second is first
        assert "already defined" in caplog.text
        assert f"differs in: {field}" in caplog.text
        assert "validator" not in caplog.text

    def test_redefinition_lists_every_differing_field(self, registry, user_schema, caplog):
        registry.define_model("users", user_schema, defaults={"active": True})
        with caplog.at_level(logging.WARNING, logger="mongoat.core.registry"):
            registry.define_model(
                "users",
                {"bsonType": "object", "properties": {}},
                allowed_operations=["insert"],
            )
        assert "differs in: validator, allowed_operations, defaults" in caplog.text

    def test_identical_full_redefinition_is_silent(self, registry, user_schema, caplog):
        options = {
            "indexes": [{"key": [("mail", 1)], "unique": True}],
            "allowed_operations": ["insert", OperationKind.FIND],
            "defaults": {"active": True},
        }
        registry.define_model("users", user_schema, **options)
        with caplog.at_level(logging.WARNING, logger="mongoat.core.registry"):
            registry.define_model("users", user_schema, **options)
        assert "already defined" not in caplog.text

    def test_identical_redefinition_is_silent(self, registry, user_schema, caplog):
        registry.define_model("users", user_schema)
        with caplog.at_level(logging.WARNING, logger="mongoat.core.registry"):
            registry.define_model("users", user_schema)
        assert "already defined" not in caplog.text

    def test_concurrent_definitions_register_once(self, registry, user_schema):
        results = []

        def define():
            results.append(registry.define_model("users", user_schema))

        threads = [threading.Thread(target=define) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len({id(model) for model in results}) == 1
        assert len(registry) == 1


@pytest.mark.unit
class TestLookup:
    """Test registry lookups."""

    def test_get_model(self, registry, user_schema):
        model = registry.define_model("users", user_schema)
        assert registry.get_model("users") is model
        assert registry.get_model("missing") is None

    def test_names_and_iteration_keep_definition_order(self, registry, user_schema):
        registry.define_model("users", user_schema)
        registry.define_model("posts", user_schema)
        assert registry.names() == ["users", "posts"]
        assert [model.collection_name for model in registry] == ["users", "posts"]
        assert "posts" in registry

    def test_registries_are_isolated(self, storage, user_schema):
        first = ModelRegistry(storage)
        second = ModelRegistry(storage)
        first.define_model("users", user_schema)
        assert "users" not in second
