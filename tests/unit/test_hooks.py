"""
Unit tests for the pre-operation hook pipeline.
"""

import pytest

from mongoat import OperationKind
from mongoat.model import HookPipeline, as_operation_kind, as_operation_kinds


@pytest.mark.unit
class TestAsOperationKind:
    """Test operation kind coercion."""

    def test_enum_passthrough(self):
        assert as_operation_kind(OperationKind.INSERT) is OperationKind.INSERT

    def test_from_string_value(self):
        assert as_operation_kind("findById") is OperationKind.FIND_BY_ID

    def test_unknown_kind(self):
        """Test that unknown names raise ValueError listing valid kinds."""
        with pytest.raises(ValueError, match="insertMany"):
            as_operation_kind("upsert")


@pytest.mark.unit
class TestAsOperationKinds:
    """Test allow-list coercion."""

    def test_mixed_entries(self):
        assert as_operation_kinds(["insert", OperationKind.FIND]) == frozenset(
            {OperationKind.INSERT, OperationKind.FIND}
        )

    def test_none_is_empty(self):
        assert as_operation_kinds(None) == frozenset()

    @pytest.mark.parametrize("value", ["insert", "find", b"insert"])
    def test_single_string_rejected(self, value):
        with pytest.raises(TypeError, match="collection of operation kinds"):
            as_operation_kinds(value)


@pytest.mark.unit
class TestHookPipeline:
    """Test hook registration and execution."""

    def test_defaults_to_noop(self):
        """Test that every kind starts with the no-op transformer."""
        pipeline = HookPipeline()
        for kind in OperationKind:
            assert not pipeline.is_registered(kind)

    def test_register(self):
        """Test that a registered transformer is returned by get()."""
        pipeline = HookPipeline()

        def hook(payload, context):
            pass

        pipeline.register("insert", hook)
        assert pipeline.get(OperationKind.INSERT) is hook
        assert pipeline.is_registered("insert")
        assert not pipeline.is_registered("update")

    def test_last_registration_wins(self):
        pipeline = HookPipeline()

        def first(payload, context):
            pass

        def second(payload, context):
            pass

        pipeline.register(OperationKind.FIND, first)
        pipeline.register(OperationKind.FIND, second)
        assert pipeline.get(OperationKind.FIND) is second

    def test_register_rejects_non_callable(self):
        pipeline = HookPipeline()
        with pytest.raises(TypeError):
            pipeline.register(OperationKind.FIND, "not callable")

    def test_register_rejects_unknown_kind(self):
        pipeline = HookPipeline()
        with pytest.raises(ValueError):
            pipeline.register("drop", lambda payload, context: None)

    @pytest.mark.asyncio
    async def test_run_mutates_payload(self):
        """Test that the transformer sees and may mutate the payload."""
        pipeline = HookPipeline()
        seen = {}

        def hook(payload, context):
            seen["context"] = context
            payload["touched"] = True

        pipeline.register(OperationKind.INSERT, hook)
        payload = {"name": "a"}
        await pipeline.run(OperationKind.INSERT, payload, {"bypass_document_validation": False})

        assert payload == {"name": "a", "touched": True}
        assert seen["context"] == {"bypass_document_validation": False}

    @pytest.mark.asyncio
    async def test_run_awaits_coroutine_hooks(self):
        """Test that async transformers are awaited before returning."""
        pipeline = HookPipeline()

        async def hook(payload, context):
            payload.append({"$limit": 1})

        pipeline.register(OperationKind.AGGREGATE, hook)
        payload = [{"$match": {}}]
        await pipeline.run(OperationKind.AGGREGATE, payload, {})
        assert payload == [{"$match": {}}, {"$limit": 1}]

    @pytest.mark.asyncio
    async def test_run_propagates_errors(self):
        """Test that an exception raised in a hook propagates."""
        pipeline = HookPipeline()

        def hook(payload, context):
            raise ValueError("rejected")

        pipeline.register(OperationKind.DELETE, hook)
        with pytest.raises(ValueError, match="rejected"):
            await pipeline.run(OperationKind.DELETE, {}, {})

    @pytest.mark.asyncio
    async def test_noop_leaves_payload(self):
        pipeline = HookPipeline()
        payload = {"a": 1}
        await pipeline.run(OperationKind.UPDATE, payload, {})
        assert payload == {"a": 1}
