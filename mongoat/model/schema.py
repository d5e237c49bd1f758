"""
Schema closing and validator building.

Turns a caller-supplied `$jsonSchema` field tree into the validation
descriptor MongoDB enforces on a collection:

- `close_schema`: sets `additionalProperties: False` on every object node,
  at every depth, unless the node is explicitly open.
- `build_validator`: closes a copy of the schema, injects the `_id`
  descriptor, appends `_id` to the required fields and pins the
  validation action and level.
"""

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bson import json_util

from ..constants import (
    IDENTITY_DESCRIPTION,
    IDENTITY_FIELD,
    OBJECT_BSON_TYPE,
    VALIDATION_ACTION,
    VALIDATION_LEVEL,
)
from ..types import FieldSchema


def _is_object_node(node: Mapping[str, Any]) -> bool:
    bson_type = node.get("bsonType")
    if isinstance(bson_type, (list, tuple)):
        return OBJECT_BSON_TYPE in bson_type
    return bson_type == OBJECT_BSON_TYPE


def close_schema(node: FieldSchema) -> FieldSchema:
    """
    Recursively close every object node of a schema.

    The node graph is mutated in place and returned. Array item
    descriptors are visited before property descriptors. Closing an
    already-closed schema is a no-op.

    Args:
        node: Schema node to close

    Returns:
        The same node
    """
    if _is_object_node(node) and not node.get("additionalProperties"):
        node["additionalProperties"] = False

    items = node.get("items")
    if isinstance(items, list):
        for item in items:
            close_schema(item)
    elif items:
        close_schema(items)

    for child in (node.get("properties") or {}).values():
        close_schema(child)

    return node


class ValidationDescriptor:
    """
    Validation settings pushed verbatim to MongoDB with collMod.

    The descriptor keeps a private deep copy of the validator document.
    Every accessor returns a fresh copy, so nothing a caller does to a
    returned value changes what `to_command` sends.

    Attributes:
        validator: The `validator` document (`$jsonSchema` plus any extra
            query expressions)
        json_schema: The `$jsonSchema` part of the validator
        required: Required field names, `_id` last
        validation_action: Always "error"
        validation_level: Always "strict"
    """

    __slots__ = ("_validator", "_required")

    def __init__(self, validator: Mapping[str, Any], required: Iterable[str] = ()) -> None:
        object.__setattr__(self, "_validator", copy.deepcopy(dict(validator)))
        object.__setattr__(self, "_required", tuple(required))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"'{type(self).__name__}' object is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"'{type(self).__name__}' object is immutable")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationDescriptor):
            return NotImplemented
        return self._validator == other._validator and self._required == other._required

    def __hash__(self) -> int:
        return hash((json_util.dumps(self._validator, sort_keys=True), self._required))

    def __repr__(self) -> str:
        return f"ValidationDescriptor(required={list(self._required)})"

    @property
    def validator(self) -> Dict[str, Any]:
        return copy.deepcopy(self._validator)

    @property
    def json_schema(self) -> Dict[str, Any]:
        return copy.deepcopy(self._validator["$jsonSchema"])

    @property
    def required(self) -> List[str]:
        return list(self._required)

    @property
    def validation_action(self) -> str:
        return VALIDATION_ACTION

    @property
    def validation_level(self) -> str:
        return VALIDATION_LEVEL

    def to_command(self, collection_name: str) -> Dict[str, Any]:
        """
        Render the collMod command for a collection.

        The returned document is a deep copy; mutating it does not affect
        the descriptor.
        """
        return {
            "collMod": collection_name,
            "validator": self.validator,
            "validationAction": self.validation_action,
            "validationLevel": self.validation_level,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "validator": self.validator,
            "validationAction": self.validation_action,
            "validationLevel": self.validation_level,
        }


def build_validator(
    schema: FieldSchema,
    extra_validation: Optional[Mapping[str, Any]] = None,
) -> ValidationDescriptor:
    """
    Build the validation descriptor for a collection.

    The caller's schema is not modified. Top-level keys of the schema
    other than `properties` and `required` are preserved (e.g.
    `description`); `bsonType` is always "object".

    Args:
        schema: Top-level collection schema
        extra_validation: Query expressions merged next to `$jsonSchema`
            in the validator document, passed through verbatim

    Returns:
        ValidationDescriptor

    Example:
        ```python
        descriptor = build_validator(
            {
                "bsonType": "object",
                "properties": {"name": {"bsonType": "string"}},
                "required": ["name"],
            }
        )
        descriptor.json_schema["required"]
        # ['name', '_id']
        ```
    """
    closed = close_schema(copy.deepcopy(dict(schema)))

    properties = dict(closed.get("properties") or {})
    properties[IDENTITY_FIELD] = {
        "bsonType": "objectId",
        "description": IDENTITY_DESCRIPTION,
    }

    required: List[str] = []
    for name in [*(closed.get("required") or []), IDENTITY_FIELD]:
        if name not in required:
            required.append(name)

    json_schema = {
        **closed,
        "bsonType": OBJECT_BSON_TYPE,
        "additionalProperties": closed.get("additionalProperties") or False,
        "properties": properties,
        "required": required,
    }

    validator: Dict[str, Any] = {"$jsonSchema": json_schema}
    if extra_validation:
        validator.update(copy.deepcopy(dict(extra_validation)))

    return ValidationDescriptor(validator=validator, required=list(required))
