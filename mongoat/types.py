"""
Type definitions for MONGOAT structures.

This module provides TypedDict definitions for collection schemas and
index specifications to improve type safety throughout the codebase.
"""

from typing import Any, Dict, List, Sequence, Tuple, TypedDict, Union


class FieldSchema(TypedDict, total=False):
    """A $jsonSchema field descriptor, possibly nested."""

    bsonType: Union[str, List[str]]
    properties: Dict[str, "FieldSchema"]
    items: Union["FieldSchema", List["FieldSchema"]]
    required: List[str]
    additionalProperties: Union[bool, "FieldSchema"]
    description: str
    pattern: str
    enum: List[Any]
    minimum: Union[int, float]
    maximum: Union[int, float]
    minLength: int
    maxLength: int


IndexKeys = Union[Dict[str, Any], Sequence[Tuple[str, Any]]]


class IndexSpecification(TypedDict, total=False):
    """Index definition: the key plus any create_index option."""

    key: IndexKeys
    name: str
    unique: bool
    sparse: bool
    expireAfterSeconds: int
    partialFilterExpression: Dict[str, Any]


Document = Dict[str, Any]
