"""
MongoDB utility functions for MONGOAT.

Identifier conversion and error serialization helpers.
"""

from typing import Any

from bson import ObjectId, json_util
from bson.errors import InvalidId

from ..exceptions import InvalidIdentifierError


def to_object_id(value: Any) -> ObjectId:
    """
    Convert a value into an ObjectId.

    Accepts an ObjectId, a 24-character hex string or 12 raw bytes.

    Args:
        value: Value to convert

    Returns:
        The ObjectId

    Raises:
        InvalidIdentifierError: If the value cannot be converted

    Example:
        ```python
        from mongoat.utils import to_object_id

        to_object_id("507f1f77bcf86cd799439011")
        # ObjectId('507f1f77bcf86cd799439011')

        to_object_id("not-a-valid-id")
        # raises InvalidIdentifierError
        ```
    """
    if isinstance(value, ObjectId):
        return value
    if value is None or not isinstance(value, (str, bytes)):
        raise InvalidIdentifierError(value)
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise InvalidIdentifierError(value) from e


def new_object_id() -> ObjectId:
    """Generate a fresh ObjectId."""
    return ObjectId()


def serialize_error(error: BaseException) -> str:
    """
    Serialize a driver error for attaching to a wrapped exception.

    Errors that carry server details (OperationFailure, BulkWriteError,
    WriteError) are rendered as relaxed Extended JSON so validation
    failure reports survive intact; other errors carry only type and message.

    Args:
        error: The exception raised by the driver

    Returns:
        Serialized representation of the error
    """
    details = getattr(error, "details", None)
    payload: dict[str, Any] = {
        "type": type(error).__name__,
        "message": str(error),
    }
    code = getattr(error, "code", None)
    if code is not None:
        payload["code"] = code
    if details:
        payload["details"] = details
    return json_util.dumps(payload, indent=2)
