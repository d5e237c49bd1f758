"""
Utility functions and helpers for MONGOAT.
"""

from .mongo import new_object_id, serialize_error, to_object_id

__all__ = ["new_object_id", "serialize_error", "to_object_id"]
