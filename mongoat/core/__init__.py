"""
Core MONGOAT components.

This module contains the Database entry point, the model registry and
connection/index management.
"""

from .connection import ConnectionManager
from .database import Database
from .index_management import IndexManager, normalize_keys
from .registry import ModelRegistry

__all__ = [
    "ConnectionManager",
    "Database",
    "IndexManager",
    "ModelRegistry",
    "normalize_keys",
]
