"""
MONGOAT - MongoDB models with closed schemas

Declare a collection's shape once, have MongoDB enforce it, restrict the
operations each collection accepts and run hooks before reads and writes.
"""

# Configuration
from .config import DatabaseConfig
from .constants import OperationKind
# Core
from .core import Database, ModelRegistry
# Errors
from .exceptions import (ConfigurationError, InitializationError,
                         InvalidIdentifierError, MongoatError,
                         OperationNotAllowedError, StorageOperationError)
# Models
from .model import (GatedModel, Model, ValidationDescriptor, build_validator,
                    close_schema)
from .utils import new_object_id, to_object_id

__version__ = "0.2.0"

__all__ = [
    # Core
    "Database",
    "DatabaseConfig",
    "ModelRegistry",
    "OperationKind",
    # Models
    "GatedModel",
    "Model",
    "ValidationDescriptor",
    "build_validator",
    "close_schema",
    # Identifiers
    "new_object_id",
    "to_object_id",
    # Errors
    "MongoatError",
    "OperationNotAllowedError",
    "StorageOperationError",
    "InvalidIdentifierError",
    "InitializationError",
    "ConfigurationError",
]
