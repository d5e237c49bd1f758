"""
Constants for MONGOAT.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from enum import Enum
from typing import Final

# ============================================================================
# OPERATION KINDS
# ============================================================================


class OperationKind(str, Enum):
    """Operations a model exposes. Keys of both the allow-list and the hook map."""

    AGGREGATE = "aggregate"
    INSERT = "insert"
    INSERT_MANY = "insertMany"
    UPDATE = "update"
    UPDATE_MANY = "updateMany"
    FIND_MANY = "findMany"
    FIND = "find"
    FIND_BY_ID = "findById"
    DELETE = "delete"
    DELETE_MANY = "deleteMany"
    TOTAL = "total"
    BULK_WRITE = "bulkWrite"


VALIDITY_OPERATIONS: Final[frozenset] = frozenset(
    {
        OperationKind.DELETE,
        OperationKind.FIND,
        OperationKind.FIND_BY_ID,
        OperationKind.FIND_MANY,
        OperationKind.INSERT,
        OperationKind.TOTAL,
        OperationKind.UPDATE,
        OperationKind.UPDATE_MANY,
    }
)
"""Allow-list applied when a model is defined with ``validity=True``."""

# ============================================================================
# VALIDATION CONSTANTS
# ============================================================================

IDENTITY_FIELD: Final[str] = "_id"
"""Reserved identity field injected into every validation schema."""

IDENTITY_DESCRIPTION: Final[str] = "Unique identifier of the document in the database"

VALIDATION_ACTION: Final[str] = "error"
"""Reject documents that violate the schema."""

VALIDATION_LEVEL: Final[str] = "strict"
"""Apply validation to all inserts and updates."""

OBJECT_BSON_TYPE: Final[str] = "object"

# ============================================================================
# DATABASE CONSTANTS
# ============================================================================

DEFAULT_MONGODB_URI: Final[str] = "mongodb://127.0.0.1:27017/"
"""Fallback connection URI when nothing else is configured."""

DEFAULT_DB_NAME: Final[str] = "mongoat-test"
"""Fallback database name when nothing else is configured."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

APP_NAME: Final[str] = "MONGOAT"

PRODUCTION_ENV: Final[str] = "production"

# Environment variables
ENV_MONGODB_URI: Final[str] = "MONGODB_URI"
ENV_MONGODB_DB_NAME: Final[str] = "MONGODB_DB_NAME"
ENV_MONGODB_USERNAME: Final[str] = "MONGODB_USERNAME"
ENV_MONGODB_PASSWORD: Final[str] = "MONGODB_PASSWORD"
ENV_PACKAGE: Final[str] = "PACKAGE"
ENV_TEST_WORKER: Final[str] = "PYTEST_XDIST_WORKER"
ENV_ENVIRONMENT: Final[str] = "MONGOAT_ENV"

URI_USERNAME_PLACEHOLDER: Final[str] = "<username>"
URI_PASSWORD_PLACEHOLDER: Final[str] = "<password>"
