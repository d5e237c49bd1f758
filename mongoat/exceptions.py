"""
Custom exceptions for MONGOAT.

These exceptions provide more specific error types while maintaining
backward compatibility with RuntimeError.
"""

from typing import Any, Dict, Optional


class MongoatError(RuntimeError):
    """
    Base exception for MONGOAT errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (collection_name,
                 operation, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class OperationNotAllowedError(MongoatError):
    """
    Raised when an operation is not in a model's allow-list.

    Raised by the capability gate before the operation is dispatched, so
    the storage driver is never reached.

    Attributes:
        operation: Operation kind value that was rejected
        collection_name: Collection of the model
    """

    def __init__(
        self,
        operation: str,
        collection_name: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f'The operation "{operation}" is not allowed in "{collection_name}"',
            context=context,
        )
        self.operation = operation
        self.collection_name = collection_name


class StorageOperationError(MongoatError):
    """
    Raised when the storage driver fails to execute an operation.

    Document validation rejections from MongoDB surface through this
    exception as well.

    Attributes:
        operation: Operation kind value that failed
        collection_name: Collection the operation ran against
        cause: Serialized underlying driver error
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        collection_name: Optional[str] = None,
        cause: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if operation:
            context["operation"] = operation
        if collection_name:
            context["collection"] = collection_name
        super().__init__(message, context=context)
        self.operation = operation
        self.collection_name = collection_name
        self.cause = cause


class InvalidIdentifierError(MongoatError, ValueError):
    """
    Raised when a value cannot be converted to an ObjectId.

    Attributes:
        value: The value that failed conversion
    """

    def __init__(self, value: Any, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"Invalid identifier: {value!r}", context=context)
        self.value = value


class InitializationError(MongoatError):
    """
    Raised when the database connection cannot be established.

    Attributes:
        message: Error message
        mongo_uri: MongoDB connection URI (if available)
        db_name: Database name (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        mongo_uri: Optional[str] = None,
        db_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the initialization error.

        Args:
            message: Error message
            mongo_uri: MongoDB connection URI (if available)
            db_name: Database name (if available)
            context: Additional context information
        """
        context = context or {}
        if mongo_uri:
            context["mongo_uri"] = mongo_uri
        if db_name:
            context["db_name"] = db_name
        super().__init__(message, context=context)
        self.mongo_uri = mongo_uri
        self.db_name = db_name


class ConfigurationError(MongoatError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value
