"""
Connection management for MONGOAT.

This module handles the Motor client lifecycle: connect, verify, shutdown.

This module is part of MONGOAT.
"""

import logging
import time

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConfigurationError as PyMongoConfigurationError
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from pymongo.server_api import ServerApi

from ..config import DatabaseConfig
from ..constants import APP_NAME
from ..exceptions import InitializationError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class ConnectionManager:
    """
    Manages the MongoDB connection lifecycle.

    Handles connection initialization, validation, and shutdown.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        """
        Initialize the connection manager.

        Args:
            config: Resolved database configuration
        """
        self.config = config

        self._mongo_client: AsyncIOMotorClient | None = None
        self._mongo_db: AsyncIOMotorDatabase | None = None
        self._initialized: bool = False

    def _client_options(self) -> dict:
        options = {
            "serverSelectionTimeoutMS": self.config.server_selection_timeout_ms,
            "appname": APP_NAME,
            **self.config.client_options,
        }
        if self.config.is_production:
            options.setdefault("server_api", ServerApi("1", strict=True, deprecation_errors=True))
        return options

    async def initialize(self) -> str:
        """
        Connect to MongoDB and verify the connection with a ping.

        Returns:
            Name of the database in use

        Raises:
            InitializationError: If the connection cannot be established
        """
        start_time = time.time()

        if self._initialized:
            logger.warning("ConnectionManager already initialized. Skipping re-initialization.")
            return self.config.db_name

        self.config.validate()
        db_name = self.config.db_name

        contextual_logger.info(
            "Initializing MongoDB connection",
            extra={"db_name": db_name},
        )

        try:
            self._mongo_client = AsyncIOMotorClient(
                self.config.connection_url, **self._client_options()
            )
            await self._mongo_client.admin.command("ping")
            self._mongo_db = self._mongo_client[db_name]

            self._initialized = True
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.initialize", duration_ms, success=True)
            contextual_logger.info(
                "MongoDB connection initialized successfully",
                extra={"db_name": db_name, "duration_ms": round(duration_ms, 2)},
            )
            return db_name
        except (ConnectionFailure, ServerSelectionTimeoutError, PyMongoConfigurationError) as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.initialize", duration_ms, success=False)
            contextual_logger.critical(
                "MongoDB connection failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            if self._mongo_client is not None:
                self._mongo_client.close()
                self._mongo_client = None
            raise InitializationError(
                f"Failed to connect to MongoDB: {e}",
                db_name=db_name,
                context={"error_type": type(e).__name__},
            ) from e

    def attach(self, client: AsyncIOMotorClient, db: AsyncIOMotorDatabase) -> None:
        """
        Use an already connected client and database instead of connecting.

        Args:
            client: Connected Motor client
            db: Database of that client
        """
        self._mongo_client = client
        self._mongo_db = db
        self._initialized = True
        logger.debug(f"Attached existing MongoDB client for database '{db.name}'")

    async def shutdown(self) -> None:
        """
        Close the MongoDB connection.

        This method is idempotent - it's safe to call multiple times.
        """
        if not self._initialized:
            return

        start_time = time.time()
        if self._mongo_client:
            self._mongo_client.close()

        self._initialized = False
        self._mongo_client = None
        self._mongo_db = None

        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.shutdown", duration_ms, success=True)
        contextual_logger.info(
            "MongoDB connection shutdown complete",
            extra={"duration_ms": round(duration_ms, 2)},
        )

    @property
    def mongo_client(self) -> AsyncIOMotorClient:
        """
        Get the MongoDB client.

        Raises:
            RuntimeError: If connection is not initialized
        """
        if not self._initialized or self._mongo_client is None:
            raise RuntimeError("ConnectionManager not initialized. Call initialize() first.")
        return self._mongo_client

    @property
    def mongo_db(self) -> AsyncIOMotorDatabase:
        """
        Get the MongoDB database.

        Raises:
            RuntimeError: If connection is not initialized
        """
        if not self._initialized or self._mongo_db is None:
            raise RuntimeError("ConnectionManager not initialized. Call initialize() first.")
        return self._mongo_db

    @property
    def initialized(self) -> bool:
        return self._initialized
