"""
Database

The entry point of MONGOAT. A `Database` owns:
- the connection to MongoDB (through `ConnectionManager`)
- the model registry (through `ModelRegistry`)
- collection setup: creation, validators and indexes for every model

This module is part of MONGOAT.
"""

import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, TypeVar, Union

from motor.motor_asyncio import (AsyncIOMotorClient, AsyncIOMotorClientSession,
                                 AsyncIOMotorCollection, AsyncIOMotorDatabase)
from pymongo.errors import PyMongoError

from ..config import DatabaseConfig
from ..constants import OperationKind
from ..exceptions import StorageOperationError
from ..model import GatedModel, Model
from ..observability import (clear_collection_context, set_collection_context,
                             timed_operation)
from ..observability import get_logger as get_contextual_logger
from ..types import FieldSchema, IndexSpecification
from ..utils import serialize_error
from .connection import ConnectionManager
from .index_management import IndexManager
from .registry import ModelRegistry

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)

T = TypeVar("T")


class Database:
    """
    Connection plus model registry.

    Example:
        ```python
        database = Database(DatabaseConfig(db_name="example"))

        User = database.define_model(
            "users",
            schema={
                "bsonType": "object",
                "properties": {"username": {"bsonType": "string"}},
                "required": ["username"],
            },
            validity=True,
        )

        await database.connect()
        await database.setup_collections()
        await User.insert({"username": "foobar"})
        await database.disconnect()
        ```
    """

    def __init__(
        self,
        config: Optional[DatabaseConfig] = None,
        client: Optional[AsyncIOMotorClient] = None,
        db: Optional[AsyncIOMotorDatabase] = None,
    ) -> None:
        """
        Args:
            config: Connection configuration (resolved from the environment
                when omitted)
            client: Already connected Motor client to reuse
            db: Database of ``client`` to use; both must be given together
        """
        self.config = config or DatabaseConfig()
        self._connection_manager = ConnectionManager(self.config)
        if client is not None and db is not None:
            self._connection_manager.attach(client, db)
        self.models = ModelRegistry(self)

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def connect(self) -> str:
        """
        Connect to MongoDB. Does nothing when already connected.

        Returns:
            Name of the database in use

        Raises:
            InitializationError: If the connection fails
            ConfigurationError: If the configuration is invalid
        """
        if self.is_connected:
            return self.mongo_db.name
        return await self._connection_manager.initialize()

    async def disconnect(self) -> None:
        await self._connection_manager.shutdown()

    @property
    def is_connected(self) -> bool:
        return self._connection_manager.initialized

    @property
    def mongo_client(self) -> AsyncIOMotorClient:
        return self._connection_manager.mongo_client

    @property
    def mongo_db(self) -> AsyncIOMotorDatabase:
        return self._connection_manager.mongo_db

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        """
        Get a Motor collection.

        Raises:
            RuntimeError: If the database is not connected
        """
        return self.mongo_db[name]

    async def info(self) -> dict[str, Any]:
        """Return the output of the dbStats command."""
        return await self.mongo_db.command("dbStats")

    # ------------------------------------------------------------------
    # Models
    # ------------------------------------------------------------------

    def define_model(
        self,
        collection_name: str,
        schema: FieldSchema,
        indexes: Optional[Iterable[IndexSpecification]] = None,
        allowed_operations: Optional[Iterable[Union[OperationKind, str]]] = None,
        defaults: Optional[Mapping[str, Any]] = None,
        validity: bool = False,
        extra_validation: Optional[Mapping[str, Any]] = None,
    ) -> GatedModel:
        """
        Define a model on this database. See `ModelRegistry.define_model`.

        Models can be defined before `connect()`; storage is only needed
        when an operation runs.
        """
        return self.models.define_model(
            collection_name,
            schema,
            indexes=indexes,
            allowed_operations=allowed_operations,
            defaults=defaults,
            validity=validity,
            extra_validation=extra_validation,
        )

    def get_model(self, name: str) -> Optional[GatedModel]:
        return self.models.get_model(name)

    @staticmethod
    def load_models(module: str) -> ModuleType:
        """
        Import a module that defines models.

        Args:
            module: Dotted module name or path to a ``.py`` file

        Returns:
            The imported module
        """
        path = Path(module)
        if path.suffix == ".py":
            module_name = path.stem
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise ImportError(f"Cannot load models from '{module}'")
            loaded = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = loaded
            spec.loader.exec_module(loaded)
            return loaded
        return importlib.import_module(module)

    # ------------------------------------------------------------------
    # Collection setup
    # ------------------------------------------------------------------

    @timed_operation("database.setup_collections")
    async def setup_collections(self) -> None:
        """Create collections, validators and indexes for every defined model."""
        for model in self.models:
            await self.setup_collection(model)

    async def setup_collection(self, model: Union[GatedModel, Model]) -> None:
        """
        Create the collection if missing, apply its validator and indexes.

        Raises:
            StorageOperationError: If MongoDB rejects the collection, its
                validator (e.g. a malformed schema) or an index
        """
        name = model.collection_name
        db = self.mongo_db
        set_collection_context(name, operation="setupCollection", db_name=db.name)
        try:
            if name not in await db.list_collection_names():
                await db.create_collection(name)
                contextual_logger.info(f"Created collection '{name}'")

            await db.command(model.validator.to_command(name))
            contextual_logger.info(f"Applied validator to '{name}'")

            await IndexManager(db).sync_indexes(name, model.indexes)
        except PyMongoError as e:
            logger.exception(f"Collection setup failed for '{name}'")
            raise StorageOperationError(
                "Collection setup failed",
                operation="setupCollection",
                collection_name=name,
                cause=serialize_error(e),
            ) from e
        finally:
            clear_collection_context()

    async def clean_collections(self) -> None:
        """Delete every document of every non-empty collection, keeping the collections."""
        db = self.mongo_db
        for name in await db.list_collection_names():
            if name.startswith("system."):
                continue
            collection = db[name]
            if await collection.count_documents({}) <= 0:
                continue
            result = await collection.delete_many({})
            logger.info(f"Removed {result.deleted_count} document(s) from '{name}'")

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def with_transaction(
        self,
        fn: Callable[[AsyncIOMotorClientSession], Awaitable[T]],
        **session_options: Any,
    ) -> T:
        """
        Run ``fn`` inside a transaction and return its result.

        The session is passed to ``fn``; forward it to operations as
        ``session=session``. Retries and commit are handled by the driver.
        """
        async with await self.mongo_client.start_session(**session_options) as session:
            return await session.with_transaction(fn)
