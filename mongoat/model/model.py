"""
Model: the CRUD facade for a single collection.

Every operation follows the same path:

1. copy the caller's payload (document, update, filter, pipeline),
2. run the pre-operation hook for the operation kind against the copy,
3. for inserts, merge the model's defaults under the document,
4. dispatch to the Motor collection and normalize the result.

Driver failures are wrapped into `StorageOperationError` carrying the
serialized cause. Permission checks are not done here; see
`mongoat.model.gate.GatedModel`.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import DeleteMany, DeleteOne, InsertOne, ReplaceOne, ReturnDocument, UpdateMany, UpdateOne
from pymongo.errors import PyMongoError
from pymongo.results import BulkWriteResult, DeleteResult, UpdateResult

from ..constants import IDENTITY_FIELD, OperationKind
from ..exceptions import StorageOperationError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation
from ..types import Document, IndexSpecification
from ..utils import serialize_error, to_object_id
from .hooks import HookPipeline, HookTransformer, as_operation_kinds
from .schema import ValidationDescriptor

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)

# Mongo shell bulk option names -> PyMongo keyword arguments
_BULK_OPTION_NAMES = {
    "upsert": "upsert",
    "arrayFilters": "array_filters",
    "collation": "collation",
    "hint": "hint",
}


# Mongo shell bulk operation name -> keys its document must carry
_BULK_REQUIRED_KEYS = {
    "insertOne": ("document",),
    "updateOne": ("filter", "update"),
    "updateMany": ("filter", "update"),
    "replaceOne": ("filter", "replacement"),
    "deleteOne": ("filter",),
    "deleteMany": ("filter",),
}


def _bulk_options(spec: Mapping[str, Any]) -> Dict[str, Any]:
    return {_BULK_OPTION_NAMES[k]: v for k, v in spec.items() if k in _BULK_OPTION_NAMES}


class Model:
    """
    CRUD facade bound to one collection.

    Instances are created by `ModelRegistry.define_model` and handed out
    wrapped in a `GatedModel`; use that entry point rather than building
    models directly.

    Attributes:
        collection_name: Name of the collection
        validator: Validation descriptor applied with collMod at setup
        indexes: Index specifications, in declaration order
        allowed_operations: Operation kinds the gate lets through
        defaults: Field values merged under every inserted document
    """

    def __init__(
        self,
        collection_name: str,
        validator: ValidationDescriptor,
        storage: Any,
        indexes: Optional[Iterable[IndexSpecification]] = None,
        allowed_operations: Optional[Iterable[Union[OperationKind, str]]] = None,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Args:
            collection_name: Collection name
            validator: Built validation descriptor
            storage: Object exposing ``get_collection(name)`` that returns a
                Motor collection (normally the owning `Database`)
            indexes: Index specifications
            allowed_operations: Allow-list of operation kinds
            defaults: Default field values for inserts. Callable values are
                invoked once per inserted document that lacks the field.
        """
        self.collection_name = collection_name
        self.validator = validator
        self.indexes = tuple(dict(index) for index in (indexes or ()))
        self.allowed_operations = as_operation_kinds(allowed_operations)
        self.defaults = dict(defaults or {})
        self.hooks = HookPipeline()
        self._storage = storage

    def __repr__(self) -> str:
        allowed = sorted(kind.value for kind in self.allowed_operations)
        return f"Model(collection_name={self.collection_name!r}, allowed_operations={allowed})"

    @property
    def collection(self) -> AsyncIOMotorCollection:
        """The underlying Motor collection (requires a connected storage)."""
        return self._storage.get_collection(self.collection_name)

    def pre(self, kind: Union[OperationKind, str], transformer: HookTransformer) -> None:
        """
        Register the hook run before ``kind`` is dispatched.

        Example:
            ```python
            def hash_password(document, options):
                document["password"] = bcrypt.hashpw(...)

            User.pre(OperationKind.INSERT, hash_password)
            ```
        """
        self.hooks.register(kind, transformer)

    def _apply_defaults(self, document: Mapping[str, Any]) -> Document:
        merged = {
            key: value() if callable(value) else value
            for key, value in self.defaults.items()
            if key not in document
        }
        merged.update(document)
        return merged

    async def _dispatch(
        self,
        kind: OperationKind,
        call: Callable[[AsyncIOMotorCollection], Awaitable[Any]],
    ) -> Any:
        collection = self.collection
        operation_name = f"model.{kind.value}"
        start_time = time.time()
        try:
            result = await call(collection)
        except PyMongoError as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation(operation_name, duration_ms, success=False, collection=self.collection_name)
            logger.exception(f"Storage operation '{kind.value}' failed on '{self.collection_name}'")
            raise StorageOperationError(
                "Storage operation failed",
                operation=kind.value,
                collection_name=self.collection_name,
                cause=serialize_error(e),
                context={"error_type": type(e).__name__},
            ) from e

        duration_ms = (time.time() - start_time) * 1000
        record_operation(operation_name, duration_ms, success=True, collection=self.collection_name)
        contextual_logger.debug(
            f"Operation: {kind.value}",
            extra={
                "collection": self.collection_name,
                "operation": kind.value,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return result

    # ------------------------------------------------------------------
    # Insert family
    # ------------------------------------------------------------------

    async def insert(self, document: Mapping[str, Any], **options: Any) -> Document:
        """
        Insert one document.

        Returns:
            The stored document including its `_id`
        """
        payload = dict(document)
        await self.hooks.run(OperationKind.INSERT, payload, options)
        to_insert = self._apply_defaults(payload)

        result = await self._dispatch(
            OperationKind.INSERT,
            lambda collection: collection.insert_one(to_insert, **options),
        )
        return {IDENTITY_FIELD: result.inserted_id, **to_insert}

    async def insert_many(
        self, documents: Iterable[Mapping[str, Any]], **options: Any
    ) -> List[Document]:
        """
        Insert several documents. The hook runs once per document.

        Returns:
            The stored documents including their `_id`, in input order
        """
        payloads = [dict(document) for document in documents]
        for payload in payloads:
            await self.hooks.run(OperationKind.INSERT_MANY, payload, options)
        to_insert = [self._apply_defaults(payload) for payload in payloads]

        result = await self._dispatch(
            OperationKind.INSERT_MANY,
            lambda collection: collection.insert_many(to_insert, **options),
        )
        return [
            {IDENTITY_FIELD: inserted_id, **document}
            for inserted_id, document in zip(result.inserted_ids, to_insert)
        ]

    # ------------------------------------------------------------------
    # Update family
    # ------------------------------------------------------------------

    async def update(
        self, filter: Mapping[str, Any], update: Mapping[str, Any], **options: Any
    ) -> Optional[Document]:
        """
        Update the first matching document.

        Returns:
            The document after the update (unless ``return_document`` is
            overridden), or None when nothing matched
        """
        payload = dict(update)
        await self.hooks.run(OperationKind.UPDATE, payload, {**filter, **options})
        options.setdefault("return_document", ReturnDocument.AFTER)

        return await self._dispatch(
            OperationKind.UPDATE,
            lambda collection: collection.find_one_and_update(filter, payload, **options),
        )

    async def update_many(
        self, filter: Mapping[str, Any], update: Mapping[str, Any], **options: Any
    ) -> UpdateResult:
        payload = dict(update)
        await self.hooks.run(OperationKind.UPDATE_MANY, payload, {**filter, **options})

        return await self._dispatch(
            OperationKind.UPDATE_MANY,
            lambda collection: collection.update_many(filter, payload, **options),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_many(
        self, filter: Optional[Mapping[str, Any]] = None, **options: Any
    ) -> List[Document]:
        payload = dict(filter or {})
        await self.hooks.run(OperationKind.FIND_MANY, payload, options)

        return await self._dispatch(
            OperationKind.FIND_MANY,
            lambda collection: collection.find(payload, **options).to_list(length=None),
        )

    async def find(
        self, filter: Optional[Mapping[str, Any]] = None, **options: Any
    ) -> Optional[Document]:
        """Return the first document matching ``filter``, or None."""
        payload = dict(filter or {})
        await self.hooks.run(OperationKind.FIND, payload, options)

        return await self._dispatch(
            OperationKind.FIND,
            lambda collection: collection.find_one(payload, **options),
        )

    async def find_by_id(self, document_id: Union[ObjectId, str, bytes], **options: Any) -> Optional[Document]:
        """
        Return the document whose `_id` is ``document_id``, or None.

        Raises:
            InvalidIdentifierError: If ``document_id`` is not a valid ObjectId;
                storage is not contacted
        """
        payload = {IDENTITY_FIELD: to_object_id(document_id)}
        await self.hooks.run(OperationKind.FIND_BY_ID, payload, options)

        return await self._dispatch(
            OperationKind.FIND_BY_ID,
            lambda collection: collection.find_one(payload, **options),
        )

    async def total(self, filter: Optional[Mapping[str, Any]] = None, **options: Any) -> int:
        payload = dict(filter or {})
        await self.hooks.run(OperationKind.TOTAL, payload, options)

        return await self._dispatch(
            OperationKind.TOTAL,
            lambda collection: collection.count_documents(payload, **options),
        )

    async def aggregate(self, pipeline: Iterable[Mapping[str, Any]], **options: Any) -> List[Document]:
        payload = list(pipeline)
        await self.hooks.run(OperationKind.AGGREGATE, payload, options)

        return await self._dispatch(
            OperationKind.AGGREGATE,
            lambda collection: collection.aggregate(payload, **options).to_list(length=None),
        )

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    async def delete(self, filter: Mapping[str, Any], **options: Any) -> Optional[Document]:
        """Delete the first matching document and return it, or None."""
        payload = dict(filter)
        await self.hooks.run(OperationKind.DELETE, payload, options)

        return await self._dispatch(
            OperationKind.DELETE,
            lambda collection: collection.find_one_and_delete(payload, **options),
        )

    async def delete_many(self, filter: Mapping[str, Any], **options: Any) -> DeleteResult:
        payload = dict(filter)
        await self.hooks.run(OperationKind.DELETE_MANY, payload, options)

        return await self._dispatch(
            OperationKind.DELETE_MANY,
            lambda collection: collection.delete_many(payload, **options),
        )

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    def _prepare_bulk_operation(self, operation: Any) -> Any:
        if isinstance(operation, InsertOne):
            # InsertOne keeps its document in _doc; there is no public accessor.
            return InsertOne(self._apply_defaults(operation._doc))
        if not isinstance(operation, Mapping):
            return operation
        if len(operation) != 1:
            raise ValueError(f"Bulk operation must have exactly one key, got {list(operation)}")

        (name, spec), = operation.items()
        if name not in _BULK_REQUIRED_KEYS:
            raise ValueError(f"Unknown bulk operation '{name}'")
        if not isinstance(spec, Mapping):
            raise ValueError(f"Bulk operation '{name}' must map to a document, got {type(spec).__name__}")
        missing = [key for key in _BULK_REQUIRED_KEYS[name] if key not in spec]
        if missing:
            raise ValueError(f"Bulk operation '{name}' is missing {', '.join(repr(k) for k in missing)}")

        if name == "insertOne":
            return InsertOne(self._apply_defaults(spec["document"]))
        if name == "updateOne":
            return UpdateOne(spec["filter"], spec["update"], **_bulk_options(spec))
        if name == "updateMany":
            return UpdateMany(spec["filter"], spec["update"], **_bulk_options(spec))
        if name == "replaceOne":
            return ReplaceOne(spec["filter"], spec["replacement"], **_bulk_options(spec))
        if name == "deleteOne":
            return DeleteOne(spec["filter"], **_bulk_options(spec))
        return DeleteMany(spec["filter"], **_bulk_options(spec))

    async def bulk_write(self, operations: Iterable[Any], **options: Any) -> BulkWriteResult:
        """
        Execute a batch of write operations.

        Accepts PyMongo operation objects or Mongo shell style mappings
        such as ``{"insertOne": {"document": {...}}}``. Defaults are applied
        to every inserted document; other operations are sent unchanged.
        """
        payload = list(operations)
        await self.hooks.run(OperationKind.BULK_WRITE, payload, options)
        requests = [self._prepare_bulk_operation(operation) for operation in payload]

        return await self._dispatch(
            OperationKind.BULK_WRITE,
            lambda collection: collection.bulk_write(requests, **options),
        )
