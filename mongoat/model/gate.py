"""
Capability gate for models.

`GatedModel` implements the same operation interface as `Model` and
checks the model's allow-list before forwarding each call. A rejected
call raises `OperationNotAllowedError` and never reaches the model, so
no hook runs and storage is not contacted.

Only metadata members (`collection_name`, `validator`, `indexes`,
`allowed_operations`, `defaults`, `hooks` and `pre`) are forwarded
without a check. Neither the wrapped model nor its Motor collection is
reachable through the gate.
"""

from typing import Any, Iterable, List, Mapping, Optional

from pymongo.results import BulkWriteResult, DeleteResult, UpdateResult

from ..constants import OperationKind
from ..exceptions import OperationNotAllowedError
from ..types import Document
from .model import Model


class GatedModel:
    """
    Allow-list enforcing wrapper around a `Model`.

    Example:
        ```python
        User = database.define_model(
            "users",
            schema,
            allowed_operations=[OperationKind.INSERT, OperationKind.FIND],
        )
        await User.insert({"name": "a"})   # forwarded
        await User.delete_many({})         # OperationNotAllowedError
        ```
    """

    __slots__ = ("_model",)

    _FORWARDED = frozenset(
        {
            "collection_name",
            "validator",
            "indexes",
            "allowed_operations",
            "defaults",
            "hooks",
            "pre",
        }
    )

    def __init__(self, model: Model) -> None:
        self._model = model

    def __getattr__(self, name: str) -> Any:
        if name not in GatedModel._FORWARDED:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        return getattr(self._model, name)

    def __repr__(self) -> str:
        return f"GatedModel({self._model!r})"

    def is_allowed(self, kind: OperationKind) -> bool:
        return kind in self._model.allowed_operations

    def _check(self, kind: OperationKind) -> None:
        if kind not in self._model.allowed_operations:
            raise OperationNotAllowedError(kind.value, self._model.collection_name)

    async def aggregate(self, pipeline: Iterable[Mapping[str, Any]], **options: Any) -> List[Document]:
        self._check(OperationKind.AGGREGATE)
        return await self._model.aggregate(pipeline, **options)

    async def insert(self, document: Mapping[str, Any], **options: Any) -> Document:
        self._check(OperationKind.INSERT)
        return await self._model.insert(document, **options)

    async def insert_many(
        self, documents: Iterable[Mapping[str, Any]], **options: Any
    ) -> List[Document]:
        self._check(OperationKind.INSERT_MANY)
        return await self._model.insert_many(documents, **options)

    async def update(
        self, filter: Mapping[str, Any], update: Mapping[str, Any], **options: Any
    ) -> Optional[Document]:
        self._check(OperationKind.UPDATE)
        return await self._model.update(filter, update, **options)

    async def update_many(
        self, filter: Mapping[str, Any], update: Mapping[str, Any], **options: Any
    ) -> UpdateResult:
        self._check(OperationKind.UPDATE_MANY)
        return await self._model.update_many(filter, update, **options)

    async def find_many(
        self, filter: Optional[Mapping[str, Any]] = None, **options: Any
    ) -> List[Document]:
        self._check(OperationKind.FIND_MANY)
        return await self._model.find_many(filter, **options)

    async def find(
        self, filter: Optional[Mapping[str, Any]] = None, **options: Any
    ) -> Optional[Document]:
        self._check(OperationKind.FIND)
        return await self._model.find(filter, **options)

    async def find_by_id(self, document_id: Any, **options: Any) -> Optional[Document]:
        self._check(OperationKind.FIND_BY_ID)
        return await self._model.find_by_id(document_id, **options)

    async def delete(self, filter: Mapping[str, Any], **options: Any) -> Optional[Document]:
        self._check(OperationKind.DELETE)
        return await self._model.delete(filter, **options)

    async def delete_many(self, filter: Mapping[str, Any], **options: Any) -> DeleteResult:
        self._check(OperationKind.DELETE_MANY)
        return await self._model.delete_many(filter, **options)

    async def total(self, filter: Optional[Mapping[str, Any]] = None, **options: Any) -> int:
        self._check(OperationKind.TOTAL)
        return await self._model.total(filter, **options)

    async def bulk_write(self, operations: Iterable[Any], **options: Any) -> BulkWriteResult:
        self._check(OperationKind.BULK_WRITE)
        return await self._model.bulk_write(operations, **options)
