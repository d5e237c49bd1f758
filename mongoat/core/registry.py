"""
Model registry.

Maps collection names to gated models, with at most one model per name.
A registry is owned by a `Database`; tests can build their own.

This module is part of MONGOAT.
"""

import logging
import threading
from typing import Any, Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Union

from ..constants import VALIDITY_OPERATIONS, OperationKind
from ..model import GatedModel, Model, ValidationDescriptor, as_operation_kinds, build_validator
from ..types import FieldSchema, IndexSpecification

logger = logging.getLogger(__name__)


class ModelRegistry:
    """
    Collection name -> model mapping.

    Definition is idempotent: defining a collection name that is already
    registered returns the registered model and discards the new
    definition (first definition wins). A warning is logged when the
    discarded definition differs from the registered one in its validator,
    allow-list, indexes or defaults.
    """

    def __init__(self, storage: Any) -> None:
        """
        Args:
            storage: Object exposing ``get_collection(name)``, bound into
                every model this registry creates
        """
        self._storage = storage
        self._models: Dict[str, GatedModel] = {}
        self._lock = threading.Lock()

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
        Define a model, or return the one already registered under the name.

        Args:
            collection_name: Collection name, unique within the registry
            schema: Top-level collection schema
            indexes: Index specifications created at setup
            allowed_operations: Operation kinds permitted on the model;
                nothing is permitted when omitted
            defaults: Field values merged under every inserted document
            validity: When True, the allow-list is fixed to delete, find,
                findById, findMany, insert, total, update and updateMany,
                ignoring ``allowed_operations``
            extra_validation: Query expressions merged into the validator

        Returns:
            The gated model registered under ``collection_name``

        Raises:
            ValueError: If ``collection_name`` is empty or an allow-list
                entry is not an operation kind
            TypeError: If ``allowed_operations`` is a single string
        """
        if not collection_name or not isinstance(collection_name, str):
            raise ValueError(f"collection_name must be a non-empty string, got {collection_name!r}")

        permitted = VALIDITY_OPERATIONS if validity else as_operation_kinds(allowed_operations)
        validator = build_validator(schema, extra_validation)

        existing = self._models.get(collection_name)
        if existing is not None:
            self._warn_if_redefined(existing, validator, permitted, indexes, defaults)
            return existing

        model = Model(
            collection_name=collection_name,
            validator=validator,
            storage=self._storage,
            indexes=indexes,
            allowed_operations=permitted,
            defaults=defaults,
        )
        gated = GatedModel(model)

        with self._lock:
            registered = self._models.setdefault(collection_name, gated)

        if registered is gated:
            logger.debug(
                f"Registered model '{collection_name}' with operations "
                f"{sorted(kind.value for kind in model.allowed_operations)}"
            )
        return registered

    def _warn_if_redefined(
        self,
        existing: GatedModel,
        validator: ValidationDescriptor,
        permitted: FrozenSet[OperationKind],
        indexes: Optional[Iterable[IndexSpecification]],
        defaults: Optional[Mapping[str, Any]],
    ) -> None:
        candidate = {
            "validator": validator,
            "allowed_operations": permitted,
            "indexes": tuple(dict(index) for index in (indexes or ())),
            "defaults": dict(defaults or {}),
        }
        differing = [name for name, value in candidate.items() if value != getattr(existing, name)]
        if differing:
            logger.warning(
                f"Model '{existing.collection_name}' is already defined; "
                f"the new definition was ignored (differs in: {', '.join(differing)})"
            )

    def get_model(self, name: str) -> Optional[GatedModel]:
        """Return the model registered under ``name``, or None."""
        return self._models.get(name)

    def names(self) -> list[str]:
        return list(self._models)

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[GatedModel]:
        return iter(list(self._models.values()))
