"""
Pre-operation hooks.

One transformer per operation kind, run before the operation is sent to
storage. A transformer is called as ``transformer(payload, context)``:

- ``payload`` is the mutable in-flight object (the document being
  inserted, the update document, the filter, the pipeline or the
  operations list) and may be changed in place;
- ``context`` is a dict with the call's options (for update operations,
  the filter merged with the options).

The return value is ignored. Coroutine functions are awaited.
"""

import inspect
import logging
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, Union

from ..constants import OperationKind

logger = logging.getLogger(__name__)

HookTransformer = Callable[[Any, Dict[str, Any]], Any]


def _noop(payload: Any, context: Dict[str, Any]) -> None:
    return None


def as_operation_kind(kind: Union[OperationKind, str]) -> OperationKind:
    """
    Coerce an operation kind value.

    Raises:
        ValueError: If the value is not an operation kind
    """
    if isinstance(kind, OperationKind):
        return kind
    try:
        return OperationKind(kind)
    except ValueError:
        valid = ", ".join(k.value for k in OperationKind)
        raise ValueError(f"Unknown operation kind {kind!r}; expected one of: {valid}") from None


def as_operation_kinds(kinds: Optional[Iterable[Union[OperationKind, str]]]) -> FrozenSet[OperationKind]:
    """
    Coerce an allow-list to a frozenset of operation kinds.

    Raises:
        TypeError: If ``kinds`` is a single string instead of a collection
        ValueError: If an entry is not an operation kind
    """
    if isinstance(kinds, (str, bytes)):
        raise TypeError(
            f"allowed_operations must be a collection of operation kinds, got the string {kinds!r}"
        )
    return frozenset(as_operation_kind(kind) for kind in (kinds or ()))


class HookPipeline:
    """Per-model map from operation kind to transformer, defaulting to a no-op."""

    def __init__(self) -> None:
        self._hooks: Dict[OperationKind, HookTransformer] = {kind: _noop for kind in OperationKind}

    def register(self, kind: Union[OperationKind, str], transformer: HookTransformer) -> None:
        """
        Replace the transformer for an operation kind. Last registration wins.

        Raises:
            ValueError: If ``kind`` is not an operation kind
            TypeError: If ``transformer`` is not callable
        """
        kind = as_operation_kind(kind)
        if not callable(transformer):
            raise TypeError(f"Hook for '{kind.value}' must be callable, got {type(transformer)}")
        self._hooks[kind] = transformer
        logger.debug(f"Registered pre-{kind.value} hook {getattr(transformer, '__name__', transformer)}")

    def get(self, kind: Union[OperationKind, str]) -> HookTransformer:
        return self._hooks[as_operation_kind(kind)]

    def is_registered(self, kind: Union[OperationKind, str]) -> bool:
        """Whether a non-default transformer is set for the kind."""
        return self._hooks[as_operation_kind(kind)] is not _noop

    async def run(self, kind: OperationKind, payload: Any, context: Dict[str, Any]) -> None:
        """Run the transformer for ``kind`` against ``payload``. Errors propagate."""
        result = self._hooks[kind](payload, context)
        if inspect.isawaitable(result):
            await result
