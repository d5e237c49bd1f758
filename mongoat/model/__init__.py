"""
Model layer: schema closing, validator building, hooks, the CRUD facade
and the capability gate.
"""

from .gate import GatedModel
from .hooks import HookPipeline, HookTransformer, as_operation_kind, as_operation_kinds
from .model import Model
from .schema import ValidationDescriptor, build_validator, close_schema

__all__ = [
    "GatedModel",
    "HookPipeline",
    "HookTransformer",
    "Model",
    "ValidationDescriptor",
    "as_operation_kind",
    "as_operation_kinds",
    "build_validator",
    "close_schema",
]
