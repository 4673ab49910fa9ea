"""
Node Registry - Closed set of workflow node kinds.

This package provides:
- NodeKind: The four kinds (trigger, action, condition, output)
- NodeKindSpec: Default name, icon and port layout of a kind
- NodeRegistry: Lookup and port validation
"""

from .models import NodeKind, NodeKindSpec
from .registry import (
    INPUT_PORT,
    OUTPUT_PORT,
    InvalidKindError,
    InvalidPortLayoutError,
    NodeRegistry,
    NodeRegistryError,
    coerce_kind,
    describe_kind,
    get_node_registry,
)

__all__ = [
    "NodeKind",
    "NodeKindSpec",
    "NodeRegistry",
    "NodeRegistryError",
    "InvalidKindError",
    "InvalidPortLayoutError",
    "INPUT_PORT",
    "OUTPUT_PORT",
    "coerce_kind",
    "describe_kind",
    "get_node_registry",
]
