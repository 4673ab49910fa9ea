"""
Node Registry - Default shapes for the closed set of node kinds.

The registry is stateless apart from its kind table:
- describe_kind(): Look up the default shape of a kind
- NodeRegistry.validate_ports(): Check port lists against the cardinality rules
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .models import NodeKind, NodeKindSpec


logger = logging.getLogger(__name__)

INPUT_PORT = "input"
OUTPUT_PORT = "output"


class NodeRegistryError(Exception):
    """Base exception for node registry errors."""

    pass


class InvalidKindError(NodeRegistryError, ValueError):
    """Raised when a node kind is outside the closed set."""

    def __init__(self, kind: object):
        self.kind = kind
        super().__init__(f"Invalid node kind: {kind!r}")


class InvalidPortLayoutError(NodeRegistryError, ValueError):
    """Raised when a node's port lists break the cardinality rules."""

    pass


_KIND_TABLE: Dict[NodeKind, NodeKindSpec] = {
    NodeKind.TRIGGER: NodeKindSpec(
        kind=NodeKind.TRIGGER,
        default_name="Trigger Node",
        icon="zap",
        inputs=[],
        outputs=[OUTPUT_PORT],
    ),
    NodeKind.ACTION: NodeKindSpec(
        kind=NodeKind.ACTION,
        default_name="Action Node",
        icon="settings",
        inputs=[INPUT_PORT],
        outputs=[OUTPUT_PORT],
    ),
    NodeKind.CONDITION: NodeKindSpec(
        kind=NodeKind.CONDITION,
        default_name="Condition Node",
        icon="git-branch",
        inputs=[INPUT_PORT],
        outputs=[OUTPUT_PORT],
    ),
    NodeKind.OUTPUT: NodeKindSpec(
        kind=NodeKind.OUTPUT,
        default_name="Output Node",
        icon="target",
        inputs=[INPUT_PORT],
        outputs=[],
    ),
}


def coerce_kind(kind: Union[NodeKind, str]) -> NodeKind:
    """Turn a kind value (enum or string) into a NodeKind."""
    if isinstance(kind, NodeKind):
        return kind
    try:
        return NodeKind(kind)
    except ValueError:
        raise InvalidKindError(kind) from None


def describe_kind(kind: Union[NodeKind, str]) -> NodeKindSpec:
    """
    Describe the default shape of a node kind.

    Args:
        kind: Node kind or its string value

    Returns:
        NodeKindSpec with default name, icon and port lists

    Raises:
        InvalidKindError: If kind is not one of the four node kinds
    """
    return _KIND_TABLE[coerce_kind(kind)]


class NodeRegistry:
    """
    Registry of node kinds.

    Usage:
        registry = get_node_registry()
        inputs, outputs = registry.create_ports("trigger")
        registry.validate_ports("output", ["input"], [])
    """

    def __init__(self, table: Optional[Dict[NodeKind, NodeKindSpec]] = None):
        self._kinds: Dict[NodeKind, NodeKindSpec] = dict(table or _KIND_TABLE)

    def describe(self, kind: Union[NodeKind, str]) -> NodeKindSpec:
        """Get the default shape of a kind."""
        resolved = coerce_kind(kind)
        if resolved not in self._kinds:
            raise InvalidKindError(kind)
        return self._kinds[resolved]

    def kinds(self) -> List[NodeKindSpec]:
        """List all kinds in declaration order."""
        return list(self._kinds.values())

    def create_ports(self, kind: Union[NodeKind, str]) -> Tuple[List[str], List[str]]:
        """Fresh copies of the default input and output port lists."""
        spec = self.describe(kind)
        return list(spec.inputs), list(spec.outputs)

    def validate_ports(
        self,
        kind: Union[NodeKind, str],
        inputs: Sequence[str],
        outputs: Sequence[str],
    ) -> None:
        """
        Check port lists against the kind's cardinality.

        Triggers have no inputs, outputs have no outputs, every other
        side has exactly one port.

        Raises:
            InvalidKindError: Unknown kind
            InvalidPortLayoutError: Port counts do not match
        """
        spec = self.describe(kind)
        if len(inputs) != len(spec.inputs):
            raise InvalidPortLayoutError(
                f"{spec.kind.value} node needs {len(spec.inputs)} input port(s), got {len(inputs)}"
            )
        if len(outputs) != len(spec.outputs):
            raise InvalidPortLayoutError(
                f"{spec.kind.value} node needs {len(spec.outputs)} output port(s), got {len(outputs)}"
            )


_registry: Optional[NodeRegistry] = None


def get_node_registry() -> NodeRegistry:
    """Get or create the shared node registry."""
    global _registry
    if _registry is None:
        _registry = NodeRegistry()
        logger.debug(f"Node registry ready with {len(_registry.kinds())} kinds")
    return _registry


__all__ = [
    "INPUT_PORT",
    "OUTPUT_PORT",
    "InvalidKindError",
    "InvalidPortLayoutError",
    "NodeRegistry",
    "NodeRegistryError",
    "coerce_kind",
    "describe_kind",
    "get_node_registry",
]
