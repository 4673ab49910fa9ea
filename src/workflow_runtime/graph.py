"""
Workflow Graph - The graph store behind the builder.

Owns the ordered node list and the connection list. Insertion order
is the execution order: the executor walks nodes as they were added,
it does not sort by connections.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from node_registry import NodeKind, describe_kind, get_node_registry

from .errors import (
    ConnectionNotFoundError,
    InvalidPortError,
    NodeNotFoundError,
    RunInProgressError,
)
from .models import (
    NodeStatus,
    Position,
    ToolRecord,
    WorkflowConnection,
    WorkflowNode,
    WorkflowStats,
)


logger = logging.getLogger(__name__)

SECONDS_PER_NODE = 2
EFFICIENCY_COST_PER_CONNECTION = 5

PositionLike = Union[Position, Dict[str, float], tuple]


def new_node_id() -> str:
    return f"node-{uuid.uuid4().hex[:12]}"


def new_connection_id() -> str:
    return f"conn-{uuid.uuid4().hex[:12]}"


def as_position(position: PositionLike) -> Position:
    """Accept a Position, a {"x", "y"} dict or an (x, y) tuple."""
    if isinstance(position, Position):
        return position.model_copy()
    if isinstance(position, dict):
        return Position.model_validate(position)
    x, y = position
    return Position(x=x, y=y)


def compute_stats(
    total_nodes: int,
    total_connections: int,
    last_run: Optional[datetime] = None,
) -> WorkflowStats:
    """
    Derive graph statistics from node and connection counts.

    estimated time is two seconds per node with a floor of one second;
    efficiency loses five points per connection, clamped to [0, 100].
    """
    estimated = max(1, total_nodes * SECONDS_PER_NODE)
    efficiency = min(100, max(0, 100 - total_connections * EFFICIENCY_COST_PER_CONNECTION))
    return WorkflowStats(
        total_nodes=total_nodes,
        total_connections=total_connections,
        estimated_time_s=estimated,
        estimated_time=f"{estimated}s",
        efficiency=efficiency,
        last_run=last_run,
    )


class WorkflowGraph:
    """
    Mutable workflow graph.

    Contains:
    - Nodes in insertion order
    - Connections between (node id, port) pairs
    - A run lock that rejects structural edits while the executor runs

    Connections never dangle: removing a node removes every connection
    that references it.
    """

    def __init__(self, name: str = "Untitled Workflow"):
        self.name = name
        self._nodes: Dict[str, WorkflowNode] = {}
        self._connections: Dict[str, WorkflowConnection] = {}
        self._lock = threading.RLock()
        self._run_active = False
        self.last_run: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> List[WorkflowNode]:
        """Nodes in insertion order."""
        with self._lock:
            return list(self._nodes.values())

    @property
    def connections(self) -> List[WorkflowConnection]:
        with self._lock:
            return list(self._connections.values())

    @property
    def node_ids(self) -> List[str]:
        with self._lock:
            return list(self._nodes.keys())

    @property
    def is_locked(self) -> bool:
        return self._run_active

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[WorkflowNode]:
        return iter(self.nodes)

    def get_node(self, node_id: str) -> WorkflowNode:
        """Get node by ID, raising NodeNotFoundError when absent."""
        with self._lock:
            node = self._nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def find_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Get node by ID or None."""
        return self._nodes.get(node_id)

    def get_connection(self, connection_id: str) -> WorkflowConnection:
        with self._lock:
            connection = self._connections.get(connection_id)
        if connection is None:
            raise ConnectionNotFoundError(connection_id)
        return connection

    def connections_for(self, node_id: str) -> List[WorkflowConnection]:
        """Connections with node_id at either end."""
        with self._lock:
            return [c for c in self._connections.values() if c.references(node_id)]

    def stats(self) -> WorkflowStats:
        """Statistics for the current node and connection counts."""
        with self._lock:
            return compute_stats(len(self._nodes), len(self._connections), self.last_run)

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def _ensure_editable(self, operation: str) -> None:
        if self._run_active:
            raise RunInProgressError(f"Cannot {operation} while the workflow is running")

    def add_node(
        self,
        kind: Union[NodeKind, str],
        position: PositionLike,
        data: Optional[Dict[str, Any]] = None,
        tool: Optional[ToolRecord] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> str:
        """
        Add a node with the kind's default shape.

        Args:
            kind: Node kind
            position: Position in graph space
            data: Opaque payload
            tool: Catalog tool the node is created from
            name: Display name override
            description: Description override

        Returns:
            ID of the new node

        Raises:
            InvalidKindError: Unknown kind
            RunInProgressError: A run is active
        """
        spec = describe_kind(kind)
        inputs, outputs = get_node_registry().create_ports(spec.kind)
        payload = dict(data or {})
        if tool is not None:
            payload["tool"] = tool.model_dump()
            name = name or tool.name
            description = description if description is not None else tool.description

        node = WorkflowNode(
            id=new_node_id(),
            kind=spec.kind,
            name=name or spec.default_name,
            description=description if description is not None else spec.default_description,
            icon=spec.icon,
            position=as_position(position),
            data=payload,
            inputs=inputs,
            outputs=outputs,
        )

        with self._lock:
            self._ensure_editable("add nodes")
            self._nodes[node.id] = node

        logger.debug(f"Added {spec.kind.value} node {node.id} ({node.name})")
        return node.id

    def remove_node(self, node_id: str) -> List[str]:
        """
        Remove a node and every connection that references it.

        Returns:
            IDs of the connections removed alongside the node
        """
        with self._lock:
            self._ensure_editable("remove nodes")
            if node_id not in self._nodes:
                raise NodeNotFoundError(node_id)
            del self._nodes[node_id]
            dropped = [cid for cid, c in self._connections.items() if c.references(node_id)]
            for cid in dropped:
                del self._connections[cid]

        logger.debug(f"Removed node {node_id} and {len(dropped)} connection(s)")
        return dropped

    def connect(
        self,
        source_id: str,
        source_port: str,
        target_id: str,
        target_port: str,
    ) -> str:
        """
        Connect an output port to an input port.

        Self-loops, duplicates and cycles are accepted.

        Raises:
            NodeNotFoundError: Either node is missing
            InvalidPortError: A port is not declared on its node
        """
        with self._lock:
            self._ensure_editable("connect nodes")
            source = self.get_node(source_id)
            target = self.get_node(target_id)
            if source_port not in source.outputs:
                raise InvalidPortError(source_id, source_port, "output")
            if target_port not in target.inputs:
                raise InvalidPortError(target_id, target_port, "input")

            connection = WorkflowConnection(
                id=new_connection_id(),
                source=source_id,
                source_handle=source_port,
                target=target_id,
                target_handle=target_port,
            )
            self._connections[connection.id] = connection

        logger.debug(f"Connected {source_id}.{source_port} -> {target_id}.{target_port}")
        return connection.id

    def disconnect(self, connection_id: str) -> None:
        """Remove a connection, raising ConnectionNotFoundError when absent."""
        with self._lock:
            self._ensure_editable("disconnect nodes")
            if connection_id not in self._connections:
                raise ConnectionNotFoundError(connection_id)
            del self._connections[connection_id]

    def clear(self) -> None:
        """Remove all nodes and connections."""
        with self._lock:
            self._ensure_editable("clear the workflow")
            self._nodes.clear()
            self._connections.clear()

    def replace(
        self,
        nodes: Iterable[WorkflowNode],
        connections: Iterable[WorkflowConnection] = (),
    ) -> None:
        """
        Replace the whole graph.

        Connections are checked against the new node set before anything
        is swapped in, so a bad connection leaves the graph untouched.
        """
        new_nodes: Dict[str, WorkflowNode] = {}
        for node in nodes:
            new_nodes[node.id] = node
        new_connections: Dict[str, WorkflowConnection] = {}
        for connection in connections:
            source = new_nodes.get(connection.source)
            target = new_nodes.get(connection.target)
            if source is None:
                raise NodeNotFoundError(connection.source)
            if target is None:
                raise NodeNotFoundError(connection.target)
            if connection.source_handle not in source.outputs:
                raise InvalidPortError(source.id, connection.source_handle, "output")
            if connection.target_handle not in target.inputs:
                raise InvalidPortError(target.id, connection.target_handle, "input")
            new_connections[connection.id] = connection

        with self._lock:
            self._ensure_editable("replace the workflow")
            self._nodes = new_nodes
            self._connections = new_connections

    # ------------------------------------------------------------------
    # In-place updates
    # ------------------------------------------------------------------

    def move_node(self, node_id: str, position: PositionLike) -> None:
        """Update a node's position."""
        with self._lock:
            self.get_node(node_id).position = as_position(position)

    def rename_node(self, node_id: str, name: str) -> None:
        with self._lock:
            self.get_node(node_id).name = name

    def set_node_status(
        self,
        node_id: str,
        status: NodeStatus,
        execution_time_ms: Optional[float] = None,
    ) -> None:
        """Set a node's status (and duration, when given)."""
        with self._lock:
            node = self.get_node(node_id)
            node.status = status
            if execution_time_ms is not None:
                node.execution_time_ms = execution_time_ms

    def reset_statuses(self, clear_durations: bool = False) -> None:
        """Put every node back to idle."""
        with self._lock:
            for node in self._nodes.values():
                node.status = NodeStatus.IDLE
                if clear_durations:
                    node.execution_time_ms = None

    @contextmanager
    def run_lock(self) -> Iterator["WorkflowGraph"]:
        """
        Hold the graph for a run.

        Structural edits raise RunInProgressError until the block exits.
        """
        with self._lock:
            if self._run_active:
                raise RunInProgressError("Workflow is already running")
            self._run_active = True
        try:
            yield self
        finally:
            with self._lock:
                self._run_active = False


__all__ = [
    "WorkflowGraph",
    "as_position",
    "compute_stats",
    "new_node_id",
    "new_connection_id",
]
