"""
Workflow Errors - Recoverable conditions raised to the caller.

A node that fails during a run is not an error here: it is recorded
as a log entry with status=error and ends the run.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base exception for workflow errors."""

    pass


class NotFoundError(WorkflowError, LookupError):
    """Raised when an id does not resolve."""

    entity = "Object"

    def __init__(self, object_id: str):
        self.object_id = object_id
        super().__init__(f"{self.entity} not found: {object_id}")


class NodeNotFoundError(NotFoundError):
    entity = "Node"


class ConnectionNotFoundError(NotFoundError):
    entity = "Connection"


class TemplateNotFoundError(NotFoundError):
    entity = "Template"


class ToolNotFoundError(NotFoundError):
    entity = "Tool"


class InvalidPortError(WorkflowError, ValueError):
    """Raised when a port name is not declared on the node."""

    def __init__(self, node_id: str, port: str, direction: str):
        self.node_id = node_id
        self.port = port
        self.direction = direction
        super().__init__(f"Node {node_id} has no {direction} port '{port}'")


class EmptyGraphError(WorkflowError):
    """Raised when a run is requested on a graph without nodes."""

    def __init__(self, message: str = "Add some nodes to execute the workflow"):
        super().__init__(message)


class RunInProgressError(WorkflowError):
    """Raised when an operation conflicts with an active run."""

    pass


class UnsupportedSchemaError(WorkflowError, ValueError):
    """Raised when a saved document has an unknown schema version."""

    pass


__all__ = [
    "WorkflowError",
    "NotFoundError",
    "NodeNotFoundError",
    "ConnectionNotFoundError",
    "TemplateNotFoundError",
    "ToolNotFoundError",
    "InvalidPortError",
    "EmptyGraphError",
    "RunInProgressError",
    "UnsupportedSchemaError",
]
