"""
Workflow Runtime - Graph store and simulated sequential execution.

This package provides:
- WorkflowNode / WorkflowConnection: Graph records
- WorkflowGraph: Node and connection store with derived statistics
- WorkflowExecutor: Sequential, fail-fast, cooperatively stoppable executor
- Outcome sources: Pluggable success/duration policies

All execution is synchronous; one node runs at a time.
"""

from .errors import (
    ConnectionNotFoundError,
    EmptyGraphError,
    InvalidPortError,
    NodeNotFoundError,
    NotFoundError,
    RunInProgressError,
    TemplateNotFoundError,
    ToolNotFoundError,
    UnsupportedSchemaError,
    WorkflowError,
)
from .models import (
    ExecutionEvent,
    ExecutionEventType,
    ExecutionLogEntry,
    LogStatus,
    NodeStatus,
    Position,
    RunMetrics,
    RunResult,
    RunStatus,
    ToolRecord,
    WorkflowConnection,
    WorkflowNode,
    WorkflowStats,
)
from .graph import WorkflowGraph, compute_stats
from .outcomes import (
    AlwaysSucceed,
    FailAt,
    NodeOutcome,
    OutcomeSource,
    RandomOutcomeSource,
    ScriptedOutcomeSource,
)
from .executor import WorkflowExecutor

__all__ = [
    # Models
    "WorkflowNode",
    "WorkflowConnection",
    "WorkflowStats",
    "Position",
    "ToolRecord",
    "NodeStatus",
    "RunStatus",
    "LogStatus",
    "ExecutionLogEntry",
    "ExecutionEvent",
    "ExecutionEventType",
    "RunMetrics",
    "RunResult",
    # Graph
    "WorkflowGraph",
    "compute_stats",
    # Outcomes
    "NodeOutcome",
    "OutcomeSource",
    "RandomOutcomeSource",
    "ScriptedOutcomeSource",
    "AlwaysSucceed",
    "FailAt",
    # Executor
    "WorkflowExecutor",
    # Errors
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
