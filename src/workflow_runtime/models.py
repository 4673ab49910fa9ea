"""
Workflow Models - Nodes, connections and run records.

Exported fields use the camelCase names of the saved workflow document
(e.g. "type", "sourceHandle", "executionTime"); Python code uses the
snake_case attribute names.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from node_registry import NodeKind, get_node_registry


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NodeStatus(str, Enum):
    """Status of a node."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


class RunStatus(str, Enum):
    """Overall run status."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.STOPPED, RunStatus.FAILED)


class LogStatus(str, Enum):
    """Outcome recorded in an execution log entry."""
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


class Position(BaseModel):
    """Node position in graph space."""
    x: float = 0
    y: float = 0


class ToolRecord(BaseModel):
    """
    A catalog tool that can be dropped onto the canvas.

    Supplied by the catalog collaborator and never modified here.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    id: str = Field(..., description="Tool ID")
    name: str = Field(..., description="Tool name")
    description: str = Field("", description="Tool description")
    category: str = Field("", description="Catalog category")
    image: str = Field("", description="Image URL")
    rating: float = Field(0, description="Average rating")


class WorkflowNode(BaseModel):
    """
    A node in a workflow graph.

    Port lists must match the kind's cardinality: triggers have no
    inputs, outputs have no outputs, everything else has one of each.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique node ID")
    kind: NodeKind = Field(..., alias="type", description="Node kind")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="Node description")
    icon: str = Field("", description="Icon tag")
    position: Position = Field(default_factory=Position)
    data: Dict[str, Any] = Field(default_factory=dict, description="Opaque payload")
    inputs: List[str] = Field(default_factory=list, description="Input port names")
    outputs: List[str] = Field(default_factory=list, description="Output port names")
    status: NodeStatus = Field(NodeStatus.IDLE, description="Execution status")
    execution_time_ms: Optional[float] = Field(
        None, alias="executionTime", description="Duration of the last execution"
    )

    @model_validator(mode="after")
    def _check_ports(self) -> "WorkflowNode":
        get_node_registry().validate_ports(self.kind, self.inputs, self.outputs)
        return self

    @property
    def tool(self) -> Optional[ToolRecord]:
        """Catalog tool this node was created from, if any."""
        tool = self.data.get("tool")
        if tool is None:
            return None
        if isinstance(tool, ToolRecord):
            return tool
        return ToolRecord.model_validate(tool)


class WorkflowConnection(BaseModel):
    """
    Directed edge from an output port of one node to an input port of another.

    Ports are scoped to their node: (source, source_handle) and
    (target, target_handle).
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Connection ID")
    source: str = Field(..., description="Source node ID")
    source_handle: str = Field(..., alias="sourceHandle", description="Source output port")
    target: str = Field(..., description="Target node ID")
    target_handle: str = Field(..., alias="targetHandle", description="Target input port")

    def references(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


class WorkflowStats(BaseModel):
    """Statistics derived from the current graph."""
    model_config = ConfigDict(populate_by_name=True)

    total_nodes: int = Field(0, alias="totalNodes")
    total_connections: int = Field(0, alias="totalConnections")
    estimated_time_s: int = Field(1, alias="estimatedTimeSeconds")
    estimated_time: str = Field("1s", alias="estimatedTime")
    efficiency: int = Field(100, ge=0, le=100)
    last_run: Optional[datetime] = Field(None, alias="lastRun")


class ExecutionLogEntry(BaseModel):
    """
    One line of a run's execution log.

    node_name is captured when the entry is written, so renaming the
    node later does not rewrite history.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Log entry ID")
    timestamp: datetime = Field(default_factory=utc_now)
    node_id: str = Field(..., alias="nodeId")
    node_name: str = Field(..., alias="nodeName")
    status: LogStatus
    message: str
    duration_ms: float = Field(0, alias="duration")
    data: Optional[Dict[str, Any]] = None


class RunMetrics(BaseModel):
    """Metrics streamed while a run is in progress."""
    model_config = ConfigDict(populate_by_name=True)

    nodes_executed: int = Field(0, alias="nodesExecuted")
    success_rate: float = Field(100, alias="successRate", ge=0, le=100)
    total_execution_time_ms: float = Field(0, alias="totalExecutionTime")
    throughput: float = Field(0, description="Nodes per second of simulated time")
    progress: float = Field(0, ge=0, le=100, description="Percent of nodes executed")


class RunResult(BaseModel):
    """Frozen record of one finished run."""
    model_config = ConfigDict(populate_by_name=True)

    run_id: str = Field(..., alias="runId")
    status: RunStatus
    logs: List[ExecutionLogEntry] = Field(default_factory=list)
    metrics: RunMetrics = Field(default_factory=RunMetrics)
    started_at: datetime = Field(default_factory=utc_now, alias="startedAt")
    finished_at: Optional[datetime] = Field(None, alias="finishedAt")
    failed_node_id: Optional[str] = Field(None, alias="failedNodeId")

    @property
    def is_success(self) -> bool:
        return self.status == RunStatus.COMPLETED


class ExecutionEventType(str, Enum):
    RUN_STARTED = "run_started"
    NODE_STARTED = "node_started"
    NODE_FINISHED = "node_finished"
    RUN_FINISHED = "run_finished"


class ExecutionEvent(BaseModel):
    """Published to executor listeners at every state transition."""
    model_config = ConfigDict(populate_by_name=True)

    event_type: ExecutionEventType = Field(..., alias="eventType")
    run_id: str = Field(..., alias="runId")
    run_status: RunStatus = Field(..., alias="runStatus")
    timestamp: datetime = Field(default_factory=utc_now)
    node_id: Optional[str] = Field(None, alias="nodeId")
    node_name: Optional[str] = Field(None, alias="nodeName")
    node_status: Optional[NodeStatus] = Field(None, alias="nodeStatus")
    log: Optional[ExecutionLogEntry] = None
    metrics: RunMetrics = Field(default_factory=RunMetrics)


__all__ = [
    "NodeStatus",
    "RunStatus",
    "LogStatus",
    "Position",
    "ToolRecord",
    "WorkflowNode",
    "WorkflowConnection",
    "WorkflowStats",
    "ExecutionLogEntry",
    "RunMetrics",
    "RunResult",
    "ExecutionEventType",
    "ExecutionEvent",
    "utc_now",
]
