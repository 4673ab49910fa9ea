"""Workflow graph and execution routes."""
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field

from node_registry import NodeRegistryError
from workflow_runtime import (
    EmptyGraphError,
    ExecutionLogEntry,
    NodeStatus,
    Position,
    RunInProgressError,
    RunMetrics,
    RunStatus,
    WorkflowConnection,
    WorkflowError,
    WorkflowNode,
    WorkflowStats,
)
from workflow_studio.api.errors import http_error
from workflow_studio.export import DEFAULT_FILENAME, WorkflowDocument, to_json
from workflow_studio.observability import get_logger, with_run_context
from workflow_studio.session import DEFAULT_NODE_POSITION, WorkflowSession, get_session

logger = get_logger(__name__)
router = APIRouter(prefix="/v1/workflow")


class AddNodeRequest(BaseModel):
    """Request model for adding a node."""

    kind: str = Field(..., description="trigger, action, condition or output")
    position: Position = Field(
        default_factory=lambda: Position(x=DEFAULT_NODE_POSITION[0], y=DEFAULT_NODE_POSITION[1]),
        description="Position in graph space",
    )
    data: dict[str, Any] = Field(default_factory=dict, description="Opaque payload")
    name: str | None = Field(default=None, description="Display name override")


class ConnectRequest(BaseModel):
    """Request model for connecting two nodes."""

    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(..., description="Source node ID")
    source_handle: str = Field("output", alias="sourceHandle", description="Source output port")
    target: str = Field(..., description="Target node ID")
    target_handle: str = Field("input", alias="targetHandle", description="Target input port")


class RemoveNodeResponse(BaseModel):
    """Response model for node removal."""

    model_config = ConfigDict(populate_by_name=True)

    node_id: str = Field(..., alias="nodeId")
    removed_connections: list[str] = Field(default_factory=list, alias="removedConnections")


class RunStateResponse(BaseModel):
    """Live view of the current (or last) run."""

    model_config = ConfigDict(populate_by_name=True)

    run_id: str | None = Field(default=None, alias="runId")
    status: RunStatus
    node_statuses: dict[str, NodeStatus] = Field(default_factory=dict, alias="nodeStatuses")
    logs: list[ExecutionLogEntry] = Field(default_factory=list)
    metrics: RunMetrics = Field(default_factory=RunMetrics)


def _run_state(session: WorkflowSession) -> RunStateResponse:
    executor = session.executor
    return RunStateResponse(
        run_id=executor.run_id,
        status=executor.status,
        node_statuses={node.id: node.status for node in session.graph.nodes},
        logs=executor.logs,
        metrics=executor.metrics,
    )


def _run_in_background(session: WorkflowSession) -> None:
    """Execute the workflow outside the request."""
    try:
        session.run()
    except (EmptyGraphError, RunInProgressError) as e:
        # The graph changed between the request and the task
        logger.warning(f"Background run rejected: {e}", extra=with_run_context(workflow_event="run_rejected"))


@router.get("", response_model=WorkflowDocument)
def get_workflow(session: WorkflowSession = Depends(get_session)) -> WorkflowDocument:
    """Current nodes, connections and statistics."""
    return session.export()


@router.get("/stats", response_model=WorkflowStats)
def get_stats(session: WorkflowSession = Depends(get_session)) -> WorkflowStats:
    return session.stats()


@router.post("/nodes", response_model=WorkflowNode, status_code=201)
def add_node(request: AddNodeRequest, session: WorkflowSession = Depends(get_session)) -> WorkflowNode:
    """
    Add a node.

    Args:
        request: Node kind, position and payload

    Returns:
        The created node

    Raises:
        HTTPException: 422 for an unknown kind, 409 while running
    """
    try:
        node_id = session.add_node(request.kind, request.position, data=request.data, name=request.name)
    except (WorkflowError, NodeRegistryError) as e:
        raise http_error(e) from e
    return session.graph.get_node(node_id)


@router.put("/nodes/{node_id}/position", response_model=WorkflowNode)
def move_node(
    node_id: str,
    position: Position,
    session: WorkflowSession = Depends(get_session),
) -> WorkflowNode:
    try:
        session.move_node(node_id, position)
        return session.graph.get_node(node_id)
    except WorkflowError as e:
        raise http_error(e) from e


@router.delete("/nodes/{node_id}", response_model=RemoveNodeResponse)
def remove_node(node_id: str, session: WorkflowSession = Depends(get_session)) -> RemoveNodeResponse:
    """Remove a node together with its connections."""
    try:
        dropped = session.remove_node(node_id)
    except WorkflowError as e:
        raise http_error(e) from e
    return RemoveNodeResponse(node_id=node_id, removed_connections=dropped)


@router.post("/connections", response_model=WorkflowConnection, status_code=201)
def connect(request: ConnectRequest, session: WorkflowSession = Depends(get_session)) -> WorkflowConnection:
    try:
        connection_id = session.connect(
            request.source, request.source_handle, request.target, request.target_handle
        )
    except WorkflowError as e:
        raise http_error(e) from e
    return session.graph.get_connection(connection_id)


@router.delete("/connections/{connection_id}", status_code=204)
def disconnect(connection_id: str, session: WorkflowSession = Depends(get_session)) -> Response:
    try:
        session.disconnect(connection_id)
    except WorkflowError as e:
        raise http_error(e) from e
    return Response(status_code=204)


@router.post("/clear")
def clear(session: WorkflowSession = Depends(get_session)) -> dict:
    """Remove every node and connection and drop the run log."""
    try:
        session.clear()
    except WorkflowError as e:
        raise http_error(e) from e
    return {"status": "cleared"}


@router.post("/run", response_model=RunStateResponse, status_code=202)
def start_run(
    background_tasks: BackgroundTasks,
    session: WorkflowSession = Depends(get_session),
) -> RunStateResponse:
    """
    Queue a run as a background task.

    A 202 response means the run was queued, not that it started: a second
    request that arrives before the first run begins is also accepted, and if
    the two runs overlap the later one is dropped with a logged warning.

    Poll GET /v1/workflow/run for progress.

    Raises:
        HTTPException: 409 when the graph is empty or already running
    """
    if len(session.graph) == 0:
        raise http_error(EmptyGraphError())
    if session.is_running:
        raise HTTPException(status_code=409, detail="Workflow is already running")

    background_tasks.add_task(_run_in_background, session)
    logger.info("Run requested via API", extra=with_run_context(workflow_event="run_requested"))
    return _run_state(session)


@router.get("/run", response_model=RunStateResponse)
def get_run(session: WorkflowSession = Depends(get_session)) -> RunStateResponse:
    return _run_state(session)


@router.post("/stop")
def stop_run(session: WorkflowSession = Depends(get_session)) -> dict:
    """Request a stop; it takes effect at the next node boundary."""
    return {"stopRequested": session.stop()}


@router.get("/export")
def export_workflow(session: WorkflowSession = Depends(get_session)) -> Response:
    """Download the workflow document as workflow.json."""
    document = session.export(announce=True)
    return Response(
        content=to_json(document),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{DEFAULT_FILENAME}"'},
    )
