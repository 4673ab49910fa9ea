"""Tool sidebar and canvas routes."""
from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from workflow_runtime import Position, ToolRecord, WorkflowError, WorkflowNode
from workflow_studio.api.errors import http_error
from workflow_studio.canvas import Viewport
from workflow_studio.catalog.tools import ALL_CATEGORIES, DEFAULT_SIDEBAR_LIMIT
from workflow_studio.session import WorkflowSession, get_session

router = APIRouter()


class DropToolRequest(BaseModel):
    """Request model for dropping a tool onto the canvas."""

    tool_id: str = Field(..., description="Catalog tool ID")
    x: float = Field(..., description="Pointer x in client coordinates")
    y: float = Field(..., description="Pointer y in client coordinates")


class ZoomRequest(BaseModel):
    direction: Literal["in", "out"]


class PanRequest(BaseModel):
    dx: float = 0
    dy: float = 0


@router.get("/v1/tools", response_model=list[ToolRecord])
def list_tools(
    category: str = ALL_CATEGORIES,
    q: str = "",
    limit: int = Query(DEFAULT_SIDEBAR_LIMIT, ge=1),
    session: WorkflowSession = Depends(get_session),
) -> list[ToolRecord]:
    """Tools matching the sidebar filter."""
    return session.tools.filter(category=category, query=q, limit=limit)


@router.get("/v1/tools/categories")
def list_categories(session: WorkflowSession = Depends(get_session)) -> list[str]:
    return session.tools.categories()


@router.get("/v1/canvas", response_model=Viewport)
def get_viewport(session: WorkflowSession = Depends(get_session)) -> Viewport:
    return session.viewport


@router.post("/v1/canvas/drop", response_model=WorkflowNode, status_code=201)
def drop_tool(request: DropToolRequest, session: WorkflowSession = Depends(get_session)) -> WorkflowNode:
    """
    Create an action node from a tool at the drop position.

    Raises:
        HTTPException: 404 for an unknown tool, 409 while running
    """
    try:
        node_id = session.drop_tool(request.tool_id, Position(x=request.x, y=request.y))
    except WorkflowError as e:
        raise http_error(e) from e
    return session.graph.get_node(node_id)


@router.post("/v1/canvas/zoom", response_model=Viewport)
def zoom(request: ZoomRequest, session: WorkflowSession = Depends(get_session)) -> Viewport:
    if request.direction == "in":
        session.viewport.zoom_in()
    else:
        session.viewport.zoom_out()
    return session.viewport


@router.post("/v1/canvas/pan", response_model=Viewport)
def pan(request: PanRequest, session: WorkflowSession = Depends(get_session)) -> Viewport:
    session.viewport.pan_by(request.dx, request.dy)
    return session.viewport
