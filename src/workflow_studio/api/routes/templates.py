"""Template catalog routes."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from workflow_runtime import WorkflowError, WorkflowStats
from workflow_studio.api.errors import http_error
from workflow_studio.catalog import WorkflowTemplate
from workflow_studio.session import WorkflowSession, get_session

router = APIRouter(prefix="/v1/templates")


class LoadTemplateResponse(BaseModel):
    """Response model for loading a template."""

    model_config = ConfigDict(populate_by_name=True)

    template_id: str = Field(..., alias="templateId")
    node_ids: list[str] = Field(default_factory=list, alias="nodeIds")
    stats: WorkflowStats


@router.get("", response_model=list[WorkflowTemplate])
def list_templates(
    category: str | None = None,
    session: WorkflowSession = Depends(get_session),
) -> list[WorkflowTemplate]:
    """List templates, optionally filtered by category."""
    return session.templates.list(category=category)


@router.get("/{template_id}", response_model=WorkflowTemplate)
def get_template(template_id: str, session: WorkflowSession = Depends(get_session)) -> WorkflowTemplate:
    try:
        return session.templates.get(template_id)
    except WorkflowError as e:
        raise http_error(e) from e


@router.post("/{template_id}/load", response_model=LoadTemplateResponse)
def load_template(template_id: str, session: WorkflowSession = Depends(get_session)) -> LoadTemplateResponse:
    """
    Replace the current workflow with a template.

    Raises:
        HTTPException: 404 for an unknown template, 409 while running
    """
    try:
        node_ids = session.load_template(template_id)
    except WorkflowError as e:
        raise http_error(e) from e
    return LoadTemplateResponse(template_id=template_id, node_ids=node_ids, stats=session.stats())
