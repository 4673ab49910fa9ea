"""Workflow document export and import."""
import json
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from workflow_runtime import (
    NodeStatus,
    UnsupportedSchemaError,
    WorkflowConnection,
    WorkflowGraph,
    WorkflowNode,
    WorkflowStats,
)
from workflow_runtime.models import utc_now
from workflow_studio.observability import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1
DEFAULT_FILENAME = "workflow.json"


class WorkflowDocument(BaseModel):
    """Portable snapshot of a workflow graph."""

    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schemaVersion")
    nodes: list[WorkflowNode] = Field(default_factory=list)
    connections: list[WorkflowConnection] = Field(default_factory=list)
    stats: WorkflowStats = Field(default_factory=WorkflowStats)
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")


def export_workflow(graph: WorkflowGraph) -> WorkflowDocument:
    """
    Snapshot the graph and its statistics.

    The document holds copies, so later edits to the graph do not
    change it.
    """
    return WorkflowDocument(
        nodes=[node.model_copy(deep=True) for node in graph.nodes],
        connections=[c.model_copy() for c in graph.connections],
        stats=graph.stats(),
    )


def to_json(document: WorkflowDocument, indent: int = 2) -> str:
    """Render the document as camelCase JSON."""
    return document.model_dump_json(by_alias=True, indent=indent)


def save_workflow(document: WorkflowDocument, path: str | Path) -> Path:
    """
    Write the document to disk.

    Args:
        document: Document to write
        path: Target file, or a directory to write workflow.json into

    Returns:
        Path that was written
    """
    target = Path(path)
    if target.is_dir():
        target = target / DEFAULT_FILENAME
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(to_json(document), encoding="utf-8")
    logger.info("Workflow saved", extra={"path": str(target), "nodes": len(document.nodes)})
    return target


def load_workflow(source: str | Path) -> WorkflowDocument:
    """
    Parse a saved document from a path or a JSON string.

    Documents without a schemaVersion are read as version 1.

    Raises:
        UnsupportedSchemaError: If the document is not a JSON object or is
            from a newer schema
    """
    is_text = isinstance(source, str) and source.lstrip().startswith(("{", "["))
    if not is_text:
        text = Path(source).read_text(encoding="utf-8")
    else:
        text = source

    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise UnsupportedSchemaError("Workflow document must be a JSON object")
    version = raw.get("schemaVersion", SCHEMA_VERSION)
    if not isinstance(version, int) or version > SCHEMA_VERSION:
        raise UnsupportedSchemaError(f"Unsupported workflow schema version: {version!r}")
    return WorkflowDocument.model_validate(raw)


def restore_workflow(document: WorkflowDocument, graph: WorkflowGraph) -> None:
    """
    Load a document's nodes and connections into a graph.

    Node statuses are reset to idle; the graph's previous contents are
    replaced.
    """
    nodes = []
    for node in document.nodes:
        restored = node.model_copy(deep=True)
        restored.status = NodeStatus.IDLE
        nodes.append(restored)
    graph.replace(nodes, [c.model_copy() for c in document.connections])
