"""
Pre-built workflow templates.

Templates are immutable blueprints. Materializing one replaces the
graph's contents with fresh copies of the template's nodes and
connections; node ids are regenerated on every load.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from node_registry import INPUT_PORT, OUTPUT_PORT, NodeKind, describe_kind, get_node_registry
from workflow_runtime import (
    Position,
    TemplateNotFoundError,
    WorkflowConnection,
    WorkflowGraph,
    WorkflowNode,
)
from workflow_runtime.graph import new_connection_id, new_node_id
from workflow_studio.observability import get_logger

logger = get_logger(__name__)


class Complexity(str, Enum):
    """Template complexity tier."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class TemplateNode(BaseModel):
    """Node blueprint, addressed by a key local to its template."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Key used by the template's connections")
    kind: NodeKind
    name: str
    description: str = ""
    position: Position = Field(default_factory=Position)
    data: dict[str, Any] = Field(default_factory=dict)


class TemplateConnection(BaseModel):
    """Connection blueprint between two template node keys."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    source_handle: str = OUTPUT_PORT
    target_handle: str = INPUT_PORT


class WorkflowTemplate(BaseModel):
    """Named, reusable workflow blueprint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Template ID")
    name: str = Field(..., description="Template name")
    description: str = Field("", description="Template description")
    category: str = Field(..., description="Catalog category")
    complexity: Complexity
    estimated_time: str = Field("", alias="estimatedTime", description="Human estimate, e.g. '5-10 min'")
    usage_count: int = Field(0, alias="usageCount")
    rating: float = Field(0, ge=0, le=5)
    nodes: tuple[TemplateNode, ...] = ()
    connections: tuple[TemplateConnection, ...] = ()

    def build(self) -> tuple[list[WorkflowNode], list[WorkflowConnection]]:
        """
        Instantiate the blueprint with fresh ids.

        Returns:
            (nodes, connections) ready for WorkflowGraph.replace
        """
        registry = get_node_registry()
        ids: dict[str, str] = {}
        nodes: list[WorkflowNode] = []
        for blueprint in self.nodes:
            spec = describe_kind(blueprint.kind)
            inputs, outputs = registry.create_ports(spec.kind)
            node = WorkflowNode(
                id=new_node_id(),
                kind=spec.kind,
                name=blueprint.name,
                description=blueprint.description or spec.default_description,
                icon=spec.icon,
                position=blueprint.position.model_copy(),
                data=dict(blueprint.data),
                inputs=inputs,
                outputs=outputs,
            )
            ids[blueprint.key] = node.id
            nodes.append(node)

        connections = [
            WorkflowConnection(
                id=new_connection_id(),
                source=ids[link.source],
                source_handle=link.source_handle,
                target=ids[link.target],
                target_handle=link.target_handle,
            )
            for link in self.connections
        ]
        return nodes, connections


def _chain(*keys: str) -> list[dict[str, str]]:
    return [{"source": a, "target": b} for a, b in zip(keys, keys[1:])]


# Template definitions
BUILTIN_TEMPLATES: list[dict[str, Any]] = [
    {
        "id": "1",
        "name": "Content Creation Pipeline",
        "description": "Generate blog posts, create images, and publish to social media",
        "category": "Content Creation",
        "complexity": "Intermediate",
        "estimated_time": "5-10 min",
        "usage_count": 1247,
        "rating": 4.8,
        "nodes": [
            {"key": "topic", "kind": "trigger", "name": "New Topic",
             "description": "Triggers when a topic is submitted", "position": {"x": 100, "y": 100}},
            {"key": "draft", "kind": "action", "name": "Write Blog Post",
             "description": "Drafts the article", "position": {"x": 300, "y": 100}},
            {"key": "image", "kind": "action", "name": "Create Images",
             "description": "Generates illustrations for the post", "position": {"x": 500, "y": 100}},
            {"key": "review", "kind": "condition", "name": "Quality Check",
             "description": "Passes posts that meet the style guide", "position": {"x": 700, "y": 100}},
            {"key": "publish", "kind": "output", "name": "Publish to Social Media",
             "description": "Posts the result", "position": {"x": 900, "y": 100}},
        ],
        "connections": _chain("topic", "draft", "image", "review", "publish"),
    },
    {
        "id": "2",
        "name": "Data Analysis Workflow",
        "description": "Process data, generate insights, and create visualizations",
        "category": "Data Processing",
        "complexity": "Advanced",
        "estimated_time": "15-20 min",
        "usage_count": 892,
        "rating": 4.6,
        "nodes": [
            {"key": "upload", "kind": "trigger", "name": "Dataset Uploaded",
             "description": "Triggers when data is received", "position": {"x": 100, "y": 100}},
            {"key": "clean", "kind": "action", "name": "Clean Data",
             "description": "Removes duplicates and fills gaps", "position": {"x": 300, "y": 100}},
            {"key": "validate", "kind": "condition", "name": "Validate Schema",
             "description": "Checks required columns", "position": {"x": 500, "y": 100}},
            {"key": "insights", "kind": "action", "name": "Generate Insights",
             "description": "Summarizes trends", "position": {"x": 700, "y": 50}},
            {"key": "charts", "kind": "action", "name": "Create Visualizations",
             "description": "Renders charts", "position": {"x": 700, "y": 200}},
            {"key": "report", "kind": "output", "name": "Send Report",
             "description": "Delivers the report", "position": {"x": 900, "y": 100}},
        ],
        "connections": [
            {"source": "upload", "target": "clean"},
            {"source": "clean", "target": "validate"},
            {"source": "validate", "target": "insights"},
            {"source": "validate", "target": "charts"},
            {"source": "insights", "target": "report"},
            {"source": "charts", "target": "report"},
        ],
    },
    {
        "id": "3",
        "name": "Customer Support Automation",
        "description": "Automate customer inquiries and generate responses",
        "category": "Communication",
        "complexity": "Beginner",
        "estimated_time": "2-5 min",
        "usage_count": 2156,
        "rating": 4.9,
        "nodes": [
            {"key": "webhook", "kind": "trigger", "name": "Webhook Trigger",
             "description": "Triggers when data is received", "position": {"x": 100, "y": 100}},
            {"key": "process", "kind": "action", "name": "Process Data",
             "description": "Processes the incoming data", "position": {"x": 300, "y": 100}},
            {"key": "send", "kind": "output", "name": "Send Result",
             "description": "Sends the processed result", "position": {"x": 500, "y": 100}},
        ],
        "connections": _chain("webhook", "process", "send"),
    },
]


class TemplateCatalog:
    """Catalog of workflow templates."""

    def __init__(self, templates: Iterable[WorkflowTemplate | dict[str, Any]] | None = None):
        """
        Initialize template catalog.

        Args:
            templates: Templates to offer (defaults to the built-in set)
        """
        source = BUILTIN_TEMPLATES if templates is None else templates
        self._templates: dict[str, WorkflowTemplate] = {}
        for item in source:
            template = item if isinstance(item, WorkflowTemplate) else WorkflowTemplate.model_validate(item)
            self._templates[template.id] = template

    def __len__(self) -> int:
        return len(self._templates)

    def list(self, category: str | None = None) -> list[WorkflowTemplate]:
        """
        List templates, optionally restricted to one category.

        Args:
            category: Exact category name, or None for all

        Returns:
            Templates in catalog order
        """
        return [
            t for t in self._templates.values()
            if category is None or t.category == category
        ]

    def get(self, template_id: str) -> WorkflowTemplate:
        """
        Get a template by ID.

        Raises:
            TemplateNotFoundError: If the ID is unknown
        """
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def materialize(self, template_id: str, graph: WorkflowGraph) -> list[str]:
        """
        Replace the graph's contents with a fresh copy of a template.

        Args:
            template_id: Template to load
            graph: Graph whose nodes and connections are replaced

        Returns:
            IDs of the new nodes, in template order

        Raises:
            TemplateNotFoundError: If the ID is unknown
            RunInProgressError: If the graph is running
        """
        template = self.get(template_id)
        nodes, connections = template.build()
        graph.replace(nodes, connections)
        logger.info(
            f"Template '{template.name}' materialized",
            extra={"template_id": template.id, "nodes": len(nodes), "connections": len(connections)},
        )
        return [node.id for node in nodes]
