"""
Workflow session: the builder's state in one explicit object.

Holds the graph, the canvas viewport, the selected node, the catalogs,
the executor and the notifier. The API and CLI drive the builder
through a session instead of sharing module-level state.
"""
from pathlib import Path
from typing import Any

from node_registry import NodeKind
from workflow_runtime import (
    EmptyGraphError,
    NodeNotFoundError,
    OutcomeSource,
    RandomOutcomeSource,
    RunResult,
    RunStatus,
    WorkflowExecutor,
    WorkflowGraph,
    WorkflowNode,
    WorkflowStats,
)
from workflow_runtime.executor import SleepFn, sleep_ms
from workflow_runtime.graph import PositionLike
from workflow_studio.canvas import Viewport
from workflow_studio.catalog import TemplateCatalog, ToolCatalog
from workflow_studio.config import Settings, get_settings
from workflow_studio.export import WorkflowDocument, export_workflow, save_workflow
from workflow_studio.notifications import (
    LoggingNotifier,
    Notification,
    NotificationLevel,
    Notifier,
)
from workflow_studio.observability import get_logger

logger = get_logger(__name__)

# Where the "add node" buttons place a new node
DEFAULT_NODE_POSITION = (200, 200)


def build_outcome_source(settings: Settings) -> OutcomeSource:
    """Random outcome source configured from settings."""
    return RandomOutcomeSource(
        success_probability=settings.success_probability,
        min_duration_ms=settings.node_min_duration_ms,
        max_duration_ms=settings.node_max_duration_ms,
        seed=settings.random_seed,
    )


def build_sleep(settings: Settings) -> SleepFn:
    """Sleep function honouring settings.time_scale."""
    scale = settings.time_scale

    def scaled_sleep(duration_ms: float) -> None:
        sleep_ms(duration_ms * scale)

    return scaled_sleep


class WorkflowSession:
    """State and operations of one workflow builder."""

    def __init__(
        self,
        graph: WorkflowGraph | None = None,
        templates: TemplateCatalog | None = None,
        tools: ToolCatalog | None = None,
        notifier: Notifier | None = None,
        outcome_source: OutcomeSource | None = None,
        sleep: SleepFn | None = None,
        viewport: Viewport | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize session.

        Args:
            graph: Graph to edit (a new empty one if not provided)
            templates: Template catalog (built-in templates if not provided)
            tools: Tool catalog (loaded from settings.tool_catalog_path if set)
            notifier: Receives user-facing messages (logs them if not provided)
            outcome_source: Outcome source for runs (random, from settings, if not provided)
            sleep: Sleep function for runs (real time scaled by settings if not provided)
            viewport: Canvas viewport
            settings: Settings (global settings if not provided)
        """
        self.settings = settings or get_settings()
        self.graph = graph if graph is not None else WorkflowGraph()
        self.templates = templates if templates is not None else TemplateCatalog()
        if tools is None:
            tools = (
                ToolCatalog.from_json_file(self.settings.tool_catalog_path)
                if self.settings.tool_catalog_path
                else ToolCatalog()
            )
        self.tools = tools
        self.notifier = notifier or LoggingNotifier()
        self.viewport = viewport or Viewport.from_settings(self.settings)
        self.selected_node_id: str | None = None
        self.executor = WorkflowExecutor(
            self.graph,
            outcome_source=outcome_source or build_outcome_source(self.settings),
            sleep=sleep or build_sleep(self.settings),
            failure_penalty=self.settings.failure_penalty,
        )

    def _notify(self, level: NotificationLevel, message: str, event: str) -> None:
        self.notifier.notify(Notification(level=level, message=message, event=event))

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_node(
        self,
        kind: NodeKind | str,
        position: PositionLike = DEFAULT_NODE_POSITION,
        data: dict[str, Any] | None = None,
        name: str | None = None,
    ) -> str:
        """Add a node and announce it."""
        node_id = self.graph.add_node(kind, position, data=data, name=name)
        node = self.graph.get_node(node_id)
        self._notify(NotificationLevel.SUCCESS, f"{node.name} added to workflow", "node_added")
        return node_id

    def drop_tool(self, tool_id: str, client_point: PositionLike) -> str:
        """
        Drop a catalog tool onto the canvas at a pointer position.

        Raises:
            ToolNotFoundError: If the tool is not in the catalog
        """
        tool = self.tools.get(tool_id)
        node_id = self.viewport.drop_tool(self.graph, tool, client_point)
        self._notify(NotificationLevel.SUCCESS, f"{tool.name} added to workflow", "node_added")
        return node_id

    def remove_node(self, node_id: str) -> list[str]:
        dropped = self.graph.remove_node(node_id)
        if self.selected_node_id == node_id:
            self.selected_node_id = None
        return dropped

    def move_node(self, node_id: str, position: PositionLike) -> None:
        self.graph.move_node(node_id, position)

    def connect(self, source_id: str, source_port: str, target_id: str, target_port: str) -> str:
        return self.graph.connect(source_id, source_port, target_id, target_port)

    def disconnect(self, connection_id: str) -> None:
        self.graph.disconnect(connection_id)

    def select_node(self, node_id: str | None) -> None:
        """Select a node (or clear the selection with None)."""
        if node_id is not None and node_id not in self.graph:
            raise NodeNotFoundError(node_id)
        self.selected_node_id = node_id

    @property
    def selected_node(self) -> WorkflowNode | None:
        if self.selected_node_id is None:
            return None
        return self.graph.find_node(self.selected_node_id)

    def load_template(self, template_id: str) -> list[str]:
        """Replace the graph with a template and announce it."""
        template = self.templates.get(template_id)
        node_ids = self.templates.materialize(template_id, self.graph)
        self.selected_node_id = None
        self._notify(NotificationLevel.SUCCESS, f'Template "{template.name}" loaded', "template_loaded")
        return node_ids

    def clear(self) -> None:
        """Empty the graph, the log and the metrics."""
        self.graph.clear()
        self.executor.reset()
        self.selected_node_id = None
        self._notify(NotificationLevel.SUCCESS, "Workflow cleared", "workflow_cleared")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.executor.is_running

    def run(self) -> RunResult:
        """
        Run the workflow and announce the outcome.

        Raises:
            EmptyGraphError: If there are no nodes
            RunInProgressError: If a run is already active
        """
        try:
            result = self.executor.run()
        except EmptyGraphError as e:
            self._notify(NotificationLevel.ERROR, str(e), "run_rejected")
            raise

        if result.status == RunStatus.COMPLETED:
            self._notify(NotificationLevel.SUCCESS, "Workflow executed successfully!", "run_succeeded")
        elif result.status == RunStatus.FAILED:
            failed = self.graph.find_node(result.failed_node_id) if result.failed_node_id else None
            name = failed.name if failed else result.failed_node_id
            self._notify(NotificationLevel.ERROR, f"Workflow failed at {name}", "run_failed")
        elif result.status == RunStatus.STOPPED:
            self._notify(NotificationLevel.INFO, "Workflow execution stopped", "run_stopped")
        return result

    def stop(self) -> bool:
        """Request a stop of the active run."""
        return self.executor.stop()

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def stats(self) -> WorkflowStats:
        return self.graph.stats()

    def export(self, announce: bool = False) -> WorkflowDocument:
        """Snapshot the workflow; announce=True reports it as saved."""
        document = export_workflow(self.graph)
        if announce:
            self._notify(NotificationLevel.SUCCESS, "Workflow saved successfully", "workflow_saved")
        return document

    def save(self, path: str | Path) -> Path:
        """Export the workflow to a JSON file and announce it."""
        written = save_workflow(self.export(), path)
        self._notify(NotificationLevel.SUCCESS, "Workflow saved successfully", "workflow_saved")
        return written


# Global session instance
_session: WorkflowSession | None = None


def get_session() -> WorkflowSession:
    """Get or create the global session."""
    global _session
    if _session is None:
        _session = WorkflowSession()
    return _session


def reset_session() -> None:
    """Reset the global session (useful for testing)."""
    global _session
    _session = None
