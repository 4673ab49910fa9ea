"""
Workflow Executor - Sequential simulated execution engine.

Runs the graph's nodes one at a time in insertion order, stopping at
the first failure. Every status change is written to the graph and
published to listeners the moment it happens.

Stop is cooperative: it is only observed between nodes, never in the
middle of a node's simulated duration.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Callable, List, Optional

from .errors import EmptyGraphError, RunInProgressError
from .graph import WorkflowGraph
from .models import (
    ExecutionEvent,
    ExecutionEventType,
    ExecutionLogEntry,
    LogStatus,
    NodeStatus,
    RunMetrics,
    RunResult,
    RunStatus,
    WorkflowNode,
    utc_now,
)
from .outcomes import NodeOutcome, OutcomeSource, RandomOutcomeSource


logger = logging.getLogger(__name__)

DEFAULT_FAILURE_PENALTY = 10

SleepFn = Callable[[float], None]
Listener = Callable[[ExecutionEvent], None]


def sleep_ms(duration_ms: float) -> None:
    """Block for duration_ms milliseconds."""
    if duration_ms > 0:
        time.sleep(duration_ms / 1000)


class WorkflowExecutor:
    """
    Sequential workflow executor.

    Executes the graph's nodes in insertion order:
    - idle -> running -> completed/error per node
    - a failed node ends the run (remaining nodes stay idle)
    - stop() resets every node to idle at the next node boundary

    Usage:
        executor = WorkflowExecutor(graph, outcome_source=AlwaysSucceed())
        executor.subscribe(print)
        result = executor.run()
    """

    def __init__(
        self,
        graph: WorkflowGraph,
        outcome_source: Optional[OutcomeSource] = None,
        sleep: Optional[SleepFn] = None,
        failure_penalty: float = DEFAULT_FAILURE_PENALTY,
    ):
        """
        Initialize executor.

        Args:
            graph: Graph to run
            outcome_source: Decides success and duration per node
            sleep: Called with each node's duration in milliseconds
            failure_penalty: Success-rate points lost per failed node

        Raises:
            ValueError: If failure_penalty is negative
        """
        if failure_penalty < 0:
            raise ValueError("failure_penalty must be non-negative")
        self._graph = graph
        self._outcome_source = outcome_source or RandomOutcomeSource()
        self._sleep = sleep or sleep_ms
        self._failure_penalty = failure_penalty

        self._listeners: List[Listener] = []
        self._stop_requested = threading.Event()
        self._state_lock = threading.Lock()

        self._status = RunStatus.IDLE
        self._run_id: Optional[str] = None
        self._logs: List[ExecutionLogEntry] = []
        self._metrics = RunMetrics()
        self.last_result: Optional[RunResult] = None

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def graph(self) -> WorkflowGraph:
        return self._graph

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status == RunStatus.RUNNING

    @property
    def run_id(self) -> Optional[str]:
        return self._run_id

    @property
    def logs(self) -> List[ExecutionLogEntry]:
        """Log entries of the current (or last) run."""
        with self._state_lock:
            return list(self._logs)

    @property
    def metrics(self) -> RunMetrics:
        with self._state_lock:
            return self._metrics.model_copy()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for execution events.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(
        self,
        event_type: ExecutionEventType,
        node: Optional[WorkflowNode] = None,
        node_status: Optional[NodeStatus] = None,
        log: Optional[ExecutionLogEntry] = None,
    ) -> None:
        event = ExecutionEvent(
            event_type=event_type,
            run_id=self._run_id or "",
            run_status=self._status,
            node_id=node.id if node else None,
            node_name=node.name if node else None,
            node_status=node_status,
            log=log,
            metrics=self.metrics,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Execution listener failed on {event_type.value}")

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def stop(self) -> bool:
        """
        Request a cooperative stop.

        Returns:
            True if a run was active and will stop at the next node boundary
        """
        if not self.is_running:
            return False
        self._stop_requested.set()
        logger.info(f"Stop requested for run {self._run_id}")
        return True

    def reset(self) -> None:
        """Drop the log and metrics of the last run."""
        if self.is_running:
            raise RunInProgressError("Cannot reset while the workflow is running")
        with self._state_lock:
            self._logs = []
            self._metrics = RunMetrics()
            self._status = RunStatus.IDLE
            self._run_id = None
        self.last_result = None

    def run(self) -> RunResult:
        """
        Execute every node in insertion order.

        Returns:
            RunResult with final status, log and metrics

        Raises:
            EmptyGraphError: The graph has no nodes
            RunInProgressError: A run is already active on this graph
        """
        if len(self._graph) == 0:
            raise EmptyGraphError()

        with self._graph.run_lock():
            return self._run_locked()

    def _run_locked(self) -> RunResult:
        nodes = self._graph.nodes
        started_at = utc_now()
        failed_node_id: Optional[str] = None

        with self._state_lock:
            self._stop_requested.clear()
            self._run_id = f"run-{uuid.uuid4().hex[:12]}"
            self._status = RunStatus.RUNNING
            self._logs = []
            self._metrics = RunMetrics()
        self._graph.reset_statuses(clear_durations=True)

        logger.info(
            f"Run {self._run_id} started with {len(nodes)} node(s)",
            extra={"run_id": self._run_id},
        )
        self._publish(ExecutionEventType.RUN_STARTED)

        final_status = RunStatus.COMPLETED
        try:
            for index, node in enumerate(nodes):
                if self._stop_requested.is_set():
                    final_status = RunStatus.STOPPED
                    break

                self._graph.set_node_status(node.id, NodeStatus.RUNNING)
                self._publish(ExecutionEventType.NODE_STARTED, node=node, node_status=NodeStatus.RUNNING)

                outcome = self._execute_node(node, index)

                if self._stop_requested.is_set():
                    final_status = RunStatus.STOPPED
                    break

                node_status = NodeStatus.COMPLETED if outcome.success else NodeStatus.ERROR
                self._graph.set_node_status(node.id, node_status, outcome.duration_ms)
                entry = self._record(node, outcome, total=len(nodes))
                self._publish(ExecutionEventType.NODE_FINISHED, node=node, node_status=node_status, log=entry)

                if not outcome.success:
                    logger.error(
                        f"Node {node.name} failed, stopping run {self._run_id}",
                        extra={"run_id": self._run_id, "node_id": node.id},
                    )
                    failed_node_id = node.id
                    final_status = RunStatus.FAILED
                    break
        except Exception:
            logger.exception(
                f"Run {self._run_id} aborted by an unexpected error",
                extra={"run_id": self._run_id},
            )
            self._graph.reset_statuses()
            self._graph.last_run = utc_now()
            with self._state_lock:
                self._status = RunStatus.FAILED
            self._publish(ExecutionEventType.RUN_FINISHED)
            raise

        # A stop accepted after the last node still ends the run as stopped
        if self._stop_requested.is_set() and final_status != RunStatus.FAILED:
            final_status = RunStatus.STOPPED

        if final_status == RunStatus.STOPPED:
            self._graph.reset_statuses()

        finished_at = utc_now()
        self._graph.last_run = finished_at
        with self._state_lock:
            self._status = final_status
            result = RunResult(
                run_id=self._run_id,
                status=final_status,
                logs=list(self._logs),
                metrics=self._metrics.model_copy(),
                started_at=started_at,
                finished_at=finished_at,
                failed_node_id=failed_node_id,
            )
        self.last_result = result

        logger.info(
            f"Run {self._run_id} finished: {final_status.value}",
            extra={"run_id": self._run_id},
        )
        self._publish(ExecutionEventType.RUN_FINISHED)
        return result

    def _execute_node(self, node: WorkflowNode, index: int) -> NodeOutcome:
        """Resolve the node's outcome and wait out its duration."""
        try:
            outcome = self._outcome_source(node, index)
            self._sleep(outcome.duration_ms)
            return outcome
        except Exception as e:
            logger.exception(
                f"Node {node.name} raised during execution",
                extra={"run_id": self._run_id, "node_id": node.id},
            )
            return NodeOutcome(success=False, duration_ms=0, data={"error": str(e)})

    def _record(self, node: WorkflowNode, outcome: NodeOutcome, total: int) -> ExecutionLogEntry:
        """Append the node's log entry and fold it into the metrics."""
        if outcome.success:
            message = f"{node.name} executed successfully"
            data = outcome.data or {"result": "Sample output data"}
        else:
            message = f"{node.name} failed to execute"
            data = outcome.data or {"error": "Sample error message"}

        entry = ExecutionLogEntry(
            id=f"log-{uuid.uuid4().hex[:12]}",
            node_id=node.id,
            node_name=node.name,
            status=LogStatus.SUCCESS if outcome.success else LogStatus.ERROR,
            message=message,
            duration_ms=outcome.duration_ms,
            data=data,
        )

        with self._state_lock:
            self._logs.append(entry)
            previous = self._metrics
            executed = previous.nodes_executed + 1
            elapsed_ms = previous.total_execution_time_ms + outcome.duration_ms
            success_rate = previous.success_rate
            if not outcome.success:
                success_rate = max(0, success_rate - self._failure_penalty)
            self._metrics = RunMetrics(
                nodes_executed=executed,
                success_rate=success_rate,
                total_execution_time_ms=elapsed_ms,
                throughput=executed / (elapsed_ms / 1000) if elapsed_ms > 0 else 0.0,
                progress=min(100.0, executed / total * 100),
            )

        logger.debug(
            f"Node {node.name}: {entry.status.value} in {outcome.duration_ms:.0f}ms",
            extra={"run_id": self._run_id, "node_id": node.id},
        )
        return entry


__all__ = [
    "WorkflowExecutor",
    "DEFAULT_FAILURE_PENALTY",
    "sleep_ms",
]
