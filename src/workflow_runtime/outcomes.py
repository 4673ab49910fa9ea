"""
Outcome Sources - Decide how a simulated node execution ends.

The executor asks its outcome source for every node. The default
source reproduces the builder's simulation (roughly 90% success,
1-3 seconds per node); tests inject deterministic sources.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence

from .models import WorkflowNode


@dataclass(frozen=True)
class NodeOutcome:
    """
    Result of one simulated node execution.

    data replaces the default sample payload in the log entry.
    """
    success: bool
    duration_ms: float = 0
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if self.duration_ms < 0:
            raise ValueError("duration_ms must be non-negative")


class OutcomeSource(Protocol):
    """Protocol for outcome sources."""

    def __call__(self, node: WorkflowNode, index: int) -> NodeOutcome:
        """
        Decide the outcome for a node.

        Args:
            node: Node about to be executed
            index: Position of the node in the run (0-based)
        """
        ...


class RandomOutcomeSource:
    """
    Independent random outcome per node.

    Usage:
        source = RandomOutcomeSource(success_probability=0.9, seed=42)
    """

    def __init__(
        self,
        success_probability: float = 0.9,
        min_duration_ms: float = 1000,
        max_duration_ms: float = 3000,
        seed: Optional[int] = None,
    ):
        if not 0 <= success_probability <= 1:
            raise ValueError("success_probability must be between 0 and 1")
        if min_duration_ms < 0 or max_duration_ms < min_duration_ms:
            raise ValueError("duration range must satisfy 0 <= min <= max")
        self.success_probability = success_probability
        self.min_duration_ms = min_duration_ms
        self.max_duration_ms = max_duration_ms
        self._rng = random.Random(seed)

    def __call__(self, node: WorkflowNode, index: int) -> NodeOutcome:
        duration = self._rng.uniform(self.min_duration_ms, self.max_duration_ms)
        success = self._rng.random() < self.success_probability
        return NodeOutcome(success=success, duration_ms=duration)


class ScriptedOutcomeSource:
    """
    Replays a fixed sequence of results.

    Nodes past the end of the script succeed.
    """

    def __init__(self, results: Sequence[bool], duration_ms: float = 0):
        self.results = list(results)
        self.duration_ms = duration_ms
        self.calls = 0

    def __call__(self, node: WorkflowNode, index: int) -> NodeOutcome:
        self.calls += 1
        success = self.results[index] if index < len(self.results) else True
        return NodeOutcome(success=success, duration_ms=self.duration_ms)


class AlwaysSucceed(ScriptedOutcomeSource):
    def __init__(self, duration_ms: float = 0):
        super().__init__([], duration_ms=duration_ms)


class FailAt(ScriptedOutcomeSource):
    """Succeeds for every node except the one at fail_index."""

    def __init__(self, fail_index: int, duration_ms: float = 0):
        if fail_index < 0:
            raise ValueError("fail_index must be non-negative")
        super().__init__([True] * fail_index + [False], duration_ms=duration_ms)


__all__ = [
    "NodeOutcome",
    "OutcomeSource",
    "RandomOutcomeSource",
    "ScriptedOutcomeSource",
    "AlwaysSucceed",
    "FailAt",
]
