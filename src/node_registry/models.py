"""
Node Registry Models - Metadata structures for node kinds.
"""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class NodeKind(str, Enum):
    """Closed set of node kinds a workflow can contain."""
    TRIGGER = "trigger"
    ACTION = "action"
    CONDITION = "condition"
    OUTPUT = "output"


class NodeKindSpec(BaseModel):
    """
    Default shape of a node kind.

    Every node the runtime constructs takes its port lists from here.
    """
    model_config = ConfigDict(frozen=True)

    kind: NodeKind = Field(..., description="Node kind")
    default_name: str = Field(..., description="Name given to a new node of this kind")
    icon: str = Field(..., description="Icon tag")
    inputs: List[str] = Field(default_factory=list, description="Input port names")
    outputs: List[str] = Field(default_factory=list, description="Output port names")

    @property
    def default_description(self) -> str:
        return f"A {self.kind.value} node"


__all__ = [
    "NodeKind",
    "NodeKindSpec",
]
