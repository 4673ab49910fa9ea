"""Read-only view over the tool catalog supplied by the backend store."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from workflow_runtime import ToolNotFoundError, ToolRecord
from workflow_studio.observability import get_logger

logger = get_logger(__name__)

ALL_CATEGORIES = "All"

CATEGORIES = [
    ALL_CATEGORIES,
    "Content Creation",
    "Data Processing",
    "Communication",
    "Analytics",
    "Automation",
]

DEFAULT_SIDEBAR_LIMIT = 10


class ToolCatalog:
    """Ordered, read-only collection of tool records."""

    def __init__(self, tools: Iterable[ToolRecord | dict[str, Any]] = ()):
        """
        Initialize tool catalog.

        Args:
            tools: Tool records (or dicts) in catalog order
        """
        self._tools: list[ToolRecord] = [
            tool if isinstance(tool, ToolRecord) else ToolRecord.model_validate(tool)
            for tool in tools
        ]

    @classmethod
    def from_json_file(cls, path: str | Path) -> "ToolCatalog":
        """
        Load a catalog from a JSON list of tool records.

        Args:
            path: JSON file path

        Returns:
            ToolCatalog with the file's records
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError(f"Tool catalog must be a JSON list: {path}")
        catalog = cls(raw)
        logger.info(f"Loaded {len(catalog)} tools from {path}")
        return catalog

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self):
        return iter(self._tools)

    def list(self) -> list[ToolRecord]:
        return list(self._tools)

    def get(self, tool_id: str) -> ToolRecord:
        """
        Get a tool by ID.

        Raises:
            ToolNotFoundError: If no tool has this ID
        """
        for tool in self._tools:
            if tool.id == tool_id:
                return tool
        raise ToolNotFoundError(tool_id)

    def categories(self) -> list[str]:
        """Categories offered by the sidebar filter."""
        return list(CATEGORIES)

    def filter(
        self,
        category: str = ALL_CATEGORIES,
        query: str = "",
        limit: int | None = DEFAULT_SIDEBAR_LIMIT,
    ) -> list[ToolRecord]:
        """
        Filter tools the way the sidebar does.

        Args:
            category: Exact category, or "All"
            query: Case-insensitive substring of the tool name
            limit: Maximum number of results (None for all)

        Returns:
            Matching tools in catalog order
        """
        needle = query.strip().lower()
        matches = [
            tool
            for tool in self._tools
            if (category == ALL_CATEGORIES or tool.category == category)
            and (not needle or needle in tool.name.lower())
        ]
        if limit is not None:
            matches = matches[:limit]
        return matches
