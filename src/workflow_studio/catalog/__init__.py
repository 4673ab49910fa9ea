"""Catalog package."""
from workflow_studio.catalog.templates import (
    BUILTIN_TEMPLATES,
    Complexity,
    TemplateCatalog,
    TemplateConnection,
    TemplateNode,
    WorkflowTemplate,
)
from workflow_studio.catalog.tools import CATEGORIES, ToolCatalog

__all__ = [
    "BUILTIN_TEMPLATES",
    "CATEGORIES",
    "Complexity",
    "TemplateCatalog",
    "TemplateConnection",
    "TemplateNode",
    "ToolCatalog",
    "WorkflowTemplate",
]
