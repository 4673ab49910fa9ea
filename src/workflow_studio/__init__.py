"""Workflow Studio - visual workflow builder backend."""

__version__ = "0.1.0"
