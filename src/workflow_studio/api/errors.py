"""Translate workflow errors into HTTP errors."""
from fastapi import HTTPException

from node_registry import NodeRegistryError
from workflow_runtime import (
    EmptyGraphError,
    InvalidPortError,
    NotFoundError,
    RunInProgressError,
)


def http_error(exc: Exception) -> HTTPException:
    """
    Map a workflow error to an HTTPException.

    Args:
        exc: Error raised by the session

    Returns:
        HTTPException with a matching status code
    """
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (InvalidPortError, NodeRegistryError)):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, (EmptyGraphError, RunInProgressError)):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
