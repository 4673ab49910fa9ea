"""Structured JSON logging with run context."""
import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from workflow_studio.config import get_settings

CONTEXT_FIELDS = ("run_id", "node_id", "workflow_event")


class RunContextFilter(logging.Filter):
    """Add run context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add default run context fields if not present."""
        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        return True


class RunJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds level, logger and run context fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add level, logger and the run context fields that carry a value."""
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        # Only keep context fields that carry a value
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value:
                log_record[name] = value
            else:
                log_record.pop(name, None)


def setup_logging(level: str | None = None) -> None:
    """Route all logging through one JSON handler on stdout."""
    settings = get_settings()

    handler = logging.StreamHandler(sys.stdout)
    formatter = RunJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    handler.setFormatter(formatter)
    handler.addFilter(RunContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((level or settings.log_level).upper())

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class ContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges call-site extra over the adapter's own."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> logging.LoggerAdapter:
    """
    Get a logger with run context support.

    Args:
        name: Logger name (typically __name__)

    Returns:
        LoggerAdapter that can accept run context in extra dict
    """
    logger = logging.getLogger(name)
    return ContextAdapter(logger, extra={})


def with_run_context(
    run_id: str | None = None,
    node_id: str | None = None,
    workflow_event: str | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Create an extra dict with run context for logging.

    Args:
        run_id: Run ID
        node_id: Node ID
        workflow_event: Name of the user-facing event being logged
        **kwargs: Additional context fields

    Returns:
        Dict to pass as extra parameter to logger methods
    """
    extra = kwargs.copy()
    if run_id:
        extra["run_id"] = run_id
    if node_id:
        extra["node_id"] = node_id
    if workflow_event:
        extra["workflow_event"] = workflow_event
    return extra
