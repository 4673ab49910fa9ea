"""Tests for structured logging."""
import json
import logging

from workflow_studio.observability import get_logger, with_run_context
from workflow_studio.observability.logging import RunContextFilter, RunJsonFormatter


def make_record(**extra):
    record = logging.LogRecord("workflow_runtime.executor", logging.INFO, __file__, 1, "Run finished", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    RunContextFilter().filter(record)
    return record


class TestRunJsonFormatter:
    def test_includes_run_context(self):
        formatter = RunJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")

        payload = json.loads(formatter.format(make_record(run_id="run-1", node_id="node-7")))

        assert payload["message"] == "Run finished"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "workflow_runtime.executor"
        assert payload["run_id"] == "run-1"
        assert payload["node_id"] == "node-7"
        assert payload["timestamp"]

    def test_drops_empty_context(self):
        formatter = RunJsonFormatter("%(level)s %(message)s")

        payload = json.loads(formatter.format(make_record()))

        assert "run_id" not in payload
        assert "workflow_event" not in payload


class TestContext:
    def test_with_run_context_skips_empty_values(self):
        assert with_run_context(run_id="run-1", node_id=None, template_id="3") == {
            "run_id": "run-1",
            "template_id": "3",
        }

    def test_adapter_keeps_call_site_extra(self, caplog):
        logger = get_logger("workflow_studio.test")

        with caplog.at_level("INFO", logger="workflow_studio.test"):
            logger.info("Template loaded", extra=with_run_context(workflow_event="template_loaded"))

        assert caplog.records[0].workflow_event == "template_loaded"
