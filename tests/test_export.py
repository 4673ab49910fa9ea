"""Tests for workflow export and import."""
import json

import pytest

from workflow_runtime import (
    AlwaysSucceed,
    NodeStatus,
    UnsupportedSchemaError,
    WorkflowExecutor,
    WorkflowGraph,
)
from workflow_studio.export import (
    SCHEMA_VERSION,
    export_workflow,
    load_workflow,
    restore_workflow,
    save_workflow,
    to_json,
)


class TestExport:
    """Test document export."""

    def test_snapshot_contents(self, pipeline):
        graph, ids = pipeline

        document = export_workflow(graph)

        assert document.schema_version == SCHEMA_VERSION
        assert [node.id for node in document.nodes] == ids
        assert len(document.connections) == 2
        assert document.stats.total_nodes == 3
        assert document.stats.efficiency == 90

    def test_snapshot_is_detached(self, pipeline):
        graph, (a, b, c) = pipeline
        document = export_workflow(graph)

        graph.rename_node(a, "Changed")
        graph.remove_node(c)

        assert document.nodes[0].name == "A"
        assert len(document.nodes) == 3

    def test_json_uses_camel_case(self, pipeline):
        graph, _ = pipeline

        raw = json.loads(to_json(export_workflow(graph)))

        assert raw["schemaVersion"] == 1
        assert "createdAt" in raw
        assert raw["stats"]["totalNodes"] == 3
        assert raw["stats"]["estimatedTime"] == "6s"
        assert raw["nodes"][0]["type"] == "trigger"
        assert raw["connections"][0]["sourceHandle"] == "output"
        assert raw["connections"][0]["targetHandle"] == "input"

    def test_save_into_directory(self, pipeline, tmp_path):
        graph, _ = pipeline

        written = save_workflow(export_workflow(graph), tmp_path)

        assert written == tmp_path / "workflow.json"
        assert json.loads(written.read_text())["stats"]["totalConnections"] == 2


class TestLoad:
    """Test document import."""

    def test_load_and_restore(self, pipeline, tmp_path):
        graph, ids = pipeline
        WorkflowExecutor(graph, outcome_source=AlwaysSucceed(duration_ms=10), sleep=lambda ms: None).run()
        path = save_workflow(export_workflow(graph), tmp_path / "saved.json")

        restored = WorkflowGraph()
        restore_workflow(load_workflow(path), restored)

        assert restored.node_ids == ids
        assert [c.id for c in restored.connections] == [c.id for c in graph.connections]
        assert all(node.status == NodeStatus.IDLE for node in restored.nodes)
        assert restored.get_node(ids[0]).execution_time_ms == 10

    def test_load_from_json_string(self, pipeline):
        graph, _ = pipeline

        document = load_workflow(to_json(export_workflow(graph)))

        assert len(document.nodes) == 3

    def test_missing_version_is_read_as_current(self):
        document = load_workflow('{"nodes": [], "connections": []}')

        assert document.schema_version == SCHEMA_VERSION

    def test_newer_version_rejected(self):
        with pytest.raises(UnsupportedSchemaError):
            load_workflow(json.dumps({"schemaVersion": SCHEMA_VERSION + 1, "nodes": []}))

    @pytest.mark.parametrize("text", ["[]", '[{"nodes": []}]'])
    def test_non_object_document_rejected(self, text):
        with pytest.raises(UnsupportedSchemaError):
            load_workflow(text)

    def test_restore_rejects_dangling_connection(self, graph):
        raw = {
            "nodes": [
                {"id": "n1", "type": "trigger", "name": "T", "outputs": ["output"]},
            ],
            "connections": [
                {"id": "c1", "source": "n1", "sourceHandle": "output", "target": "n2", "targetHandle": "input"},
            ],
        }
        document = load_workflow(json.dumps(raw))

        with pytest.raises(LookupError):
            restore_workflow(document, graph)
        assert len(graph) == 0
