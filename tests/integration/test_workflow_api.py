"""Integration tests for the workflow API endpoints."""
import pytest
from fastapi.testclient import TestClient

from workflow_runtime import FailAt
from workflow_studio.api.main import app
from workflow_studio.session import WorkflowSession, get_session


@pytest.fixture
def client(session):
    """Test client bound to a deterministic session."""
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


def add(client, kind, **body):
    response = client.post("/v1/workflow/nodes", json={"kind": kind, **body})
    assert response.status_code == 201
    return response.json()["id"]


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["service"] == "workflow-studio"


class TestNodes:
    """Test node and connection endpoints."""

    def test_add_node(self, client):
        response = client.post(
            "/v1/workflow/nodes",
            json={"kind": "trigger", "position": {"x": 10, "y": 20}, "name": "Start"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "trigger"
        assert data["name"] == "Start"
        assert data["inputs"] == []
        assert data["outputs"] == ["output"]
        assert data["status"] == "idle"

    def test_add_node_unknown_kind(self, client):
        response = client.post("/v1/workflow/nodes", json={"kind": "webhook"})

        assert response.status_code == 422
        assert "webhook" in response.json()["detail"]

    def test_move_node(self, client):
        node_id = add(client, "action")

        response = client.put(f"/v1/workflow/nodes/{node_id}/position", json={"x": 1, "y": 2})

        assert response.status_code == 200
        assert response.json()["position"] == {"x": 1, "y": 2}

    def test_connect_and_cascade_delete(self, client):
        a = add(client, "trigger")
        b = add(client, "output")

        response = client.post(
            "/v1/workflow/connections",
            json={"source": a, "sourceHandle": "output", "target": b, "targetHandle": "input"},
        )
        assert response.status_code == 201
        connection_id = response.json()["id"]

        response = client.delete(f"/v1/workflow/nodes/{a}")

        assert response.status_code == 200
        assert response.json() == {"nodeId": a, "removedConnections": [connection_id]}
        assert client.get("/v1/workflow/stats").json()["totalConnections"] == 0

    def test_connect_invalid_port(self, client):
        a = add(client, "action")
        t = add(client, "trigger")

        response = client.post("/v1/workflow/connections", json={"source": a, "target": t})

        assert response.status_code == 422

    def test_missing_node_is_404(self, client):
        assert client.delete("/v1/workflow/nodes/ghost").status_code == 404
        assert client.delete("/v1/workflow/connections/ghost").status_code == 404

    def test_disconnect(self, client):
        a = add(client, "trigger")
        b = add(client, "action")
        connection_id = client.post("/v1/workflow/connections", json={"source": a, "target": b}).json()["id"]

        response = client.delete(f"/v1/workflow/connections/{connection_id}")

        assert response.status_code == 204
        assert client.get("/v1/workflow").json()["connections"] == []

    def test_clear(self, client):
        add(client, "trigger")

        response = client.post("/v1/workflow/clear")

        assert response.json() == {"status": "cleared"}
        assert client.get("/v1/workflow/stats").json()["totalNodes"] == 0


class TestRun:
    """Test run endpoints."""

    def test_run_empty_graph(self, client):
        response = client.post("/v1/workflow/run")

        assert response.status_code == 409
        assert response.json()["detail"] == "Add some nodes to execute the workflow"

    def test_run_completes(self, client):
        client.post("/v1/templates/3/load")

        response = client.post("/v1/workflow/run")
        assert response.status_code == 202

        state = client.get("/v1/workflow/run").json()
        assert state["status"] == "completed"
        assert len(state["logs"]) == 3
        assert set(state["nodeStatuses"].values()) == {"completed"}
        assert state["metrics"]["nodesExecuted"] == 3
        assert state["metrics"]["successRate"] == 100

    def test_run_failure(self, notifier):
        session = WorkflowSession(notifier=notifier, outcome_source=FailAt(0), sleep=lambda ms: None)
        app.dependency_overrides[get_session] = lambda: session
        try:
            client = TestClient(app)
            client.post("/v1/templates/3/load")
            client.post("/v1/workflow/run")

            state = client.get("/v1/workflow/run").json()
        finally:
            app.dependency_overrides.clear()

        assert state["status"] == "failed"
        assert [entry["status"] for entry in state["logs"]] == ["error"]
        assert state["metrics"]["successRate"] == 90
        assert notifier.messages[-1] == "Workflow failed at Webhook Trigger"

    def test_back_to_back_runs_are_queued(self, client):
        client.post("/v1/templates/3/load")

        first = client.post("/v1/workflow/run")
        second = client.post("/v1/workflow/run")

        assert first.status_code == 202
        assert second.status_code == 202
        state = client.get("/v1/workflow/run").json()
        assert state["status"] == "completed"
        assert len(state["logs"]) == 3

    def test_stop_when_idle(self, client):
        response = client.post("/v1/workflow/stop")

        assert response.json() == {"stopRequested": False}

    def test_export(self, client, notifier):
        client.post("/v1/templates/1/load")

        response = client.get("/v1/workflow/export")

        assert response.status_code == 200
        assert "workflow.json" in response.headers["content-disposition"]
        data = response.json()
        assert data["schemaVersion"] == 1
        assert data["stats"]["totalNodes"] == 5
        assert notifier.messages[-1] == "Workflow saved successfully"


class TestTemplates:
    """Test template endpoints."""

    def test_list(self, client):
        response = client.get("/v1/templates")

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == ["1", "2", "3"]

    def test_list_by_category(self, client):
        response = client.get("/v1/templates", params={"category": "Data Processing"})

        assert [t["name"] for t in response.json()] == ["Data Analysis Workflow"]

    def test_get_uses_camel_case(self, client):
        data = client.get("/v1/templates/1").json()

        assert data["estimatedTime"] == "5-10 min"
        assert data["usageCount"] == 1247

    def test_unknown_template(self, client):
        assert client.get("/v1/templates/42").status_code == 404
        assert client.post("/v1/templates/42/load").status_code == 404

    def test_load(self, client):
        add(client, "trigger")

        response = client.post("/v1/templates/2/load")

        data = response.json()
        assert data["templateId"] == "2"
        assert len(data["nodeIds"]) == 6
        assert data["stats"]["totalNodes"] == 6
        assert data["stats"]["totalConnections"] == 6


class TestCanvas:
    """Test tool sidebar and canvas endpoints."""

    def test_tools_filter(self, client):
        response = client.get("/v1/tools", params={"category": "Content Creation", "q": "image"})

        assert [t["id"] for t in response.json()] == ["tool-2"]

    def test_tools_limit(self, client):
        response = client.get("/v1/tools", params={"limit": 2})

        assert len(response.json()) == 2

    @pytest.mark.parametrize("limit", [0, -1])
    def test_tools_limit_must_be_positive(self, client, limit):
        response = client.get("/v1/tools", params={"limit": limit})

        assert response.status_code == 422

    def test_categories(self, client):
        categories = client.get("/v1/tools/categories").json()

        assert categories[0] == "All"
        assert "Communication" in categories

    def test_drop_tool(self, client):
        client.post("/v1/canvas/zoom", json={"direction": "in"})

        response = client.post("/v1/canvas/drop", json={"tool_id": "tool-1", "x": 220, "y": 110})

        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "action"
        assert data["name"] == "Blog Writer"
        assert data["position"]["x"] == pytest.approx(200)
        assert data["position"]["y"] == pytest.approx(100)

    def test_drop_unknown_tool(self, client):
        response = client.post("/v1/canvas/drop", json={"tool_id": "nope", "x": 0, "y": 0})

        assert response.status_code == 404

    def test_zoom_and_pan(self, client):
        for _ in range(20):
            client.post("/v1/canvas/zoom", json={"direction": "out"})
        client.post("/v1/canvas/pan", json={"dx": 25, "dy": -10})

        viewport = client.get("/v1/canvas").json()

        assert viewport["zoom"] == 0.5
        assert viewport["pan"] == {"x": 25, "y": -10}
