"""Tests for the canvas viewport."""
import pytest
from pydantic import ValidationError

from node_registry import NodeKind
from workflow_runtime import Position, ToolRecord
from workflow_studio.canvas import Viewport
from workflow_studio.config import Settings


class TestCoordinates:
    """Test client/graph coordinate mapping."""

    def test_identity_at_default(self):
        assert Viewport().to_graph_space((120, 80)) == Position(x=120, y=80)

    def test_origin_pan_and_zoom(self):
        viewport = Viewport(origin=Position(x=10, y=20), pan=Position(x=30, y=-40), zoom=2.0)

        assert viewport.to_graph_space((240, 220)) == Position(x=100, y=120)

    def test_round_trip(self):
        viewport = Viewport(origin=Position(x=5, y=5), pan=Position(x=-12, y=7), zoom=1.5)

        client = viewport.to_client_space(viewport.to_graph_space({"x": 300, "y": 150}))

        assert client.x == pytest.approx(300)
        assert client.y == pytest.approx(150)

    def test_pan_by(self):
        viewport = Viewport()

        viewport.pan_by(15, -5)
        viewport.pan_by(5, 5)

        assert viewport.pan == Position(x=20, y=0)
        assert viewport.to_graph_space((20, 0)) == Position(x=0, y=0)


class TestZoom:
    """Test zoom stepping and clamping."""

    def test_zoom_in_steps(self):
        viewport = Viewport()

        assert viewport.zoom_in() == 1.1
        assert viewport.zoom_in() == 1.2
        assert viewport.zoom_percent == 120

    def test_zoom_clamps_high(self):
        viewport = Viewport()

        for _ in range(30):
            viewport.zoom_in()

        assert viewport.zoom == 2.0

    def test_zoom_clamps_low(self):
        viewport = Viewport()

        for _ in range(30):
            viewport.zoom_out()

        assert viewport.zoom == 0.5
        assert viewport.zoom_percent == 50

    def test_set_zoom_clamps(self):
        viewport = Viewport()

        assert viewport.set_zoom(7) == 2.0
        assert viewport.set_zoom(0.01) == 0.5

    def test_rejects_zoom_outside_bounds(self):
        with pytest.raises(ValidationError):
            Viewport(zoom=3.0)

    def test_from_settings(self):
        viewport = Viewport.from_settings(Settings(min_zoom=0.25, max_zoom=4, zoom_step=0.25))

        assert viewport.zoom_out() == 0.75
        assert viewport.set_zoom(10) == 4


class TestDropTool:
    def test_drop_creates_action_node(self, graph):
        tool = ToolRecord(id="tool-9", name="Summarizer", description="Summarizes text", category="Analytics")
        viewport = Viewport(origin=Position(x=100, y=50), zoom=2.0)

        node_id = viewport.drop_tool(graph, tool, (300, 250))
        node = graph.get_node(node_id)

        assert node.kind == NodeKind.ACTION
        assert node.name == "Summarizer"
        assert node.description == "Summarizes text"
        assert node.position == Position(x=100, y=100)
        assert node.tool.id == "tool-9"
