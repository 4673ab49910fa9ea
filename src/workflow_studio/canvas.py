"""Canvas viewport: pan/zoom state and pointer-to-graph coordinate mapping."""
from pydantic import BaseModel, Field, model_validator

from workflow_runtime import Position, ToolRecord, WorkflowGraph
from workflow_runtime.graph import PositionLike, as_position

# Decimal places kept on zoom values
ZOOM_PRECISION = 2


class Viewport(BaseModel):
    """
    Pan offset and zoom factor of the canvas.

    origin is the canvas element's top-left corner in client coordinates.
    A client point p maps to graph space as (p - origin - pan) / zoom.
    """

    origin: Position = Field(default_factory=Position)
    pan: Position = Field(default_factory=Position)
    zoom: float = Field(default=1.0, gt=0)
    min_zoom: float = Field(default=0.5, gt=0)
    max_zoom: float = Field(default=2.0, gt=0)
    zoom_step: float = Field(default=0.1, gt=0)

    @model_validator(mode="after")
    def validate_zoom(self) -> "Viewport":
        """Validate that zoom sits inside its bounds."""
        if self.max_zoom < self.min_zoom:
            raise ValueError("max_zoom must be >= min_zoom")
        if not self.min_zoom <= self.zoom <= self.max_zoom:
            raise ValueError(f"zoom must be between {self.min_zoom} and {self.max_zoom}")
        return self

    @classmethod
    def from_settings(cls, settings) -> "Viewport":
        return cls(
            min_zoom=settings.min_zoom,
            max_zoom=settings.max_zoom,
            zoom_step=settings.zoom_step,
        )

    @property
    def zoom_percent(self) -> int:
        """Zoom as the rounded percentage shown next to the zoom controls."""
        return round(self.zoom * 100)

    def to_graph_space(self, point: PositionLike) -> Position:
        """
        Convert a client (pointer) coordinate to graph space.

        Args:
            point: Client coordinate

        Returns:
            Position in graph space
        """
        p = as_position(point)
        return Position(
            x=(p.x - self.origin.x - self.pan.x) / self.zoom,
            y=(p.y - self.origin.y - self.pan.y) / self.zoom,
        )

    def to_client_space(self, position: PositionLike) -> Position:
        """Inverse of to_graph_space."""
        g = as_position(position)
        return Position(
            x=g.x * self.zoom + self.origin.x + self.pan.x,
            y=g.y * self.zoom + self.origin.y + self.pan.y,
        )

    def set_zoom(self, zoom: float) -> float:
        """Set zoom, clamped to [min_zoom, max_zoom]."""
        self.zoom = round(min(self.max_zoom, max(self.min_zoom, zoom)), ZOOM_PRECISION)
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom + self.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom - self.zoom_step)

    def pan_by(self, dx: float, dy: float) -> Position:
        """Shift the pan offset."""
        self.pan = Position(x=self.pan.x + dx, y=self.pan.y + dy)
        return self.pan

    def set_origin(self, origin: PositionLike) -> None:
        self.origin = as_position(origin)

    def drop_tool(self, graph: WorkflowGraph, tool: ToolRecord, client_point: PositionLike) -> str:
        """
        Drop a catalog tool onto the canvas.

        Creates an action node at the graph-space position under the pointer.

        Returns:
            ID of the new node
        """
        return graph.add_node("action", self.to_graph_space(client_point), tool=tool)
