"""Committed shape records: the artifact downstream serializers consume."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from primsight.engine.shapes import Shape, ShapeType, get_registry
from primsight.utils.color import rgb_to_hex


class ShapeRecord(BaseModel):
    """One committed shape: variant tag, control geometry, paint."""

    model_config = ConfigDict(frozen=True)

    kind: ShapeType
    # Canvas pixel coordinates; meaning per variant:
    #   TRIANGLE vertices, RECTANGLE corners,
    #   ELLIPSE [center, x-radius end, y-radius end], curves control points
    points: list[tuple[float, float]]
    color: tuple[int, int, int]
    alpha: float = Field(..., ge=0.0, le=1.0)
    stroke_width: float | None = None

    @classmethod
    def from_shape(cls, shape: Shape, color: tuple[int, int, int], alpha: float) -> ShapeRecord:
        return cls(
            kind=shape.kind,
            points=shape.control_points(),
            color=color,
            alpha=alpha,
            stroke_width=shape.stroke_width,
        )

    @property
    def hex_color(self) -> str:
        return rgb_to_hex(self.color)

    def to_shape(self) -> Shape:
        cls = get_registry().get(self.kind)
        return cls.from_control_points(self.points, self.stroke_width)


class ApproximationResult(BaseModel):
    """Background plus the ordered shape list of one run."""

    width: int
    height: int
    background: tuple[int, int, int]
    seed: int
    shapes: list[ShapeRecord] = Field(default_factory=list)
    total_error: float = 0.0
    rmse: float = 0.0

    @property
    def background_hex(self) -> str:
        return rgb_to_hex(self.background)
