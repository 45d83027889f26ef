"""Triangle: three free vertices."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, ClassVar, Sequence

import numpy as np
from numpy.typing import NDArray

from primsight.engine.shapes.base import CanvasBounds, Point, Shape, fmt
from primsight.engine.shapes.registry import ShapeType, register_shape
from primsight.utils.geometry import interior_angle

# Sliver triangles cover almost nothing; every angle must exceed this.
MIN_DEGREES = 15.0


@register_shape(ShapeType.TRIANGLE)
@dataclass(frozen=True)
class Triangle(Shape):
    vertices: tuple[Point, Point, Point]

    degrees_of_freedom: ClassVar[int] = 3

    @classmethod
    def _draw(cls, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> Triangle:
        p0 = bounds.random_point(rng)
        p1 = bounds.point_near(p0, rng, step)
        p2 = bounds.point_near(p0, rng, step)
        return cls((p0, p1, p2))

    @classmethod
    def from_control_points(cls, points: Sequence[Point], stroke_width: float | None = None) -> Triangle:
        if len(points) != 3:
            raise ValueError(f"Triangles have 3 vertices, not {len(points)}")
        p0, p1, p2 = ((float(x), float(y)) for x, y in points)
        return cls((p0, p1, p2))

    def is_valid(self) -> bool:
        p0, p1, p2 = self.vertices
        if p0 == p1 or p0 == p2 or p1 == p2:
            return False
        return (
            interior_angle(p0, p1, p2) > MIN_DEGREES
            and interior_angle(p1, p2, p0) > MIN_DEGREES
            and interior_angle(p2, p0, p1) > MIN_DEGREES
        )

    def is_degenerate(self) -> bool:
        (x0, y0), (x1, y1), (x2, y2) = self.vertices
        return abs((x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0)) < 1e-12

    def _perturb(self, index: int, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> Triangle:
        vertices = list(self.vertices)
        vertices[index] = bounds.jitter(vertices[index], rng, step)
        return replace(self, vertices=tuple(vertices))

    def extent(self) -> tuple[float, float, float, float]:
        xs = [p[0] for p in self.vertices]
        ys = [p[1] for p in self.vertices]
        return (min(xs), min(ys), max(xs), max(ys))

    def contains(self, xs: NDArray[np.float64], ys: NDArray[np.float64]) -> NDArray[np.bool_]:
        (x0, y0), (x1, y1), (x2, y2) = self.vertices
        area2 = (x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0)
        if abs(area2) < 1e-12:
            return np.zeros(np.shape(xs), dtype=bool)
        # Edge functions; all share the sign of area2 inside the triangle
        e0 = (x1 - x0) * (ys - y0) - (y1 - y0) * (xs - x0)
        e1 = (x2 - x1) * (ys - y1) - (y2 - y1) * (xs - x1)
        e2 = (x0 - x2) * (ys - y2) - (y0 - y2) * (xs - x2)
        if area2 > 0:
            return (e0 >= 0) & (e1 >= 0) & (e2 >= 0)
        return (e0 <= 0) & (e1 <= 0) & (e2 <= 0)

    def control_points(self) -> list[Point]:
        return list(self.vertices)

    def to_vector_path(self, scale: float = 1.0) -> str:
        (x0, y0), (x1, y1), (x2, y2) = ((x * scale, y * scale) for x, y in self.vertices)
        return f"M{fmt(x0)} {fmt(y0)} L{fmt(x1)} {fmt(y1)} L{fmt(x2)} {fmt(y2)} Z"

    def svg_element(self, color: str, alpha: float, scale: float = 1.0) -> dict[str, Any]:
        points = " ".join(f"{fmt(x * scale)},{fmt(y * scale)}" for x, y in self.vertices)
        return {"tag": "polygon", "fill": color, "fill-opacity": f"{alpha:.5f}", "points": points}
