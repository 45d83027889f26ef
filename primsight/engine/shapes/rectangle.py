"""Rotated rectangle: center, side lengths and a rotation in degrees."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Sequence

import numpy as np
from numpy.typing import NDArray

from primsight.engine.shapes.base import MIN_SIZE, CanvasBounds, Point, Shape, angle_of, fmt
from primsight.engine.shapes.registry import ShapeType, register_shape
from primsight.utils.geometry import bbox, distance, rotate_points

# Std-dev of a rotation mutation, degrees.
ANGLE_STEP = 32.0


@register_shape(ShapeType.RECTANGLE)
@dataclass(frozen=True)
class Rectangle(Shape):
    center: Point
    width: float
    height: float
    # Degrees in [0, 180); a half-turn maps a rectangle onto itself
    angle: float = 0.0

    degrees_of_freedom: ClassVar[int] = 4

    @classmethod
    def _draw(cls, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> Rectangle:
        upper = max(MIN_SIZE + 1.0, bounds.max_dim / 2)
        return cls(
            center=bounds.random_point(rng),
            width=float(rng.uniform(MIN_SIZE, upper)),
            height=float(rng.uniform(MIN_SIZE, upper)),
            angle=float(rng.uniform(0.0, 180.0)),
        )

    @classmethod
    def from_control_points(cls, points: Sequence[Point], stroke_width: float | None = None) -> Rectangle:
        """Rebuild from the four corners produced by ``control_points``."""
        if len(points) != 4:
            raise ValueError(f"Rectangles have 4 corners, not {len(points)}")
        p0, p1, p2, _ = ((float(x), float(y)) for x, y in points)
        cx = sum(p[0] for p in points) / 4
        cy = sum(p[1] for p in points) / 4
        return cls(center=(cx, cy), width=distance(p0, p1), height=distance(p1, p2), angle=angle_of(p0, p1))

    def is_valid(self) -> bool:
        return self.width >= MIN_SIZE and self.height >= MIN_SIZE

    def is_degenerate(self) -> bool:
        return self.width <= 0.0 or self.height <= 0.0

    def _perturb(self, index: int, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> Rectangle:
        limit = 2 * bounds.max_dim
        if index == 0:
            return replace(self, center=bounds.jitter(self.center, rng, step))
        if index == 1:
            return replace(self, width=float(np.clip(self.width + rng.normal(0.0, step), MIN_SIZE, limit)))
        if index == 2:
            return replace(self, height=float(np.clip(self.height + rng.normal(0.0, step), MIN_SIZE, limit)))
        return replace(self, angle=float((self.angle + rng.normal(0.0, ANGLE_STEP)) % 180.0))

    def corners(self) -> list[Point]:
        cx, cy = self.center
        hw, hh = self.width / 2, self.height / 2
        local = np.array([[cx - hw, cy - hh], [cx + hw, cy - hh], [cx + hw, cy + hh], [cx - hw, cy + hh]])
        return [(float(x), float(y)) for x, y in rotate_points(local, self.center, self.angle)]

    def extent(self) -> tuple[float, float, float, float]:
        return bbox(np.asarray(self.corners()))

    def contains(self, xs: NDArray[np.float64], ys: NDArray[np.float64]) -> NDArray[np.bool_]:
        theta = math.radians(self.angle)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        dx = xs - self.center[0]
        dy = ys - self.center[1]
        lx = dx * cos_t + dy * sin_t
        ly = -dx * sin_t + dy * cos_t
        return (np.abs(lx) <= self.width / 2) & (np.abs(ly) <= self.height / 2)

    def control_points(self) -> list[Point]:
        return self.corners()

    def to_vector_path(self, scale: float = 1.0) -> str:
        (x0, y0), (x1, y1), (x2, y2), (x3, y3) = ((x * scale, y * scale) for x, y in self.corners())
        return f"M{fmt(x0)} {fmt(y0)} L{fmt(x1)} {fmt(y1)} L{fmt(x2)} {fmt(y2)} L{fmt(x3)} {fmt(y3)} Z"

    def svg_element(self, color: str, alpha: float, scale: float = 1.0) -> dict[str, Any]:
        cx, cy = self.center[0] * scale, self.center[1] * scale
        w, h = self.width * scale, self.height * scale
        return {
            "tag": "rect",
            "fill": color,
            "fill-opacity": f"{alpha:.5f}",
            "x": fmt(cx - w / 2),
            "y": fmt(cy - h / 2),
            "width": fmt(w),
            "height": fmt(h),
            "transform": f"rotate({fmt(self.angle)} {fmt(cx)} {fmt(cy)})",
        }
