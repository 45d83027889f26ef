"""Rotated ellipse: center, two radii and a rotation in degrees."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Sequence

import numpy as np
from numpy.typing import NDArray

from primsight.engine.shapes.base import MIN_SIZE, CanvasBounds, Point, Shape, angle_of, fmt
from primsight.engine.shapes.registry import ShapeType, register_shape
from primsight.utils.geometry import distance

ANGLE_STEP = 32.0


@register_shape(ShapeType.ELLIPSE)
@dataclass(frozen=True)
class Ellipse(Shape):
    center: Point
    rx: float
    ry: float
    angle: float = 0.0

    degrees_of_freedom: ClassVar[int] = 4

    @classmethod
    def _draw(cls, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> Ellipse:
        upper = max(MIN_SIZE + 1.0, bounds.max_dim / 4)
        return cls(
            center=bounds.random_point(rng),
            rx=float(rng.uniform(MIN_SIZE, upper)),
            ry=float(rng.uniform(MIN_SIZE, upper)),
            angle=float(rng.uniform(0.0, 180.0)),
        )

    @classmethod
    def from_control_points(cls, points: Sequence[Point], stroke_width: float | None = None) -> Ellipse:
        """Rebuild from ``[center, end of x-radius, end of y-radius]``."""
        if len(points) != 3:
            raise ValueError(f"Ellipses have 3 control points, not {len(points)}")
        c, a, b = ((float(x), float(y)) for x, y in points)
        return cls(center=c, rx=distance(c, a), ry=distance(c, b), angle=angle_of(c, a))

    def is_valid(self) -> bool:
        return self.rx >= MIN_SIZE and self.ry >= MIN_SIZE

    def is_degenerate(self) -> bool:
        return self.rx <= 0.0 or self.ry <= 0.0

    def _perturb(self, index: int, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> Ellipse:
        limit = bounds.max_dim
        if index == 0:
            return replace(self, center=bounds.jitter(self.center, rng, step))
        if index == 1:
            return replace(self, rx=float(np.clip(self.rx + rng.normal(0.0, step / 2), MIN_SIZE, limit)))
        if index == 2:
            return replace(self, ry=float(np.clip(self.ry + rng.normal(0.0, step / 2), MIN_SIZE, limit)))
        return replace(self, angle=float((self.angle + rng.normal(0.0, ANGLE_STEP)) % 180.0))

    def extent(self) -> tuple[float, float, float, float]:
        theta = math.radians(self.angle)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        hx = math.hypot(self.rx * cos_t, self.ry * sin_t)
        hy = math.hypot(self.rx * sin_t, self.ry * cos_t)
        cx, cy = self.center
        return (cx - hx, cy - hy, cx + hx, cy + hy)

    def contains(self, xs: NDArray[np.float64], ys: NDArray[np.float64]) -> NDArray[np.bool_]:
        theta = math.radians(self.angle)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        dx = xs - self.center[0]
        dy = ys - self.center[1]
        lx = (dx * cos_t + dy * sin_t) / self.rx
        ly = (-dx * sin_t + dy * cos_t) / self.ry
        return lx * lx + ly * ly <= 1.0

    def control_points(self) -> list[Point]:
        theta = math.radians(self.angle)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        cx, cy = self.center
        return [
            (cx, cy),
            (cx + self.rx * cos_t, cy + self.rx * sin_t),
            (cx - self.ry * sin_t, cy + self.ry * cos_t),
        ]

    def to_vector_path(self, scale: float = 1.0) -> str:
        # Two half arcs between the ends of the x-radius
        theta = math.radians(self.angle)
        cx, cy = self.center[0] * scale, self.center[1] * scale
        rx, ry = self.rx * scale, self.ry * scale
        ex, ey = rx * math.cos(theta), rx * math.sin(theta)
        arc = f"A{fmt(rx)} {fmt(ry)} {fmt(self.angle)} 1 1"
        return (
            f"M{fmt(cx + ex)} {fmt(cy + ey)} "
            f"{arc} {fmt(cx - ex)} {fmt(cy - ey)} "
            f"{arc} {fmt(cx + ex)} {fmt(cy + ey)} Z"
        )

    def svg_element(self, color: str, alpha: float, scale: float = 1.0) -> dict[str, Any]:
        cx, cy = self.center[0] * scale, self.center[1] * scale
        return {
            "tag": "ellipse",
            "fill": color,
            "fill-opacity": f"{alpha:.5f}",
            "cx": fmt(cx),
            "cy": fmt(cy),
            "rx": fmt(self.rx * scale),
            "ry": fmt(self.ry * scale),
            "transform": f"rotate({fmt(self.angle)} {fmt(cx)} {fmt(cy)})",
        }
