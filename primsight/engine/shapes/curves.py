"""Stroked Bezier curves: quadratic and cubic.

Coverage is everything within half the stroke width of the curve, with round
caps. The curve is flattened densely and the distance query runs against a
KD-tree of the flattened samples.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import cached_property
from typing import Any, ClassVar, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.spatial import cKDTree

from primsight.engine.shapes.base import MIN_STROKE_WIDTH, CanvasBounds, Point, Shape, fmt
from primsight.engine.shapes.registry import ShapeType, register_shape
from primsight.utils.geometry import bbox, flatten_bezier, polyline_length

# Std-dev of a stroke-width mutation, pixels.
STROKE_STEP = 1.0
# Upper bound of a freshly drawn stroke width.
INITIAL_STROKE_MAX = 3.0


@dataclass(frozen=True)
class StrokedCurve(Shape):
    points: tuple[Point, ...]
    width: float = MIN_STROKE_WIDTH

    control_count: ClassVar[int]

    @classmethod
    def _draw(cls, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> StrokedCurve:
        start = bounds.random_point(rng)
        rest = [bounds.point_near(start, rng, step) for _ in range(cls.control_count - 1)]
        upper = max(MIN_STROKE_WIDTH, min(INITIAL_STROKE_MAX, bounds.max_stroke))
        return cls(points=(start, *rest), width=float(rng.uniform(MIN_STROKE_WIDTH, upper)))

    @classmethod
    def from_control_points(cls, points: Sequence[Point], stroke_width: float | None = None) -> StrokedCurve:
        if len(points) != cls.control_count:
            raise ValueError(f"{cls.__name__} needs {cls.control_count} control points, not {len(points)}")
        if stroke_width is None:
            raise ValueError(f"{cls.__name__} needs a stroke width")
        return cls(points=tuple((float(x), float(y)) for x, y in points), width=float(stroke_width))

    @property
    def stroke_width(self) -> float:
        return self.width

    def _perturb(self, index: int, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> StrokedCurve:
        if index < self.control_count:
            points = list(self.points)
            points[index] = bounds.jitter(points[index], rng, step)
            return replace(self, points=tuple(points))
        width = float(np.clip(self.width + rng.normal(0.0, STROKE_STEP), MIN_STROKE_WIDTH, bounds.max_stroke))
        return replace(self, width=width)

    def is_degenerate(self) -> bool:
        # A stroke along a path collapsed to one point has no extent to follow
        return self.width <= 0.0 or polyline_length(np.asarray(self.points, dtype=np.float64)) <= 1e-9

    @cached_property
    def flattened(self) -> NDArray[np.float64]:
        return flatten_bezier(np.asarray(self.points, dtype=np.float64))

    def extent(self) -> tuple[float, float, float, float]:
        # A Bezier lies inside the hull of its control points
        xmin, ymin, xmax, ymax = bbox(np.asarray(self.points, dtype=np.float64))
        half = self.width / 2
        return (xmin - half, ymin - half, xmax + half, ymax + half)

    def contains(self, xs: NDArray[np.float64], ys: NDArray[np.float64]) -> NDArray[np.bool_]:
        samples = np.column_stack([np.ravel(xs), np.ravel(ys)])
        dist, _ = cKDTree(self.flattened).query(samples, k=1, distance_upper_bound=self.width / 2)
        return np.isfinite(dist).reshape(np.shape(xs))

    def control_points(self) -> list[Point]:
        return list(self.points)

    def svg_element(self, color: str, alpha: float, scale: float = 1.0) -> dict[str, Any]:
        return {
            "tag": "path",
            "fill": "none",
            "stroke": color,
            "stroke-opacity": f"{alpha:.5f}",
            "stroke-width": fmt(self.width * scale),
            "stroke-linecap": "round",
            "d": self.to_vector_path(scale),
        }


@register_shape(ShapeType.QUADRATIC)
@dataclass(frozen=True)
class QuadraticCurve(StrokedCurve):
    """Points are (start, control, end)."""

    control_count: ClassVar[int] = 3
    # Three points plus the stroke width
    degrees_of_freedom: ClassVar[int] = 4

    def is_valid(self) -> bool:
        # The start-end chord must be the longest side of the control
        # triangle, which rules out curves folding back on themselves
        (x1, y1), (x2, y2), (x3, y3) = self.points
        d12 = (x1 - x2) ** 2 + (y1 - y2) ** 2
        d23 = (x2 - x3) ** 2 + (y2 - y3) ** 2
        d13 = (x1 - x3) ** 2 + (y1 - y3) ** 2
        return d13 > d12 and d13 > d23

    def to_vector_path(self, scale: float = 1.0) -> str:
        (sx, sy), (cx, cy), (ex, ey) = ((x * scale, y * scale) for x, y in self.points)
        return f"M{fmt(sx)} {fmt(sy)} Q{fmt(cx)} {fmt(cy)} {fmt(ex)} {fmt(ey)}"


@register_shape(ShapeType.CUBIC)
@dataclass(frozen=True)
class CubicCurve(StrokedCurve):
    """Points are (start, control1, control2, end)."""

    control_count: ClassVar[int] = 4
    degrees_of_freedom: ClassVar[int] = 5

    def is_valid(self) -> bool:
        return polyline_length(np.asarray(self.points, dtype=np.float64)) > 1e-9

    def to_vector_path(self, scale: float = 1.0) -> str:
        (sx, sy), (c1x, c1y), (c2x, c2y), (ex, ey) = ((x * scale, y * scale) for x, y in self.points)
        return f"M{fmt(sx)} {fmt(sy)} C{fmt(c1x)} {fmt(c1y)} {fmt(c2x)} {fmt(c2y)} {fmt(ex)} {fmt(ey)}"
