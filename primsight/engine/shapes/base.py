"""Shape contract shared by every variant, plus canvas bounds for random draws."""

from __future__ import annotations

import abc
import math
from dataclasses import dataclass
from typing import Any, ClassVar, Sequence

import numpy as np
from numpy.typing import NDArray

from primsight.engine.rasterizer import Coverage, rasterize
from primsight.engine.shapes.registry import ShapeType

Point = tuple[float, float]

# Bounded retries when a draw or a mutation lands on an invalid shape.
# Exhausting them is not an error: randomize keeps the last draw (which then
# rasterizes empty) and mutate returns the shape unchanged.
MAX_RANDOM_ATTEMPTS = 1000
MAX_MUTATION_ATTEMPTS = 1000

# Smallest rectangle side / ellipse radius, in pixels.
MIN_SIZE = 1.0
# Stroke widths live in [MIN_STROKE_WIDTH, CanvasBounds.max_stroke].
MIN_STROKE_WIDTH = 1.0


@dataclass(frozen=True)
class CanvasBounds:
    """Canvas size plus how far control points may leave it."""

    width: int
    height: int
    border: float = 6.0

    @property
    def max_dim(self) -> float:
        return float(max(self.width, self.height))

    @property
    def max_stroke(self) -> float:
        return max(2.0, self.max_dim / 4)

    def clamp(self, x: float, y: float) -> Point:
        return (
            float(min(max(x, -self.border), self.width + self.border)),
            float(min(max(y, -self.border), self.height + self.border)),
        )

    def random_point(self, rng: np.random.Generator) -> Point:
        return (float(rng.uniform(0, self.width)), float(rng.uniform(0, self.height)))

    def point_near(self, point: Point, rng: np.random.Generator, radius: float) -> Point:
        """Uniform draw in the square of half-side ``radius`` around ``point``."""
        return self.clamp(
            point[0] + rng.uniform(-radius, radius),
            point[1] + rng.uniform(-radius, radius),
        )

    def jitter(self, point: Point, rng: np.random.Generator, step: float) -> Point:
        """Gaussian perturbation of both coordinates, clamped back into bounds."""
        return self.clamp(point[0] + rng.normal(0.0, step), point[1] + rng.normal(0.0, step))


def fmt(value: float) -> str:
    """Compact SVG number: two decimals, trailing zeros dropped."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


class Shape(abc.ABC):
    """A geometric primitive with control geometry.

    Concrete variants are frozen dataclasses: ``mutate`` returns a new shape
    and committed shapes can never change.
    """

    kind: ClassVar[ShapeType]
    degrees_of_freedom: ClassVar[int]

    # ── construction ──

    @classmethod
    def randomize(cls, rng: np.random.Generator, bounds: CanvasBounds, step: float = 16.0) -> Shape:
        """Random shape inside ``bounds``; degenerate draws are retried."""
        shape = cls._draw(rng, bounds, step)
        for _ in range(MAX_RANDOM_ATTEMPTS):
            if shape.is_valid():
                break
            shape = cls._draw(rng, bounds, step)
        return shape

    @classmethod
    @abc.abstractmethod
    def _draw(cls, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> Shape:
        """One unvalidated random draw."""

    @classmethod
    @abc.abstractmethod
    def from_control_points(cls, points: Sequence[Point], stroke_width: float | None = None) -> Shape:
        """Inverse of ``control_points`` (plus ``stroke_width`` for curves)."""

    # ── search ──

    def mutate(self, rng: np.random.Generator, bounds: CanvasBounds, step: float = 16.0) -> Shape:
        """Perturb exactly one degree of freedom, chosen uniformly at random."""
        for _ in range(MAX_MUTATION_ATTEMPTS):
            index = int(rng.integers(self.degrees_of_freedom))
            candidate = self._perturb(index, rng, bounds, step)
            if candidate.is_valid():
                return candidate
        return self

    @abc.abstractmethod
    def _perturb(self, index: int, rng: np.random.Generator, bounds: CanvasBounds, step: float) -> Shape:
        """Copy of this shape with degree of freedom ``index`` perturbed."""

    def is_valid(self) -> bool:
        return True

    def is_degenerate(self) -> bool:
        """True when the shape encloses zero area; such shapes rasterize empty."""
        return False

    # ── rasterization ──

    @abc.abstractmethod
    def extent(self) -> tuple[float, float, float, float]:
        """Continuous (xmin, ymin, xmax, ymax) enclosing every covered point."""

    @abc.abstractmethod
    def contains(self, xs: NDArray[np.float64], ys: NDArray[np.float64]) -> NDArray[np.bool_]:
        """Vectorised inside test for sample coordinates."""

    def rasterize(self, width: int, height: int, supersample: int = 4) -> Coverage:
        return rasterize(self, width, height, supersample)

    # ── export ──

    @abc.abstractmethod
    def control_points(self) -> list[Point]:
        ...

    @property
    def stroke_width(self) -> float | None:
        return None

    def scaled(self, factor: float) -> Shape:
        points = [(x * factor, y * factor) for x, y in self.control_points()]
        width = self.stroke_width
        return type(self).from_control_points(points, None if width is None else width * factor)

    @abc.abstractmethod
    def to_vector_path(self, scale: float = 1.0) -> str:
        """SVG path data (``d`` attribute) in canvas pixel units times ``scale``."""

    @abc.abstractmethod
    def svg_element(self, color: str, alpha: float, scale: float = 1.0) -> dict[str, Any]:
        """Element dict for ``serialize_svg`` (``tag`` plus attributes)."""


def angle_of(origin: Point, target: Point) -> float:
    """Direction from ``origin`` to ``target`` in degrees, normalised to [0, 180)."""
    return math.degrees(math.atan2(target[1] - origin[1], target[0] - origin[0])) % 180.0
