"""Anti-aliased rasterization: shape geometry to a coverage map over its bounding box.

Coverage is estimated by supersampling: each pixel in the clipped bounding box
gets an s x s grid of sample centers, the shape's vectorised inside test runs
on all of them at once, and ``block_reduce`` averages each pixel's block into
a fraction in [0, 1]. Cost scales with bounding-box area, never canvas area.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Protocol

import numpy as np
from numpy.typing import NDArray
from skimage.measure import block_reduce


class BoundingBox(NamedTuple):
    """Integer pixel box, half-open: columns [x0, x1), rows [y0, y1)."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return max(0, self.x1 - self.x0)

    @property
    def height(self) -> int:
        return max(0, self.y1 - self.y0)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def slices(self) -> tuple[slice, slice]:
        """Row/column slices for indexing ``(H, W, ...)`` arrays."""
        return (slice(self.y0, self.y1), slice(self.x0, self.x1))


EMPTY_BOX = BoundingBox(0, 0, 0, 0)


class Rasterizable(Protocol):
    def is_degenerate(self) -> bool: ...

    def extent(self) -> tuple[float, float, float, float]: ...

    def contains(self, xs: NDArray[np.float64], ys: NDArray[np.float64]) -> NDArray[np.bool_]: ...


@dataclass(frozen=True)
class Coverage:
    """Per-pixel coverage fractions inside ``box``."""

    box: BoundingBox
    mask: NDArray[np.float64]

    @classmethod
    def empty(cls) -> Coverage:
        return cls(EMPTY_BOX, np.zeros((0, 0), dtype=np.float64))

    @property
    def is_empty(self) -> bool:
        return self.box.is_empty or not np.any(self.mask > 0)

    @property
    def total(self) -> float:
        """Covered area in pixels."""
        return float(self.mask.sum())

    def to_full(self, width: int, height: int) -> NDArray[np.float64]:
        """Coverage expanded to a full ``(height, width)`` canvas."""
        full = np.zeros((height, width), dtype=np.float64)
        if not self.box.is_empty:
            full[self.box.slices] = self.mask
        return full


def clip_box(
    extent: tuple[float, float, float, float],
    width: int,
    height: int,
) -> BoundingBox:
    """Pixel box touched by a continuous extent, clipped to the canvas."""
    xmin, ymin, xmax, ymax = extent
    if not all(math.isfinite(v) for v in extent):
        return EMPTY_BOX
    x0 = max(0, int(math.floor(xmin)))
    y0 = max(0, int(math.floor(ymin)))
    x1 = min(width, int(math.ceil(xmax)))
    y1 = min(height, int(math.ceil(ymax)))
    if x1 <= x0 or y1 <= y0:
        return EMPTY_BOX
    return BoundingBox(x0, y0, x1, y1)


def sample_grid(box: BoundingBox, supersample: int) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Sub-pixel sample centers for ``box``, each array shaped ``(h*s, w*s)``."""
    s = supersample
    xs = box.x0 + (np.arange(box.width * s, dtype=np.float64) + 0.5) / s
    ys = box.y0 + (np.arange(box.height * s, dtype=np.float64) + 0.5) / s
    return np.meshgrid(xs, ys)


def rasterize(shape: Rasterizable, width: int, height: int, supersample: int = 4) -> Coverage:
    """Coverage map of ``shape`` on a ``width`` x ``height`` canvas."""
    if shape.is_degenerate():
        return Coverage.empty()
    box = clip_box(shape.extent(), width, height)
    if box.is_empty:
        return Coverage.empty()

    xs, ys = sample_grid(box, supersample)
    inside = shape.contains(xs, ys)
    if not np.any(inside):
        return Coverage.empty()

    if supersample == 1:
        mask = inside.astype(np.float64)
    else:
        mask = block_reduce(inside.astype(np.float64), block_size=(supersample, supersample), func=np.mean)
    return Coverage(box, mask)
