"""Difference scorer: optimal color for a footprint and incremental error.

The running total is the sum of squared per-channel differences between the
canvas and the target. ``ScoreContext`` keeps the per-pixel error map, so the
error of a bounding box before a candidate is a slice sum and only the box
has to be re-blended to score the candidate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from primsight.engine.buffer import PixelBuffer
from primsight.engine.config import MIN_ALPHA
from primsight.engine.rasterizer import BoundingBox, Coverage
from primsight.utils.color import RGB

# Relative singular-value cutoff for the joint color/alpha solve. A constant
# canvas makes the system exactly rank 3; float noise must not hide that.
_RANK_RCOND = 1e-10


def squared_error(canvas: NDArray[np.float64], target: NDArray[np.float64]) -> NDArray[np.float64]:
    """Per-pixel squared difference summed over channels."""
    diff = canvas - target
    return np.einsum("ijk,ijk->ij", diff, diff)


def blend(
    region: NDArray[np.float64],
    mask: NDArray[np.float64],
    color: RGB | NDArray[np.float64],
    alpha: float,
) -> NDArray[np.float64]:
    """Alpha-over: ``color*coverage*alpha + region*(1 - coverage*alpha)``."""
    w = (mask * alpha)[:, :, None]
    return np.asarray(color, dtype=np.float64) * w + region * (1.0 - w)


@dataclass
class ScoreContext:
    """Running total error plus the per-pixel error map it sums."""

    error_map: NDArray[np.float64]
    total: float

    @classmethod
    def from_buffers(cls, canvas: PixelBuffer, target: PixelBuffer) -> ScoreContext:
        error_map = squared_error(canvas.pixels, target.pixels)
        return cls(error_map=error_map, total=float(error_map.sum()))

    @property
    def sample_count(self) -> int:
        """Pixels x channels."""
        return int(self.error_map.size * 3)

    @property
    def rmse(self) -> float:
        return math.sqrt(max(self.total, 0.0) / self.sample_count)

    def region_error(self, box: BoundingBox) -> float:
        if box.is_empty:
            return 0.0
        return float(self.error_map[box.slices].sum())

    def update_region(self, box: BoundingBox, canvas: PixelBuffer, target: PixelBuffer) -> float:
        """Recompute the error inside ``box`` after the canvas changed there."""
        if box.is_empty:
            return self.total
        region = box.slices
        before = float(self.error_map[region].sum())
        self.error_map[region] = squared_error(canvas.pixels[region], target.pixels[region])
        self.total = self.total - before + float(self.error_map[region].sum())
        return self.total


def _solve_color(weights: NDArray[np.float64], canvas: NDArray[np.float64], target: NDArray[np.float64]) -> RGB:
    """Per-channel least-squares color for effective weights ``coverage*alpha``."""
    denom = float(np.sum(weights * weights))
    if denom <= 0.0:
        return (0, 0, 0)
    residual = target - canvas * (1.0 - weights)[:, :, None]
    numer = np.einsum("ij,ijk->k", weights, residual)
    color = np.clip(np.rint(numer / denom), 0, 255)
    return (int(color[0]), int(color[1]), int(color[2]))


def _solve_alpha(mask: NDArray[np.float64], canvas: NDArray[np.float64], target: NDArray[np.float64]) -> float:
    """Least-squares alpha for a free color.

    With u = alpha*color the blend is ``C + w*(u - alpha*C)``, linear in
    (u_r, u_g, u_b, alpha). Rank-deficient systems (e.g. a constant canvas,
    where any alpha works) resolve to an opaque shape.
    """
    w2 = mask * mask
    diff = canvas - target
    w2_canvas = np.einsum("ij,ijk->k", w2, canvas)

    a = np.zeros((4, 4), dtype=np.float64)
    a[:3, :3] = np.eye(3) * float(w2.sum())
    a[:3, 3] = -w2_canvas
    a[3, :3] = -w2_canvas
    a[3, 3] = float(np.einsum("ij,ijk->", w2, canvas * canvas))

    b = np.empty(4, dtype=np.float64)
    b[:3] = -np.einsum("ij,ijk->k", mask, diff)
    b[3] = float(np.einsum("ij,ijk->", mask, canvas * diff))

    solution, _, rank, _ = np.linalg.lstsq(a, b, rcond=_RANK_RCOND)
    alpha = float(solution[3])
    if rank < 4 or not math.isfinite(alpha):
        return 1.0
    return min(1.0, max(MIN_ALPHA, alpha))


def optimal_color(
    coverage: Coverage,
    target: PixelBuffer,
    canvas: PixelBuffer,
    alpha: float | None = None,
) -> tuple[RGB, float]:
    """Color (and alpha, unless fixed) minimising the footprint's squared error.

    Returns ``((0, 0, 0), 0.0)`` for an empty footprint.
    """
    if coverage.is_empty:
        return (0, 0, 0), 0.0

    region = coverage.box.slices
    mask = coverage.mask
    c_region = canvas.pixels[region]
    t_region = target.pixels[region]

    if alpha is not None:
        return _solve_color(mask * alpha, c_region, t_region), float(alpha)

    # The clipped closed-form alpha can lose to an opaque shape; keep the better
    options = []
    for candidate in dict.fromkeys((_solve_alpha(mask, c_region, t_region), 1.0)):
        color = _solve_color(mask * candidate, c_region, t_region)
        error = float(squared_error(blend(c_region, mask, color, candidate), t_region).sum())
        options.append((error, color, candidate))
    _, color, chosen = min(options, key=lambda o: o[0])
    return color, chosen


def score(
    coverage: Coverage,
    color: RGB,
    alpha: float,
    canvas: PixelBuffer,
    target: PixelBuffer,
    context: ScoreContext,
) -> float:
    """Total error if this candidate were committed.

    ``total - error(box before) + error(box after)``; pixels outside the box
    are unchanged by construction.
    """
    if coverage.is_empty:
        return context.total
    region = coverage.box.slices
    after = squared_error(blend(canvas.pixels[region], coverage.mask, color, alpha), target.pixels[region])
    return context.total - context.region_error(coverage.box) + float(after.sum())
