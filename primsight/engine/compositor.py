"""Canvas compositor: paints a committed shape onto the running canvas."""

from __future__ import annotations

from primsight.engine.buffer import PixelBuffer
from primsight.engine.rasterizer import Coverage
from primsight.engine.scorer import blend
from primsight.utils.color import RGB


def composite(canvas: PixelBuffer, coverage: Coverage, color: RGB, alpha: float) -> None:
    """Alpha-over ``color`` onto ``canvas`` inside the coverage box, in place.

    Uses the same ``blend`` the scorer used, so the canvas ends up exactly as
    scored. An empty coverage leaves the canvas untouched.
    """
    if coverage.is_empty:
        return
    region = coverage.box.slices
    canvas.pixels[region] = blend(canvas.pixels[region], coverage.mask, color, alpha)
