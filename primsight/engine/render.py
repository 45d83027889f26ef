"""Raster rendering of a committed shape list, optionally at a larger scale."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from primsight.engine.buffer import PixelBuffer
from primsight.engine.compositor import composite
from primsight.engine.errors import ConfigurationError
from primsight.models.shapes import ApproximationResult, ShapeRecord
from primsight.utils.color import RGB

logger = logging.getLogger(__name__)


def render_records(
    records: Iterable[ShapeRecord],
    width: int,
    height: int,
    background: RGB,
    scale: float = 1.0,
    supersample: int = 4,
) -> PixelBuffer:
    """Paint ``records`` in order over a flat background.

    Control points are in canvas pixels; the output is
    ``round(width*scale) x round(height*scale)``.
    """
    if scale <= 0:
        raise ConfigurationError(f"scale must be positive, got {scale}")
    out_w = max(1, round(width * scale))
    out_h = max(1, round(height * scale))

    canvas = PixelBuffer.filled(out_w, out_h, background)
    count = 0
    for record in records:
        shape = record.to_shape()
        if scale != 1.0:
            shape = shape.scaled(scale)
        composite(canvas, shape.rasterize(out_w, out_h, supersample), record.color, record.alpha)
        count += 1

    logger.debug("Rendered %d shapes at %dx%d", count, out_w, out_h)
    return canvas


def render_result(result: ApproximationResult, scale: float = 1.0, supersample: int = 4) -> PixelBuffer:
    return render_records(result.shapes, result.width, result.height, result.background, scale, supersample)
