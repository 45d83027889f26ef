"""Tests for optimal color and incremental scoring."""

from __future__ import annotations

import math

import numpy as np
import pytest

from primsight.engine.buffer import PixelBuffer
from primsight.engine.compositor import composite
from primsight.engine.rasterizer import Coverage
from primsight.engine.scorer import ScoreContext, blend, optimal_color, score, squared_error
from primsight.engine.shapes import Ellipse, Rectangle, Triangle
from tests.conftest import BLACK, RED, make_gradient, make_solid


def _full_error(canvas: PixelBuffer, target: PixelBuffer) -> float:
    return float(squared_error(canvas.pixels, target.pixels).sum())


def test_squared_error():
    a = np.zeros((1, 2, 3))
    b = np.zeros((1, 2, 3))
    b[0, 1] = (1.0, 2.0, 2.0)
    assert squared_error(a, b).tolist() == [[0.0, 9.0]]


def test_blend():
    region = np.zeros((1, 2, 3))
    mask = np.array([[1.0, 0.5]])
    out = blend(region, mask, (200, 100, 0), 0.5)
    assert out[0, 0].tolist() == [100.0, 50.0, 0.0]
    assert out[0, 1].tolist() == [50.0, 25.0, 0.0]


def test_context_totals_and_rmse(gradient):
    canvas = PixelBuffer.filled(gradient.width, gradient.height, gradient.average_color())
    ctx = ScoreContext.from_buffers(canvas, gradient)
    assert math.isclose(ctx.total, _full_error(canvas, gradient))
    assert ctx.sample_count == gradient.width * gradient.height * 3
    assert math.isclose(ctx.rmse, math.sqrt(ctx.total / ctx.sample_count))


def test_red_square_on_black():
    target = make_solid(2, 2, RED)
    canvas = make_solid(2, 2, BLACK)
    ctx = ScoreContext.from_buffers(canvas, target)
    cov = Rectangle(center=(1.0, 1.0), width=4.0, height=4.0).rasterize(2, 2)

    color, alpha = optimal_color(cov, target, canvas)
    assert color == RED
    assert alpha == 1.0
    assert score(cov, color, alpha, canvas, target, ctx) == pytest.approx(0.0, abs=1e-9)


def test_fixed_alpha_solves_color_only():
    target = make_solid(2, 2, RED)
    canvas = make_solid(2, 2, BLACK)
    cov = Rectangle(center=(1.0, 1.0), width=4.0, height=4.0).rasterize(2, 2)
    color, alpha = optimal_color(cov, target, canvas, alpha=0.5)
    # 510 wanted, clipped to the channel range
    assert color == (255, 0, 0)
    assert alpha == 0.5


def test_solved_alpha_recovers_translucent_paint():
    rng = np.random.default_rng(3)
    canvas = PixelBuffer.from_array(rng.uniform(0.0, 255.0, (4, 4, 3)))
    paint = np.array([200.0, 40.0, 90.0])
    target = PixelBuffer.from_array(0.5 * paint + 0.5 * canvas.pixels)
    cov = Rectangle(center=(2.0, 2.0), width=4.0, height=4.0).rasterize(4, 4)

    color, alpha = optimal_color(cov, target, canvas)
    assert alpha == pytest.approx(0.5, abs=1e-6)
    assert color == (200, 40, 90)


def test_colors_are_integers_in_range(gradient):
    canvas = PixelBuffer.filled(gradient.width, gradient.height, (0, 0, 0))
    cov = Ellipse(center=(8.0, 8.0), rx=5.0, ry=3.0, angle=20.0).rasterize(16, 16)
    color, alpha = optimal_color(cov, gradient, canvas)
    assert all(isinstance(c, int) and 0 <= c <= 255 for c in color)
    assert 8 / 255 <= alpha <= 1.0


def test_empty_coverage():
    target = make_gradient(4, 4)
    canvas = make_solid(4, 4, BLACK)
    ctx = ScoreContext.from_buffers(canvas, target)
    empty = Coverage.empty()
    assert optimal_color(empty, target, canvas) == ((0, 0, 0), 0.0)
    assert score(empty, (10, 20, 30), 1.0, canvas, target, ctx) == ctx.total


def test_incremental_score_matches_full_recompute(gradient):
    canvas = PixelBuffer.filled(gradient.width, gradient.height, gradient.average_color())
    ctx = ScoreContext.from_buffers(canvas, gradient)
    cov = Triangle(((1.0, 1.0), (14.3, 2.7), (6.1, 13.9))).rasterize(16, 16)
    color, alpha = optimal_color(cov, gradient, canvas)

    predicted = score(cov, color, alpha, canvas, gradient, ctx)
    composite(canvas, cov, color, alpha)
    assert predicted == pytest.approx(_full_error(canvas, gradient), rel=1e-9)


def test_update_region_tracks_canvas(gradient):
    canvas = PixelBuffer.filled(gradient.width, gradient.height, (0, 0, 0))
    ctx = ScoreContext.from_buffers(canvas, gradient)
    for shape in (
        Rectangle(center=(4.0, 4.0), width=6.0, height=3.0, angle=10.0),
        Ellipse(center=(10.0, 9.0), rx=4.0, ry=2.0, angle=70.0),
        Triangle(((0.0, 15.0), (15.0, 15.0), (8.0, 3.0))),
    ):
        cov = shape.rasterize(16, 16)
        color, alpha = optimal_color(cov, gradient, canvas)
        composite(canvas, cov, color, alpha)
        ctx.update_region(cov.box, canvas, gradient)
        assert ctx.total == pytest.approx(_full_error(canvas, gradient), rel=1e-9)
        assert np.allclose(ctx.error_map, squared_error(canvas.pixels, gradient.pixels))
