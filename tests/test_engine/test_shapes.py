"""Tests for the shape variants: validity, random draws, mutation, export."""

from __future__ import annotations

import math

import numpy as np
import pytest

from primsight.engine.shapes import (
    CanvasBounds,
    CubicCurve,
    Ellipse,
    QuadraticCurve,
    Rectangle,
    Triangle,
    get_registry,
)
from primsight.engine.shapes.base import fmt

BOUNDS = CanvasBounds(32, 32)

SAMPLE_SHAPES = [
    Triangle(((2.0, 3.0), (20.0, 5.0), (9.0, 18.0))),
    Rectangle(center=(10.0, 12.0), width=8.0, height=3.0, angle=30.0),
    Ellipse(center=(16.0, 16.0), rx=6.0, ry=2.5, angle=150.0),
    QuadraticCurve(points=((1.0, 1.0), (8.0, 12.0), (20.0, 2.0)), width=2.0),
    CubicCurve(points=((1.0, 1.0), (5.0, 20.0), (15.0, 0.0), (25.0, 25.0)), width=1.5),
]


# ── validity ──


def test_triangle_validity():
    assert Triangle(((0.0, 0.0), (10.0, 0.0), (5.0, 8.66))).is_valid()
    # Angle at the base ~5.7 degrees
    assert not Triangle(((0.0, 0.0), (10.0, 0.0), (5.0, 0.5))).is_valid()
    assert not Triangle(((0.0, 0.0), (0.0, 0.0), (5.0, 5.0))).is_valid()


def test_quadratic_validity():
    assert QuadraticCurve(points=((0.0, 0.0), (5.0, 3.0), (10.0, 0.0))).is_valid()
    # Control point beyond the end: the curve folds back
    assert not QuadraticCurve(points=((0.0, 0.0), (10.0, 0.0), (5.0, 0.0))).is_valid()


def test_cubic_validity():
    assert not CubicCurve(points=((3.0, 3.0),) * 4).is_valid()
    assert CubicCurve(points=((0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0))).is_valid()


def test_minimum_sizes():
    assert not Rectangle(center=(5.0, 5.0), width=0.5, height=4.0).is_valid()
    assert not Ellipse(center=(5.0, 5.0), rx=4.0, ry=0.2).is_valid()
    assert Ellipse(center=(5.0, 5.0), rx=1.0, ry=1.0).is_valid()


# ── random draws and mutation ──


@pytest.mark.parametrize("kind", get_registry().kinds(), ids=lambda k: k.value)
def test_randomize_is_valid(kind, rng):
    cls = get_registry().get(kind)
    for _ in range(20):
        shape = cls.randomize(rng, BOUNDS)
        assert isinstance(shape, cls)
        assert shape.is_valid()


@pytest.mark.parametrize("kind", get_registry().kinds(), ids=lambda k: k.value)
def test_randomize_is_deterministic(kind):
    cls = get_registry().get(kind)
    a = cls.randomize(np.random.default_rng(7), BOUNDS)
    b = cls.randomize(np.random.default_rng(7), BOUNDS)
    assert a == b


def test_random_points_stay_within_border(rng):
    for _ in range(50):
        shape = Triangle.randomize(rng, BOUNDS)
        for x, y in shape.control_points():
            assert -BOUNDS.border <= x <= BOUNDS.width + BOUNDS.border
            assert -BOUNDS.border <= y <= BOUNDS.height + BOUNDS.border


def test_curve_stroke_width_bounds(rng):
    for _ in range(50):
        shape = CubicCurve.randomize(rng, BOUNDS)
        assert 1.0 <= shape.width <= BOUNDS.max_stroke
        mutated = shape.mutate(rng, BOUNDS)
        assert 1.0 <= mutated.width <= BOUNDS.max_stroke


@pytest.mark.parametrize("shape", SAMPLE_SHAPES, ids=lambda s: s.kind.value)
def test_mutate_returns_new_valid_shape(shape, rng):
    mutated = shape.mutate(rng, BOUNDS)
    assert type(mutated) is type(shape)
    assert mutated.is_valid()
    assert mutated != shape


def test_triangle_mutation_moves_one_vertex(rng):
    tri = SAMPLE_SHAPES[0]
    for _ in range(20):
        mutated = tri.mutate(rng, BOUNDS)
        moved = [a != b for a, b in zip(tri.vertices, mutated.vertices)]
        assert sum(moved) == 1


def test_mutate_gives_up_on_impossible_shape(rng):
    # Every move clamps back onto the origin, so no valid candidate exists
    bounds = CanvasBounds(0, 0, border=0.0)
    tri = Triangle(((0.0, 0.0), (0.0, 0.0), (0.0, 0.0)))
    assert tri.mutate(rng, bounds) is tri


# ── control points and export ──


@pytest.mark.parametrize("shape", SAMPLE_SHAPES, ids=lambda s: s.kind.value)
def test_control_points_round_trip(shape):
    rebuilt = type(shape).from_control_points(shape.control_points(), shape.stroke_width)
    for (x0, y0), (x1, y1) in zip(shape.control_points(), rebuilt.control_points()):
        assert math.isclose(x0, x1, abs_tol=1e-9)
        assert math.isclose(y0, y1, abs_tol=1e-9)
    assert rebuilt.stroke_width == shape.stroke_width


def test_from_control_points_checks_count():
    with pytest.raises(ValueError):
        Triangle.from_control_points([(0.0, 0.0), (1.0, 1.0)])
    with pytest.raises(ValueError):
        QuadraticCurve.from_control_points([(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)])


def test_scaled():
    tri = Triangle(((1.0, 2.0), (3.0, 4.0), (5.0, 1.0)))
    assert tri.scaled(2.0).vertices == ((2.0, 4.0), (6.0, 8.0), (10.0, 2.0))
    quad = QuadraticCurve(points=((0.0, 0.0), (5.0, 3.0), (10.0, 0.0)), width=1.5)
    assert quad.scaled(2.0).width == 3.0


def test_fmt():
    assert fmt(4.0) == "4"
    assert fmt(1.5) == "1.5"
    assert fmt(2.25) == "2.25"
    assert fmt(100.0) == "100"
    assert fmt(-0.001) == "0"


def test_vector_paths():
    assert Triangle(((0.0, 0.0), (4.0, 0.0), (0.0, 4.0))).to_vector_path() == "M0 0 L4 0 L0 4 Z"
    assert Triangle(((0.0, 0.0), (4.0, 0.0), (0.0, 4.0))).to_vector_path(2.0) == "M0 0 L8 0 L0 8 Z"
    rect = Rectangle(center=(5.0, 5.0), width=4.0, height=2.0)
    assert rect.to_vector_path() == "M3 4 L7 4 L7 6 L3 6 Z"
    ellipse = Ellipse(center=(5.0, 5.0), rx=3.0, ry=2.0)
    assert ellipse.to_vector_path() == "M8 5 A3 2 0 1 1 2 5 A3 2 0 1 1 8 5 Z"
    quad = QuadraticCurve(points=((0.0, 0.0), (5.0, 3.0), (10.0, 0.0)))
    assert quad.to_vector_path() == "M0 0 Q5 3 10 0"
    cubic = CubicCurve(points=((0.0, 0.0), (1.0, 2.0), (3.0, 4.0), (5.0, 6.0)))
    assert cubic.to_vector_path() == "M0 0 C1 2 3 4 5 6"


def test_svg_elements():
    tri = Triangle(((0.0, 0.0), (4.0, 0.0), (0.0, 4.0)))
    elem = tri.svg_element("#FF0000", 0.5)
    assert elem == {"tag": "polygon", "fill": "#FF0000", "fill-opacity": "0.50000", "points": "0,0 4,0 0,4"}

    rect = Rectangle(center=(5.0, 5.0), width=4.0, height=2.0, angle=45.0).svg_element("#00FF00", 1.0, 2.0)
    assert rect["tag"] == "rect"
    assert rect["x"] == "6" and rect["y"] == "8"
    assert rect["width"] == "8" and rect["height"] == "4"
    assert rect["transform"] == "rotate(45 10 10)"

    curve = QuadraticCurve(points=((0.0, 0.0), (5.0, 3.0), (10.0, 0.0)), width=2.0).svg_element("#0000FF", 0.25)
    assert curve["tag"] == "path"
    assert curve["fill"] == "none"
    assert curve["stroke"] == "#0000FF"
    assert curve["stroke-opacity"] == "0.25000"
    assert curve["stroke-width"] == "2"
    assert curve["stroke-linecap"] == "round"
