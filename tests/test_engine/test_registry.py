"""Tests for the shape registry."""

import pytest

from primsight.engine.shapes import Ellipse, Triangle
from primsight.engine.shapes.registry import ShapeRegistry, ShapeType, get_registry


def test_register_and_get():
    reg = ShapeRegistry()
    reg.register(ShapeType.TRIANGLE, Triangle)
    assert reg.get(ShapeType.TRIANGLE) is Triangle
    assert reg.count == 1


def test_kinds_follow_enum_order():
    reg = ShapeRegistry()
    reg.register(ShapeType.ELLIPSE, Ellipse)
    reg.register(ShapeType.TRIANGLE, Triangle)
    assert reg.kinds() == [ShapeType.TRIANGLE, ShapeType.ELLIPSE]


def test_duplicate_rejected():
    reg = ShapeRegistry()
    reg.register(ShapeType.TRIANGLE, Triangle)
    with pytest.raises(ValueError):
        reg.register(ShapeType.TRIANGLE, Triangle)


def test_mixed_is_not_a_variant():
    reg = ShapeRegistry()
    with pytest.raises(ValueError):
        reg.register(ShapeType.MIXED, Triangle)


def test_global_registry_has_every_variant():
    reg = get_registry()
    assert reg.count == 5
    assert reg.kinds() == [
        ShapeType.TRIANGLE,
        ShapeType.RECTANGLE,
        ShapeType.ELLIPSE,
        ShapeType.QUADRATIC,
        ShapeType.CUBIC,
    ]
    for kind in reg.kinds():
        assert reg.get(kind).kind is kind
