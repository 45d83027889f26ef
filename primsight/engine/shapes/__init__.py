"""Shape variants. Importing this package registers every variant."""

from primsight.engine.shapes.registry import ShapeType, get_registry, register_shape
from primsight.engine.shapes.base import CanvasBounds, Point, Shape
from primsight.engine.shapes.triangle import Triangle
from primsight.engine.shapes.rectangle import Rectangle
from primsight.engine.shapes.ellipse import Ellipse
from primsight.engine.shapes.curves import CubicCurve, QuadraticCurve, StrokedCurve

__all__ = [
    "ShapeType",
    "get_registry",
    "register_shape",
    "CanvasBounds",
    "Point",
    "Shape",
    "Triangle",
    "Rectangle",
    "Ellipse",
    "StrokedCurve",
    "QuadraticCurve",
    "CubicCurve",
]
