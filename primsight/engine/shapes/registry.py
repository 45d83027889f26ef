"""Shape registry: every variant is a class registered via decorator.

Usage:
    @register_shape(ShapeType.TRIANGLE)
    @dataclass(frozen=True)
    class Triangle(Shape):
        ...

The variant set is closed: ``ShapeType`` enumerates it and ``MIXED`` is a
selector, not a variant.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from primsight.engine.shapes.base import Shape

logger = logging.getLogger(__name__)


class ShapeType(str, enum.Enum):
    TRIANGLE = "TRIANGLE"
    RECTANGLE = "RECTANGLE"
    ELLIPSE = "ELLIPSE"
    QUADRATIC = "QUADRATIC"
    CUBIC = "CUBIC"
    MIXED = "MIXED"


class ShapeRegistry:
    """Maps each concrete ``ShapeType`` to its class."""

    def __init__(self) -> None:
        self._shapes: dict[ShapeType, type[Shape]] = {}

    def register(self, kind: ShapeType, cls: type[Shape]) -> None:
        if kind is ShapeType.MIXED:
            raise ValueError("MIXED is a selector, not a shape variant")
        if kind in self._shapes:
            raise ValueError(f"Duplicate shape type: {kind.value}")
        self._shapes[kind] = cls
        logger.debug("Registered shape %s (%s)", kind.value, cls.__name__)

    def get(self, kind: ShapeType) -> type[Shape]:
        return self._shapes[kind]

    def kinds(self) -> list[ShapeType]:
        """Concrete variants in enumeration order (stable for random choice)."""
        return [k for k in ShapeType if k in self._shapes]

    @property
    def count(self) -> int:
        return len(self._shapes)


# Module-level singleton
_registry = ShapeRegistry()


def get_registry() -> ShapeRegistry:
    return _registry


def register_shape(kind: ShapeType) -> Callable[[type[Shape]], type[Shape]]:
    """Class decorator registering a shape variant under ``kind``."""

    def decorator(cls: type[Shape]) -> type[Shape]:
        cls.kind = kind
        _registry.register(kind, cls)
        return cls

    return decorator
