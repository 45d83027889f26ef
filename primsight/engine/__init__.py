"""PrimSight shape-approximation engine."""

from primsight.engine.buffer import PixelBuffer
from primsight.engine.config import OptimizerConfig
from primsight.engine.errors import ConfigurationError
from primsight.engine.shapes import ShapeType, get_registry

__all__ = [
    "PixelBuffer",
    "OptimizerConfig",
    "ConfigurationError",
    "ShapeType",
    "get_registry",
]
