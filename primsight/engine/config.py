"""Optimizer configuration: the per-run knobs of the hill climber."""

from __future__ import annotations

import time
from dataclasses import dataclass

from primsight.engine.errors import ConfigurationError
from primsight.engine.shapes.registry import ShapeType
from primsight.utils.color import is_hex_color

# Lowest alpha a solved color may use: 8/255. Below this a shape is
# practically invisible and the per-channel color solve becomes unstable.
MIN_ALPHA = 8 / 255


@dataclass
class OptimizerConfig:
    """Controls the shape search for one run."""

    # Number of shapes (rounds)
    shape_count: int = 100
    # Consecutive failed mutations before a round commits
    max_age: int = 100
    shape_type: ShapeType = ShapeType.TRIANGLE
    # RRGGBB; None = average color of the target
    background: str | None = None
    # None = derived from the wall clock
    seed: int | None = None

    # Independent random candidates per round (K)
    candidates: int = 32
    # Threads used to score the K candidates
    workers: int = 1

    # Fixed shape alpha in (0, 1]; None = solved with the color
    alpha: float | None = None

    # Sub-samples per pixel axis for anti-aliased coverage
    supersample: int = 4
    # Std-dev (px) of control point perturbations
    mutation_step: float = 16.0
    # How far (px) control points may wander outside the canvas
    border_extension: float = 6.0

    def __post_init__(self) -> None:
        if isinstance(self.shape_type, str):
            try:
                self.shape_type = ShapeType(self.shape_type.upper())
            except ValueError as e:
                raise ConfigurationError(f"Unknown shape type: {self.shape_type!r}") from e

    def validate(self, width: int, height: int) -> None:
        """Reject configurations no round could run with."""
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Canvas must be non-empty, got {width}x{height}")
        if self.shape_count <= 0:
            raise ConfigurationError(f"shape_count must be positive, got {self.shape_count}")
        if self.max_age <= 0:
            raise ConfigurationError(f"max_age must be positive, got {self.max_age}")
        if self.candidates <= 0:
            raise ConfigurationError(f"candidates must be positive, got {self.candidates}")
        if self.workers <= 0:
            raise ConfigurationError(f"workers must be positive, got {self.workers}")
        if self.supersample <= 0:
            raise ConfigurationError(f"supersample must be positive, got {self.supersample}")
        if self.mutation_step <= 0:
            raise ConfigurationError(f"mutation_step must be positive, got {self.mutation_step}")
        if self.border_extension < 0:
            raise ConfigurationError(f"border_extension must be >= 0, got {self.border_extension}")
        if self.alpha is not None and not (0.0 < self.alpha <= 1.0):
            raise ConfigurationError(f"alpha must be in (0, 1], got {self.alpha}")
        if self.seed is not None and self.seed < 0:
            raise ConfigurationError(f"seed must be >= 0, got {self.seed}")
        if self.background is not None and not is_hex_color(self.background):
            raise ConfigurationError(f"background must be RRGGBB, got {self.background!r}")

    def resolved_seed(self) -> int:
        if self.seed is not None:
            return int(self.seed)
        return time.time_ns() & 0xFFFF_FFFF_FFFF_FFFF
