"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from primsight.engine.buffer import PixelBuffer
from primsight.engine.config import OptimizerConfig


# Small canvases keep the optimizer tests fast

GRADIENT_W = 16
GRADIENT_H = 16

RED = (255, 0, 0)
BLACK = (0, 0, 0)


def make_gradient(width: int = GRADIENT_W, height: int = GRADIENT_H) -> PixelBuffer:
    """Red ramps left to right, green top to bottom, blue opposes red."""
    xs = np.linspace(0.0, 255.0, width)
    ys = np.linspace(0.0, 255.0, height)
    red = np.tile(xs, (height, 1))
    green = np.tile(ys[:, None], (1, width))
    blue = 255.0 - red
    return PixelBuffer.from_array(np.stack([red, green, blue], axis=-1))


def make_solid(width: int, height: int, color: tuple[int, int, int]) -> PixelBuffer:
    return PixelBuffer.filled(width, height, color)


def fast_config(**overrides) -> OptimizerConfig:
    """Few shapes, few candidates, short refinement."""
    values = {"shape_count": 10, "max_age": 20, "candidates": 8, "seed": 42}
    values.update(overrides)
    return OptimizerConfig(**values)


@pytest.fixture
def gradient() -> PixelBuffer:
    return make_gradient()


@pytest.fixture
def red_2x2() -> PixelBuffer:
    return make_solid(2, 2, RED)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
