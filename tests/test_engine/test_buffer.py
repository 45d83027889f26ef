"""Tests for PixelBuffer construction and conversion."""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from primsight.engine.buffer import PixelBuffer
from primsight.engine.errors import ConfigurationError


def test_from_array_rgb():
    data = np.zeros((3, 5, 3), dtype=np.uint8)
    buf = PixelBuffer.from_array(data)
    assert buf.width == 5
    assert buf.height == 3
    assert buf.pixels.dtype == np.float64


def test_from_array_drops_alpha():
    data = np.full((2, 2, 4), 200, dtype=np.uint8)
    buf = PixelBuffer.from_array(data)
    assert buf.pixels.shape == (2, 2, 3)
    assert np.all(buf.pixels == 200.0)


def test_from_array_clips_range():
    data = np.array([[[-10.0, 300.0, 128.0]]])
    buf = PixelBuffer.from_array(data)
    assert buf.pixels[0, 0].tolist() == [0.0, 255.0, 128.0]


@pytest.mark.parametrize(
    "data",
    [
        np.zeros((4, 4)),
        np.zeros((4, 4, 2)),
        np.zeros((0, 4, 3)),
        np.full((2, 2, 3), np.nan),
    ],
)
def test_from_array_rejects_bad_input(data):
    with pytest.raises(ConfigurationError):
        PixelBuffer.from_array(data)


def test_filled_and_average_color():
    buf = PixelBuffer.filled(4, 3, (10, 20, 30))
    assert buf.shape == (4, 3)
    assert buf.average_color() == (10, 20, 30)


def test_filled_rejects_empty():
    with pytest.raises(ConfigurationError):
        PixelBuffer.filled(0, 3, (0, 0, 0))


def test_average_color_of_halves():
    data = np.zeros((2, 2, 3))
    data[:, 0] = (255, 255, 255)
    assert PixelBuffer.from_array(data).average_color() == (127, 127, 127)


def test_copy_is_independent():
    buf = PixelBuffer.filled(2, 2, (1, 2, 3))
    other = buf.copy()
    other.pixels[0, 0] = (9, 9, 9)
    assert buf.pixels[0, 0].tolist() == [1.0, 2.0, 3.0]


def test_image_round_trip():
    buf = PixelBuffer.filled(6, 4, (12, 34, 56))
    image = buf.to_image()
    assert image.size == (6, 4)
    assert image.mode == "RGB"
    back = PixelBuffer.from_image(image)
    assert np.array_equal(back.pixels, buf.pixels)


def test_from_image_converts_rgba():
    image = Image.new("RGBA", (3, 2), (1, 2, 3, 4))
    buf = PixelBuffer.from_image(image)
    assert buf.pixels.shape == (2, 3, 3)
    assert buf.pixels[1, 2].tolist() == [1.0, 2.0, 3.0]
