"""PixelBuffer: fixed-size RGB sample grid used for the target and the canvas.

Samples are float64 on the 0-255 scale, shape ``(height, width, 3)``. Pixel
(x, y) covers the unit square [x, x+1) x [y, y+1).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from primsight.engine.errors import ConfigurationError

if TYPE_CHECKING:
    from PIL import Image


@dataclass
class PixelBuffer:
    pixels: NDArray[np.float64]

    @classmethod
    def from_array(cls, data: Any) -> PixelBuffer:
        """Build a buffer from an ``(H, W, 3)`` or ``(H, W, 4)`` array-like.

        uint8 and float inputs are both read on the 0-255 scale. An alpha
        channel is dropped.
        """
        arr = np.asarray(data, dtype=np.float64)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ConfigurationError(f"Expected an (H, W, 3|4) pixel array, got shape {arr.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ConfigurationError(f"Pixel buffer must be non-empty, got {arr.shape[1]}x{arr.shape[0]}")
        if not np.all(np.isfinite(arr)):
            raise ConfigurationError("Pixel buffer contains non-finite samples")
        return cls(np.clip(arr[:, :, :3], 0.0, 255.0).copy())

    @classmethod
    def filled(cls, width: int, height: int, color: tuple[int, int, int]) -> PixelBuffer:
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Pixel buffer must be non-empty, got {width}x{height}")
        pixels = np.empty((height, width, 3), dtype=np.float64)
        pixels[:, :] = np.asarray(color, dtype=np.float64)
        return cls(pixels)

    @classmethod
    def from_image(cls, image: Image.Image) -> PixelBuffer:
        """Wrap an already-decoded Pillow image."""
        return cls.from_array(np.asarray(image.convert("RGB")))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> tuple[int, int]:
        return (self.width, self.height)

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.pixels.copy())

    def average_color(self) -> tuple[int, int, int]:
        """Mean color over all pixels, truncated to integers."""
        mean = self.pixels.reshape(-1, 3).mean(axis=0)
        return (int(mean[0]), int(mean[1]), int(mean[2]))

    def to_uint8(self) -> NDArray[np.uint8]:
        return np.clip(np.rint(self.pixels), 0, 255).astype(np.uint8)

    def to_image(self) -> Image.Image:
        """Pillow RGB image of the buffer (in memory only)."""
        from PIL import Image

        return Image.fromarray(self.to_uint8())
