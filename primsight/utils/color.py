"""Color helpers: hex parsing/formatting. No engine imports."""

from __future__ import annotations

import re

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")

RGB = tuple[int, int, int]


def parse_hex(value: str) -> RGB:
    """Parse ``RRGGBB`` (optionally ``#``-prefixed) into an RGB triple."""
    match = _HEX_RE.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid RRGGBB color: {value!r}")
    digits = match.group(1)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def rgb_to_hex(color: RGB | tuple[float, float, float]) -> str:
    """Format an RGB triple as ``#RRGGBB``; channels are rounded and clamped to 0-255."""
    r, g, b = (max(0, min(255, int(round(c)))) for c in color)
    return f"#{r:02X}{g:02X}{b:02X}"


def is_hex_color(value: str) -> bool:
    return _HEX_RE.match(value.strip()) is not None
