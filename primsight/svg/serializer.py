"""Write SVG markup for an approximation result."""

from __future__ import annotations

from typing import Any
from xml.sax.saxutils import escape

from primsight.engine.shapes.base import fmt
from primsight.models.shapes import ApproximationResult


def serialize_svg(
    elements: list[dict[str, Any]],
    canvas_w: float,
    canvas_h: float,
    title: str = "",
    description: str = "",
) -> str:
    """Generate SVG markup from element definitions (``tag`` plus attributes)."""
    w, h = fmt(canvas_w), fmt(canvas_h)
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg width="{w}" height="{h}" viewBox="0 0 {w} {h}" xmlns="http://www.w3.org/2000/svg"'
        f' role="img">',
    ]

    if title:
        lines.append(f"  <title>{escape(title)}</title>")
    if description:
        lines.append(f"  <desc>{escape(description)}</desc>")

    for elem in elements:
        tag = elem.get("tag", "path")
        attrs = {k: v for k, v in elem.items() if k != "tag"}
        attr_str = " ".join(f'{k}="{v}"' for k, v in attrs.items())
        lines.append(f"  <{tag} {attr_str} />")

    lines.append("</svg>")
    return "\n".join(lines)


def result_to_svg(result: ApproximationResult, scale: float = 1.0, title: str = "") -> str:
    """Background rect followed by one element per committed shape, in paint order."""
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")
    canvas_w = result.width * scale
    canvas_h = result.height * scale

    elements: list[dict[str, Any]] = [
        {
            "tag": "rect",
            "x": "0",
            "y": "0",
            "width": fmt(canvas_w),
            "height": fmt(canvas_h),
            "fill": result.background_hex,
        }
    ]
    for record in result.shapes:
        elements.append(record.to_shape().svg_element(record.hex_color, record.alpha, scale))

    description = f"{len(result.shapes)} shapes, seed {result.seed}"
    return serialize_svg(elements, canvas_w, canvas_h, title=title, description=description)
