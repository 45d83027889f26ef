"""API request models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ApproximateRequest(BaseModel):
    width: int = Field(..., gt=0, description="Target width in pixels")
    height: int = Field(..., gt=0, description="Target height in pixels")
    pixels: list[Any] = Field(
        ...,
        description="Row-major RGB(A) values 0-255: flat, per pixel, or per row",
    )

    # Unset knobs fall back to the service settings / engine defaults
    shape_count: int | None = Field(default=None, description="Number of shapes (rounds)")
    max_age: int | None = Field(default=None, description="Failed mutations before a round commits")
    shape_type: str | None = Field(default=None, description="TRIANGLE, RECTANGLE, ELLIPSE, QUADRATIC, CUBIC or MIXED")
    background: str | None = Field(default=None, description="RRGGBB; default is the average target color")
    seed: int | None = Field(default=None, description="Random seed for a reproducible run")
    candidates: int | None = Field(default=None, description="Random candidates per round")
    alpha: float | None = Field(default=None, description="Fixed shape alpha; default is solved per shape")

    scale: float = Field(default=1.0, gt=0, description="Output scale for SVG and PNG")
    include_png: bool = Field(default=False, description="Also return a base64 PNG rendering")
