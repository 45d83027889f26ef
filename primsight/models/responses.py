"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from primsight.models.shapes import ShapeRecord


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    shape_types: list[str] = Field(default_factory=list)


class ApproximateResponse(BaseModel):
    width: int
    height: int
    background: str
    seed: int
    shapes: list[ShapeRecord] = Field(default_factory=list)
    svg: str
    rmse: float = 0.0
    total_error: float = 0.0
    processing_time_ms: float = 0.0
    png_base64: str | None = None
