"""POST /api/approximate: approximate a pixel buffer with shapes."""

from __future__ import annotations

import asyncio
import base64
import io
import json
import logging
import time
from collections.abc import AsyncGenerator

import numpy as np
from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from primsight.config import settings
from primsight.engine.buffer import PixelBuffer
from primsight.engine.config import OptimizerConfig
from primsight.engine.errors import ConfigurationError
from primsight.engine.optimizer import HillClimber, create_optimizer
from primsight.engine.render import render_result
from primsight.models.requests import ApproximateRequest
from primsight.models.responses import ApproximateResponse
from primsight.models.shapes import ApproximationResult
from primsight.svg.serializer import result_to_svg

logger = logging.getLogger(__name__)

router = APIRouter()


_SENTINEL = object()  # marks end of queue


def _decode_pixels(request: ApproximateRequest) -> PixelBuffer:
    area = request.width * request.height
    if area > settings.max_canvas_pixels:
        raise HTTPException(
            status_code=413,
            detail=f"Canvas {request.width}x{request.height} exceeds {settings.max_canvas_pixels} pixels",
        )
    try:
        data = np.asarray(request.pixels, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Malformed pixel data: {e}") from e

    if data.size not in (area * 3, area * 4):
        raise HTTPException(
            status_code=400,
            detail=f"Expected {area * 3} RGB or {area * 4} RGBA values, got {data.size}",
        )
    try:
        return PixelBuffer.from_array(data.reshape(request.height, request.width, data.size // area))
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _default(value, fallback):
    return fallback if value is None else value


def _build_optimizer(request: ApproximateRequest) -> HillClimber:
    target = _decode_pixels(request)
    try:
        config = OptimizerConfig(
            shape_count=_default(request.shape_count, settings.default_shape_count),
            max_age=_default(request.max_age, settings.default_max_age),
            shape_type=_default(request.shape_type, "TRIANGLE"),
            background=request.background,
            seed=request.seed,
            candidates=_default(request.candidates, settings.default_candidates),
            workers=settings.max_workers,
            alpha=request.alpha,
        )
        return create_optimizer(target, config)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _encode_png(result: ApproximationResult, scale: float) -> str:
    buf = io.BytesIO()
    render_result(result, scale=scale).to_image().save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _build_response(
    result: ApproximationResult,
    request: ApproximateRequest,
    elapsed_ms: float,
) -> ApproximateResponse:
    return ApproximateResponse(
        width=result.width,
        height=result.height,
        background=result.background_hex,
        seed=result.seed,
        shapes=result.shapes,
        svg=result_to_svg(result, scale=request.scale),
        rmse=result.rmse,
        total_error=result.total_error,
        processing_time_ms=round(elapsed_ms, 1),
        png_base64=_encode_png(result, request.scale) if request.include_png else None,
    )


@router.post("/approximate", response_model=ApproximateResponse)
async def approximate(request: ApproximateRequest) -> ApproximateResponse:
    start = time.perf_counter()
    optimizer = _build_optimizer(request)

    # CPU-bound; keep the event loop free
    result = await asyncio.get_running_loop().run_in_executor(None, optimizer.run)

    elapsed = (time.perf_counter() - start) * 1000
    return _build_response(result, request, elapsed)


async def _stream_approximate(optimizer: HillClimber, request: ApproximateRequest) -> AsyncGenerator[str, None]:
    """Drive optimizer.run_streaming() in a thread, yielding SSE events as rounds commit."""
    start = time.perf_counter()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def _run_optimizer() -> None:
        try:
            for progress in optimizer.run_streaming():
                loop.call_soon_threadsafe(queue.put_nowait, progress)
        except Exception as e:
            logger.exception("Streaming approximation failed")
            loop.call_soon_threadsafe(queue.put_nowait, {"type": "error", "message": str(e)})
        loop.call_soon_threadsafe(queue.put_nowait, _SENTINEL)

    loop.run_in_executor(None, _run_optimizer)

    failed = False
    while True:
        item = await queue.get()
        if item is _SENTINEL:
            break
        if item.get("type") == "error":
            failed = True
            yield f"event: error\ndata: {json.dumps(item)}\n\n"
            continue
        yield f"event: progress\ndata: {json.dumps(item)}\n\n"

    if not failed:
        elapsed = (time.perf_counter() - start) * 1000
        response = _build_response(optimizer.result(), request, elapsed)
        yield f"event: result\ndata: {response.model_dump_json()}\n\n"

    yield f"event: done\ndata: {json.dumps({'type': 'done'})}\n\n"


@router.post("/approximate/stream")
async def approximate_stream(request: ApproximateRequest) -> StreamingResponse:
    optimizer = _build_optimizer(request)
    return StreamingResponse(_stream_approximate(optimizer, request), media_type="text/event-stream")
