"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

# Flattened curves keep consecutive samples at most this far apart (pixels).
# A quarter pixel keeps the nearest-sample distance within ~0.01px of the
# true curve distance for strokes one pixel wide.
_FLATTEN_SPACING = 0.25

# Lower bound on flattening samples so tiny curves still get a shape.
_MIN_FLATTEN_SAMPLES = 16


def bbox(points: NDArray[np.float64]) -> tuple[float, float, float, float]:
    """Compute (xmin, ymin, xmax, ymax) bounding box."""
    if len(points) == 0:
        return (0.0, 0.0, 0.0, 0.0)
    return (
        float(np.min(points[:, 0])),
        float(np.min(points[:, 1])),
        float(np.max(points[:, 0])),
        float(np.max(points[:, 1])),
    )


def arc_lengths(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Cumulative arc-length along a point sequence."""
    diffs = np.diff(points, axis=0)
    segment_lengths = np.sqrt(np.sum(diffs**2, axis=1))
    return np.concatenate([[0.0], np.cumsum(segment_lengths)])


def polyline_length(points: NDArray[np.float64]) -> float:
    if len(points) < 2:
        return 0.0
    return float(arc_lengths(points)[-1])


def distance(p: tuple[float, float], q: tuple[float, float]) -> float:
    return math.hypot(q[0] - p[0], q[1] - p[1])


def interior_angle(
    vertex: tuple[float, float],
    a: tuple[float, float],
    b: tuple[float, float],
) -> float:
    """Angle in degrees at ``vertex`` between the rays towards ``a`` and ``b``.

    Returns 0.0 when either ray has zero length.
    """
    d1 = distance(vertex, a)
    d2 = distance(vertex, b)
    if d1 < 1e-12 or d2 < 1e-12:
        return 0.0
    dot = ((a[0] - vertex[0]) * (b[0] - vertex[0]) + (a[1] - vertex[1]) * (b[1] - vertex[1])) / (d1 * d2)
    return math.degrees(math.acos(max(-1.0, min(1.0, dot))))


def rotate_points(
    points: NDArray[np.float64],
    center: tuple[float, float],
    degrees: float,
) -> NDArray[np.float64]:
    """Rotate points about ``center`` (y-down image coordinates, clockwise on screen)."""
    theta = math.radians(degrees)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    shifted = np.asarray(points, dtype=np.float64) - np.asarray(center, dtype=np.float64)
    x = shifted[:, 0] * cos_t - shifted[:, 1] * sin_t
    y = shifted[:, 0] * sin_t + shifted[:, 1] * cos_t
    return np.column_stack([x + center[0], y + center[1]])


def bezier_points(control: NDArray[np.float64], t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Evaluate a quadratic (3 controls) or cubic (4 controls) Bezier at parameters ``t``."""
    control = np.asarray(control, dtype=np.float64)
    t = np.asarray(t, dtype=np.float64)[:, None]
    mt = 1.0 - t
    if len(control) == 3:
        p0, p1, p2 = control
        return mt**2 * p0 + 2 * mt * t * p1 + t**2 * p2
    if len(control) == 4:
        p0, p1, p2, p3 = control
        return mt**3 * p0 + 3 * mt**2 * t * p1 + 3 * mt * t**2 * p2 + t**3 * p3
    raise ValueError(f"Bezier needs 3 or 4 control points, got {len(control)}")


def flatten_bezier(control: NDArray[np.float64], spacing: float = _FLATTEN_SPACING) -> NDArray[np.float64]:
    """Sample a Bezier densely enough that neighbouring samples are ``spacing`` apart.

    The control polygon length bounds the curve length, so it sizes the sample count.
    """
    bound = polyline_length(np.asarray(control, dtype=np.float64))
    n = max(_MIN_FLATTEN_SAMPLES, int(math.ceil(bound / spacing)) + 1)
    return bezier_points(control, np.linspace(0.0, 1.0, n))
