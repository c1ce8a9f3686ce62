"""
Arc warp.

Bends a rendered raster onto a circular arc, like Photoshop's "Arc" text
warp. Each destination column is a vertical slice of the source rotated by
that column's angle on the circle and shifted down by the arc's displacement.
Sampling runs destination to source, so the output has no holes.

For a canvas of ``w x h`` and an arc percentage ``p``:

    s = p / 100 * h * 0.35          sag of the arc
    R = w^2 / (8 s) + s / 2         circle radius
    d = R - s

    theta(x) = asin((x - w/2) / R)  clamped to +-0.999999
    yArc(x)  = d - R cos(theta(x))

The canvas grows by ``ceil(max(yArc) - min(yArc))`` rows and the displacement
range is centered vertically.
"""

from __future__ import annotations

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

SAG_FACTOR = 0.35
MAX_SIN = 0.999999
MIN_SAG_DENOMINATOR = 1e-6


def arc_geometry(width: int, height: int, arc_pct: float) -> tuple[float, float, float]:
    """
    Circle describing the arc.

    :return: (sag, radius, center distance)
    """
    sag = (arc_pct / 100.0) * height * SAG_FACTOR
    radius = (width * width) / max(MIN_SAG_DENOMINATOR, 8 * sag) + sag / 2
    return sag, radius, radius - sag


def column_angles(width: int, radius: float) -> tuple[np.ndarray, np.ndarray]:
    """``sin(theta)`` and ``cos(theta)`` at every column center."""
    xc = np.arange(width, dtype=np.float64) + 0.5
    sin_t = np.clip((xc - width / 2) / radius, -MAX_SIN, MAX_SIN)
    return sin_t, np.sqrt(1.0 - sin_t * sin_t)


def bilinear_sample(pixels: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Sample ``pixels`` (H, W, C) at fractional coordinates.

    Coordinates outside ``[0, W) x [0, H)`` give transparent zeros. The
    right/bottom neighbor is clamped to the last column/row.
    """
    h, w = pixels.shape[:2]
    inside = (x >= 0) & (y >= 0) & (x < w) & (y < h)

    xs = np.where(inside, x, 0.0)
    ys = np.where(inside, y, 0.0)
    x0 = np.floor(xs).astype(np.intp)
    y0 = np.floor(ys).astype(np.intp)
    x1 = np.minimum(w - 1, x0 + 1)
    y1 = np.minimum(h - 1, y0 + 1)
    tx = (xs - x0)[..., None]
    ty = (ys - y0)[..., None]

    out = (
        pixels[y0, x0] * ((1 - tx) * (1 - ty))
        + pixels[y0, x1] * (tx * (1 - ty))
        + pixels[y1, x0] * ((1 - tx) * ty)
        + pixels[y1, x1] * (tx * ty)
    )
    out[~inside] = 0
    return out.astype(pixels.dtype, copy=False)


def arc_warp(pixels: np.ndarray, arc_pct: float) -> np.ndarray:
    """
    Warp a raster onto an arc.

    :param pixels: Source raster (H, W, C). Premultiplied RGBA keeps edges clean.
    :param arc_pct: Bend strength in percent, clamped to 0..100
    :return: The warped raster (H', W, C) with H' >= H. For ``arc_pct <= 0``
        the input array itself is returned.
    """
    arc = min(100.0, max(0.0, arc_pct if math.isfinite(arc_pct) else 0.0))
    if arc <= 0:
        return pixels

    h0, w0 = pixels.shape[:2]
    _, radius, d = arc_geometry(w0, h0, arc)
    sin_t, cos_t = column_angles(w0, radius)
    y_arc = d - radius * cos_t

    min_arc = float(y_arc.min())
    max_arc = float(y_arc.max())
    h1 = h0 + int(math.ceil(max(0.0, max_arc - min_arc)))
    mid_arc = (min_arc + max_arc) / 2
    logger.debug(f"Arc warp {arc}%: {w0}x{h0} -> {w0}x{h1}, radius {radius:.1f}")

    # Pivot of every column, then the offset of every destination row from it
    ty = h1 / 2 + (y_arc - mid_arc)
    yc = np.arange(h1, dtype=np.float64)[:, None] + 0.5
    dy = yc - ty[None, :]

    xc = np.arange(w0, dtype=np.float64)[None, :] + 0.5
    src_x = xc + sin_t[None, :] * dy
    src_y = h0 / 2 + cos_t[None, :] * dy

    return bilinear_sample(pixels, src_x, src_y)
