"""Per-channel mean and standard deviation over a region of a cube.

Regions are given in normalized coordinates. An empty region, a single point
outside the unit square and a polygon that covers no pixel all produce the
sentinel spectrum (see :meth:`cubestats.types.Spectrum.sentinel`), which has
``has_sample == False``.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

import cv2
import numpy as np
from numpy.typing import NDArray

from .cube import Cube
from .errors import InvalidArgumentError
from .types import Point, Polygon, SpectralMean, Spectrum, as_polygon
from .validators import check_cube

if TYPE_CHECKING:
    from .config import SpectrumSettings

__all__ = ["extract_spectrum", "extract_spectrum_with", "polygon_mask"]

logger = logging.getLogger(__name__)

_MASK_FILL = 255
_MASK_THRESHOLD = 128
_INT32 = np.iinfo(np.int32)


def polygon_mask(width: int, height: int, polygon: Polygon) -> NDArray[np.bool_]:
    """Rasterize a normalized polygon into a ``(height, width)`` inclusion mask.

    Vertices are scaled by ``(width - 1, height - 1)`` and rounded to the
    nearest pixel before OpenCV's scanline fill draws them. Pixels whose fill
    value exceeds half of the fill intensity count as inside.
    """

    points = as_polygon(polygon)
    mask = np.zeros((int(height), int(width)), dtype=np.uint8)
    if not points:
        return mask.astype(bool)

    scaled = np.array(
        [[p.x * (width - 1), p.y * (height - 1)] for p in points], dtype=np.float64
    )
    if not np.all(np.isfinite(scaled)):
        raise InvalidArgumentError("Polygon coordinates must be finite")
    vertices = np.clip(np.rint(scaled), _INT32.min, _INT32.max).astype(np.int32)

    cv2.fillPoly(mask, [vertices.reshape(-1, 1, 2)], _MASK_FILL)
    return mask > _MASK_THRESHOLD


def _pixel_index(coord: float, size: int) -> int:
    # coord is within [0, 1], so flooring after adding a half rounds halves up
    return int(math.floor(coord * (size - 1) + 0.5))


def _sample_point(data: NDArray[Any], wavelengths: NDArray[np.uint32], point: Point) -> Spectrum:
    height, width, _ = data.shape
    row = _pixel_index(point.y, height)
    col = _pixel_index(point.x, width)
    pixel = data[row, col, :]
    entries = tuple(
        SpectralMean(wavelength=int(wl), value=float(v)) for wl, v in zip(wavelengths, pixel)
    )
    return Spectrum(entries=entries)


def _accumulate_rows(
    data: NDArray[Any], inside: NDArray[np.bool_], start: int, stop: int
) -> tuple[NDArray[np.float64], NDArray[np.float64], int]:
    rows = inside[start:stop]
    samples = data[start:stop][rows].astype(np.float64)
    return samples.sum(axis=0), np.square(samples).sum(axis=0), int(rows.sum())


def _accumulate(
    data: NDArray[Any], inside: NDArray[np.bool_], *, tile_rows: int, workers: int
) -> tuple[NDArray[np.float64], NDArray[np.float64], int]:
    height, _, channels = data.shape
    bounds = [(start, min(start + tile_rows, height)) for start in range(0, height, tile_rows)]

    if workers > 1 and len(bounds) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            partials = list(pool.map(lambda b: _accumulate_rows(data, inside, *b), bounds))
    else:
        partials = [_accumulate_rows(data, inside, start, stop) for start, stop in bounds]

    sums = np.zeros(channels, dtype=np.float64)
    sq_sums = np.zeros(channels, dtype=np.float64)
    count = 0
    for part_sum, part_sq, part_n in partials:
        sums += part_sum
        sq_sums += part_sq
        count += part_n
    return sums, sq_sums, count


def _region_statistics(
    sums: NDArray[np.float64], sq_sums: NDArray[np.float64], count: int
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    mean = sums / count
    # sum((x - m)^2) / n expanded as (sum(x^2) - 2 m sum(x)) / n + m^2
    variance = (sq_sums - 2.0 * sums * mean) / count + mean * mean
    # cancellation can leave a tiny negative variance for flat regions
    std = np.sqrt(np.maximum(variance, 0.0))
    return mean, std


def extract_spectrum(
    cube: Cube,
    polygon: Polygon,
    *,
    workers: int | None = None,
    tile_rows: int | None = None,
) -> Spectrum:
    """Compute the per-channel mean and standard deviation inside ``polygon``.

    Parameters
    ----------
    cube:
        Cube to sample. It is validated with :func:`check_cube` first.
    polygon:
        Normalized vertices. No vertex yields the sentinel spectrum; a single
        vertex reads the nearest pixel directly (std is ``0.0``); two or more
        vertices average every pixel inside the filled polygon.
    workers:
        Number of threads used to accumulate row tiles. Defaults to one.
    tile_rows:
        Rows per accumulation tile. Defaults to splitting the cube evenly
        across ``workers``.
    """

    data = check_cube(cube)
    points = as_polygon(polygon)

    if not points:
        logger.debug("Empty polygon; returning sentinel spectrum")
        return Spectrum.sentinel(cube.channels)

    if len(points) == 1:
        point = points[0]
        if not point.in_unit_square:
            logger.warning("Point (%s, %s) lies outside the unit square", point.x, point.y)
            return Spectrum.sentinel(cube.channels)
        return _sample_point(data, cube.wavelengths, point)

    workers = max(1, int(workers or 1))
    if tile_rows is None:
        tile_rows = -(-cube.height // workers)
    if tile_rows < 1:
        msg = f"tile_rows must be positive, got {tile_rows}"
        raise InvalidArgumentError(msg)

    inside = polygon_mask(cube.width, cube.height, points)
    sums, sq_sums, count = _accumulate(data, inside, tile_rows=int(tile_rows), workers=workers)
    logger.debug("Polygon with %d vertices covers %d pixels", len(points), count)

    if count == 0:
        logger.warning("Polygon encloses no pixel centers; returning sentinel spectrum")
        return Spectrum.sentinel(cube.channels)

    mean, std = _region_statistics(sums, sq_sums, count)
    entries = tuple(
        SpectralMean(wavelength=int(wl), value=float(m), std=float(s))
        for wl, m, s in zip(cube.wavelengths, mean, std)
    )
    return Spectrum(entries=entries)


def extract_spectrum_with(
    cube: Cube, polygon: Polygon, settings: SpectrumSettings
) -> Spectrum:
    """Run :func:`extract_spectrum` with options taken from ``settings``."""

    return extract_spectrum(
        cube, polygon, workers=settings.workers, tile_rows=settings.tile_rows
    )
