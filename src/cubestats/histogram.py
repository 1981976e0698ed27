"""Grouped value histograms across wavelength bands.

Channels are partitioned into ``wavelength_bins`` contiguous groups of
``channels // wavelength_bins`` channels each. Trailing channels that do not
fill a whole group are left out. Every group yields one histogram pooling the
samples of all its channels over the closed value range ``[0, max_val]``;
samples outside that range (and NaN) are not counted, so the total occurrence
of a group can be smaller than its sample count.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from .cube import Cube
from .dtypes import CubeElementType, ElementKind
from .errors import CubePreconditionError, InvalidArgumentError
from .types import Histogram, HistogramVector, ProcessingMode
from .validators import check_cube, check_histogram_size

if TYPE_CHECKING:
    from .config import HistogramSettings

__all__ = ["extract_histograms", "extract_histograms_with", "group_layout"]

logger = logging.getLogger(__name__)

_REFLECTANCE_SCALE = 100.0


def group_layout(channels: int, wavelength_bins: int) -> tuple[int, int]:
    """Return ``(channels_per_group, group_count)`` for a channel partition.

    Both values are truncated, never rounded: 5 channels in 2 bins give two
    groups of two channels and channel 4 is dropped.
    """

    if wavelength_bins < 1 or wavelength_bins > channels:
        msg = f"wavelength_bins must be within 1..{channels}, got {wavelength_bins}"
        raise InvalidArgumentError(msg)
    per_group = channels // wavelength_bins
    return per_group, channels // per_group


def _detect_max(data: NDArray[Any], element_type: CubeElementType) -> float:
    if element_type.kind is not ElementKind.FLOATING:
        return float(data.max())

    finite_mask = np.isfinite(data)
    if finite_mask.all():
        return float(data.max())
    finite = data[finite_mask]
    if finite.size == 0:
        raise CubePreconditionError("Cube holds no finite values to detect a maximum from")
    return float(finite.max())


def _bucket_counts(plane: NDArray[Any], max_val: float, count_bins: int) -> NDArray[np.int64]:
    values = plane.ravel()
    if max_val > 0:
        # edges near finfo(float64).max overflow while being spaced out
        with np.errstate(over="ignore"):
            counts, _ = np.histogram(values, bins=count_bins, range=(0.0, max_val))
        return counts.astype(np.int64)

    # degenerate range [0, 0]: only exact zeros are in range
    counts = np.zeros(count_bins, dtype=np.int64)
    if max_val == 0:
        counts[0] = np.count_nonzero(values == 0)
    return counts


def _bucket_labels(count_bins: int, bin_size: float, mode: ProcessingMode) -> NDArray[np.float32]:
    labels = np.arange(count_bins, dtype=np.float64) * bin_size
    if mode is ProcessingMode.CUBE_REFLECTANCE:
        labels = labels / _REFLECTANCE_SCALE
    # float64 nominal maxima do not fit float32 and become inf
    with np.errstate(over="ignore"):
        return labels.astype(np.float32)


def _group_histogram(
    data: NDArray[Any],
    wavelengths: NDArray[np.uint32],
    group: int,
    per_group: int,
    max_val: float,
    count_bins: int,
    labels: NDArray[np.float32],
) -> Histogram:
    first = group * per_group
    occurrence = np.zeros(count_bins, dtype=np.int64)
    for channel in range(first, first + per_group):
        occurrence += _bucket_counts(data[:, :, channel], max_val, count_bins)

    return Histogram(
        wavelength=int(wavelengths[first + per_group // 2]),
        count=labels.copy(),
        occurrence=occurrence.astype(np.uint64),
    )


def extract_histograms(
    cube: Cube,
    min_elements: int,
    count_bins: int,
    wavelength_bins: int,
    detect_max: bool,
    mode: ProcessingMode | str,
    *,
    workers: int | None = None,
) -> HistogramVector:
    """Compute one pooled value histogram per wavelength group.

    Parameters
    ----------
    cube:
        Cube to summarise; it must hold more than ``min_elements`` elements.
    min_elements:
        Lower bound on ``width * height * channels``.
    count_bins:
        Number of uniform value buckets over ``[0, max_val]``.
    wavelength_bins:
        Requested number of channel groups.
    detect_max:
        Use the largest value in the cube as ``max_val`` instead of the
        element type's nominal maximum.
    mode:
        Processing mode of the cube. :attr:`ProcessingMode.CUBE_REFLECTANCE`
        divides the bucket labels by 100.
    workers:
        Number of threads computing groups concurrently. Defaults to one.

    Returns
    -------
    list[Histogram]
        Histograms in increasing channel order. Each histogram's wavelength
        is that of the middle channel of its group.
    """

    data = check_cube(cube)
    check_histogram_size(cube, min_elements)
    if count_bins < 1:
        msg = f"count_bins must be positive, got {count_bins}"
        raise InvalidArgumentError(msg)
    try:
        mode = ProcessingMode.parse(mode)
    except ValueError as exc:
        raise InvalidArgumentError(str(exc)) from exc

    element_type = cube.element_type
    per_group, group_count = group_layout(cube.channels, wavelength_bins)
    dropped = cube.channels - per_group * group_count
    if dropped:
        logger.debug("Dropping %d trailing channel(s) not filling a whole group", dropped)

    if detect_max:
        max_val = _detect_max(data, element_type)
        logger.debug("Detected maximum value %s", max_val)
    else:
        max_val = element_type.nominal_max
    bin_size = max_val / count_bins
    labels = _bucket_labels(count_bins, bin_size, mode)
    logger.debug(
        "Histogramming %d group(s) of %d channel(s), bin size %s",
        group_count,
        per_group,
        bin_size,
    )

    wavelengths = cube.wavelengths

    def build(group: int) -> Histogram:
        return _group_histogram(
            data, wavelengths, group, per_group, max_val, count_bins, labels
        )

    workers = max(1, int(workers or 1))
    if workers > 1 and group_count > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(build, range(group_count)))
    return [build(group) for group in range(group_count)]


def extract_histograms_with(cube: Cube, settings: HistogramSettings) -> HistogramVector:
    """Run :func:`extract_histograms` with options taken from ``settings``."""

    return extract_histograms(
        cube,
        settings.min_elements,
        settings.count_bins,
        settings.wavelength_bins,
        settings.detect_max,
        settings.mode,
        workers=settings.workers,
    )
