"""Value types produced and consumed by the extractors.

Every result is a fresh value built per call. Nothing here holds a reference to
the cube it was derived from.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import overload

import numpy as np
from numpy.typing import NDArray

__all__ = [
    "SENTINEL_VALUE",
    "ProcessingMode",
    "Point",
    "PointLike",
    "Polygon",
    "as_polygon",
    "SpectralMean",
    "Spectrum",
    "Histogram",
    "HistogramVector",
]

SENTINEL_VALUE = -999.0
"""Value reported for channels without a valid sample."""


class ProcessingMode(str, Enum):
    """Processing stage the cube was produced by.

    Only :attr:`CUBE_REFLECTANCE` changes extractor output: histogram labels are
    divided by 100 to express reflectance in percent-scaled units.
    """

    PREVIEW = "preview"
    CUBE_RAW = "cube_raw"
    CUBE_DARK_SUBTRACT = "cube_dark_subtract"
    CUBE_REFLECTANCE = "cube_reflectance"
    CUBE_SPECTRAL_RADIANCE = "cube_spectral_radiance"

    @classmethod
    def parse(cls, value: "ProcessingMode | str") -> "ProcessingMode":
        """Accept a member, its value or its name in any letter case."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            if key.upper() in cls.__members__:
                return cls[key.upper()]
            value = key.lower()
        try:
            return cls(value)
        except ValueError as exc:
            msg = f"Unknown processing mode {value!r}"
            raise ValueError(msg) from exc


@dataclass(frozen=True, slots=True)
class Point:
    """Normalized image coordinate; ``(0, 0)`` and ``(1, 1)`` are opposite corners."""

    x: float
    y: float

    @property
    def in_unit_square(self) -> bool:
        return 0.0 <= self.x <= 1.0 and 0.0 <= self.y <= 1.0


PointLike = Point | Sequence[float]
Polygon = Iterable[PointLike]


def _as_point(value: PointLike) -> Point:
    if isinstance(value, Point):
        return value
    coords = tuple(value)
    if len(coords) != 2:
        msg = f"Points need exactly two coordinates, got {len(coords)}"
        raise ValueError(msg)
    return Point(float(coords[0]), float(coords[1]))


def as_polygon(points: Polygon) -> tuple[Point, ...]:
    """Normalise ``points`` into a tuple of :class:`Point`, keeping their order."""

    return tuple(_as_point(p) for p in points)


@dataclass(frozen=True, slots=True)
class SpectralMean:
    """Mean and standard deviation of one channel."""

    wavelength: int = 0
    value: float = SENTINEL_VALUE
    std: float = 0.0


@dataclass(frozen=True, slots=True)
class Spectrum(Sequence[SpectralMean]):
    """Per-channel statistics over a spatial region, index-aligned with channels.

    ``has_sample`` is ``False`` when no pixel could be sampled (empty polygon,
    out-of-range point, polygon enclosing no pixel). Such a spectrum still has
    one entry per channel, each equal to ``SpectralMean()``.
    """

    entries: tuple[SpectralMean, ...]
    has_sample: bool = True

    @classmethod
    def sentinel(cls, channels: int) -> "Spectrum":
        return cls(entries=tuple(SpectralMean() for _ in range(channels)), has_sample=False)

    @overload
    def __getitem__(self, index: int) -> SpectralMean: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[SpectralMean, ...]: ...

    def __getitem__(self, index):
        return self.entries[index]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[SpectralMean]:
        return iter(self.entries)

    @property
    def wavelengths(self) -> NDArray[np.uint32]:
        return np.array([e.wavelength for e in self.entries], dtype=np.uint32)

    @property
    def values(self) -> NDArray[np.float64]:
        return np.array([e.value for e in self.entries], dtype=np.float64)

    @property
    def stds(self) -> NDArray[np.float64]:
        return np.array([e.std for e in self.entries], dtype=np.float64)


@dataclass(slots=True, eq=False)
class Histogram:
    """Pooled value histogram of one wavelength group.

    ``count`` holds the bucket labels and ``occurrence`` the number of samples
    per bucket; both have one entry per bucket.
    """

    wavelength: int
    count: NDArray[np.float32] = field(default_factory=lambda: np.zeros(0, dtype=np.float32))
    occurrence: NDArray[np.uint64] = field(default_factory=lambda: np.zeros(0, dtype=np.uint64))

    def __post_init__(self) -> None:
        self.count = np.asarray(self.count, dtype=np.float32)
        self.occurrence = np.asarray(self.occurrence, dtype=np.uint64)
        if self.count.shape != self.occurrence.shape:
            msg = "Histogram count and occurrence must have the same length"
            raise ValueError(msg)

    @property
    def total(self) -> int:
        """Number of samples that landed in any bucket."""

        return int(self.occurrence.sum())


HistogramVector = list[Histogram]
