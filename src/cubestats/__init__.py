"""Per-wavelength statistics and histograms for hyperspectral cubes.

The package consumes an already decoded cube (see :class:`Cube`) and derives
two kinds of summaries from it:

* :func:`extract_spectrum` computes a per-channel mean and standard deviation
  over a polygon or a single point given in normalized image coordinates.
* :func:`extract_histograms` computes pooled value histograms over contiguous
  groups of channels.

Both are pure functions; the cube buffer is only read.
"""

from __future__ import annotations

from .config import ExtractionConfig, HistogramSettings, SpectrumSettings, load_config
from .cube import Cube
from .dtypes import CubeElementType, ElementKind, element_type_for_dtype, map_element_type
from .errors import CubePreconditionError, CubestatsError, InvalidArgumentError
from .histogram import extract_histograms, extract_histograms_with
from .spectrum import extract_spectrum, extract_spectrum_with, polygon_mask
from .types import (
    SENTINEL_VALUE,
    Histogram,
    HistogramVector,
    Point,
    ProcessingMode,
    SpectralMean,
    Spectrum,
)
from .version import __version__

__all__ = [
    "__version__",
    "SENTINEL_VALUE",
    "Cube",
    "CubeElementType",
    "CubePreconditionError",
    "CubestatsError",
    "ElementKind",
    "ExtractionConfig",
    "Histogram",
    "HistogramSettings",
    "HistogramVector",
    "InvalidArgumentError",
    "Point",
    "ProcessingMode",
    "SpectralMean",
    "Spectrum",
    "SpectrumSettings",
    "element_type_for_dtype",
    "extract_histograms",
    "extract_histograms_with",
    "extract_spectrum",
    "extract_spectrum_with",
    "load_config",
    "map_element_type",
    "polygon_mask",
]
