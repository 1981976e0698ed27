"""Configuration schemas for the cube statistics extractors.

The Pydantic models below hold the tunables of :mod:`cubestats.spectrum` and
:mod:`cubestats.histogram`. :func:`load_config` builds an
:class:`ExtractionConfig` from a YAML file or an in-memory mapping.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import ProcessingMode

__all__ = ["SpectrumSettings", "HistogramSettings", "ExtractionConfig", "load_config"]


class SpectrumSettings(BaseModel):
    """Options for :func:`cubestats.spectrum.extract_spectrum`."""

    model_config = ConfigDict(extra="forbid")

    workers: int = Field(1, ge=1, description="Threads accumulating row tiles")
    tile_rows: int | None = Field(
        None,
        ge=1,
        description="Rows per accumulation tile; defaults to an even split across workers",
    )


class HistogramSettings(BaseModel):
    """Options for :func:`cubestats.histogram.extract_histograms`."""

    model_config = ConfigDict(extra="forbid")

    min_elements: int = Field(0, ge=0, description="Cube must hold more elements than this")
    count_bins: int = Field(256, ge=1, description="Number of value buckets")
    wavelength_bins: int = Field(16, ge=1, description="Number of channel groups")
    detect_max: bool = Field(
        False,
        description="Scan the cube for its maximum instead of using the type's nominal maximum",
    )
    mode: ProcessingMode = Field(ProcessingMode.CUBE_RAW, description="Processing mode of the cube")
    workers: int = Field(1, ge=1, description="Threads computing channel groups")

    @field_validator("mode", mode="before")
    @classmethod
    def _coerce_mode(cls, value: Any) -> Any:
        if isinstance(value, str):
            return ProcessingMode.parse(value)
        return value


class ExtractionConfig(BaseModel):
    """Top-level configuration grouping both extractors."""

    model_config = ConfigDict(extra="forbid")

    spectrum: SpectrumSettings = Field(default_factory=SpectrumSettings)
    histogram: HistogramSettings = Field(default_factory=HistogramSettings)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise TypeError(f"Expected mapping in {path}, found {type(data)}")
    return dict(data)


def load_config(source: str | Path | Mapping[str, Any] | None = None) -> ExtractionConfig:
    """Build an :class:`ExtractionConfig` from a YAML path or a mapping.

    ``None`` returns the defaults.
    """

    if source is None:
        return ExtractionConfig()
    if isinstance(source, Mapping):
        raw = dict(source)
    elif isinstance(source, (str, Path)):
        raw = _load_yaml(Path(source))
    else:
        raise TypeError(f"Unsupported config source: {source!r}")
    return ExtractionConfig.model_validate(raw)
