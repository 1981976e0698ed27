"""Mapping from generic element types to multi-channel storage descriptors.

A cube buffer is described by an element category (unsigned integer, signed
integer or floating point), the byte width of one element and the number of
interleaved channels. :func:`map_element_type` turns that description into a
:class:`CubeElementType` that can address the buffer without conversion, both
as a numpy dtype and as the equivalent OpenCV multi-channel type code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import cv2
import numpy as np
from numpy.typing import DTypeLike

from .errors import InvalidArgumentError

__all__ = [
    "MAX_CHANNELS",
    "ElementKind",
    "CubeElementType",
    "map_element_type",
    "element_type_for_dtype",
]

MAX_CHANNELS = 511
"""Largest channel count a cube may interleave."""


class ElementKind(str, Enum):
    UNSIGNED = "unsigned"
    SIGNED = "signed"
    FLOATING = "floating"


# (kind, byte width) -> (numpy dtype, OpenCV depth)
_SUPPORTED: dict[tuple[ElementKind, int], tuple[np.dtype, int]] = {
    (ElementKind.UNSIGNED, 1): (np.dtype(np.uint8), cv2.CV_8U),
    (ElementKind.UNSIGNED, 2): (np.dtype(np.uint16), cv2.CV_16U),
    (ElementKind.SIGNED, 1): (np.dtype(np.int8), cv2.CV_8S),
    (ElementKind.SIGNED, 2): (np.dtype(np.int16), cv2.CV_16S),
    (ElementKind.SIGNED, 4): (np.dtype(np.int32), cv2.CV_32S),
    (ElementKind.FLOATING, 2): (np.dtype(np.float16), cv2.CV_16F),
    (ElementKind.FLOATING, 4): (np.dtype(np.float32), cv2.CV_32F),
    (ElementKind.FLOATING, 8): (np.dtype(np.float64), cv2.CV_64F),
}

_KIND_LABELS = {
    ElementKind.UNSIGNED: "unsigned integer",
    ElementKind.SIGNED: "signed integer",
    ElementKind.FLOATING: "floating point",
}


@dataclass(frozen=True, slots=True)
class CubeElementType:
    """Storage descriptor for an interleaved multi-channel cube buffer."""

    kind: ElementKind
    byte_width: int
    channels: int
    dtype: np.dtype
    cv_depth: int

    @property
    def cv_type(self) -> int:
        """OpenCV type code for ``channels`` interleaved elements of ``cv_depth``."""

        return int(cv2.CV_MAKETYPE(self.cv_depth, self.channels))

    @property
    def nominal_max(self) -> float:
        """Largest value representable by one element."""

        if self.kind is ElementKind.FLOATING:
            return float(np.finfo(self.dtype).max)
        return float(np.iinfo(self.dtype).max)


def map_element_type(kind: ElementKind | str, byte_width: int, channels: int) -> CubeElementType:
    """Return the storage descriptor for ``channels`` interleaved elements.

    Parameters
    ----------
    kind:
        Element category, as :class:`ElementKind` or its string value.
    byte_width:
        Size of one element in bytes. Unsigned integers support 1 or 2 bytes,
        signed integers 1, 2 or 4 bytes and floating point 2, 4 or 8 bytes.
    channels:
        Number of interleaved channels, within ``[1, 511]``.

    Raises
    ------
    InvalidArgumentError
        If the channel count or the byte width is not supported.
    """

    if channels < 1 or channels > MAX_CHANNELS:
        msg = f"Invalid channel count {channels}; expected 1..{MAX_CHANNELS}"
        raise InvalidArgumentError(msg)

    try:
        kind = ElementKind(kind)
    except ValueError as exc:
        msg = f"Unknown element kind {kind!r}"
        raise InvalidArgumentError(msg) from exc

    entry = _SUPPORTED.get((kind, int(byte_width)))
    if entry is None:
        msg = f"Invalid bitdepth for {_KIND_LABELS[kind]} data type: {byte_width} bytes"
        raise InvalidArgumentError(msg)

    dtype, depth = entry
    return CubeElementType(
        kind=kind,
        byte_width=int(byte_width),
        channels=int(channels),
        dtype=dtype,
        cv_depth=int(depth),
    )


def element_type_for_dtype(dtype: DTypeLike, channels: int) -> CubeElementType:
    """Derive kind and width from a numpy dtype and map it."""

    dt = np.dtype(dtype)
    if dt.kind == "u":
        kind = ElementKind.UNSIGNED
    elif dt.kind == "i":
        kind = ElementKind.SIGNED
    elif dt.kind == "f":
        kind = ElementKind.FLOATING
    else:
        msg = f"Cube elements must be numeric, got dtype {dt}"
        raise InvalidArgumentError(msg)
    return map_element_type(kind, dt.itemsize, channels)
