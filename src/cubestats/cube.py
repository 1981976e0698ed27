"""Read-only view over an externally owned hyperspectral cube buffer.

The buffer is laid out row-major with channels interleaved fastest, so the
element for pixel ``(x, y)`` and channel ``z`` sits at ``(y * width + x) *
channels + z``. :meth:`Cube.view` exposes it as a ``(height, width, channels)``
numpy array that shares memory with the caller's buffer.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .dtypes import CubeElementType, ElementKind, element_type_for_dtype, map_element_type
from .errors import CubePreconditionError, InvalidArgumentError

__all__ = ["Cube"]


@dataclass(slots=True)
class Cube:
    """Geometry, wavelength lookup and raw buffer of one cube.

    ``buffer`` may be any object exporting the buffer protocol (``bytes``,
    ``memoryview``, a contiguous ``numpy.ndarray`` ...). It is never copied or
    written to. ``wavelengths`` maps channel index to wavelength in nm and is
    stored as ``uint32``; ``None`` models a cube whose lookup table was never
    populated and is rejected by the extractors.
    """

    width: int
    height: int
    channels: int
    buffer: Any
    kind: ElementKind
    byte_width: int
    wavelengths: NDArray[np.uint32] | None = None

    def __post_init__(self) -> None:
        self.width = int(self.width)
        self.height = int(self.height)
        self.channels = int(self.channels)
        self.byte_width = int(self.byte_width)
        try:
            self.kind = ElementKind(self.kind)
        except ValueError as exc:
            msg = f"Unknown element kind {self.kind!r}"
            raise InvalidArgumentError(msg) from exc

        if self.wavelengths is not None:
            table = np.asarray(self.wavelengths)
            if table.ndim != 1:
                msg = "Cube.wavelengths must be a one-dimensional lookup table"
                raise CubePreconditionError(msg)
            if table.size and (not np.all(np.isfinite(table)) or np.any(table < 0)):
                msg = "Cube.wavelengths must hold finite, non-negative values"
                raise CubePreconditionError(msg)
            self.wavelengths = table.astype(np.uint32)

    @classmethod
    def from_array(cls, data: ArrayLike, wavelengths: Sequence[int] | ArrayLike | None) -> "Cube":
        """Wrap an ``(height, width, channels)`` array.

        The array is only copied when it is not C-contiguous or not in native
        byte order.
        """

        arr = np.asarray(data)
        if arr.ndim != 3:
            msg = "Cube data must have exactly three dimensions (height, width, channels)"
            raise CubePreconditionError(msg)
        if not arr.dtype.isnative:
            arr = arr.astype(arr.dtype.newbyteorder("="))
        arr = np.ascontiguousarray(arr)

        element_type = element_type_for_dtype(arr.dtype, max(int(arr.shape[2]), 1))
        height, width, channels = (int(n) for n in arr.shape)
        return cls(
            width=width,
            height=height,
            channels=channels,
            buffer=arr,
            kind=element_type.kind,
            byte_width=element_type.byte_width,
            wavelengths=None if wavelengths is None else np.asarray(wavelengths),
        )

    @property
    def shape(self) -> tuple[int, int, int]:
        """Return the cube shape as ``(height, width, channels)``."""

        return self.height, self.width, self.channels

    @property
    def element_count(self) -> int:
        return self.width * self.height * self.channels

    @property
    def element_type(self) -> CubeElementType:
        return map_element_type(self.kind, self.byte_width, self.channels)

    def wavelength(self, channel: int) -> int:
        if self.wavelengths is None:
            msg = "Cube has no wavelength table"
            raise CubePreconditionError(msg)
        return int(self.wavelengths[channel])

    def view(self) -> NDArray[Any]:
        """Return a read-only ``(height, width, channels)`` view of the buffer."""

        element_type = self.element_type
        try:
            flat = np.frombuffer(self.buffer, dtype=element_type.dtype)
        except (TypeError, ValueError) as exc:
            msg = f"Cube buffer cannot be interpreted as {element_type.dtype}: {exc}"
            raise CubePreconditionError(msg) from exc

        if flat.size != self.element_count:
            msg = (
                f"Cube buffer holds {flat.size} elements, expected "
                f"{self.width}x{self.height}x{self.channels}={self.element_count}"
            )
            raise CubePreconditionError(msg)

        flat.flags.writeable = False
        return flat.reshape(self.height, self.width, self.channels)
