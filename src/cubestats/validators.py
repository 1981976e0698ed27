from __future__ import annotations

import logging
from typing import Any

from numpy.typing import NDArray

from .cube import Cube
from .errors import CubePreconditionError

__all__ = ["check_cube", "check_histogram_size"]

_logger = logging.getLogger(__name__)


def check_cube(cube: Cube) -> NDArray[Any]:
    """Enforce the cube contract shared by both extractors.

    Structural issues raise :class:`CubePreconditionError`; an unsupported
    element type raises :class:`~cubestats.errors.InvalidArgumentError`. On
    success the ``(height, width, channels)`` view of the buffer is returned.
    """

    if cube.width <= 1 or cube.height <= 1:
        msg = f"Cube must be larger than 1x1 pixels, got {cube.width}x{cube.height}"
        raise CubePreconditionError(msg)
    if cube.channels <= 0:
        msg = f"Cube must have at least one channel, got {cube.channels}"
        raise CubePreconditionError(msg)
    if cube.wavelengths is None:
        raise CubePreconditionError("Cube has no wavelength table")
    if cube.wavelengths.shape[0] != cube.channels:
        msg = (
            f"Wavelength table has {cube.wavelengths.shape[0]} entries "
            f"but the cube has {cube.channels} channels"
        )
        raise CubePreconditionError(msg)

    data = cube.view()
    _logger.debug("Validated cube %s of %s", cube.shape, data.dtype)
    return data


def check_histogram_size(cube: Cube, min_elements: int) -> None:
    if cube.element_count <= min_elements:
        msg = (
            f"Cube holds {cube.element_count} elements; histograms need more than "
            f"{min_elements}"
        )
        raise CubePreconditionError(msg)
