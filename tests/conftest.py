"""Pytest configuration for the cubestats test suite."""

from __future__ import annotations

import numpy as np
import pytest

from cubestats import Cube


@pytest.fixture
def two_band_cube() -> Cube:
    """4x4 uint8 cube: channel 0 is 100 everywhere, channel 1 is 200."""

    data = np.empty((4, 4, 2), dtype=np.uint8)
    data[..., 0] = 100
    data[..., 1] = 200
    return Cube.from_array(data, [500, 510])


@pytest.fixture
def ramp_cube() -> Cube:
    """6x5 uint16 cube whose values encode ``(y, x, z)``."""

    height, width, channels = 6, 5, 3
    y, x, z = np.meshgrid(
        np.arange(height), np.arange(width), np.arange(channels), indexing="ij"
    )
    data = (y * 100 + x * 10 + z).astype(np.uint16)
    return Cube.from_array(data, [400, 450, 500])
