from __future__ import annotations

"""Benchmark spectrum and histogram extraction on a synthetic cube."""

import argparse
import sys
from pathlib import Path
from statistics import mean, pstdev
from time import perf_counter

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cubestats import Cube, extract_histograms_with, extract_spectrum_with, load_config
from cubestats.utils.logging import get_logger

_LOG = get_logger(__name__)

_DTYPES = {"uint8": np.uint8, "uint16": np.uint16, "float32": np.float32}


def _synthetic_cube(height: int, width: int, channels: int, dtype: str, seed: int) -> Cube:
    rng = np.random.default_rng(seed)
    np_dtype = np.dtype(_DTYPES[dtype])
    if np_dtype.kind == "f":
        data = rng.random((height, width, channels), dtype=np.float32)
    else:
        data = rng.integers(0, np.iinfo(np_dtype).max, size=(height, width, channels), dtype=np_dtype)
    wavelengths = np.linspace(450, 850, channels).astype(np.uint32)
    return Cube.from_array(data, wavelengths)


def _time(fn, runs: int) -> tuple[float, float]:
    timings = []
    for _ in range(runs):
        start = perf_counter()
        fn()
        timings.append(perf_counter() - start)
    return mean(timings), pstdev(timings)


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark cube statistics extraction.")
    parser.add_argument("--config", type=str, default=None, help="Extraction YAML config.")
    parser.add_argument("--height", type=int, default=512)
    parser.add_argument("--width", type=int, default=512)
    parser.add_argument("--channels", type=int, default=106)
    parser.add_argument("--dtype", choices=sorted(_DTYPES), default="uint16")
    parser.add_argument("--runs", type=int, default=3)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    cfg = load_config(args.config)
    cube = _synthetic_cube(args.height, args.width, args.channels, args.dtype, args.seed)
    polygon = [(0.1, 0.1), (0.9, 0.2), (0.8, 0.9), (0.2, 0.7)]

    spec_mean, spec_std = _time(lambda: extract_spectrum_with(cube, polygon, cfg.spectrum), args.runs)
    _LOG.info(
        "spectrum shape=%s workers=%d time=%.4fs ± %.4fs",
        cube.shape,
        cfg.spectrum.workers,
        spec_mean,
        spec_std,
    )

    hist_mean, hist_std = _time(lambda: extract_histograms_with(cube, cfg.histogram), args.runs)
    _LOG.info(
        "histograms shape=%s bins=%d groups=%d workers=%d time=%.4fs ± %.4fs",
        cube.shape,
        cfg.histogram.count_bins,
        cfg.histogram.wavelength_bins,
        cfg.histogram.workers,
        hist_mean,
        hist_std,
    )


if __name__ == "__main__":
    main()
