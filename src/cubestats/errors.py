"""Exception hierarchy shared by the cube statistics extractors."""

from __future__ import annotations

__all__ = ["CubestatsError", "InvalidArgumentError", "CubePreconditionError"]


class CubestatsError(ValueError):
    """Base class for all errors raised by :mod:`cubestats`."""


class InvalidArgumentError(CubestatsError):
    """An argument lies outside the supported configuration space.

    Raised for unsupported element widths or categories, channel counts outside
    ``[1, 511]`` and invalid bin counts.
    """


class CubePreconditionError(CubestatsError):
    """The cube handed to an extractor is malformed.

    Covers invalid spatial dimensions, a missing or mis-sized wavelength table,
    a buffer whose length disagrees with the declared geometry, and cubes too
    small for a histogram request.
    """
