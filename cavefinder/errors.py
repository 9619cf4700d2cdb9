"""Error taxonomy shared by the locator, the scanner and the front-ends."""

from __future__ import annotations


class CaveFinderError(Exception):
    """Base class for every error raised by :mod:`cavefinder`."""


class IoError(CaveFinderError):
    """The input file could not be opened or read."""


class MalformedImage(CaveFinderError):
    """Header or section table is structurally invalid or truncated."""


class NotAPEFile(CaveFinderError):
    """A DOS or PE signature did not match."""


class InvalidArgument(CaveFinderError, ValueError):
    """A caller-supplied parameter was rejected."""
