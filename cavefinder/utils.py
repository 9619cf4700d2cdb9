"""Utility helpers: file loading, argument parsing, entropy."""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from pathlib import Path

from .errors import InvalidArgument, IoError
from .models import RawImage

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_FILE_SIZE = 100 * 1024 * 1024  # 100 MB safety limit

_DECIMAL = re.compile(r"[0-9]+")
_HEX = re.compile(r"0[xX][0-9a-fA-F]+")

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_file(path: str) -> Path:
    """Ensure *path* exists, is a file, and is within the size limit.

    Returns the resolved ``Path`` on success; raises ``IoError`` otherwise.
    An empty file is accepted here and rejected later by the locator.
    """
    p = Path(path).resolve()
    if not p.exists():
        raise IoError(f"File not found: {p}")
    if not p.is_file():
        raise IoError(f"Not a regular file: {p}")
    size = p.stat().st_size
    if size > MAX_FILE_SIZE:
        raise IoError(
            f"File too large ({size / 1024 / 1024:.1f} MB). "
            f"Limit is {MAX_FILE_SIZE / 1024 / 1024:.0f} MB."
        )
    return p


def load_image(path: str) -> RawImage:
    """Read the whole file at *path* into an immutable :class:`RawImage`."""
    p = validate_file(path)
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise IoError(f"Can't read {p}: {exc.strerror or exc}") from exc
    logger.debug("loaded %s (%d bytes)", p, len(data))
    return RawImage(path=str(p), data=data)


def parse_min_cave(value: str | int) -> int:
    """Parse a minimum cave size given as decimal or ``0x`` hex.

    Raises ``InvalidArgument`` for anything that is not a positive integer.
    """
    if isinstance(value, bool):
        raise InvalidArgument("Minimum cave size must be a positive integer.")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if _DECIMAL.fullmatch(text):
            number = int(text, 10)
        elif _HEX.fullmatch(text):
            number = int(text, 16)
        else:
            raise InvalidArgument("Minimum cave size must be a positive integer.")
    if number <= 0:
        raise InvalidArgument("Minimum cave size must be a positive integer.")
    return number


def shannon_entropy(data: bytes) -> float:
    """Calculate Shannon entropy of *data* (0.0 – 8.0 for byte data)."""
    if not data:
        return 0.0
    counts = Counter(data)
    length = len(data)
    return -sum(
        (c / length) * math.log2(c / length)
        for c in counts.values()
        if c
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PE_MACHINES = {
    0x14C: "x86",
    0x8664: "x86_64",
    0x1C0: "ARM",
    0xAA64: "ARM64",
}


def pe_machine_name(machine: int) -> str:
    return _PE_MACHINES.get(machine, f"0x{machine:X}")
