"""
Cave Finder MCP Server
──────────────────────
Scans the raw section data of a PE binary for code caves:
  • runs of zero bytes at least ``min_cave_size`` long
  • one record per cave with section, file offset and length
  • optional RVA / VA / permission annotations for injection planning

Exposed as a FastMCP server so an agent can call it via the
Model-Context-Protocol.
"""

from __future__ import annotations

import logging
from typing import Any

from fastmcp import FastMCP

from cavefinder.errors import CaveFinderError
from cavefinder.mapping import map_caves
from cavefinder.models import ScanResult
from cavefinder.scanner import find_caves as _find_caves
from cavefinder.utils import load_image

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# MCP server instance
# ---------------------------------------------------------------------------

mcp = FastMCP("cave-finder")

# ---------------------------------------------------------------------------
# Tool
# ---------------------------------------------------------------------------


def find_caves_impl(
    file_path: str,
    min_cave_size: int,
    details: bool = False,
    strict: bool = True,
) -> dict[str, Any]:
    """Find code caves in a PE binary (plain callable).

    Errors are reported in the ``errors`` list of the returned document
    rather than raised.
    """
    try:
        image = load_image(file_path)
        result = _find_caves(image, min_cave_size, strict=strict)
        if details:
            result.mappings = map_caves(image.data, result.caves, result.sections)
    except CaveFinderError as exc:
        logger.info("scan of %s failed: %s", file_path, exc)
        result = ScanResult(path=file_path, min_cave=0, errors=[str(exc)])
        result.summary = f"Scan failed: {exc}"

    return result.to_dict()


@mcp.tool()
def find_caves(
    file_path: str,
    min_cave_size: int,
    details: bool = False,
) -> dict[str, Any]:
    """Find code caves (runs of zero bytes) in the sections of a PE binary.

    Returns structured JSON with the section table, every cave of at
    least ``min_cave_size`` bytes (section, file offset, length) and,
    when ``details`` is set, each cave's RVA, VA and section permissions.
    """
    return find_caves_impl(file_path, min_cave_size, details=details)


# ---------------------------------------------------------------------------
# Standalone entry-point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    mcp.run()
