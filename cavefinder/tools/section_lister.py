"""
Section Lister MCP Server
─────────────────────────
Surfaces the section table of a PE binary as seen by the cave scanner:
  • raw and virtual extents of every section
  • rwx permissions, Shannon entropy and zero-byte count
Sections whose raw data runs past the end of the file are flagged.
"""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from cavefinder.errors import CaveFinderError
from cavefinder.locator import locate_sections, read_file_header
from cavefinder.utils import load_image, pe_machine_name, shannon_entropy

# ---------------------------------------------------------------------------
# MCP server
# ---------------------------------------------------------------------------

mcp = FastMCP("section-lister")

# ---------------------------------------------------------------------------
# Tool
# ---------------------------------------------------------------------------


def list_sections_impl(file_path: str) -> dict[str, Any]:
    """List the sections of a PE binary (plain callable)."""
    try:
        image = load_image(file_path)
        header = read_file_header(image.data)
        sections = locate_sections(image.data, strict=False)
    except CaveFinderError as exc:
        return {"path": file_path, "sections": [], "errors": [str(exc)]}

    errors = []
    if len(sections) < header.number_of_sections:
        errors.append(
            f"Section table truncated: {len(sections)} of "
            f"{header.number_of_sections} entries in bounds"
        )

    rows = []
    for sec in sections:
        row = sec.to_dict()
        if sec.fits(image.size):
            raw = image.data[sec.raw_offset:sec.raw_end]
            row["entropy"] = round(shannon_entropy(raw), 4)
            row["zero_bytes"] = raw.count(0)
            row["in_bounds"] = True
        else:
            row["entropy"] = None
            row["zero_bytes"] = None
            row["in_bounds"] = False
            errors.append(f"Section {sec.display_name!r} raw data exceeds file size")
        rows.append(row)

    return {
        "path": image.path,
        "size": image.size,
        "machine": pe_machine_name(header.machine),
        "sections": rows,
        "errors": errors,
    }


@mcp.tool()
def list_sections(file_path: str) -> dict[str, Any]:
    """List the section table of a PE binary.

    Returns JSON with each section's name, raw offset and size, virtual
    address and size, permissions, entropy and zero-byte count.
    """
    return list_sections_impl(file_path)


# ---------------------------------------------------------------------------
# Standalone entry-point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    mcp.run()
