"""MCP tool servers for code-cave reconnaissance."""

from .cave_finder import mcp as cave_finder_mcp
from .section_lister import mcp as section_lister_mcp

__all__ = [
    "cave_finder_mcp",
    "section_lister_mcp",
]
