"""Locate code caves in the raw section data of PE binaries."""

from .errors import CaveFinderError, InvalidArgument, IoError, MalformedImage, NotAPEFile
from .locator import locate_sections, read_file_header
from .mapping import map_caves
from .models import CaveMapping, CaveRecord, RawImage, ScanResult, SectionDescriptor
from .scanner import find_caves, iter_section_caves, scan_image, scan_section
from .utils import load_image, parse_min_cave

__all__ = [
    "CaveFinderError",
    "InvalidArgument",
    "IoError",
    "MalformedImage",
    "NotAPEFile",
    "CaveMapping",
    "CaveRecord",
    "RawImage",
    "ScanResult",
    "SectionDescriptor",
    "locate_sections",
    "read_file_header",
    "map_caves",
    "find_caves",
    "iter_section_caves",
    "scan_image",
    "scan_section",
    "load_image",
    "parse_min_cave",
]
