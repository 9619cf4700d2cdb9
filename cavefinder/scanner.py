"""
Cave Scanner
────────────
Walks the raw data of each section and reports runs of zero bytes that
are at least ``min_cave`` long. Runs are matched inside each section's
raw extent only, so a cave never spans a section boundary.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, Iterator

from .errors import MalformedImage
from .locator import locate_sections, read_file_header
from .models import CaveRecord, RawImage, ScanResult, SectionDescriptor
from .utils import parse_min_cave

logger = logging.getLogger(__name__)

CaveSink = Callable[[CaveRecord], None]

_ZERO_RUN = re.compile(rb"\x00+")


def check_extent(section: SectionDescriptor, image_size: int) -> None:
    """Raise ``MalformedImage`` if *section*'s raw data runs past the image."""
    if not section.fits(image_size):
        raise MalformedImage(
            f"Section {section.display_name!r} raw data "
            f"0x{section.raw_offset:X}+0x{section.raw_size:X} "
            f"exceeds file size 0x{image_size:X}"
        )


def iter_section_caves(
    data: bytes, section: SectionDescriptor, min_cave: int
) -> Iterator[CaveRecord]:
    """Yield the caves of one section in ascending offset order.

    *min_cave* must already be a positive integer.
    """
    check_extent(section, len(data))

    name = section.display_name
    # pos/endpos confine every match to the section, so each run is maximal
    # within it and one touching the last byte is still reported
    for match in _ZERO_RUN.finditer(data, section.raw_offset, section.raw_end):
        length = match.end() - match.start()
        if length >= min_cave:
            yield CaveRecord(name, match.start(), length, section.index)


def scan_section(
    data: bytes,
    section: SectionDescriptor,
    min_cave: int,
    sink: CaveSink | None = None,
) -> list[CaveRecord]:
    """Collect the caves of *section*, passing each one to *sink* as found."""
    caves = []
    for cave in iter_section_caves(data, section, min_cave):
        if sink is not None:
            sink(cave)
        caves.append(cave)
    return caves


def scan_image(
    data: bytes,
    sections: Iterable[SectionDescriptor],
    min_cave: int,
    sink: CaveSink | None = None,
    strict: bool = True,
    errors: list[str] | None = None,
) -> list[CaveRecord]:
    """Scan every section in table order.

    With ``strict=True`` every extent is checked before the first section
    is scanned, so a malformed image reaches *sink* with no records. With
    ``strict=False`` a section whose raw data runs past the image is
    skipped; the reason is logged and appended to *errors* when given.
    """
    sections = list(sections)
    if strict:
        for section in sections:
            check_extent(section, len(data))

    caves: list[CaveRecord] = []
    for section in sections:
        try:
            found = scan_section(data, section, min_cave, sink)
        except MalformedImage as exc:
            if strict:
                raise
            logger.warning("skipping section %d: %s", section.index, exc)
            if errors is not None:
                errors.append(str(exc))
            continue
        logger.debug(
            "section %s: %d cave(s)", section.display_name, len(found)
        )
        caves.extend(found)
    return caves


def find_caves(
    image: RawImage,
    min_cave: int | str,
    sink: CaveSink | None = None,
    strict: bool = True,
) -> ScanResult:
    """Locate the sections of *image* and scan all of them for caves."""
    min_cave = parse_min_cave(min_cave)
    result = ScanResult(path=image.path, min_cave=min_cave)
    result.sections = locate_sections(image.data, strict=strict)
    declared = read_file_header(image.data).number_of_sections
    if len(result.sections) < declared:
        result.errors.append(
            f"Section table truncated: {len(result.sections)} of {declared} entries in bounds"
        )
    result.caves = scan_image(
        image.data,
        result.sections,
        min_cave,
        sink=sink,
        strict=strict,
        errors=result.errors,
    )
    result.summarize()
    return result
