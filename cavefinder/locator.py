"""
PE Section Locator
──────────────────
Reads just enough of a PE image to enumerate its section table:
  • DOS header magic and ``e_lfanew``
  • PE signature and COFF file header
  • the section table that follows the optional header

Every read is bounds-checked against the buffer; structural problems
raise ``MalformedImage`` and signature mismatches raise ``NotAPEFile``.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

from .errors import MalformedImage, NotAPEFile
from .models import SectionDescriptor

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

IMAGE_DOS_SIGNATURE = b"MZ"
IMAGE_NT_SIGNATURE = b"PE\x00\x00"

DOS_HEADER_SIZE = 64
E_LFANEW_OFFSET = 0x3C

_FILE_HEADER = struct.Struct("<HHIIIHH")
_SECTION_HEADER = struct.Struct("<8sIIIIIIHHI")

FILE_HEADER_SIZE = _FILE_HEADER.size        # 20
SECTION_HEADER_SIZE = _SECTION_HEADER.size  # 40


@dataclass(frozen=True)
class FileHeader:
    """The COFF file header fields the locator cares about."""

    machine: int
    number_of_sections: int
    time_date_stamp: int
    size_of_optional_header: int
    characteristics: int
    section_table_offset: int


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def read_file_header(data: bytes) -> FileHeader:
    """Validate the DOS/PE signatures and return the COFF file header."""
    if len(data) < DOS_HEADER_SIZE:
        raise MalformedImage(
            f"File too small for a DOS header ({len(data)} < {DOS_HEADER_SIZE} bytes)"
        )
    if data[:2] != IMAGE_DOS_SIGNATURE:
        raise NotAPEFile("DOS header magic 'MZ' not found")

    (e_lfanew,) = struct.unpack_from("<I", data, E_LFANEW_OFFSET)
    if e_lfanew + len(IMAGE_NT_SIGNATURE) > len(data):
        raise MalformedImage(
            f"e_lfanew 0x{e_lfanew:X} points outside the file ({len(data)} bytes)"
        )
    if data[e_lfanew:e_lfanew + 4] != IMAGE_NT_SIGNATURE:
        raise NotAPEFile(f"PE signature not found at 0x{e_lfanew:X}")

    header_offset = e_lfanew + len(IMAGE_NT_SIGNATURE)
    if header_offset + FILE_HEADER_SIZE > len(data):
        raise MalformedImage("COFF file header is truncated")

    (machine, nsections, timestamp, _symtab, _nsyms,
     opt_size, characteristics) = _FILE_HEADER.unpack_from(data, header_offset)

    return FileHeader(
        machine=machine,
        number_of_sections=nsections,
        time_date_stamp=timestamp,
        size_of_optional_header=opt_size,
        characteristics=characteristics,
        section_table_offset=header_offset + FILE_HEADER_SIZE + opt_size,
    )


def locate_sections(data: bytes, strict: bool = True) -> list[SectionDescriptor]:
    """Return the section table of *data* in on-disk table order.

    When the declared section count overruns the buffer, ``strict`` mode
    raises ``MalformedImage``; otherwise only the entries that are fully
    in bounds are returned.
    """
    header = read_file_header(data)
    table = header.section_table_offset
    count = header.number_of_sections

    available = max(0, len(data) - table) // SECTION_HEADER_SIZE
    if count > available:
        message = (
            f"Section table declares {count} entries at 0x{table:X} "
            f"but only {available} fit in the file"
        )
        if strict:
            raise MalformedImage(message)
        logger.warning("%s; truncating enumeration", message)
        count = available

    sections = []
    for i in range(count):
        (name, vsize, vaddr, raw_size, raw_ptr,
         _relocs, _lines, _nrelocs, _nlines,
         characteristics) = _SECTION_HEADER.unpack_from(
            data, table + i * SECTION_HEADER_SIZE
        )
        sections.append(SectionDescriptor(
            index=i,
            name=name,
            raw_offset=raw_ptr,
            raw_size=raw_size,
            virtual_address=vaddr,
            virtual_size=vsize,
            characteristics=characteristics,
        ))

    logger.debug("located %d section(s) at 0x%X", len(sections), table)
    return sections
