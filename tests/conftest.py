# tests/conftest.py
"""
Shared fixtures: a tiny PE32 image builder.

Images carry a DOS header, a PE signature, a COFF file header, an
optional PE32 header (unless disabled) and a section table, followed by
each section's raw data. Sections are placed on FileAlignment boundaries
unless ``packed=True``, in which case their raw data is laid out back to
back.
"""

import struct
from dataclasses import dataclass

import pytest

FILE_ALIGNMENT = 0x200
SECTION_ALIGNMENT = 0x1000
IMAGE_BASE = 0x400000
OPTIONAL_HEADER_SIZE = 0xE0

TEXT_CHARACTERISTICS = 0x60000020  # code | execute | read
DATA_CHARACTERISTICS = 0xC0000040  # initialized data | read | write


@dataclass
class Sec:
    name: bytes
    data: bytes
    characteristics: int = TEXT_CHARACTERISTICS
    raw_offset: int | None = None  # override the pointer written to the table
    raw_size: int | None = None    # override the size written to the table


def _align(value, alignment):
    return (value + alignment - 1) // alignment * alignment


def _optional_header(size_of_image, size_of_headers):
    opt = bytearray(OPTIONAL_HEADER_SIZE)
    struct.pack_into("<H", opt, 0, 0x10B)                 # Magic (PE32)
    struct.pack_into("<I", opt, 16, SECTION_ALIGNMENT)    # AddressOfEntryPoint
    struct.pack_into("<I", opt, 28, IMAGE_BASE)
    struct.pack_into("<I", opt, 32, SECTION_ALIGNMENT)
    struct.pack_into("<I", opt, 36, FILE_ALIGNMENT)
    struct.pack_into("<H", opt, 40, 4)                    # MajorOperatingSystemVersion
    struct.pack_into("<H", opt, 48, 4)                    # MajorSubsystemVersion
    struct.pack_into("<I", opt, 56, size_of_image)
    struct.pack_into("<I", opt, 60, size_of_headers)
    struct.pack_into("<H", opt, 68, 3)                    # Subsystem (console)
    struct.pack_into("<I", opt, 92, 16)                   # NumberOfRvaAndSizes
    return bytes(opt)


def _build_pe(sections, *, e_lfanew=0x80, declared_sections=None,
              optional_header=True, packed=False):
    opt_size = OPTIONAL_HEADER_SIZE if optional_header else 0
    table_offset = e_lfanew + 4 + 20 + opt_size
    headers_end = table_offset + 40 * len(sections)
    first_raw = headers_end if packed else _align(headers_end, FILE_ALIGNMENT)

    # raw layout
    raw_offsets = []
    cursor = first_raw
    for sec in sections:
        raw_offsets.append(cursor)
        cursor += len(sec.data)
        if not packed:
            cursor = _align(cursor, FILE_ALIGNMENT)

    # virtual layout
    vaddrs = []
    va = SECTION_ALIGNMENT
    for sec in sections:
        vaddrs.append(va)
        va = _align(va + max(len(sec.data), 1), SECTION_ALIGNMENT)

    out = bytearray(max(cursor, headers_end))
    out[0:2] = b"MZ"
    struct.pack_into("<I", out, 0x3C, e_lfanew)
    out[e_lfanew:e_lfanew + 4] = b"PE\x00\x00"
    nsections = len(sections) if declared_sections is None else declared_sections
    struct.pack_into("<HHIIIHH", out, e_lfanew + 4,
                     0x14C, nsections, 0, 0, 0, opt_size, 0x0102)
    if optional_header:
        out[e_lfanew + 24:table_offset] = _optional_header(va, first_raw)

    for i, sec in enumerate(sections):
        raw_ptr = raw_offsets[i] if sec.raw_offset is None else sec.raw_offset
        raw_size = len(sec.data) if sec.raw_size is None else sec.raw_size
        struct.pack_into("<8sIIIIIIHHI", out, table_offset + 40 * i,
                         sec.name, len(sec.data), vaddrs[i], raw_size, raw_ptr,
                         0, 0, 0, 0, sec.characteristics)
        out[raw_offsets[i]:raw_offsets[i] + len(sec.data)] = sec.data

    return bytes(out)


@pytest.fixture
def build_pe():
    return _build_pe


@pytest.fixture
def simple_pe(build_pe):
    """.text with a 32-byte interior cave and a 16-byte tail cave, .data all filled."""
    text = b"\x55\x8b\xec" + b"\x90" * 29 + b"\x00" * 32 + b"\xc3" * 32 + b"\x00" * 16
    data = b"\x41" * 64
    return build_pe([
        Sec(b".text", text),
        Sec(b".data", data, DATA_CHARACTERISTICS),
    ])


@pytest.fixture
def pe_file(tmp_path, simple_pe):
    path = tmp_path / "sample.exe"
    path.write_bytes(simple_pe)
    return path
