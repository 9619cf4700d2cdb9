"""Data models shared by the section locator, the cave scanner and the tool servers."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any


# ---------------------------------------------------------------------------
# Section characteristics
# ---------------------------------------------------------------------------

IMAGE_SCN_MEM_EXECUTE = 0x20000000
IMAGE_SCN_MEM_READ = 0x40000000
IMAGE_SCN_MEM_WRITE = 0x80000000

SECTION_NAME_SIZE = 8


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RawImage:
    """Full contents of a file on disk, loaded once and never mutated."""

    path: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class SectionDescriptor:
    """One entry of the PE section table.

    Holds no bytes of its own: ``raw_offset``/``raw_size`` describe a view
    into the :class:`RawImage` the descriptor was read from.
    """

    index: int
    name: bytes
    raw_offset: int
    raw_size: int
    virtual_address: int = 0
    virtual_size: int = 0
    characteristics: int = 0

    @property
    def raw_end(self) -> int:
        return self.raw_offset + self.raw_size

    @property
    def display_name(self) -> str:
        """Name trimmed at the first NUL or at eight bytes, whichever comes first."""
        raw = self.name[:SECTION_NAME_SIZE].split(b"\x00", 1)[0]
        return raw.decode("utf-8", errors="replace")

    @property
    def permissions(self) -> str:
        r = "r" if self.characteristics & IMAGE_SCN_MEM_READ else "-"
        w = "w" if self.characteristics & IMAGE_SCN_MEM_WRITE else "-"
        x = "x" if self.characteristics & IMAGE_SCN_MEM_EXECUTE else "-"
        return f"{r}{w}{x}"

    def fits(self, image_size: int) -> bool:
        return self.raw_end <= image_size

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["name"] = self.display_name
        d["permissions"] = self.permissions
        return d


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CaveRecord:
    """A run of zero bytes inside one section's raw data."""

    section_name: str
    offset: int
    length: int
    section_index: int = 0

    @property
    def end(self) -> int:
        return self.offset + self.length

    def format(self) -> str:
        return (
            f"Cave found in {self.section_name} at 0x{self.offset:X}, "
            f"size: {self.length} bytes"
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CaveMapping:
    """A cave translated into the image's virtual address space."""

    cave: CaveRecord
    rva: int | None = None
    va: int | None = None
    permissions: str = ""

    def format(self) -> str:
        if self.rva is None or self.va is None:
            where = "unmapped"
        else:
            where = f"rva 0x{self.rva:X}, va 0x{self.va:X}"
        return f"{self.cave.format()} ({where}, {self.permissions or '---'})"

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.cave.to_dict(),
            "rva": self.rva,
            "va": self.va,
            "permissions": self.permissions,
        }


@dataclass
class ScanResult:
    """Aggregated output of one scan over one file."""

    path: str
    min_cave: int
    sections: list[SectionDescriptor] = field(default_factory=list)
    caves: list[CaveRecord] = field(default_factory=list)
    mappings: list[CaveMapping] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    summary: str = ""

    # convenience ----------------------------------------------------------

    def add(self, cave: CaveRecord) -> None:
        self.caves.append(cave)

    @property
    def largest(self) -> CaveRecord | None:
        """Largest cave; the earliest one wins a tie."""
        best = None
        for cave in self.caves:
            if best is None or cave.length > best.length:
                best = cave
        return best

    def summarize(self) -> str:
        n = len(self.caves)
        self.summary = (
            f"{n} cave{'' if n == 1 else 's'} of at least {self.min_cave} bytes "
            f"in {len(self.sections)} section{'' if len(self.sections) == 1 else 's'}."
        )
        if self.largest is not None:
            self.summary += (
                f" Largest: {self.largest.length} bytes in "
                f"{self.largest.section_name} at 0x{self.largest.offset:X}."
            )
        return self.summary

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "min_cave": self.min_cave,
            "sections": [s.to_dict() for s in self.sections],
            "caves": [c.to_dict() for c in self.caves],
            "mappings": [m.to_dict() for m in self.mappings],
            "summary": self.summary,
            "errors": self.errors,
        }
