"""Translate cave file offsets into the image's virtual address space."""

from __future__ import annotations

import logging
from typing import Iterable

from .models import CaveMapping, CaveRecord, SectionDescriptor

logger = logging.getLogger(__name__)


def map_caves(
    data: bytes,
    caves: Iterable[CaveRecord],
    sections: Iterable[SectionDescriptor],
) -> list[CaveMapping]:
    """Attach RVA, VA and section permissions to each cave.

    Addresses come from *pefile*; if it refuses the image the caves are
    still returned, with ``rva`` and ``va`` left as ``None``.
    """
    import pefile

    perms = {s.index: s.permissions for s in sections}
    caves = list(caves)

    try:
        pe = pefile.PE(data=data, fast_load=True)
    except pefile.PEFormatError as exc:
        logger.warning("pefile could not map the image: %s", exc)
        return [CaveMapping(cave=c, permissions=perms.get(c.section_index, ""))
                for c in caves]

    try:
        image_base = pe.OPTIONAL_HEADER.ImageBase
        mappings = []
        for cave in caves:
            rva = pe.get_rva_from_offset(cave.offset)
            mappings.append(CaveMapping(
                cave=cave,
                rva=rva,
                va=None if rva is None else image_base + rva,
                permissions=perms.get(cave.section_index, ""),
            ))
    finally:
        pe.close()

    return mappings
