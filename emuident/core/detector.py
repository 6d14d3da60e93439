from __future__ import annotations

import logging
from typing import BinaryIO, Iterable, Optional

from emuident.common.models import MagicEntry
from emuident.common.stream import read_at

logger = logging.getLogger(__name__)

# Checked in order, first match wins. "PSP GAME" and "PLAYSTATION" share an
# offset, so the PSP entry must stay ahead of the PS1 one.
MAGIC_NUMBERS: tuple[MagicEntry, ...] = (
    MagicEntry(0x008008, "psp", b"PSP GAME"),
    MagicEntry(0x008008, "ps1", b"PLAYSTATION"),
    MagicEntry(0x00001C, "gc", b"\xc2\x33\x9f\x3d"),
    MagicEntry(0x000000, "scd", b"SEGADISCSYSTEM"),
    MagicEntry(0x000000, "sat", b"SEGA SEGASATURN"),
    MagicEntry(0x000000, "dc", b"SEGA SEGAKATANA"),
)


def detect_system(fp: BinaryIO, table: Iterable[MagicEntry] = MAGIC_NUMBERS) -> Optional[str]:
    """Return the system name of the first magic entry found in ``fp``."""
    logger.debug("Comparing with known magic numbers...")
    for entry in table:
        data = read_at(fp, entry.offset, entry.length)
        if data is None:
            continue
        if data == entry.magic:
            logger.debug("Magic match for %s at 0x%X", entry.system_name, entry.offset)
            return entry.system_name
    return None
