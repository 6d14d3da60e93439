from __future__ import annotations

from typing import BinaryIO, Optional

from .stream import read_at
from ..config import ASCII_SCAN_LIMIT

WINDOW = 15
# WBFS containers start with their own magic, which looks like a serial
WBFS_MAGIC = b"WBFS"


def _is_serial_byte(b: int) -> bool:
    # A-Z, 0-9, '-'
    return b == 0x2D or 0x30 <= b <= 0x39 or 0x41 <= b <= 0x5A


def get_ascii_serial(fp: BinaryIO, limit: int = ASCII_SCAN_LIMIT) -> Optional[str]:
    """Check for a plain ASCII serial near the start of the image (Wii and
    other formats without a dedicated reader).

    Returns the first run of 4 to 8 serial characters found at one of the
    first ``limit`` offsets.
    """
    data = read_at(fp, 0, limit + WINDOW - 1)
    if not data:
        return None

    for pos in range(min(limit, len(data))):
        window = data[pos:pos + WINDOW]
        if window.split(b"\x00", 1)[0] == WBFS_MAGIC:
            continue
        run = 0
        for b in window:
            if not _is_serial_byte(b):
                break
            run += 1
        if 3 < run < 9:
            return window[:run].decode("ascii")
    return None
