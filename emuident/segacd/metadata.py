from __future__ import annotations

import re
from typing import BinaryIO, Optional

from ..common.stream import read_at

SERIAL_OFFSET = 0x0183
SERIAL_LEN = 11

_WHITESPACE_RE = re.compile(r"[ \t\n\r\v\f]")


def normalize_segacd_serial(raw: str) -> Optional[str]:
    """Redump form of a Mega-CD header serial.

    ``T-6013 -00`` -> ``T-6013``; ``MK-4407 -50`` -> ``4407-50``;
    ``MK-4407 -00`` -> ``4407``.
    """
    serial = _WHITESPACE_RE.sub("", raw)

    if serial.startswith(("T-", "G-")):
        return serial[:serial.rindex("-")]

    if serial.startswith("MK-"):
        code = serial[3:7]
        if serial.endswith("50"):
            return f"{code}-50"
        return code

    return None


def get_segacd_serial(fp: BinaryIO) -> Optional[str]:
    raw = read_at(fp, SERIAL_OFFSET, SERIAL_LEN)
    if not raw:
        return None
    return normalize_segacd_serial(raw.split(b"\x00", 1)[0].decode("latin-1"))
