from __future__ import annotations

from typing import BinaryIO, Optional

from ..common.stream import read_at

# IP.BIN header: product number field and first compatible-area code
SERIAL_OFFSET = 0x0020
SERIAL_LEN = 9
REGION_OFFSET = 0x0040


def normalize_saturn_serial(raw: str, region: str) -> Optional[str]:
    """Redump form of a Saturn product number for the given area code.

    U drops the ``MK-`` prefix, E appends ``-50``, J is kept as is.
    """
    serial = raw.strip(" \t")

    if region == "U":
        if serial.startswith("MK-"):
            return serial[3:]
        return serial
    if region == "E":
        return serial + "-50"
    if region == "J":
        return serial
    return None


def get_saturn_serial(fp: BinaryIO) -> Optional[str]:
    raw = read_at(fp, SERIAL_OFFSET, SERIAL_LEN)
    if not raw:
        return None
    region = read_at(fp, REGION_OFFSET, 1)
    if not region:
        return None
    return normalize_saturn_serial(
        raw.split(b"\x00", 1)[0].decode("latin-1"),
        region.decode("latin-1"),
    )
