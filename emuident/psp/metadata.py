from __future__ import annotations

import re
from typing import BinaryIO, Optional

from ..common.stream import read_at
from ..config import PSP_SCAN_LIMIT

# Publisher/region prefixes of UMD and PSN serials (e.g. ULUS-10041)
SERIAL_PREFIXES = (
    b"ULES-", b"ULUS-", b"ULJS-",
    b"ULEM-", b"ULUM-", b"ULJM-",
    b"UCES-", b"UCUS-", b"UCJS-", b"UCAS-", b"UCKS-",
    b"ULKS-", b"ULAS-",
    b"NPEH-", b"NPUH-", b"NPJH-", b"NPHH-",
    b"NPEG-", b"NPUG-", b"NPJG-", b"NPHG-",
    b"NPEZ-", b"NPUZ-", b"NPJZ-",
)
PREFIX_RE = re.compile(b"|".join(re.escape(p) for p in SERIAL_PREFIXES))
PREFIX_LEN = 5
SERIAL_LEN = 10


def get_psp_serial(fp: BinaryIO, limit: int = PSP_SCAN_LIMIT) -> Optional[str]:
    """Find the first known serial prefix in the first ``limit`` offsets.

    Returns the 10 bytes starting at the match, e.g. ``ULUS-10041``.
    """
    # A match may start at offset limit - 1 and still needs a full prefix
    data = read_at(fp, 0, limit + PREFIX_LEN - 1)
    if not data:
        return None
    m = PREFIX_RE.search(data)
    if not m or m.start() >= limit:
        return None

    raw = read_at(fp, m.start(), SERIAL_LEN)
    if not raw:
        return None
    return raw.split(b"\x00", 1)[0].decode("latin-1")
