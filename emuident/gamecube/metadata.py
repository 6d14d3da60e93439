from __future__ import annotations

import logging
from typing import BinaryIO, NamedTuple, Optional

from ..common.stream import read_at

logger = logging.getLogger(__name__)

SERIAL_PREFIX = "DL-DOL-"


class RegionSuffix(NamedTuple):
    suffix: str
    exact: bool


# Region code (4th character of the game id) -> redump suffix.
# P and X also cover UKV/AUS/EUU sub-regions that cannot be told apart from
# the header alone; they are reported as EUR and flagged inexact.
REGION_SUFFIXES: dict[str, RegionSuffix] = {
    "E": RegionSuffix("-USA", True),
    "J": RegionSuffix("-JPN", True),
    "P": RegionSuffix("-EUR", False),
    "X": RegionSuffix("-EUR", False),
    "Y": RegionSuffix("-FAH", True),
    "D": RegionSuffix("-NOE", True),
    "S": RegionSuffix("-ESP", True),
    "F": RegionSuffix("-FRA", True),
    "I": RegionSuffix("-ITA", True),
    "H": RegionSuffix("-HOL", True),
}


def get_gamecube_serial(fp: BinaryIO) -> Optional[str]:
    """Convert the raw GameCube game id into a redump serial.

    ``GM4E`` becomes ``DL-DOL-GM4E-USA``. Multi-disc suffixes are not
    added.
    """
    raw = read_at(fp, 0, 4)
    if raw is None or len(raw) < 4:
        return None

    serial = SERIAL_PREFIX + raw.decode("latin-1")
    region = REGION_SUFFIXES.get(serial[10])
    if region is None:
        return None
    if not region.exact:
        logger.debug("GameCube region %r mapped to %s approximately", serial[10], region.suffix)
    return serial + region.suffix
