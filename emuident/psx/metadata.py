from __future__ import annotations

import logging
from typing import BinaryIO, Optional

from ..common.stream import read_at, stream_size

logger = logging.getLogger(__name__)

# First four bytes of a raw (2352) sector: sync pattern 00 FF FF FF
RAW_SYNC_PREFIX = b"\x00\xff\xff\xff"

# Root directory record inside the primary volume descriptor (sector 16)
ROOT_RECORD_OFFSET = 156
PVD_SECTOR = 16
DIR_READ_SIZE = 2048 * 2
CNF_READ_SIZE = 256
SYSTEM_CNF = b"SYSTEM.CNF;1"


def _isalnum(b: int) -> bool:
    return 0x30 <= b <= 0x39 or 0x41 <= b <= 0x5A or 0x61 <= b <= 0x7A


def _extent(record: bytes, pos: int) -> Optional[int]:
    """24-bit little-endian extent LBA of a directory record."""
    if pos + 5 > len(record):
        return None
    return record[pos + 2] | (record[pos + 3] << 8) | (record[pos + 4] << 16)


def _find_system_cnf(directory: bytes) -> Optional[int]:
    pos = 0
    while pos < len(directory):
        length = directory[pos]
        if not length:
            return None
        name = directory[pos + 33:pos + 33 + len(SYSTEM_CNF)]
        if name.upper() == SYSTEM_CNF:
            return pos
        pos += length
    return None


def parse_boot_line(cnf: bytes) -> Optional[str]:
    """Turn the BOOT line of a SYSTEM.CNF into ``XXXX-NNNNN``.

    ``BOOT = cdrom:\\SLUS_005.94;1`` gives ``SLUS-00594``.
    """
    cnf = cnf.split(b"\x00", 1)[0]
    start = cnf.lower().find(b"boot")
    if start == -1:
        return None

    # Executable name starts after the last path separator of the line
    boot_file = start
    pos = start
    while pos < len(cnf) and cnf[pos] != 0x0A:
        if cnf[pos] in (0x5C, 0x3A):  # '\' ':'
            boot_file = pos + 1
        pos += 1

    name = cnf[boot_file:]
    if len(name) < 5:
        return None

    serial = name[:4].decode("latin-1").upper() + "-"
    pos = 4
    if not _isalnum(name[pos]):
        pos += 1

    digits = []
    while pos < len(name) and _isalnum(name[pos]):
        digits.append(chr(name[pos]))
        pos += 1
        if pos < len(name) and name[pos] == 0x2E:  # '.'
            pos += 1
    if not digits:
        return None
    return serial + "".join(digits)


def _detect_ps1_sub(fp: BinaryIO, sub_channel_mixed: bool) -> Optional[str]:
    try:
        size = stream_size(fp)
    except (OSError, ValueError):
        return None

    is_mode1 = False
    if not sub_channel_mixed and not (size & 0x7FF):
        mode_test = read_at(fp, 0, 4)
        if mode_test is None:
            return None
        is_mode1 = mode_test != RAW_SYNC_PREFIX

    skip = 0 if is_mode1 else 24
    if sub_channel_mixed:
        frame_size = 2448
    elif is_mode1:
        frame_size = 2048
    else:
        frame_size = 2352

    pvd = read_at(fp, ROOT_RECORD_OFFSET + skip + PVD_SECTOR * frame_size, 6)
    if pvd is None or len(pvd) < 6:
        return None
    root_sector = _extent(pvd, 0)

    directory = read_at(fp, skip + root_sector * frame_size, DIR_READ_SIZE)
    if not directory:
        return None

    pos = _find_system_cnf(directory)
    if pos is None:
        return None

    cnf_sector = _extent(directory, pos)
    if cnf_sector is None:
        return None
    cnf = read_at(fp, skip + cnf_sector * frame_size, CNF_READ_SIZE)
    if not cnf:
        return None

    return parse_boot_line(cnf)


def get_psx_serial(fp: BinaryIO) -> Optional[str]:
    """Extract a PS1 serial (e.g. ``SLUS-00594``) from SYSTEM.CNF.

    Tries cooked/raw sectors first, then raw sectors with interleaved
    subchannel data.
    """
    serial = _detect_ps1_sub(fp, False)
    if serial is None:
        serial = _detect_ps1_sub(fp, True)
    if serial:
        logger.debug("PS1 serial %s", serial)
    return serial
