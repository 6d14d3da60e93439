"""Dreamcast product number normalization.

The IP.BIN product number field (10 bytes at 0x40) is free-form: vendors pad
with spaces, split region suffixes with spaces, or drop the hyphen after the
``T`` publisher prefix. The rules below reshape it into the redump
convention (7 to 9 characters plus a region fragment). They are heuristics;
long ``MK-`` numbers have no known mapping and are reported as unsupported.
"""

from __future__ import annotations

import logging
import re
from typing import BinaryIO, Optional

from ..common.stream import read_at

logger = logging.getLogger(__name__)

SERIAL_OFFSET = 0x0040
SERIAL_LEN = 10

_MULTI_SPACE_RE = re.compile(r" {2,}")
_WHITESPACE_RE = re.compile(r"[ \t\n\r\v\f]")


def _hyphenate(raw: str) -> str:
    serial = raw.strip(" \t")
    serial = _MULTI_SPACE_RE.sub(" ", serial)
    return _WHITESPACE_RE.sub("-", serial)


def _third_party(serial: str) -> str:
    # "T-nnnnn" and "T-nnnnn-rr"
    length = len(serial)
    if serial.count("-") >= 2 or length <= 7:
        return serial
    return f"{serial[:7]}-{serial[length - 2:]}"


def _third_party_unhyphenated(serial: str) -> str:
    # "Tnnnnn..." gets the missing hyphen first
    fixed = f"T-{serial[1:]}"
    if fixed.count("-") >= 2:
        index = fixed.rindex("-")
        return f"{fixed[:index]}-{fixed[-2:]}"
    length = len(fixed) - 1
    if length <= 8:
        return fixed[:9]
    return f"{fixed[:7]}-{fixed[length - 2:]}"


def _hdr(serial: str) -> str:
    if serial.count("-") >= 2:
        index = serial.rindex("-")
        return f"{serial[:index - 1]}-{serial[len(serial) - 4:]}"
    return serial


def _first_party(serial: str) -> Optional[str]:
    if len(serial) <= 8:
        return serial[:8]
    logger.debug("Unsupported Dreamcast first-party serial layout %r", serial)
    return None


def normalize_dreamcast_serial(raw: str) -> Optional[str]:
    serial = _hyphenate(raw)
    if serial.startswith("T-"):
        return _third_party(serial)
    if serial.startswith("T"):
        return _third_party_unhyphenated(serial)
    if serial.startswith("HDR-"):
        return _hdr(serial)
    if serial.startswith("MK-"):
        return _first_party(serial)
    return None


def get_dreamcast_serial(fp: BinaryIO) -> Optional[str]:
    raw = read_at(fp, SERIAL_OFFSET, SERIAL_LEN)
    if not raw:
        return None
    return normalize_dreamcast_serial(raw.split(b"\x00", 1)[0].decode("latin-1"))
