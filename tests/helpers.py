"""Builders for small synthetic disc images used across the tests."""

from __future__ import annotations

SYNC = b"\x00" + b"\xff" * 10 + b"\x00"


def image(size: int, placements: dict[int, bytes]) -> bytes:
    """Zero-filled image of ``size`` bytes with data written at offsets."""
    buf = bytearray(size)
    for offset, data in placements.items():
        end = offset + len(data)
        if end > len(buf):
            buf.extend(b"\x00" * (end - len(buf)))
        buf[offset:end] = data
    return bytes(buf)


def _dir_record(name: bytes, lba: int) -> bytes:
    length = 33 + len(name)
    length += length % 2
    rec = bytearray(length)
    rec[0] = length
    rec[2:6] = lba.to_bytes(4, "little")
    rec[32] = len(name)
    rec[33:33 + len(name)] = name
    return bytes(rec)


def cooked_ps1_sectors(boot_line: bytes, with_cnf: bool = True) -> list[bytes]:
    """22 user-data sectors of a minimal PS1 ISO9660 volume.

    Sector 16 is the volume descriptor, 20 the root directory and 21 the
    SYSTEM.CNF file.
    """
    sectors = [bytes(2048) for _ in range(22)]

    pvd = bytearray(2048)
    pvd[0:6] = b"\x01CD001"
    pvd[8:19] = b"PLAYSTATION"
    pvd[156:156 + 34] = _dir_record(b"\x00", 20)
    sectors[16] = bytes(pvd)

    root = _dir_record(b"\x00", 20) + _dir_record(b"\x01", 20)
    if with_cnf:
        root += _dir_record(b"SYSTEM.CNF;1", 21)
    root += _dir_record(b"PSX.EXE;1", 21)
    sectors[20] = root.ljust(2048, b"\x00")

    sectors[21] = boot_line.ljust(2048, b"\x00")
    return sectors


def ps1_image(boot_line: bytes = b"BOOT = cdrom:\\SLUS_005.94;1\r\nTCB = 4\r\n",
              layout: str = "cooked", with_cnf: bool = True) -> bytes:
    """PS1 image in one of three layouts: ``cooked`` (2048 per sector),
    ``raw`` (2352, Mode 2) or ``subchannel`` (2448, raw plus 96 bytes)."""
    sectors = cooked_ps1_sectors(boot_line, with_cnf)
    if layout == "cooked":
        return b"".join(sectors)

    out = bytearray()
    for lba, data in enumerate(sectors):
        header = SYNC + bytes([0x00, 0x02, lba & 0xFF, 0x02])
        raw = header + b"\x00" * 8 + data + b"\x00" * 280
        assert len(raw) == 2352
        if layout == "subchannel":
            raw += b"\x00" * 96
        out += raw
    return bytes(out)


def raw_mode1(cooked: bytes) -> bytes:
    """Wrap 2048-byte user data into raw Mode 1 sectors."""
    out = bytearray()
    for lba in range(0, len(cooked), 2048):
        data = cooked[lba:lba + 2048].ljust(2048, b"\x00")
        out += SYNC + bytes([0x00, 0x02, 0x00, 0x01]) + data + b"\x00" * 288
    return bytes(out)


def saturn_header(product: bytes = b"MK-81060  ", area: bytes = b"U") -> bytes:
    return image(0x100, {
        0x00: b"SEGA SEGASATURN ",
        0x10: b"SEGA ENTERPRISES",
        0x20: product,
        0x2A: b"V1.000",
        0x30: b"19960215",
        0x38: b"CD-1/1  ",
        0x40: area,
    })


def dreamcast_header(product: bytes = b"T-8101N   ") -> bytes:
    return image(0x100, {
        0x00: b"SEGA SEGAKATANA ",
        0x10: b"SEGA ENTERPRISES",
        0x40: product,
        0x4A: b"V1.001",
    })


def segacd_header(serial: bytes = b"T-6013 -00 ") -> bytes:
    return image(0x200, {
        0x000: b"SEGADISCSYSTEM  ",
        0x180: b"GM ",
        0x183: serial,
    })
