"""Byte-stream helpers shared by the playlist scanners and serial readers.

Any seekable binary file object works as a stream. These helpers add the
behaviour the scanners rely on: transient errors are retried, other I/O
errors become :class:`StreamError`, and failed seeks are reported as ``None``
instead of raising.
"""

from __future__ import annotations

import io
import os
from pathlib import Path
from typing import BinaryIO, Optional

from .exceptions import StreamError
from ..config import RAW_SECTOR_SIZE

_TRANSIENT = (InterruptedError, BlockingIOError)

USER_DATA_SIZE = 2048
# Raw sector followed by 96 bytes of subchannel data
SUBCHANNEL_SECTOR_SIZE = RAW_SECTOR_SIZE + 96
SYNC_PATTERN = b"\x00" + b"\xff" * 10 + b"\x00"
# User data offset inside a raw sector, by mode byte (header byte 15)
USER_DATA_OFFSETS = {1: 16, 2: 24}


def _stream_name(fp) -> str:
    return str(getattr(fp, "name", "<stream>"))


def open_stream(path: Path | str) -> BinaryIO:
    """Open ``path`` for binary reading."""
    try:
        return open(path, "rb")
    except OSError as e:
        raise StreamError(str(path), f"Não foi possível abrir {path}: {e.strerror or e}", e.errno) from e


def get_file_size(path: Path | str) -> Optional[int]:
    """Return the size of ``path`` in bytes, or None when it cannot be sized."""
    try:
        with open(path, "rb") as f:
            f.seek(0, os.SEEK_END)
            return f.tell()
    except OSError:
        return None


def stream_size(fp: BinaryIO) -> int:
    fp.seek(0, os.SEEK_END)
    return fp.tell()


def read_exact(fp: BinaryIO, length: int) -> bytes:
    """Read up to ``length`` bytes, retrying transient conditions.

    Stops early only at end of stream.
    """
    chunks = []
    remaining = length
    while remaining > 0:
        try:
            chunk = fp.read(remaining)
        except _TRANSIENT:
            continue
        except OSError as e:
            raise StreamError(_stream_name(fp), f"Erro de leitura: {e.strerror or e}", e.errno) from e
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_at(fp: BinaryIO, offset: int, length: int) -> Optional[bytes]:
    """Seek to ``offset`` and read up to ``length`` bytes.

    Returns None when the seek itself fails (negative offset, closed or
    unseekable stream). Short reads near the end of the stream are returned
    as-is.
    """
    try:
        fp.seek(offset, os.SEEK_SET)
    except (OSError, ValueError):
        return None
    return read_exact(fp, length)


class _StreamView:
    """Read-only, seekable view over part of another stream.

    Subclasses set ``size`` and implement ``_read(n)`` for the current
    position. Closing a view leaves the underlying stream open.
    """

    size = 0

    def __init__(self, fp: BinaryIO):
        self._fp = fp
        self._pos = 0
        self.closed = False
        self.name = _stream_name(fp)

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._pos

    def seek(self, pos: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            target = pos
        elif whence == io.SEEK_CUR:
            target = self._pos + pos
        elif whence == io.SEEK_END:
            target = self.size + pos
        else:
            raise ValueError(f"invalid whence: {whence}")
        if target < 0:
            raise OSError(22, "negative seek position")
        self._pos = target
        return self._pos

    def read(self, n: int = -1) -> bytes:
        if self.closed:
            raise ValueError("read from closed view")
        available = max(self.size - self._pos, 0)
        if n is None or n < 0 or n > available:
            n = available
        if n == 0:
            return b""
        data = self._read(n)
        self._pos += len(data)
        return data

    def _read(self, n: int) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class TrackWindow(_StreamView):
    """View of ``[offset, offset + size)``; position 0 maps to ``offset``."""

    def __init__(self, fp: BinaryIO, offset: int, size: int):
        if offset < 0 or size < 0:
            raise ValueError("offset and size must be non-negative")
        super().__init__(fp)
        self.offset = offset
        self.size = size

    def _read(self, n: int) -> bytes:
        self._fp.seek(self.offset + self._pos, io.SEEK_SET)
        return read_exact(self._fp, n)


class RawSectorView(_StreamView):
    """Cooked (2048 bytes per sector) view of a raw sector image.

    Logical offset ``n`` maps to byte ``n % 2048`` of the user data area of
    sector ``n // 2048``. ``sector_size`` is 2352, or 2448 when every sector
    carries subchannel data.
    """

    def __init__(
        self,
        fp: BinaryIO,
        data_offset: int,
        raw_size: Optional[int] = None,
        sector_size: int = RAW_SECTOR_SIZE,
    ):
        super().__init__(fp)
        self.data_offset = data_offset
        self.sector_size = sector_size
        if raw_size is None:
            raw_size = stream_size(fp)
        self.size = (raw_size // sector_size) * USER_DATA_SIZE

    def _read(self, n: int) -> bytes:
        out = bytearray()
        pos = self._pos
        while n > 0:
            sector, within = divmod(pos, USER_DATA_SIZE)
            chunk_len = min(n, USER_DATA_SIZE - within)
            self._fp.seek(sector * self.sector_size + self.data_offset + within, io.SEEK_SET)
            chunk = read_exact(self._fp, chunk_len)
            out += chunk
            if len(chunk) < chunk_len:
                break
            pos += chunk_len
            n -= chunk_len
        return bytes(out)


def user_data_view(fp: BinaryIO):
    """Return a cooked view of ``fp`` when it holds raw CD sectors.

    Streams that do not start with a CD sync pattern are returned unchanged.
    """
    header = read_at(fp, 0, 16)
    if not header or len(header) < 16 or header[:12] != SYNC_PATTERN:
        return fp
    data_offset = USER_DATA_OFFSETS.get(header[15])
    if data_offset is None:
        return fp
    size = stream_size(fp)
    sector_size = RAW_SECTOR_SIZE
    if size % RAW_SECTOR_SIZE and not size % SUBCHANNEL_SECTOR_SIZE:
        sector_size = SUBCHANNEL_SECTOR_SIZE
    return RawSectorView(fp, data_offset, size, sector_size)
