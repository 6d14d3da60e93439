"""GDI (GD-ROM playlist) scanner.

A GDI file starts with the track count, followed by one entry per track::

    track_number offset mode sector_size filename disc_offset

Unlike CUE, a GDI track always spans its whole file, so the scanner only
reports the path of the selected track file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from ..common.exceptions import PlaylistParseError, StreamError, TrackNotFoundError
from ..common.models import GdiTrack
from ..common.stream import get_file_size, open_stream
from .tokenizer import read_token

logger = logging.getLogger(__name__)


def _field(fp: BinaryIO, gdi_path: Path, name: str) -> str:
    token = read_token(fp)
    if token is None:
        raise PlaylistParseError(str(gdi_path), f"entrada truncada: falta {name}")
    return token


def _int_field(value: str, gdi_path: Path, name: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise PlaylistParseError(str(gdi_path), f"{name} inválido '{value}'") from None


def _read_entry(fp: BinaryIO, gdi_path: Path, number_token: str) -> GdiTrack:
    """Read an entry up to its filename; the disc offset is left unread."""
    offset = _field(fp, gdi_path, "offset")
    mode = _int_field(_field(fp, gdi_path, "mode"), gdi_path, "mode")
    sector_size = _int_field(_field(fp, gdi_path, "sector size"), gdi_path, "sector size")
    filename = _field(fp, gdi_path, "filename")
    return GdiTrack(
        number=_int_field(number_token, gdi_path, "track number"),
        offset=_int_field(offset, gdi_path, "offset"),
        mode=mode,
        sector_size=sector_size,
        path=gdi_path.parent / filename,
    )


def read_gdi_tracks(fp: BinaryIO, gdi_path: Path | str) -> Iterator[GdiTrack]:
    """Parse every entry of a GDI stream positioned at its start.

    An entry's disc offset is only required once the next entry is asked
    for, so a caller that stops early never reads it.
    """
    gdi_path = Path(gdi_path)
    read_token(fp)  # track count, not validated
    while True:
        number = read_token(fp)
        if number is None:
            return
        yield _read_entry(fp, gdi_path, number)
        _field(fp, gdi_path, "disc offset")


def locate_gdi_track(gdi_path: Path | str, first: bool = False) -> Path:
    """Return the path of the largest data track file of a GDI.

    With ``first`` the first data track file wins.

    Raises:
        StreamError: the GDI or a data track file cannot be opened or sized
        PlaylistParseError: a truncated or malformed entry
        TrackNotFoundError: the GDI lists no data track
    """
    gdi_path = Path(gdi_path)
    logger.debug("Parsing GDI file '%s'...", gdi_path)
    largest = 0
    best: Optional[Path] = None

    with open_stream(gdi_path) as fp:
        for track in read_gdi_tracks(fp, gdi_path):
            if not track.is_data:
                continue
            size = get_file_size(track.path)
            if size is None:
                raise StreamError(str(track.path), f"Não foi possível obter o tamanho de {track.path}")
            if size > largest:
                largest = size
                best = track.path
                logger.debug("Track %d selected: %s (%d bytes)", track.number, track.path, size)
                if first:
                    break

    if best is None:
        raise TrackNotFoundError(str(gdi_path))
    return best


def next_gdi_file(fp: BinaryIO, gdi_path: Path | str) -> Optional[Path]:
    """Read one GDI entry from ``fp`` and return its track file path.

    At position 0 the track count is consumed first. The stream belongs to
    the caller and is left positioned at the next entry.
    """
    gdi_path = Path(gdi_path)
    if fp.tell() == 0:
        read_token(fp)

    # track number, offset, mode, sector size
    for _ in range(4):
        read_token(fp)

    filename = read_token(fp)
    if filename is None:
        return None
    read_token(fp)  # disc offset
    return gdi_path.parent / filename


def iter_gdi_files(gdi_path: Path | str) -> Iterator[Path]:
    """Yield every track file of a GDI, in playlist order."""
    with open_stream(gdi_path) as fp:
        while True:
            path = next_gdi_file(fp, gdi_path)
            if path is None:
                return
            yield path
