"""CUE sheet scanner.

Finds the data track of a CUE sheet as an ``(offset, size, path)`` triple,
where ``offset`` and ``size`` are byte counts inside the referenced file.
Only ``FILE``, ``TRACK`` and ``INDEX`` directives are interpreted; anything
else is skipped token by token.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from ..common.exceptions import PlaylistParseError, TrackNotFoundError, TrackSpanError
from ..common.models import CueTrack, TrackCandidate
from ..common.stream import get_file_size, open_stream
from ..config import FRAMES_PER_SECOND, RAW_SECTOR_SIZE
from .tokenizer import read_token

logger = logging.getLogger(__name__)

# mm:ss:ff, exactly two digits each
TIMESTAMP_RE = re.compile(r"^(\d{2}):(\d{2}):(\d{2})$")


def timestamp_to_offset(stamp: str) -> Optional[int]:
    """Convert an ``mm:ss:ff`` INDEX timestamp to a byte offset."""
    m = TIMESTAMP_RE.match(stamp)
    if not m:
        return None
    minutes, seconds, frames = (int(g) for g in m.groups())
    return ((minutes * 60 + seconds) * FRAMES_PER_SECOND + frames) * RAW_SECTOR_SIZE


class CandidateTracker:
    """Best-track selection over a stream of candidate regions.

    Two states: no candidate, or one candidate open at a start offset for a
    given track. ``resolve`` closes the open candidate against an end
    boundary and keeps it if it is strictly larger than the best so far.
    """

    def __init__(self, source: str = "<cue>"):
        self.source = source
        self.candidate: Optional[TrackCandidate] = None
        self.best: Optional[CueTrack] = None

    @property
    def is_open(self) -> bool:
        return self.candidate is not None

    @property
    def best_size(self) -> int:
        return self.best.size if self.best else 0

    def open(self, start: int, track: int) -> None:
        if self.candidate is not None:
            raise RuntimeError("candidate already open")
        self.candidate = TrackCandidate(start, track)

    def discard(self) -> None:
        self.candidate = None

    def resolve(self, end: int, path: Path) -> bool:
        """Close the open candidate at ``end``; True if it became the best."""
        cand = self.candidate
        if cand is None:
            return False
        self.candidate = None
        if end < cand.start_offset:
            raise TrackSpanError(self.source, cand.start_offset, end)
        size = end - cand.start_offset
        if size > self.best_size:
            self.best = CueTrack(cand.start_offset, size, path)
            logger.debug("Track %d selected: offset=%d size=%d", cand.track_number, cand.start_offset, size)
            return True
        return False


def _operand(fp: BinaryIO, cue_path: Path, directive: str) -> str:
    token = read_token(fp)
    if token is None:
        raise PlaylistParseError(str(cue_path), f"{directive} incompleto")
    return token


class _CueScan:
    """Directive-driven state for a single locate_cue_track call."""

    def __init__(self, cue_path: Path, first: bool):
        self.cue_path = cue_path
        self.cue_dir = cue_path.parent
        self.first = first
        self.tracker = CandidateTracker(str(cue_path))
        self.last_file: Optional[Path] = None
        self.file_size: Optional[int] = None
        self.track: Optional[int] = None
        self.is_data = False

    def _close_file(self) -> bool:
        if self.last_file is None:
            return False
        if self.file_size is None:
            # Unknown size: the open region cannot be measured
            self.tracker.discard()
            return False
        return self.tracker.resolve(self.file_size, self.last_file)

    def on_file(self, fp: BinaryIO) -> bool:
        updated = self._close_file()
        name = _operand(fp, self.cue_path, "FILE")
        _operand(fp, self.cue_path, "FILE")  # file type
        self.last_file = self.cue_dir / name
        self.file_size = get_file_size(self.last_file)
        if self.file_size is None:
            logger.debug("Could not size track file %s", self.last_file)
        return updated

    def on_track(self, fp: BinaryIO) -> None:
        number = _operand(fp, self.cue_path, "TRACK")
        kind = _operand(fp, self.cue_path, "TRACK")
        try:
            self.track = int(number)
        except ValueError:
            raise PlaylistParseError(str(self.cue_path), f"número de faixa inválido '{number}'") from None
        self.is_data = kind.upper() != "AUDIO"

    def on_index(self, fp: BinaryIO) -> bool:
        _operand(fp, self.cue_path, "INDEX")  # index number
        stamp = _operand(fp, self.cue_path, "INDEX")
        offset = timestamp_to_offset(stamp)
        if offset is None:
            raise PlaylistParseError(str(self.cue_path), f"timestamp inválido '{stamp}'")
        if self.last_file is None:
            raise PlaylistParseError(str(self.cue_path), "INDEX antes de FILE")

        updated = False
        cand = self.tracker.candidate
        if cand is not None and cand.track_number != self.track:
            updated = self.tracker.resolve(offset, self.last_file)

        if self.is_data and not self.tracker.is_open:
            self.tracker.open(offset, self.track if self.track is not None else 0)
        return updated

    def run(self, fp: BinaryIO) -> Optional[CueTrack]:
        while True:
            token = read_token(fp)
            if token is None:
                break
            directive = token.upper()
            updated = False
            if directive == "FILE":
                updated = self.on_file(fp)
            elif directive == "TRACK":
                self.on_track(fp)
            elif directive == "INDEX":
                updated = self.on_index(fp)
            if updated and self.first:
                return self.tracker.best

        self._close_file()
        return self.tracker.best


def locate_cue_track(cue_path: Path | str, first: bool = False) -> CueTrack:
    """Locate the data track referenced by a CUE sheet.

    With ``first`` the first resolved data track wins, otherwise the largest.

    Raises:
        StreamError: the CUE file cannot be opened or read
        PlaylistParseError: malformed directive or timestamp
        TrackNotFoundError: no data track could be resolved
    """
    cue_path = Path(cue_path)
    logger.debug("Parsing CUE file '%s'...", cue_path)
    with open_stream(cue_path) as fp:
        best = _CueScan(cue_path, first).run(fp)
    if best is None:
        raise TrackNotFoundError(str(cue_path))
    return best


def next_cue_file(fp: BinaryIO, cue_path: Path | str) -> Optional[Path]:
    """Advance ``fp`` past the next FILE directive and return its path.

    The stream belongs to the caller and is left open.
    """
    cue_dir = Path(cue_path).parent
    while True:
        token = read_token(fp)
        if token is None:
            return None
        if token.upper() == "FILE":
            name = read_token(fp)
            if name is None:
                return None
            return cue_dir / name


def iter_cue_files(cue_path: Path | str) -> Iterator[Path]:
    """Yield every file referenced by a CUE sheet, in order."""
    with open_stream(cue_path) as fp:
        while True:
            path = next_cue_file(fp, cue_path)
            if path is None:
                return
            yield path
