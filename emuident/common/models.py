from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import GDI_AUDIO_MODE, GDI_AUDIO_SECTOR_SIZE


@dataclass(frozen=True)
class TrackCandidate:
    start_offset: int
    track_number: int


@dataclass(frozen=True)
class CueTrack:
    offset: int
    size: int
    path: Path


@dataclass(frozen=True)
class GdiTrack:
    number: int
    offset: int
    mode: int
    sector_size: int
    path: Path

    @property
    def is_data(self) -> bool:
        return not (self.mode == GDI_AUDIO_MODE and self.sector_size == GDI_AUDIO_SECTOR_SIZE)


@dataclass(frozen=True)
class MagicEntry:
    offset: int
    system_name: str
    magic: bytes

    @property
    def length(self) -> int:
        return len(self.magic)


@dataclass
class DiscIdentity:
    system: Optional[str]  # None when no signature matched
    serial: Optional[str]


@dataclass
class ScanResult:
    path: str
    container: str  # "cue", "gdi", "raw"
    track_path: Optional[str] = None
    track_offset: Optional[int] = None
    track_size: Optional[int] = None
    system: Optional[str] = None
    serial: Optional[str] = None
    error: Optional[str] = None

    @property
    def identified(self) -> bool:
        return self.serial is not None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "container": self.container,
            "track_path": self.track_path,
            "track_offset": self.track_offset,
            "track_size": self.track_size,
            "system": self.system,
            "serial": self.serial,
            "error": self.error,
        }
