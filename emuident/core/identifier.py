from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Optional

from emuident.common.exceptions import EmuIdentError, format_exception_chain
from emuident.common.models import DiscIdentity, ScanResult
from emuident.common.registry import ConsoleFamily, registry
from emuident.common.stream import TrackWindow, open_stream, user_data_view
from emuident.config import EXT_TO_CONTAINER
from emuident.core.detector import detect_system
from emuident.logging_cfg import log_call, set_scan_id
from emuident.playlist.cue import locate_cue_track
from emuident.playlist.gdi import locate_gdi_track

logger = logging.getLogger(__name__)


def container_for(path: Path) -> str:
    return EXT_TO_CONTAINER.get(path.suffix.lower(), "raw")


def identify_stream(fp: BinaryIO, ascii_fallback: bool = True) -> DiscIdentity:
    """Detect the console family of a stream and read its serial.

    Raw 2352-byte sector images are read through their 2048-byte user data.
    When no signature matches, or the family reader finds nothing, the
    generic ASCII reader is tried.
    """
    fp = user_data_view(fp)
    system = detect_system(fp)
    serial = None
    if system is not None and registry.get_decoder(system) is not None:
        serial = registry.extract_serial(fp, system)
    if serial is None and ascii_fallback:
        serial = registry.extract_serial(fp, ConsoleFamily.ASCII)
        if serial is not None:
            logger.debug("Serial %s found by ASCII scan", serial)
    return DiscIdentity(system=system, serial=serial)


@log_call()
def identify_file(
    path: Path | str,
    first_track: bool = True,
    ascii_fallback: bool = True,
) -> ScanResult:
    """Identify a raw image, CUE sheet or GDI playlist.

    Raises:
        StreamError: a file cannot be opened or read
        PlaylistParseError: a malformed playlist
        TrackNotFoundError: a playlist without data track
    """
    path = Path(path)
    container = container_for(path)
    result = ScanResult(path=str(path), container=container)

    if container == "cue":
        track = locate_cue_track(path, first=first_track)
        result.track_path = str(track.path)
        result.track_offset = track.offset
        result.track_size = track.size
        with open_stream(track.path) as fp:
            identity = identify_stream(TrackWindow(fp, track.offset, track.size), ascii_fallback)
    else:
        if container == "gdi":
            target = locate_gdi_track(path, first=first_track)
            result.track_path = str(target)
        else:
            target = path
        with open_stream(target) as fp:
            identity = identify_stream(fp, ascii_fallback)

    result.system = identity.system
    result.serial = identity.serial
    return result


def scan_files(
    paths: Iterable[Path | str],
    first_track: bool = True,
    ascii_fallback: bool = True,
    progress_cb: Optional[Callable[[float, str], None]] = None,
) -> list[ScanResult]:
    """Identify each file in turn; failures are recorded, not raised."""
    paths = [Path(p) for p in paths]
    results: list[ScanResult] = []
    total = len(paths)

    for i, path in enumerate(paths):
        set_scan_id()
        if progress_cb and total > 0:
            progress_cb(i / total, path.name)
        try:
            results.append(identify_file(path, first_track=first_track, ascii_fallback=ascii_fallback))
        except EmuIdentError as e:
            logger.info("Skipping %s: %s", path, format_exception_chain(e))
            results.append(ScanResult(path=str(path), container=container_for(path), error=str(e)))

    if progress_cb and total > 0:
        progress_cb(1.0, "")
    return results
