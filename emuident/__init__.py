"""emuident: locate the data track of CUE/GDI playlists, detect the console
family of a disc image and read its serial in the redump convention.
"""

from .common.registry import ConsoleFamily, extract_serial
from .core.detector import MAGIC_NUMBERS, detect_system
from .core.identifier import identify_file, identify_stream
from .playlist import (
    iter_cue_files,
    iter_gdi_files,
    locate_cue_track,
    locate_gdi_track,
    next_cue_file,
    next_gdi_file,
)

__version__ = "1.0.0"

__all__ = [
    "ConsoleFamily",
    "MAGIC_NUMBERS",
    "detect_system",
    "extract_serial",
    "identify_file",
    "identify_stream",
    "locate_cue_track",
    "next_cue_file",
    "iter_cue_files",
    "locate_gdi_track",
    "next_gdi_file",
    "iter_gdi_files",
]
