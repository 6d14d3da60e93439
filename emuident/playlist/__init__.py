"""Playlist scanners (CUE and GDI) and their tokenizer."""

from .cue import iter_cue_files, locate_cue_track, next_cue_file
from .gdi import iter_gdi_files, locate_gdi_track, next_gdi_file
from .tokenizer import read_token

__all__ = [
    "read_token",
    "locate_cue_track",
    "next_cue_file",
    "iter_cue_files",
    "locate_gdi_track",
    "next_gdi_file",
    "iter_gdi_files",
]
