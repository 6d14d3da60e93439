"""Configuration and constants for the emuident package."""
from __future__ import annotations

from typing import Dict

# Default settings file looked up by the CLI
SETTINGS_DEFAULT = "emuident.json"

# Playlist tokens are bounded; longer directives are truncated
MAX_TOKEN_LEN = 255

# CUE timestamps: 75 frames per second, one raw 2352-byte sector per frame
FRAMES_PER_SECOND = 75
RAW_SECTOR_SIZE = 2352

# GDI: mode 0 with raw 2352-byte sectors is the audio layout
GDI_AUDIO_MODE = 0
GDI_AUDIO_SECTOR_SIZE = 2352

# Linear scan windows (number of start offsets probed)
PSP_SCAN_LIMIT = 100_000
ASCII_SCAN_LIMIT = 10_000

# Container detection by extension; anything else is read as a raw image
EXT_TO_CONTAINER: Dict[str, str] = {
    ".cue": "cue",
    ".gdi": "gdi",
    ".iso": "raw",
    ".bin": "raw",
    ".img": "raw",
    ".gcm": "raw",
    ".wbfs": "raw",
}

# Human readable names for the system ids reported by the detector
SYSTEM_DISPLAY_NAMES: Dict[str, str] = {
    "ps1": "PlayStation",
    "psp": "PlayStation Portable",
    "gc": "Nintendo GameCube",
    "scd": "Sega CD / Mega-CD",
    "sat": "Sega Saturn",
    "dc": "Sega Dreamcast",
    "ascii": "Generic (ASCII serial)",
}
