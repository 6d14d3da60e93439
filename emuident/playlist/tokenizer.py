"""Whitespace and quote aware tokenizer for CUE and GDI playlists."""

from __future__ import annotations

import logging
from typing import BinaryIO, Optional

from ..common.exceptions import PlaylistParseError, StreamError
from ..config import MAX_TOKEN_LEN

logger = logging.getLogger(__name__)

WHITESPACE = b" \t\r\n"
QUOTE = b'"'


def _stream_name(fp) -> str:
    return str(getattr(fp, "name", "<stream>"))


def _read_byte(fp: BinaryIO) -> bytes:
    while True:
        try:
            return fp.read(1)
        except (InterruptedError, BlockingIOError):
            continue
        except OSError as e:
            raise StreamError(_stream_name(fp), f"Erro de leitura: {e.strerror or e}", e.errno) from e


def read_token(fp: BinaryIO, max_len: int = MAX_TOKEN_LEN) -> Optional[str]:
    """Read the next token from ``fp``.

    Returns None at end of stream. A token starting with a double quote runs
    to the closing quote and may contain whitespace; the quotes are stripped.
    A token longer than ``max_len`` bytes is cut there and its remaining
    bytes are returned by the next call.

    Raises PlaylistParseError when the stream ends inside a quoted token.
    """
    buf = bytearray()
    quoted = False

    # Skip leading whitespace
    while True:
        c = _read_byte(fp)
        if not c:
            return None
        if c in WHITESPACE:
            continue
        if c == QUOTE:
            quoted = True
        else:
            buf += c
        break

    while len(buf) < max_len:
        c = _read_byte(fp)
        if not c:
            if quoted:
                raise PlaylistParseError(_stream_name(fp), "token entre aspas não terminado")
            return buf.decode("latin-1")
        if c == QUOTE:
            return buf.decode("latin-1")
        if c in WHITESPACE and not quoted:
            return buf.decode("latin-1")
        buf += c

    # Bound reached: any remaining bytes come back from the next call
    logger.debug("Token bound of %d bytes reached in %s", max_len, _stream_name(fp))
    return buf.decode("latin-1")
