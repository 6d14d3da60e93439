"""Exceções do emuident.

Só os scanners de playlists e a camada de I/O levantam exceções. Resultados
"não encontrado" dos detetores e descodificadores de serial são devolvidos
como ``None``: uma imagem sem assinatura conhecida não é um erro.
"""

from __future__ import annotations

import traceback
from typing import Any, Optional


# ============================================================================
# BASE
# ============================================================================

class EmuIdentError(Exception):
    """Raiz da hierarquia; ``details`` guarda o contexto estruturado do erro."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"


# ============================================================================
# I/O
# ============================================================================

class StreamError(EmuIdentError):
    """Falha ao abrir, posicionar ou ler um stream (não transitória)."""

    def __init__(self, path: str, message: str, errno: Optional[int] = None):
        details: dict[str, Any] = {"path": path}
        if errno is not None:
            details["errno"] = errno
        super().__init__(message, details)
        self.path = path
        self.errno = errno


# ============================================================================
# PLAYLISTS
# ============================================================================

class PlaylistParseError(EmuIdentError):
    """Diretiva malformada, timestamp inválido ou entrada truncada."""

    def __init__(self, path: str, reason: str = ""):
        message = f"Falha ao processar playlist {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, {"path": path, "reason": reason})
        self.path = path
        self.reason = reason


class TrackSpanError(PlaylistParseError):
    """Candidato fechado com fim anterior ao início."""

    def __init__(self, path: str, start: int, end: int):
        super().__init__(path, f"fim de faixa {end} anterior ao início {start}")
        self.details.update(start=start, end=end)
        self.start = start
        self.end = end


class TrackNotFoundError(EmuIdentError):
    """Playlist válida, mas nenhuma faixa de dados foi resolvida."""

    def __init__(self, path: str):
        super().__init__(f"Nenhuma faixa de dados encontrada em {path}", {"path": path})
        self.path = path


# ============================================================================
# SERIAIS
# ============================================================================

class UnsupportedSystemError(EmuIdentError):
    """Família de consola sem descodificador registado."""

    def __init__(self, system: str):
        super().__init__(f"Sistema não suportado: {system}", {"system": system})
        self.system = system


# ============================================================================
# FORMATAÇÃO
# ============================================================================

def format_exception_chain(exc: BaseException, include_traceback: bool = False) -> str:
    """Descreve ``exc`` e as exceções que a causaram, da mais externa à raiz.

    Segue ``__cause__`` e, quando não foi suprimido, ``__context__``.
    Com ``include_traceback`` devolve o traceback completo.
    """
    if include_traceback:
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    parts = []
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, EmuIdentError):
            parts.append(str(current))
        else:
            parts.append(f"{type(current).__name__}: {current}")
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None
    return " → ".join(parts)
