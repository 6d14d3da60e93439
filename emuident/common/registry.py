from __future__ import annotations

import logging
from enum import Enum
from typing import BinaryIO, Callable, Optional

from .ascii_serial import get_ascii_serial
from .exceptions import UnsupportedSystemError
from ..dreamcast.metadata import get_dreamcast_serial
from ..gamecube.metadata import get_gamecube_serial
from ..psp.metadata import get_psp_serial
from ..psx.metadata import get_psx_serial
from ..saturn.metadata import get_saturn_serial
from ..segacd.metadata import get_segacd_serial

logger = logging.getLogger(__name__)

SerialDecoder = Callable[[BinaryIO], Optional[str]]


class ConsoleFamily(str, Enum):
    """Famílias de consola; os valores coincidem com os nomes do detetor."""

    PS1 = "ps1"
    PSP = "psp"
    GAMECUBE = "gc"
    SEGA_CD = "scd"
    SATURN = "sat"
    DREAMCAST = "dc"
    ASCII = "ascii"


class SerialRegistry:
    """Registo central dos descodificadores de serial por família."""

    def __init__(self):
        self._decoders: dict[str, SerialDecoder] = {}
        self._register_defaults()

    def _register_defaults(self):
        decoders = {
            ConsoleFamily.PS1: get_psx_serial,
            ConsoleFamily.PSP: get_psp_serial,
            ConsoleFamily.GAMECUBE: get_gamecube_serial,
            ConsoleFamily.SEGA_CD: get_segacd_serial,
            ConsoleFamily.SATURN: get_saturn_serial,
            ConsoleFamily.DREAMCAST: get_dreamcast_serial,
            ConsoleFamily.ASCII: get_ascii_serial,
        }
        for family, decoder in decoders.items():
            self.register(family, decoder)

    def register(self, family: ConsoleFamily | str, decoder: SerialDecoder):
        self._decoders[_key(family)] = decoder

    def get_decoder(self, family: ConsoleFamily | str) -> SerialDecoder | None:
        return self._decoders.get(_key(family))

    def extract_serial(self, fp: BinaryIO, family: ConsoleFamily | str) -> Optional[str]:
        """Executa o descodificador da família sobre o stream.

        Raises:
            UnsupportedSystemError: Se a família não tiver descodificador
        """
        decoder = self.get_decoder(family)
        if decoder is None:
            raise UnsupportedSystemError(_key(family))
        serial = decoder(fp)
        logger.debug("Serial %s para %s: %s", _key(family), getattr(fp, "name", "<stream>"), serial)
        return serial

    def list_families(self) -> list[str]:
        return sorted(self._decoders.keys())


def _key(family: ConsoleFamily | str) -> str:
    if isinstance(family, ConsoleFamily):
        return family.value
    return str(family)


# Singleton
registry = SerialRegistry()


def extract_serial(fp: BinaryIO, family: ConsoleFamily | str) -> Optional[str]:
    return registry.extract_serial(fp, family)
