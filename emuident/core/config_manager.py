from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from emuident import config

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "log_format": "auto",  # auto | json | human
    "log_level": "INFO",
    "log_dir": None,  # pasta para _SCAN_LOG.txt
    "first_track": True,
    "ascii_fallback": True,
}


class ConfigManager:
    """Definições do utilizador guardadas num ficheiro JSON.

    Os valores guardados sobrepõem-se aos de ``DEFAULT_SETTINGS``; um ficheiro
    inexistente, ilegível ou que não contenha um objeto JSON deixa os valores
    por omissão.
    """

    def __init__(self, config_file: Path | str = config.SETTINGS_DEFAULT):
        self.config_path = Path(config_file)
        self.values: dict[str, Any] = dict(DEFAULT_SETTINGS)
        self.load()

    def load(self) -> None:
        self.values = dict(DEFAULT_SETTINGS)
        try:
            stored = json.loads(self.config_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, ValueError) as e:
            logger.debug("A ignorar configurações em %s: %s", self.config_path, e)
            return
        if isinstance(stored, dict):
            self.values.update(stored)

    def save(self) -> bool:
        try:
            self.config_path.write_text(
                json.dumps(self.values, indent=4, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as e:
            logger.debug("Não foi possível gravar %s: %s", self.config_path, e)
            return False
        return True

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value

    def log_level(self) -> int:
        """Nível de logging configurado; nomes desconhecidos contam como INFO."""
        level = logging.getLevelName(str(self.get("log_level", "INFO")).upper())
        return level if isinstance(level, int) else logging.INFO

    def log_dir(self) -> Optional[Path]:
        value = self.get("log_dir")
        return Path(value) if value else None
