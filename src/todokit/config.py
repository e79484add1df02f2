"""Configuration management for todokit."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.completion import CompletionConfig, CompletionDateMode

logger = logging.getLogger(__name__)

TODOKIT_HOME = Path(os.environ.get("TODOKIT_HOME", Path.home() / ".todokit"))
CONFIG_FILE = TODOKIT_HOME / "config" / "todokit.conf"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Config:
    """todokit configuration."""

    todo_file: str = str(TODOKIT_HOME / "todo.txt")
    done_file: str = ""
    soon_days: int = 7
    completion_date_mode: CompletionDateMode = CompletionDateMode.CREATION_DATE_PRESENT
    auto_create_date: bool = False
    default_sort: str = ""

    @property
    def completion(self) -> CompletionConfig:
        return CompletionConfig(date_mode=self.completion_date_mode)


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_bool(key: str, value: str) -> bool | None:
    low = value.lower()
    if low in _TRUE:
        return True
    if low in _FALSE:
        return False
    logger.warning(f"Ignoring {key}: expected yes/no, got '{value}'")
    return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from todokit.conf (`key = value` lines)."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            logger.warning(f"Ignoring config line without '=': {line}")
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "todo_file":
                config.todo_file = value
            case "done_file":
                config.done_file = value
            case "soon_days":
                try:
                    config.soon_days = int(value)
                except ValueError:
                    logger.warning(f"Ignoring soon_days: not a number '{value}'")
            case "completion_date_mode":
                try:
                    config.completion_date_mode = CompletionDateMode(value.lower())
                except ValueError:
                    logger.warning(f"Ignoring unknown completion_date_mode '{value}'")
            case "auto_create_date":
                flag = _parse_bool(key, value)
                if flag is not None:
                    config.auto_create_date = flag
            case "default_sort":
                config.default_sort = value
            case _:
                logger.warning(f"Unknown config key '{key}'")

    return config
