import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class ConfigError(ValueError):
    """Raised when an environment variable holds a malformed value."""


_TRUE_VALUES = {"1", "true", "True", "TRUE", "yes", "YES", "y"}
_FALSE_VALUES = {"0", "false", "False", "FALSE", "no", "NO", "n"}
SUPPORTED_LANGS = ("en", "ko")


def _get_env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None or val.strip() == "":
        return default
    val = val.strip()
    if val in _TRUE_VALUES:
        return True
    if val in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean")


def _get_env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {name} must be an integer") from exc


def _resolve_lang(explicit: Optional[str], locale_tag: Optional[str]) -> str:
    if explicit:
        lang = explicit.strip().lower()
        if lang not in SUPPORTED_LANGS:
            raise ConfigError(f"ALARM_LANG must be one of {', '.join(SUPPORTED_LANGS)}")
        return lang
    if locale_tag and locale_tag.lower().startswith("ko"):
        return "ko"
    return "en"


@dataclass
class Config:
    storage_dir: Path
    storage_key: str
    timezone_name: Optional[str]
    lang: str
    log_level: str
    log_dir: Path
    log_to_file: bool
    log_max_bytes: int


def load_config(env_path: Optional[Path] = None) -> Config:
    if env_path is None:
        env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    storage_dir = Path(os.getenv("ALARM_STORAGE_DIR", "data"))
    storage_key = os.getenv("ALARM_STORAGE_KEY", "alarms").strip()
    if not storage_key:
        raise ConfigError("ALARM_STORAGE_KEY must not be empty")
    timezone_name = os.getenv("ALARM_TIMEZONE") or None
    lang = _resolve_lang(os.getenv("ALARM_LANG"), os.getenv("LANG"))
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        logging.warning("Invalid LOG_LEVEL '%s', defaulting to INFO", log_level)
        log_level = "INFO"
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    log_to_file = _get_env_bool("LOG_TO_FILE", True)
    log_max_bytes = _get_env_int("LOG_MAX_BYTES", 1_000_000)

    return Config(
        storage_dir=storage_dir,
        storage_key=storage_key,
        timezone_name=timezone_name,
        lang=lang,
        log_level=log_level,
        log_dir=log_dir,
        log_to_file=log_to_file,
        log_max_bytes=log_max_bytes,
    )


def setup_logging(
    log_level: str = "INFO",
    log_dir: Path = Path("logs"),
    to_file: bool = True,
    max_bytes: int = 1_000_000,
) -> None:
    """Configure root logging once per process. Call it from the entry point before anything logs."""
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    handlers = []

    if to_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "cycle_alarms.log", maxBytes=max_bytes, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=handlers,
        force=True,
    )
