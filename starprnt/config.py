"""Application settings - loads printer and encoder defaults from a .env file.

Only the command line tools read these; the encoder itself takes its options
as arguments.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

from starprnt.codepages import DEFAULT_CANDIDATES
from starprnt.options import EncoderOptions

logger = logging.getLogger(__name__)


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse string to bool; default for missing values."""
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def _get_int(key: str, default: int) -> int:
    """Get an integer env var; log a warning and use the default if malformed."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        logger.warning("Invalid integer for %s in .env: %r, using %d", key, value, default)
        return default


def _get_log_level(key: str, default: str) -> str:
    """Get a logging level name; log a warning and use the default if unknown."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Invalid log level for %s in .env: %r, using %s", key, value, default)
        return default
    return level


def _parse_list(value: str | None) -> Tuple[str, ...]:
    """Parse comma-separated names; handles both 'a,b' and '[a,b]' formats."""
    if not value or not value.strip():
        return ()
    raw = value.strip()
    if raw.startswith("[") and raw.endswith("]"):
        raw = raw[1:-1]
    return tuple(x.strip() for x in raw.split(",") if x.strip())


@dataclass(frozen=True)
class Settings:
    width: int
    word_wrap: bool
    codepage_mapping: str
    codepage_candidates: Tuple[str, ...]
    serial_port: str
    baudrate: int
    serial_bytesize: int
    serial_parity: str
    serial_stopbits: int
    serial_timeout: float
    serial_dsrdtr: bool
    log_dir: str
    log_level: str

    def encoder_options(self) -> EncoderOptions:
        return EncoderOptions(
            width=self.width,
            word_wrap=self.word_wrap,
            codepage_mapping=self.codepage_mapping,
            codepage_candidates=self.codepage_candidates,
        )


def load_settings(env_file: str | None = None) -> Settings:
    """Read settings from the environment, after loading ``env_file`` (or ./.env)."""

    if not load_dotenv(env_file or os.path.join(os.getcwd(), ".env")):
        logger.debug(".env file not found, using environment and defaults")

    return Settings(
        # Columns on 80mm paper with the default font
        width=_get_int("STARPRNT_WIDTH", 48),
        word_wrap=_parse_bool(os.getenv("STARPRNT_WORD_WRAP"), default=True),
        codepage_mapping=os.getenv("STARPRNT_CODEPAGE_MAPPING", "star").strip(),
        codepage_candidates=_parse_list(os.getenv("STARPRNT_CODEPAGE_CANDIDATES")) or DEFAULT_CANDIDATES,
        serial_port=os.getenv("SERIAL_PORT", "/dev/serial0").strip(),
        baudrate=_get_int("BAUDRATE", 9600),
        serial_bytesize=_get_int("SERIAL_BYTESIZE", 8),
        serial_parity=os.getenv("SERIAL_PARITY", "N").strip().upper(),
        serial_stopbits=_get_int("SERIAL_STOPBITS", 1),
        serial_timeout=float(os.getenv("SERIAL_TIMEOUT", "1.0").strip()),
        serial_dsrdtr=_parse_bool(os.getenv("SERIAL_DSRDTR"), default=True),
        log_dir=os.getenv("LOG_DIR", "logs").strip(),
        log_level=_get_log_level("LOG_LEVEL", "INFO"),
    )
