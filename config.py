"""
Service configuration read from the environment (and a local .env file).
"""

import logging
import math
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from placement import Anchor, PlacementDefaults, parse_anchor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    port: int = 3000
    max_content_length_mb: int = 50
    download_timeout: float = 30
    default_position: str = 'bottom-right'
    default_padding: float = 40
    default_logo_size: float = 10
    log_level: str = 'INFO'

    @property
    def max_content_length(self) -> int:
        return self.max_content_length_mb * 1024 * 1024

    def placement_defaults(self) -> PlacementDefaults:
        anchor = parse_anchor(self.default_position, Anchor.BOTTOM_RIGHT)
        if anchor is Anchor.NONE:
            # 'none' as a default would silently disable every overlay
            logger.warning("DEFAULT_POSITION=none ignored, using bottom-right")
            anchor = Anchor.BOTTOM_RIGHT
        logo_size = self.default_logo_size if self.default_logo_size > 0 else 10
        return PlacementDefaults(anchor=anchor, padding=self.default_padding, logo_size=logo_size)


def _env_number(name: str, default, cast, positive: bool = True):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = cast(raw)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value) or (positive and value <= 0):
        logger.warning("Invalid value %r for %s, using %r", raw, name, default)
        return default
    return value


def _env_log_level(name: str, default: str) -> str:
    level = os.environ.get(name, default).strip().upper()
    if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        logger.warning("Invalid log level %r for %s, using %s", level, name, default)
        return default
    return level


def load_settings() -> Settings:
    """Build Settings from environment variables, loading .env first."""
    load_dotenv()
    return Settings(
        port=_env_number('PORT', 3000, int),
        max_content_length_mb=_env_number('MAX_CONTENT_LENGTH_MB', 50, int),
        download_timeout=_env_number('DOWNLOAD_TIMEOUT', 30, float),
        default_position=os.environ.get('DEFAULT_POSITION', 'bottom-right'),
        default_padding=_env_number('DEFAULT_PADDING', 40, float, positive=False),
        default_logo_size=_env_number('DEFAULT_LOGO_SIZE', 10, float),
        log_level=_env_log_level('LOG_LEVEL', 'INFO'),
    )
