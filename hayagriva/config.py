"""Runtime settings read from the environment (and ``.env``)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)

DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"
DEFAULT_CALL_TIMEOUT = 60.0
DEFAULT_MAX_GROUNDING_CHARS = 500_000

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Configuration for providers and the orchestrator."""

    api_key: Optional[str] = None
    text_model: str = DEFAULT_TEXT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    call_timeout: float = DEFAULT_CALL_TIMEOUT
    max_grounding_chars: int = DEFAULT_MAX_GROUNDING_CHARS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
            text_model=os.getenv("HAYAGRIVA_TEXT_MODEL", DEFAULT_TEXT_MODEL),
            image_model=os.getenv("HAYAGRIVA_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            call_timeout=_read_number(
                "HAYAGRIVA_CALL_TIMEOUT", DEFAULT_CALL_TIMEOUT, float
            ),
            max_grounding_chars=_read_number(
                "HAYAGRIVA_MAX_GROUNDING_CHARS", DEFAULT_MAX_GROUNDING_CHARS, int
            ),
            log_level=os.getenv("HAYAGRIVA_LOG_LEVEL", "INFO").upper(),
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Install the root handler used by the interactive shell."""

    level_name = (settings or Settings()).log_level
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _read_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    if value <= 0:
        LOGGER.warning("Ignoring non-positive %s=%r, using %s", name, raw, default)
        return default
    return value
