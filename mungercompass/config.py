import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.0


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE


def _read_number(name: str, default, cast):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return cast(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        model=os.getenv("COMPASS_MODEL") or DEFAULT_MODEL,
        max_tokens=_read_number("COMPASS_MAX_TOKENS", DEFAULT_MAX_TOKENS, int),
        temperature=_read_number("COMPASS_TEMPERATURE", DEFAULT_TEMPERATURE, float),
    )


def warn_if_missing_api_key(settings: Settings) -> bool:
    if settings.api_key:
        return True
    logger.warning("ANTHROPIC_API_KEY is not set. Model calls will fail until you configure it.")
    return False
