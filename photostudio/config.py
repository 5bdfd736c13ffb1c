from __future__ import annotations

import logging
import os
from typing import Callable, List, Optional, Tuple

from dotenv import load_dotenv

# Load .env if present to populate environment variables
load_dotenv()

logger = logging.getLogger(__name__)


CREDENTIAL_HELP = (
    "No API key was found. For local development, add VITE_API_KEY=<your key> to a .env file "
    "in the project root. For a hosted deployment, set the API_KEY environment variable."
)


def _env(name: str) -> Callable[[], Optional[str]]:
    def lookup() -> Optional[str]:
        return os.getenv(name)

    return lookup


# Evaluated in order; the first non-empty value wins.
CREDENTIAL_STRATEGIES: List[Tuple[str, Callable[[], Optional[str]]]] = [
    ("vite", _env("VITE_API_KEY")),
    ("bundler", _env("API_KEY")),
    ("process", _env("GEMINI_API_KEY")),
]


def resolve_credential(strategies: Optional[List[Tuple[str, Callable[[], Optional[str]]]]] = None) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(source_name, key)`` for the first strategy yielding a key, or ``(None, None)``."""
    for name, lookup in strategies if strategies is not None else CREDENTIAL_STRATEGIES:
        value = lookup()
        if value and value.strip():
            return name, value.strip()
    return None, None


def get_credential() -> Optional[str]:
    return resolve_credential()[1]


def text_model_name() -> str:
    return os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash")


def image_edit_model_name() -> str:
    return os.getenv("GEMINI_IMAGE_EDIT_MODEL", "gemini-2.5-flash-image")


DEFAULT_TIMEOUT = 120.0


def request_timeout() -> float:
    raw = os.getenv("GEMINI_TIMEOUT", "")
    try:
        value = float(raw) if raw.strip() else DEFAULT_TIMEOUT
    except ValueError:
        logger.warning("Ignoring malformed GEMINI_TIMEOUT=%r, using %.0fs", raw, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    return value if value > 0 else DEFAULT_TIMEOUT


def log_level() -> str:
    return os.getenv("PHOTOSTUDIO_LOG_LEVEL", "INFO").upper()
