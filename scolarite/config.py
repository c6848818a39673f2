"""
Runtime configuration, read from environment variables.

    SCOLARITE_API_URL     base URL of the backend (default http://localhost:5000)
    SCOLARITE_API_KEY     fallback bearer token when no auth token is stored
    SCOLARITE_TIMEOUT     request timeout in seconds (default 30)
    SCOLARITE_TOKEN_FILE  where the auth token is stored
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_TIMEOUT = 30.0


def default_token_path() -> Path:
    return PACKAGE_DIR / "data" / "auth_token.json"


def _parse_timeout(raw: Optional[str]) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid SCOLARITE_TIMEOUT=%r", raw)
        return DEFAULT_TIMEOUT
    if value <= 0:
        logger.warning("Ignoring non-positive SCOLARITE_TIMEOUT=%r", raw)
        return DEFAULT_TIMEOUT
    return value


@dataclass
class Settings:
    api_url: str = DEFAULT_API_URL
    api_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    token_file: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        api_url = (env.get("SCOLARITE_API_URL") or "").strip() or DEFAULT_API_URL
        api_key = (env.get("SCOLARITE_API_KEY") or "").strip() or None
        token_file = (env.get("SCOLARITE_TOKEN_FILE") or "").strip()

        return cls(
            api_url=api_url.rstrip("/"),
            api_key=api_key,
            timeout=_parse_timeout(env.get("SCOLARITE_TIMEOUT")),
            token_file=Path(token_file) if token_file else default_token_path(),
        )
