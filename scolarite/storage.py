"""
Persistent storage for the user's auth token.

This module manages the file:

    data/auth_token.json    {"auth_token": "..."}

A stored token takes priority over SCOLARITE_API_KEY when requests are sent
(see client.ApiClient).
"""

from __future__ import annotations

import json
from pathlib import Path

from scolarite.config import default_token_path


def load_auth_token(path: str | Path | None = None) -> str | None:
    """
    Load the stored auth token.

    Returns None if the file does not exist, is invalid or holds no token.
    """
    token_path = Path(path) if path is not None else default_token_path()

    if not token_path.exists():
        return None

    try:
        data = json.loads(token_path.read_text(encoding="utf-8"))
        token = data.get("auth_token")
        if not isinstance(token, str):
            return None
        token = token.strip()
        return token or None
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        return None


def save_auth_token(token: str, path: str | Path | None = None) -> None:
    """
    Save the auth token, creating parent directories if needed.
    """
    token_path = Path(path) if path is not None else default_token_path()
    token_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"auth_token": str(token).strip()}
    token_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def clear_auth_token(path: str | Path | None = None) -> bool:
    """
    Remove the stored token. Returns True if a file was removed.
    """
    token_path = Path(path) if path is not None else default_token_path()
    if not token_path.exists():
        return False
    token_path.unlink()
    return True
