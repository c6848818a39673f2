"""
Failure types and the error normalizer.

The HTTP layer raises ApiFailure (status code + decoded body).
Accessors turn every ApiFailure into an AccessError whose message is
picked by error_message(), in this priority order:

    1. the body itself, when the backend answered with plain text
    2. the first message of the first field in body["errors"]
    3. body["message"], then body["title"]
    4. the default message supplied by the caller
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

import requests


class ApiFailure(Exception):
    """
    A failed HTTP call, decoded once at the client boundary.

    status_code is None for transport failures (no response at all).
    """

    def __init__(
        self,
        status_code: Optional[int],
        body: Any = None,
        method: str = "",
        path: str = "",
        reason: str = "",
    ):
        self.status_code = status_code
        self.body = body
        self.method = method
        self.path = path
        self.reason = reason
        super().__init__(self._describe())

    def _describe(self) -> str:
        where = f"{self.method} {self.path}".strip()
        if self.status_code is None:
            return f"{where}: no response ({self.reason or 'transport failure'})"
        return f"{where}: HTTP {self.status_code}"

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class AccessError(Exception):
    """
    Raised by every accessor method. str(exc) is the message to show.
    """

    def __init__(self, message: str, failure: Optional[ApiFailure] = None):
        super().__init__(message)
        self.message = message
        self.failure = failure

    @property
    def status_code(self) -> Optional[int]:
        return self.failure.status_code if self.failure is not None else None


class UpdateState(Enum):
    APPLIED = "applied"
    PARTIAL = "partial"
    NOT_APPLIED = "not_applied"


class ReconciliationError(AccessError):
    """
    A student update that failed somewhere in its unlink / link / PUT sequence.

    Nothing is rolled back: when state is PARTIAL, `completed` lists the
    link steps that reached the backend, e.g. [("unlink", 5)].
    """

    def __init__(
        self,
        message: str,
        failure: Optional[ApiFailure] = None,
        state: UpdateState = UpdateState.NOT_APPLIED,
        completed: Optional[list[tuple[str, int]]] = None,
    ):
        super().__init__(message, failure)
        self.state = state
        self.completed = list(completed or [])


def decode_body(response: Optional[requests.Response]) -> Any:
    """
    Decode a response body: JSON if possible, else text, else None.
    """
    if response is None or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _body_of(failure: Any) -> Any:
    if isinstance(failure, ApiFailure):
        return failure.body
    if isinstance(failure, AccessError) and failure.failure is not None:
        return failure.failure.body
    if isinstance(failure, requests.RequestException):
        return decode_body(failure.response)
    return None


def _first_field_error(errors: Any) -> Optional[str]:
    if not isinstance(errors, dict) or not errors:
        return None
    first = next(iter(errors.values()))
    if isinstance(first, (list, tuple)):
        if not first:
            return None
        first = first[0]
    if first is None or first == "":
        return None
    return str(first)


def error_message(failure: Any, default: str) -> str:
    """
    Extract a human-readable message from any failure value.
    Never raises: unknown shapes fall back to `default`.
    """
    body = _body_of(failure)
    if not body:
        return default

    if isinstance(body, str):
        return body

    if not isinstance(body, dict):
        return default

    field_error = _first_field_error(body.get("errors"))
    if field_error:
        return field_error

    for key in ("message", "title"):
        value = body.get(key)
        if value:
            return str(value)

    return default
