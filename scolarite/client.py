"""
The shared HTTP client.

One ApiClient is created at startup and handed to every accessor.
It carries the base URL, the timeout and a token provider that is asked
for the bearer token on every request, so a token saved by `login`
is picked up without rebuilding the client.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import requests

from scolarite.config import Settings
from scolarite.errors import ApiFailure, decode_body
from scolarite.storage import load_auth_token


logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


def stored_token_provider(settings: Settings) -> TokenProvider:
    """
    Stored auth token first, SCOLARITE_API_KEY otherwise.
    """

    def provide() -> Optional[str]:
        return load_auth_token(settings.token_file) or settings.api_key

    return provide


class ApiClient:
    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "ApiClient":
        return cls(
            settings.api_url,
            token_provider=stored_token_provider(settings),
            timeout=settings.timeout,
            session=session,
        )

    def _headers(self) -> dict[str, str]:
        token = self.token_provider() if self.token_provider is not None else None
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, json: Any = None) -> Any:
        """
        Send one request and return the decoded JSON payload (None when empty).

        Raises ApiFailure for transport errors and non-2xx responses.
        """
        url = self.url_for(path)
        try:
            resp = self.session.request(method, url, json=json, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.debug("%s %s failed: %s", method, path, exc)
            raise ApiFailure(None, method=method, path=path, reason=str(exc)) from exc

        logger.debug("%s %s -> %s", method, path, resp.status_code)

        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise ApiFailure(resp.status_code, decode_body(resp), method=method, path=path, reason=str(exc)) from exc

        return decode_body(resp)

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self) -> None:
        self.session.close()
