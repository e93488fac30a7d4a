"""HTTP client for the memo proxy server (AI text helpers and GitHub login)."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

UA = "MemoPad/0.1"
TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=10.0, pool=5.0)
SESSION_HEADER = "x-session-id"


class ApiError(RuntimeError):
    """A proxy call failed: transport error, non-2xx status or unexpected payload."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class MemoApi:
    """Thin wrapper around the proxy endpoints.

    Every method either returns the documented field or raises :class:`ApiError`.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        timeout: httpx.Timeout | float = TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"User-Agent": UA, "Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "MemoApi":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -------------------------
    # AI text helpers
    # -------------------------
    def generate_title(self, body: str) -> str:
        return self._field("POST", "/api/generateTitle", "title", json={"body": body})

    def summarize(self, body: str) -> str:
        return self._field("POST", "/api/summarize", "summary", json={"body": body})

    def classify_category(self, text: str) -> str:
        return self._field("POST", "/api/classifyCategory", "category", json={"text": text})

    # -------------------------
    # Auth
    # -------------------------
    def authorize_url(self, redirect: Optional[str] = None) -> str:
        params = {"redirect": redirect} if redirect else None
        return self._field("GET", "/api/auth/github", "authUrl", params=params)

    def exchange_code(self, code: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/github/callback", json={"code": code})
        session_id = data.get("sessionId") or data.get("sessionToken")
        if not session_id or not isinstance(data.get("user"), dict):
            raise ApiError("login response is missing the session or user")
        return {"sessionId": session_id, "user": data["user"]}

    def current_user(self, session_id: str) -> Dict[str, Any]:
        return self._field("GET", "/api/auth/user", "user", headers={SESSION_HEADER: session_id})

    def logout(self, session_id: str) -> None:
        self._request("POST", "/api/auth/logout", headers={SESSION_HEADER: session_id})

    # -------------------------
    # Internals
    # -------------------------
    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            r = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(f"{method} {path} failed: {e}") from e
        if r.status_code >= 400:
            raise ApiError(f"{method} {path} returned {r.status_code}: {_error_detail(r)}", status=r.status_code)
        try:
            data = r.json()
        except ValueError as e:
            raise ApiError(f"{method} {path} returned invalid JSON", status=r.status_code) from e
        if not isinstance(data, dict):
            raise ApiError(f"{method} {path} returned an unexpected payload", status=r.status_code)
        return data

    def _field(self, method: str, path: str, field: str, **kwargs: Any) -> Any:
        data = self._request(method, path, **kwargs)
        if field not in data:
            raise ApiError(f"{method} {path} response has no {field!r}")
        return data[field]


def _error_detail(r: httpx.Response) -> str:
    try:
        data = r.json()
    except ValueError:
        return r.text[:200]
    if isinstance(data, dict):
        return str(data.get("detail") or data.get("error") or data)
    return str(data)
