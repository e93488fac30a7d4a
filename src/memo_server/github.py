"""GitHub OAuth web flow: authorize URL, code exchange and profile lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)

ACCEPT = "application/vnd.github.v3+json"


class OAuthError(RuntimeError):
    """Base class for login failures."""


class OAuthConfigError(OAuthError):
    """Client id or secret is missing."""


class NoAccessTokenError(OAuthError):
    """GitHub did not hand out an access token for the code."""


class OAuthUpstreamError(OAuthError):
    pass


@dataclass
class GitHubSettings:
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    authorize_url: str = "https://github.com/login/oauth/authorize"
    token_url: str = "https://github.com/login/oauth/access_token"
    api_url: str = "https://api.github.com"
    default_redirect: str = "http://localhost:3000/callback"
    scope: str = "user"
    timeout: float = 15.0


class GitHubOAuth:
    def __init__(self, settings: GitHubSettings, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.settings = settings
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.settings.client_id and self.settings.client_secret)

    def authorize_url(self, redirect: Optional[str] = None) -> str:
        query = urlencode({
            "client_id": self.settings.client_id or "",
            "redirect_uri": redirect or self.settings.default_redirect,
            "scope": self.settings.scope,
        })
        return f"{self.settings.authorize_url}?{query}"

    def exchange_code(self, code: str) -> str:
        """Trade a one-time code for an access token."""
        if not self.configured:
            raise OAuthConfigError("GitHub client id/secret are not configured")
        data = self._json("POST", self.settings.token_url, json={
            "client_id": self.settings.client_id,
            "client_secret": self.settings.client_secret,
            "code": code,
        }, headers={"Accept": "application/json"})
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            logger.info("GitHub token exchange returned no access token: %s", data.get("error") if isinstance(data, dict) else data)
            raise NoAccessTokenError("GitHub did not return an access token")
        return str(token)

    def fetch_user(self, access_token: str) -> Dict[str, Any]:
        data = self._json("GET", f"{self.settings.api_url.rstrip('/')}/user", headers={
            "Authorization": f"Bearer {access_token}",
            "Accept": ACCEPT,
        })
        if not isinstance(data, dict) or "id" not in data:
            raise OAuthUpstreamError("GitHub user response is missing the id")
        return {
            "id": data.get("id"),
            "login": data.get("login"),
            "avatar_url": data.get("avatar_url"),
            "name": data.get("name"),
        }

    def _json(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            with httpx.Client(timeout=self.settings.timeout, transport=self._transport) as client:
                r = client.request(method, url, **kwargs)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPError as e:
            raise OAuthUpstreamError(f"GitHub {method} {url} failed: {e}") from e
        except ValueError as e:
            raise OAuthUpstreamError(f"GitHub {method} {url} returned invalid JSON") from e


def create_from_config(cfg: Dict[str, Any]) -> GitHubOAuth:
    gh = (cfg or {}).get("github", {}) if isinstance(cfg, dict) else {}
    defaults = GitHubSettings()
    settings = GitHubSettings(
        client_id=str(gh["client_id"]) if gh.get("client_id") else None,
        client_secret=str(gh["client_secret"]) if gh.get("client_secret") else None,
        authorize_url=gh.get("authorize_url") or defaults.authorize_url,
        token_url=gh.get("token_url") or defaults.token_url,
        api_url=gh.get("api_url") or defaults.api_url,
        default_redirect=gh.get("default_redirect") or defaults.default_redirect,
        scope=gh.get("scope") or defaults.scope,
        timeout=float(gh.get("timeout") or defaults.timeout),
    )
    return GitHubOAuth(settings)
