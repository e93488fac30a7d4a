from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

from .api import ApiError
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

SESSION_KEY = "sessionId"


class AuthApi(Protocol):
    def authorize_url(self, redirect: Optional[str] = None) -> str: ...

    def exchange_code(self, code: str) -> Dict[str, Any]: ...

    def current_user(self, session_id: str) -> Dict[str, Any]: ...

    def logout(self, session_id: str) -> None: ...


class AuthManager:
    """Client side of the GitHub login: remembers the session token locally."""

    def __init__(self, storage: KeyValueStorage, api: AuthApi) -> None:
        self.storage = storage
        self.api = api
        self.user: Optional[Dict[str, Any]] = None
        self.session_id: Optional[str] = storage.get_item(SESSION_KEY)

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None

    @property
    def display_name(self) -> str:
        if not self.user:
            return ""
        return str(self.user.get("name") or self.user.get("login") or "")

    def load_user(self) -> Optional[Dict[str, Any]]:
        """Resolve the stored session. A rejected session is forgotten."""
        if not self.session_id:
            return None
        try:
            self.user = self.api.current_user(self.session_id)
        except ApiError as e:
            if e.status is not None:
                logger.info("Stored session rejected (%s); clearing it.", e.status)
                self._forget()
            else:
                logger.error("Failed to load user: %s", e)
        return self.user

    def authorize_url(self, redirect: Optional[str] = None) -> str:
        return self.api.authorize_url(redirect)

    def login(self, code: str) -> bool:
        try:
            data = self.api.exchange_code(code)
        except ApiError as e:
            logger.error("GitHub login failed: %s", e)
            return False
        self.session_id = data["sessionId"]
        self.user = data["user"]
        self.storage.set_item(SESSION_KEY, self.session_id)
        return True

    def logout(self) -> None:
        if self.session_id:
            try:
                self.api.logout(self.session_id)
            except ApiError as e:
                logger.error("Logout request failed: %s", e)
        self._forget()

    def _forget(self) -> None:
        self.user = None
        self.session_id = None
        self.storage.remove_item(SESSION_KEY)
