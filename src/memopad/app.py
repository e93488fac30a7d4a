"""Composition root: builds the store, controller and auth manager and wires them."""
from __future__ import annotations

import logging
from typing import Optional

from .api import ApiError, MemoApi
from .auth import AuthManager
from .controller import Clipboard, Interaction, MemoController
from .storage import KeyValueStorage
from .store import PAGE_SIZE, MemoStore
from .view import PageView

logger = logging.getLogger(__name__)


class App:
    def __init__(
        self,
        store: MemoStore,
        controller: MemoController,
        auth: Optional[AuthManager] = None,
    ) -> None:
        self.store = store
        self.controller = controller
        self.auth = auth

    @classmethod
    def create(
        cls,
        storage: KeyValueStorage,
        interaction: Interaction,
        *,
        api: Optional[MemoApi] = None,
        clipboard: Optional[Clipboard] = None,
        fallback_clipboard: Optional[Clipboard] = None,
        page_size: int = PAGE_SIZE,
        with_auth: bool = True,
    ) -> "App":
        store = MemoStore(storage, classifier=api, page_size=page_size)
        store.load()
        controller = MemoController(
            store,
            interaction,
            texts=api,
            clipboard=clipboard,
            fallback_clipboard=fallback_clipboard,
        )
        auth = AuthManager(storage, api) if (api is not None and with_auth) else None
        if auth is not None:
            auth.load_user()
        return cls(store, controller, auth)

    # -------------------------
    # Navigation
    # -------------------------
    @property
    def current_page(self) -> int:
        return self.controller.current_page

    def render(self) -> PageView:
        return self.controller.render()

    def filter_by_category(self, category: Optional[str]) -> PageView:
        self.store.set_category_filter(category)
        self.controller.current_page = 1
        return self.controller.render()

    def go_to_page(self, page: int) -> PageView:
        self.controller.current_page = page
        return self.controller.render()

    def next_page(self) -> PageView:
        if self.controller.current_page < self.store.total_pages():
            return self.go_to_page(self.controller.current_page + 1)
        return self.controller.view()

    def previous_page(self) -> PageView:
        if self.controller.current_page > 1:
            return self.go_to_page(self.controller.current_page - 1)
        return self.controller.view()

    # -------------------------
    # Login
    # -------------------------
    def login_url(self, redirect: Optional[str] = None) -> Optional[str]:
        if self.auth is None:
            return None
        try:
            return self.auth.authorize_url(redirect)
        except ApiError as e:
            logger.error("Failed to get the GitHub authorize URL: %s", e)
            self.controller.ui.alert("GitHub login failed.")
            return None

    def handle_login_callback(self, code: str) -> bool:
        if self.auth is None:
            return False
        if self.auth.login(code):
            self.controller.render()
            return True
        self.controller.ui.alert("Login failed.")
        return False

    def logout(self) -> bool:
        if self.auth is None or not self.controller.ui.confirm("Log out?"):
            return False
        self.auth.logout()
        return True
