"""Memo pad client: memo store, view model, controller and composition root.

Typical usage
-------------
from memopad import App, FileStorage, MemoApi
app = App.create(FileStorage("data"), interaction, api=MemoApi("http://127.0.0.1:8000"))
"""

from __future__ import annotations

from .api import ApiError, MemoApi
from .app import App
from .auth import AuthManager
from .checksum import checksum
from .controller import MemoController
from .storage import FileStorage, MemoryStorage
from .store import MemoStore
from .typing import CATEGORY_LABELS, DEFAULT_CATEGORY, Memo
from .view import PageView, build_page_view

__all__ = [
    "ApiError",
    "App",
    "AuthManager",
    "CATEGORY_LABELS",
    "DEFAULT_CATEGORY",
    "FileStorage",
    "Memo",
    "MemoApi",
    "MemoController",
    "MemoStore",
    "MemoryStorage",
    "PageView",
    "build_page_view",
    "checksum",
    "__version__",
]

__version__ = "0.1.0"
