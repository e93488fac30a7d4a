"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

import pytest

# Ensure src/ is on the import path (for local imports without installing as package)
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from memopad.storage import MemoryStorage  # noqa: E402
from memopad.store import MemoStore  # noqa: E402


class TickingClock:
    """Returns a later time on every call so memo ids never collide."""

    def __init__(self, start: datetime = datetime(2024, 1, 5, 15, 4, 5)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class StubClassifier:
    def __init__(self, answer: str = "Shopping", error: Optional[Exception] = None) -> None:
        self.answer = answer
        self.error = error
        self.calls: List[str] = []

    def classify_category(self, text: str) -> str:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.answer


class ScriptedInteraction:
    """Answers prompts/confirms from queues and records everything shown."""

    def __init__(self, prompts: Optional[List[Optional[str]]] = None, confirms: Optional[List[bool]] = None) -> None:
        self.prompts = list(prompts or [])
        self.confirms = list(confirms or [])
        self.alerts: List[str] = []
        self.toasts: List[str] = []
        self.asked: List[str] = []

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def confirm(self, message: str) -> bool:
        self.asked.append(message)
        return self.confirms.pop(0) if self.confirms else False

    def prompt(self, message: str) -> Optional[str]:
        self.asked.append(message)
        return self.prompts.pop(0) if self.prompts else None

    def toast(self, message: str) -> None:
        self.toasts.append(message)


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the root directory of the project."""
    return Path(__file__).resolve().parent.parent


@pytest.fixture(scope="function")
def tmp_data_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for file-backed storage during tests."""
    d = tmp_path / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


@pytest.fixture(scope="function")
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure tests run with a clean environment (no leftover vars)."""
    for var in ["MEMO_SERVER_CONFIG", "GEMINI_API_KEY", "GH_CLIENT_ID", "GH_CLIENT_SECRET"]:
        monkeypatch.delenv(var, raising=False)
    for var in list(os.environ):
        if var.startswith("MEMO_SERVER__"):
            monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def classifier() -> StubClassifier:
    return StubClassifier()


@pytest.fixture
def store(storage: MemoryStorage, classifier: StubClassifier) -> MemoStore:
    s = MemoStore(storage, classifier=classifier, clock=TickingClock())
    s.load()
    return s


def fill(store: MemoStore, n: int, **kwargs) -> List[int]:
    """Create ``n`` memos titled m0..m{n-1}; returns their ids oldest first."""
    return [store.create(f"m{i}", "", f"body {i}", **kwargs).id for i in range(n)]
