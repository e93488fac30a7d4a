from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Tuple

from .checksum import checksum, verify
from .storage import KeyValueStorage
from .typing import DEFAULT_CATEGORY, Memo

logger = logging.getLogger(__name__)

MEMOS_KEY = "memos"
PAGE_SIZE = 10


class Classifier(Protocol):
    def classify_category(self, text: str) -> str: ...


def format_created_at(when: datetime) -> str:
    """Render a timestamp the way the ko-KR locale does: ``2024. 1. 5. 오후 3:04:05``."""
    meridiem = "오전" if when.hour < 12 else "오후"
    hour = when.hour % 12 or 12
    return f"{when.year}. {when.month}. {when.day}. {meridiem} {hour}:{when.minute:02d}:{when.second:02d}"


# -----------------------------
# Memo Store
# -----------------------------
class MemoStore:
    """
    Ordered memo collection mirrored into client-local storage.

    - Newest memos first; ``create`` inserts at the front, ``update`` keeps position
    - Every mutation rewrites the whole collection under the ``memos`` key
    - Queries (``page``, ``total_pages``) see the category-filtered sequence;
      ``categories`` always sees everything

    Lookups are linear scans; collections are small.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        classifier: Optional[Classifier] = None,
        page_size: int = PAGE_SIZE,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.storage = storage
        self.classifier = classifier
        self.page_size = page_size
        self._clock = clock
        self._memos: List[Memo] = []
        self._selected_category: Optional[str] = None

    # ----------------- persistence -----------------
    def load(self) -> List[Memo]:
        """Restore the collection; absent or corrupt storage yields an empty one."""
        self._memos = self._read()
        return list(self._memos)

    def _read(self) -> List[Memo]:
        raw = self.storage.get_item(MEMOS_KEY)
        if not raw:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError(f"expected a list, got {type(items).__name__}")
            return [Memo.from_dict(item) for item in items]
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Stored memos are unreadable, starting empty: %s", e)
            return []

    def save(self) -> None:
        payload = json.dumps([m.to_dict() for m in self._memos], ensure_ascii=False)
        self.storage.set_item(MEMOS_KEY, payload)

    # ----------------- mutations -----------------
    def create(self, title: str, url: Optional[str], body: str, password: Optional[str] = None) -> Memo:
        """Insert a new memo at the front. Callers validate title/body beforehand."""
        now = self._clock()
        memo = Memo(
            id=int(now.timestamp() * 1000),
            title=title,
            url=url,
            body=body,
            password=checksum(password) if password else None,
            category=DEFAULT_CATEGORY,
            created_at=format_created_at(now),
        )
        self._memos.insert(0, memo)
        self.save()
        return memo

    def update(
        self,
        memo_id: int,
        title: str,
        url: Optional[str],
        body: str,
        password: Optional[str] = None,
    ) -> Optional[Memo]:
        """Edit a memo in place; silently ignores unknown ids.

        An absent ``password`` keeps the existing lock.
        """
        memo = self.get(memo_id)
        if memo is None:
            return None
        memo.title = title
        memo.url = url
        memo.body = body
        if password:
            memo.password = checksum(password)
        self.save()
        return memo

    def set_category(self, memo_id: int, category: str) -> Optional[Memo]:
        memo = self.get(memo_id)
        if memo is None:
            return None
        memo.category = category or DEFAULT_CATEGORY
        self.save()
        return memo

    def delete(self, memo_id: int) -> None:
        self._memos = [m for m in self._memos if m.id != memo_id]
        self.save()

    # ----------------- queries -----------------
    @property
    def memos(self) -> Tuple[Memo, ...]:
        return tuple(self._memos)

    @property
    def selected_category(self) -> Optional[str]:
        return self._selected_category

    def get(self, memo_id: int) -> Optional[Memo]:
        for memo in self._memos:
            if memo.id == memo_id:
                return memo
        return None

    def set_category_filter(self, category: Optional[str]) -> None:
        self._selected_category = category

    def filtered(self) -> List[Memo]:
        if self._selected_category is None:
            return list(self._memos)
        return [m for m in self._memos if m.category == self._selected_category]

    def page(self, page_number: int) -> List[Memo]:
        """1-indexed page of the filtered sequence; out of range gives ``[]``."""
        if page_number < 1:
            return []
        start = (page_number - 1) * self.page_size
        return self.filtered()[start:start + self.page_size]

    def total_pages(self) -> int:
        return math.ceil(len(self.filtered()) / self.page_size)

    def categories(self) -> List[str]:
        return sorted({m.category or DEFAULT_CATEGORY for m in self._memos})

    # ----------------- collaborators -----------------
    def classify(self, title: str, body: str) -> str:
        """Ask the classifier for a category; any failure yields ``"Other"``."""
        if self.classifier is None:
            return DEFAULT_CATEGORY
        try:
            category = self.classifier.classify_category(f"{title} {body}")
        except Exception as e:
            logger.warning("Category classification failed: %s", e)
            return DEFAULT_CATEGORY
        category = (category or "").strip() if isinstance(category, str) else ""
        return category or DEFAULT_CATEGORY

    @staticmethod
    def verify_password(stored_checksum: Optional[str], candidate: str) -> bool:
        return verify(stored_checksum, candidate)
