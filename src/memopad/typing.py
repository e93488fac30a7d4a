from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_CATEGORY = "Other"

# Labels the classifier is asked to choose from. Any other string it returns
# is still accepted as a category.
CATEGORY_LABELS = (
    "Daily",
    "Work",
    "Idea",
    "Learning",
    "Health",
    "Finance",
    "Hobby",
    "Shopping",
    DEFAULT_CATEGORY,
)


@dataclass
class Memo:
    """A single memo as stored under the ``memos`` key."""

    id: int
    title: str
    body: str
    url: Optional[str] = None
    password: Optional[str] = None   # checksum string, None = unprotected
    category: str = DEFAULT_CATEGORY
    created_at: str = ""             # serialized as "createdAt"

    @property
    def locked(self) -> bool:
        return self.password is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "body": self.body,
            "password": self.password,
            "category": self.category,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Memo":
        return cls(
            id=int(raw["id"]),
            title=str(raw.get("title") or ""),
            body=str(raw.get("body") or ""),
            url=raw.get("url"),
            password=raw.get("password"),
            category=str(raw.get("category") or DEFAULT_CATEGORY),
            created_at=str(raw.get("createdAt") or ""),
        )
