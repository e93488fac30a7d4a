"""Pure render model: store state + page + unlocked ids -> :class:`PageView`.

Nothing here touches a terminal or a browser, so front-ends only have to draw
what they are given.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, List, Optional

from .store import MemoStore
from .typing import DEFAULT_CATEGORY, Memo


@dataclass(frozen=True)
class CategoryButton:
    label: Optional[str]   # None = "show all"
    active: bool


@dataclass(frozen=True)
class MemoCard:
    id: int
    title: str
    category: str
    created_at: str
    locked: bool               # protected and not unlocked in this render
    protected: bool
    copyable: bool
    body: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class Pagination:
    pages: List[int]
    current: int
    has_previous: bool
    has_next: bool

    @property
    def visible(self) -> bool:
        return len(self.pages) > 1


@dataclass(frozen=True)
class PageView:
    categories: List[CategoryButton]
    memos: List[MemoCard]
    pagination: Pagination
    selected_category: Optional[str] = None

    @property
    def empty(self) -> bool:
        return not self.memos


def memo_card(memo: Memo, unlocked: bool = False) -> MemoCard:
    protected = memo.password is not None
    hidden = protected and not unlocked
    return MemoCard(
        id=memo.id,
        title=memo.title,
        category=memo.category or DEFAULT_CATEGORY,
        created_at=memo.created_at,
        locked=hidden,
        protected=protected,
        copyable=not hidden,
        body=None if hidden else memo.body,
        # URLs of protected memos stay hidden even once unlocked.
        url=memo.url if memo.url and not protected else None,
    )


def category_buttons(store: MemoStore) -> List[CategoryButton]:
    selected = store.selected_category
    buttons = [CategoryButton(label=None, active=selected is None)]
    buttons.extend(CategoryButton(label=c, active=c == selected) for c in store.categories())
    return buttons


def pagination(total_pages: int, current: int) -> Pagination:
    return Pagination(
        pages=list(range(1, total_pages + 1)),
        current=current,
        has_previous=current > 1,
        has_next=current < total_pages,
    )


def build_page_view(store: MemoStore, page: int, unlocked: AbstractSet[int] = frozenset()) -> PageView:
    cards = [memo_card(m, unlocked=m.id in unlocked) for m in store.page(page)]
    return PageView(
        categories=category_buttons(store),
        memos=cards,
        pagination=pagination(store.total_pages(), page),
        selected_category=store.selected_category,
    )
