from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Set

from .api import ApiError
from .checksum import is_valid_code
from .store import MemoStore
from .view import PageView, build_page_view

logger = logging.getLogger(__name__)


# -----------------------------
# Collaborator surfaces
# -----------------------------
class Interaction(Protocol):
    """Blocking user prompts plus transient notifications."""

    def alert(self, message: str) -> None: ...

    def confirm(self, message: str) -> bool: ...

    def prompt(self, message: str) -> Optional[str]: ...

    def toast(self, message: str) -> None: ...


class Clipboard(Protocol):
    def write(self, text: str) -> None: ...


class TextService(Protocol):
    def generate_title(self, body: str) -> str: ...

    def summarize(self, body: str) -> str: ...


class ModalMode(enum.Enum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"


@dataclass
class MemoForm:
    title: str = ""
    url: str = ""
    body: str = ""


# -----------------------------
# Controller
# -----------------------------
class MemoController:
    """Owns transient view state: the edit modal, the lock toggle, unlocked memos
    and the current page. Persisted state lives in :class:`MemoStore`.
    """

    def __init__(
        self,
        store: MemoStore,
        interaction: Interaction,
        *,
        texts: Optional[TextService] = None,
        clipboard: Optional[Clipboard] = None,
        fallback_clipboard: Optional[Clipboard] = None,
    ) -> None:
        self.store = store
        self.ui = interaction
        self.texts = texts
        self.clipboard = clipboard
        self.fallback_clipboard = fallback_clipboard

        self.current_page = 1
        self.mode = ModalMode.CLOSED
        self.editing_id: Optional[int] = None
        self.password_protected = False
        self.form = MemoForm()
        self._unlocked: Set[int] = set()
        # Bumped on every open/close so late results from a closed modal are dropped.
        self._generation = 0

    # -------------------------
    # Rendering
    # -------------------------
    def render(self) -> PageView:
        """Full re-render; previously unlocked memos lock again."""
        self._unlocked.clear()
        return self.view()

    def view(self) -> PageView:
        return build_page_view(self.store, self.current_page, self._unlocked)

    # -------------------------
    # Modal
    # -------------------------
    @property
    def is_open(self) -> bool:
        return self.mode is not ModalMode.CLOSED

    def open_add(self) -> None:
        self._generation += 1
        self.mode = ModalMode.CREATE
        self.editing_id = None
        self.password_protected = False
        self.form = MemoForm()

    def open_edit(self, memo_id: int) -> bool:
        memo = self.store.get(memo_id)
        if memo is None:
            return False
        self._generation += 1
        self.mode = ModalMode.EDIT
        self.editing_id = memo_id
        self.password_protected = memo.password is not None
        self.form = MemoForm(title=memo.title, url=memo.url or "", body=memo.body)
        return True

    def close(self) -> None:
        self._generation += 1
        self.mode = ModalMode.CLOSED
        self.editing_id = None
        self.password_protected = False
        self.form = MemoForm()

    def toggle_password(self) -> bool:
        self.password_protected = not self.password_protected
        return self.password_protected

    def submit(self, title: str, url: str, body: str) -> bool:
        """Validate and persist the open form. Returns True when the modal closed."""
        if not self.is_open:
            return False
        title, url, body = title.strip(), (url or "").strip(), body.strip()
        self.form = MemoForm(title=title, url=url, body=body)
        if not title or not body:
            self.ui.alert("Please enter both a title and a body.")
            return False

        password: Optional[str] = None
        if self.password_protected:
            password = self.ui.prompt("Enter a 4-digit code:")
            if password is None:
                return False
            if not is_valid_code(password):
                self.ui.alert("The code must be exactly 4 digits.")
                return False

        generation = self._generation
        category = self.store.classify(title, body)
        if generation != self._generation:
            logger.info("Modal closed during classification; dropping the result.")
            return False

        if self.mode is ModalMode.EDIT and self.editing_id is not None:
            self.store.update(self.editing_id, title, url, body, password)
            self.store.set_category(self.editing_id, category)
            self.ui.toast("Memo updated.")
        else:
            memo = self.store.create(title, url, body, password)
            self.store.set_category(memo.id, category)
            self.ui.toast("Memo saved.")

        self.close()
        self.current_page = 1
        self.render()
        return True

    # -------------------------
    # Memo actions
    # -------------------------
    def delete(self, memo_id: int) -> bool:
        if not self.ui.confirm("Delete this memo?"):
            return False
        self.store.delete(memo_id)
        self.ui.toast("Memo deleted.")
        self.render()
        return True

    def unlock(self, memo_id: int) -> Optional[PageView]:
        """Reveal a protected memo until the next full render.

        Returns the refreshed view on a matching code, otherwise ``None``.
        """
        memo = self.store.get(memo_id)
        if memo is None or memo.password is None:
            return None
        code = self.ui.prompt("Enter the code:")
        if code is None:
            return None
        if not self.store.verify_password(memo.password, code):
            self.ui.alert("Wrong password.")
            return None
        self._unlocked.add(memo_id)
        return self.view()

    def is_unlocked(self, memo_id: int) -> bool:
        return memo_id in self._unlocked

    def copy(self, memo_id: int) -> bool:
        memo = self.store.get(memo_id)
        if memo is None:
            return False
        if memo.password is not None and memo_id not in self._unlocked:
            return False
        try:
            if self.clipboard is None:
                raise RuntimeError("no clipboard available")
            self.clipboard.write(memo.body)
        except Exception as e:
            logger.debug("Clipboard write failed, using fallback: %s", e)
            if self.fallback_clipboard is None:
                self.ui.alert("Copy failed.")
                return False
            self.fallback_clipboard.write(memo.body)
        self.ui.toast("Body copied.")
        return True

    # -------------------------
    # AI helpers
    # -------------------------
    def generate_title(self, body: str, current_title: str = "") -> str:
        """Return a generated title, or ``current_title`` when generation fails."""
        body = (body or "").strip()
        if not body:
            self.ui.alert("Please enter a body first.")
            return current_title
        if self.texts is None:
            self.ui.alert("Title generation is not available.")
            return current_title
        try:
            title = self.texts.generate_title(body)
        except ApiError as e:
            logger.exception("Title generation failed: %s", e)
            self.ui.alert(f"Title generation failed: {e}")
            return current_title
        if self.is_open:
            self.form.title = title
        self.ui.toast("Title generated.")
        return title

    def summarize(self, memo_id: int) -> Optional[str]:
        memo = self.store.get(memo_id)
        if memo is None:
            return None
        if memo.password is not None and memo_id not in self._unlocked:
            self.ui.alert("Unlock this memo first.")
            return None
        if self.texts is None:
            self.ui.alert("Summaries are not available.")
            return None
        try:
            summary = self.texts.summarize(memo.body)
        except ApiError as e:
            logger.exception("Summary failed: %s", e)
            self.ui.alert(f"Summary failed: {e}")
            return None
        self.ui.alert(summary)
        return summary
