"""Terminal front-end: draws a :class:`PageView` as text and reads commands."""
from __future__ import annotations

import base64
import shlex
import sys
from typing import Callable, Dict, List, Optional, TextIO

from .app import App
from .view import MemoCard, PageView

HELP = """\
commands:
  add                     new memo
  edit ID                 edit a memo
  del ID                  delete a memo
  copy ID                 copy a memo body
  unlock ID               reveal a locked memo until the next refresh
  sum ID                  summarize a memo
  page N | next | prev    move between pages
  filter CATEGORY | all   filter by category
  login | logout          GitHub session
  help | quit"""


# Typed at a form prompt to empty a field instead of keeping it.
CLEAR = "-"


class ConsoleInteraction:
    def __init__(self, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
        self.stdin = stdin
        self.stdout = stdout

    def readline(self, message: str) -> Optional[str]:
        self.stdout.write(message + " ")
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\n")

    def alert(self, message: str) -> None:
        self.stdout.write(f"! {message}\n")

    def confirm(self, message: str) -> bool:
        answer = self.readline(f"{message} [y/N]")
        return (answer or "").strip().lower() in {"y", "yes"}

    def prompt(self, message: str) -> Optional[str]:
        answer = self.readline(message)
        # An empty answer counts as cancel, like dismissing a browser prompt.
        if answer is None or not answer.strip():
            return None
        return answer.strip()

    def toast(self, message: str) -> None:
        self.stdout.write(f"* {message}\n")


class Osc52Clipboard:
    """Copy through the terminal's OSC 52 escape sequence."""

    def __init__(self, stream: TextIO = sys.stdout) -> None:
        self.stream = stream

    def write(self, text: str) -> None:
        if not self.stream.isatty():
            raise RuntimeError("OSC 52 needs a terminal")
        payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
        self.stream.write(f"\x1b]52;c;{payload}\x07")
        self.stream.flush()


class SelectionClipboard:
    """Print the text on its own so the user can select and copy it by hand."""

    def __init__(self, stream: TextIO = sys.stdout) -> None:
        self.stream = stream

    def write(self, text: str) -> None:
        self.stream.write("----- select to copy -----\n")
        self.stream.write(text + "\n")
        self.stream.write("--------------------------\n")


# -----------------------------
# Drawing
# -----------------------------
def _card_lines(card: MemoCard) -> List[str]:
    title = card.title + (" [locked]" if card.protected else "")
    lines = [f"#{card.id}  {title}  ({card.category})"]
    if card.url:
        lines.append(f"    {card.url}")
    if card.locked:
        lines.append("    [locked memo]")
    else:
        lines.extend(f"    {line}" for line in (card.body or "").splitlines())
    lines.append(f"    {card.created_at}")
    return lines


def draw(view: PageView) -> str:
    out: List[str] = []
    labels = []
    for button in view.categories:
        label = button.label or "all"
        labels.append(f"[{label}]" if button.active else label)
    out.append("categories: " + " ".join(labels))
    out.append("")
    if view.empty:
        out.append("No memos yet. Add one!")
    for card in view.memos:
        out.extend(_card_lines(card))
        out.append("")
    p = view.pagination
    if p.visible:
        pages = " ".join(f"[{n}]" if n == p.current else str(n) for n in p.pages)
        nav = [("prev" if p.has_previous else ""), pages, ("next" if p.has_next else "")]
        out.append("pages: " + " ".join(x for x in nav if x))
    return "\n".join(out)


# -----------------------------
# Command loop
# -----------------------------
class Shell:
    def __init__(self, app: App, io: ConsoleInteraction) -> None:
        self.app = app
        self.io = io
        self.commands: Dict[str, Callable[[List[str]], Optional[PageView]]] = {
            "add": self._add,
            "edit": self._edit,
            "del": self._delete,
            "copy": self._copy,
            "unlock": self._unlock,
            "sum": self._summarize,
            "page": lambda a: self.app.go_to_page(int(a[0])),
            "next": lambda a: self.app.next_page(),
            "prev": lambda a: self.app.previous_page(),
            "filter": lambda a: self.app.filter_by_category(" ".join(a) or None),
            "all": lambda a: self.app.filter_by_category(None),
            "login": self._login,
            "logout": self._logout,
        }

    @property
    def ctl(self):
        return self.app.controller

    def _fill_form(self) -> bool:
        ctl = self.ctl
        form = ctl.form
        title = self.io.readline(f"title [{form.title}] (g = generate):")
        if title is None:
            return False
        url = self.io.readline(f"url [{form.url}] (- clears):")
        body = self.io.readline("body (blank keeps current):")
        if body is None or url is None:
            return False
        body = body or form.body
        if title.strip() == "g":
            title = ctl.generate_title(body, form.title)
        title = title or form.title
        url = "" if url.strip() == CLEAR else (url or form.url)
        lock = self.io.readline(f"lock with a code? [{'Y' if ctl.password_protected else 'N'}/toggle t]:")
        if (lock or "").strip().lower() == "t":
            ctl.toggle_password()
        return ctl.submit(title, url, body)

    def _add(self, args: List[str]) -> Optional[PageView]:
        self.ctl.open_add()
        if not self._fill_form():
            self.ctl.close()
        return self.ctl.view()

    def _edit(self, args: List[str]) -> Optional[PageView]:
        if not self.ctl.open_edit(int(args[0])):
            self.io.alert("No such memo.")
            return None
        if not self._fill_form():
            self.ctl.close()
        return self.ctl.view()

    def _delete(self, args: List[str]) -> Optional[PageView]:
        self.ctl.delete(int(args[0]))
        return self.ctl.view()

    def _copy(self, args: List[str]) -> Optional[PageView]:
        self.ctl.copy(int(args[0]))
        return None

    def _unlock(self, args: List[str]) -> Optional[PageView]:
        return self.ctl.unlock(int(args[0]))

    def _summarize(self, args: List[str]) -> Optional[PageView]:
        self.ctl.summarize(int(args[0]))
        return None

    def _login(self, args: List[str]) -> Optional[PageView]:
        url = self.app.login_url()
        if not url:
            return None
        self.io.stdout.write(f"Open this URL and paste the code from the redirect:\n  {url}\n")
        code = self.io.prompt("code:")
        if code and self.app.handle_login_callback(code):
            self.io.toast(f"Welcome, {self.app.auth.display_name}")
        return None

    def _logout(self, args: List[str]) -> Optional[PageView]:
        self.app.logout()
        return None

    def run(self) -> None:
        self.io.stdout.write(draw(self.app.render()) + "\n")
        while True:
            line = self.io.readline(">")
            if line is None:
                break
            try:
                parts = shlex.split(line)
            except ValueError as e:
                self.io.alert(str(e))
                continue
            if not parts:
                continue
            name, args = parts[0].lower(), parts[1:]
            if name in {"quit", "exit", "q"}:
                break
            if name == "help":
                self.io.stdout.write(HELP + "\n")
                continue
            handler = self.commands.get(name)
            if handler is None:
                self.io.alert(f"Unknown command {name!r}; try 'help'.")
                continue
            try:
                view = handler(args)
            except (IndexError, ValueError):
                self.io.alert(f"Bad arguments for {name!r}; try 'help'.")
                continue
            if view is not None:
                self.io.stdout.write(draw(view) + "\n")
