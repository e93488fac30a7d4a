from __future__ import annotations

import io

from memopad.app import App
from memopad.console import ConsoleInteraction, Osc52Clipboard, SelectionClipboard, Shell, draw
from memopad.controller import MemoController
from memopad.store import MemoStore
from memopad.view import build_page_view


def _shell(store: MemoStore, script: str):
    out = io.StringIO()
    console = ConsoleInteraction(stdin=io.StringIO(script), stdout=out)
    controller = MemoController(
        store,
        console,
        clipboard=Osc52Clipboard(out),
        fallback_clipboard=SelectionClipboard(out),
    )
    return Shell(App(store, controller), console), out


def test_draw_empty_page(store: MemoStore):
    text = draw(build_page_view(store, 1))
    assert "categories: [all]" in text
    assert "No memos yet. Add one!" in text
    assert "pages:" not in text


def test_add_command_saves_and_redraws(store: MemoStore):
    shell, out = _shell(store, "add\nGroceries\n\nmilk and eggs\n\nquit\n")
    shell.run()
    assert [m.title for m in store.memos] == ["Groceries"]
    assert store.memos[0].category == "Shopping"
    text = out.getvalue()
    assert "* Memo saved." in text
    assert "Groceries  (Shopping)" in text
    assert "categories: [all] Shopping" in text


def test_add_with_bad_code_keeps_nothing(store: MemoStore):
    shell, out = _shell(store, "add\nSecret\n\nhidden\nt\n12a4\n")
    shell.run()
    assert store.memos == ()
    assert "! The code must be exactly 4 digits." in out.getvalue()


def test_locked_memo_unlock_and_copy_fallback(store: MemoStore):
    memo = store.create("Secret", "", "hidden text", "1234")
    shell, out = _shell(store, f"copy {memo.id}\nunlock {memo.id}\n1234\ncopy {memo.id}\n")
    shell.run()
    text = out.getvalue()
    first_draw, after_unlock = text.split("Enter the code:", 1)
    assert "[locked memo]" in first_draw
    assert "hidden text" not in first_draw
    # StringIO is no terminal, so the OSC 52 path fails over to printing
    assert "----- select to copy -----\nhidden text\n" in after_unlock
    assert "* Body copied." in after_unlock
    assert text.count("Body copied.") == 1


def test_filter_and_paging_commands(store: MemoStore):
    for i in range(12):
        store.create(f"m{i}", "", f"body {i}")
    shell, out = _shell(store, "next\nnext\nprev\nfilter Other\n")
    shell.run()
    text = out.getvalue()
    assert "pages: prev 1 [2]" in text
    assert "pages: [1] 2 next" in text
    assert store.selected_category == "Other"


def test_unknown_and_malformed_commands(store: MemoStore):
    shell, out = _shell(store, "bogus\nedit\nedit abc\nedit 99\nhelp\n")
    shell.run()
    text = out.getvalue()
    assert "! Unknown command 'bogus'; try 'help'." in text
    assert text.count("! Bad arguments for 'edit'") == 2
    assert "! No such memo." in text
    assert "commands:" in text


def test_delete_requires_confirmation(store: MemoStore):
    memo = store.create("keep", "", "x")
    shell, out = _shell(store, f"del {memo.id}\nn\ndel {memo.id}\ny\n")
    shell.run()
    assert store.memos == ()
    assert out.getvalue().count("* Memo deleted.") == 1


def test_login_without_auth_is_a_noop(store: MemoStore):
    shell, out = _shell(store, "login\nlogout\n")
    shell.run()
    assert "Open this URL" not in out.getvalue()


def test_edit_keeps_blank_fields_and_clears_url_with_dash(store: MemoStore):
    memo = store.create("Links", "https://example.test", "reading list")
    shell, _ = _shell(store, f"edit {memo.id}\n\n\n\n\n")
    shell.run()
    assert store.get(memo.id).url == "https://example.test"

    shell, _ = _shell(store, f"edit {memo.id}\nRenamed\n-\n\n\n")
    shell.run()
    updated = store.get(memo.id)
    assert updated.title == "Renamed"
    assert updated.body == "reading list"
    assert updated.url == ""
