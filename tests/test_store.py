from __future__ import annotations

import json
import math
from datetime import datetime
from pathlib import Path

import pytest

from conftest import StubClassifier, TickingClock, fill
from memopad.storage import FileStorage, MemoryStorage
from memopad.store import MEMOS_KEY, MemoStore, format_created_at


def _reload(storage) -> MemoStore:
    s = MemoStore(storage)
    s.load()
    return s


def test_create_then_reload_roundtrip(store: MemoStore, storage: MemoryStorage):
    memo = store.create("Title", "https://example.com", "Body text")
    other = store.create("No url", "", "plain")

    reloaded = _reload(storage)
    by_id = {m.id: m for m in reloaded.memos}
    assert by_id[memo.id].title == "Title"
    assert by_id[memo.id].url == "https://example.com"
    assert by_id[memo.id].body == "Body text"
    assert by_id[other.id].url == ""
    # newest first survives the reload
    assert [m.id for m in reloaded.memos] == [other.id, memo.id]


def test_create_defaults(store: MemoStore, storage: MemoryStorage):
    memo = store.create("t", None, "b")
    assert memo.category == "Other"
    assert memo.password is None
    assert memo.created_at == "2024. 1. 5. 오후 3:04:05"
    assert memo.id == int(datetime(2024, 1, 5, 15, 4, 5).timestamp() * 1000)

    stored = json.loads(storage.get_item(MEMOS_KEY))
    assert stored[0]["createdAt"] == memo.created_at
    assert set(stored[0]) == {"id", "title", "url", "body", "password", "category", "createdAt"}


def test_format_created_at_morning_and_noon():
    assert format_created_at(datetime(2023, 12, 31, 0, 5, 9)) == "2023. 12. 31. 오전 12:05:09"
    assert format_created_at(datetime(2023, 6, 1, 12, 0, 0)) == "2023. 6. 1. 오후 12:00:00"


def test_update_preserves_password_when_absent(store: MemoStore):
    memo = store.create("t", "", "b", password="4321")
    store.update(memo.id, "t2", "u", "b2")

    updated = store.get(memo.id)
    assert updated.title == "t2" and updated.url == "u" and updated.body == "b2"
    assert store.verify_password(updated.password, "4321")


def test_update_replaces_password_when_given(store: MemoStore):
    memo = store.create("t", "", "b", password="4321")
    store.update(memo.id, "t", "", "b", password="1111")
    assert store.verify_password(store.get(memo.id).password, "1111")
    assert not store.verify_password(store.get(memo.id).password, "4321")


def test_update_keeps_position(store: MemoStore):
    ids = fill(store, 3)
    store.update(ids[0], "edited", "", "b")
    assert [m.id for m in store.memos] == list(reversed(ids))
    assert store.memos[-1].title == "edited"


def test_update_missing_id_is_silent_noop(store: MemoStore, storage: MemoryStorage):
    fill(store, 2)
    before = storage.get_item(MEMOS_KEY)
    assert store.update(123, "x", "", "y") is None
    assert storage.get_item(MEMOS_KEY) == before


def test_delete_is_idempotent(store: MemoStore, storage: MemoryStorage):
    ids = fill(store, 3)
    store.delete(ids[1])
    once = storage.get_item(MEMOS_KEY)
    store.delete(ids[1])
    assert storage.get_item(MEMOS_KEY) == once
    assert [m.id for m in store.memos] == [ids[2], ids[0]]


@pytest.mark.parametrize("n", [0, 1, 9, 10, 11, 25])
def test_pagination_covers_everything_exactly_once(store: MemoStore, n: int):
    ids = fill(store, n)
    assert store.total_pages() == math.ceil(n / 10)

    seen = []
    for p in range(1, store.total_pages() + 1):
        seen.extend(m.id for m in store.page(p))
    assert seen == list(reversed(ids))


def test_fifteen_memos_make_two_pages(store: MemoStore):
    ids = fill(store, 15)
    assert store.total_pages() == 2
    assert [m.id for m in store.page(2)] == list(reversed(ids[:5]))


def test_out_of_range_pages_are_empty(store: MemoStore):
    fill(store, 3)
    assert store.page(2) == []
    assert store.page(0) == []
    assert store.page(-1) == []


def test_custom_page_size(storage: MemoryStorage):
    s = MemoStore(storage, page_size=3, clock=TickingClock())
    fill(s, 7)
    assert s.total_pages() == 3
    assert len(s.page(3)) == 1
    with pytest.raises(ValueError):
        MemoStore(storage, page_size=0)


def test_category_filter_isolates_and_restores(store: MemoStore):
    ids = fill(store, 12)
    for memo_id in ids[::3]:
        store.set_category(memo_id, "Work")

    store.set_category_filter("Work")
    assert store.total_pages() == 1
    assert all(m.category == "Work" for m in store.page(1))
    assert len(store.page(1)) == 4

    store.set_category_filter(None)
    assert len(store.filtered()) == 12
    assert store.total_pages() == 2


def test_categories_are_sorted_and_unfiltered(store: MemoStore):
    ids = fill(store, 3)
    store.set_category(ids[0], "Work")
    store.set_category(ids[1], "Daily")
    store.set_category_filter("Work")
    assert store.categories() == ["Daily", "Other", "Work"]


def test_set_category_on_missing_memo_does_nothing(store: MemoStore):
    assert store.set_category(999, "Work") is None
    assert store.memos == ()


def test_classify_uses_title_and_body(store: MemoStore, classifier: StubClassifier):
    assert store.classify("Milk", "Buy milk") == "Shopping"
    assert classifier.calls == ["Milk Buy milk"]


@pytest.mark.parametrize(
    "classifier",
    [
        StubClassifier(error=RuntimeError("offline")),
        StubClassifier(answer=""),
        StubClassifier(answer="   "),
    ],
)
def test_classify_falls_back_to_other(storage: MemoryStorage, classifier: StubClassifier):
    s = MemoStore(storage, classifier=classifier)
    assert s.classify("t", "b") == "Other"


def test_classify_without_classifier_is_other(storage: MemoryStorage):
    assert MemoStore(storage).classify("t", "b") == "Other"


def test_unknown_category_labels_are_kept(storage: MemoryStorage):
    s = MemoStore(storage, classifier=StubClassifier(answer="Gardening"), clock=TickingClock())
    memo = s.create("t", "", "b")
    s.set_category(memo.id, s.classify("t", "b"))
    assert s.get(memo.id).category == "Gardening"
    assert s.categories() == ["Gardening"]


def test_milk_scenario(store: MemoStore):
    fill(store, 2)
    memo = store.create("Milk", "", "Buy milk", None)
    store.set_category(memo.id, store.classify("Milk", "Buy milk"))

    first = store.page(1)[0]
    assert first.id == memo.id
    assert first.category == "Shopping"
    assert first.password is None


def test_password_scenario(store: MemoStore):
    memo = store.create("secret", "", "hidden", password="1234")
    assert memo.password == "1509442"
    assert store.verify_password(memo.password, "1234")
    assert not store.verify_password(memo.password, "0000")


@pytest.mark.parametrize("raw", ["not json", "{\"a\": 1}", "[{\"title\": \"no id\"}]", "[1, 2]"])
def test_corrupt_storage_loads_empty(raw: str):
    s = MemoStore(MemoryStorage({MEMOS_KEY: raw}))
    assert s.load() == []


def test_undecodable_memo_file_loads_empty(tmp_data_dir: Path):
    (tmp_data_dir / "memos.json").write_bytes(b"\xff\xfe\x80garbage")
    s = MemoStore(FileStorage(tmp_data_dir), clock=TickingClock())
    assert s.load() == []

    # The next write replaces the unreadable file.
    s.create("fresh", "", "start over")
    assert [m.title for m in _reload(FileStorage(tmp_data_dir)).memos] == ["fresh"]


def test_missing_optional_fields_get_defaults():
    raw = json.dumps([{"id": 1, "title": "t", "body": "b"}])
    s = MemoStore(MemoryStorage({MEMOS_KEY: raw}))
    (memo,) = s.load()
    assert memo.category == "Other"
    assert memo.password is None
    assert memo.url is None


def test_file_storage_roundtrip(tmp_data_dir: Path):
    s = MemoStore(FileStorage(tmp_data_dir), clock=TickingClock())
    memo = s.create("제목", "", "본문")
    assert (tmp_data_dir / "memos.json").exists()

    reloaded = _reload(FileStorage(tmp_data_dir))
    assert reloaded.memos[0].id == memo.id
    assert reloaded.memos[0].title == "제목"
