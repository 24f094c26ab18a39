# tests/test_kv_repo.py
from kv_repo import SqlKeyValueStore, make_engine


def _store(tmp_path):
    db_file = tmp_path / "test.db"
    return SqlKeyValueStore(make_engine(f"sqlite:///{db_file}"))


def test_put_get_keeps_types(tmp_path):
    store = _store(tmp_path)

    store.put("h1_2025-03-01_success", False)
    store.put("habits_list", "[]")

    assert store.get("h1_2025-03-01_success") is False
    assert store.get("habits_list") == "[]"
    assert store.get("missing", "fallback") == "fallback"
    assert store.contains("habits_list")
    assert not store.contains("missing")


def test_put_overwrites(tmp_path):
    store = _store(tmp_path)
    store.put("key", True)
    store.put("key", False)

    assert store.get("key") is False
    assert store.keys() == ["key"]


def test_data_persists_across_engines(tmp_path):
    url = f"sqlite:///{tmp_path / 'test.db'}"
    SqlKeyValueStore.from_url(url).put("active_habit_id", "abc")

    assert SqlKeyValueStore.from_url(url).get("active_habit_id") == "abc"


def test_remove_many_and_clear(tmp_path):
    store = _store(tmp_path)
    for key in ("a", "b", "c"):
        store.put(key, 1)

    store.remove_many(["a", "b", "nope"])
    store.remove("nope")
    assert store.keys() == ["c"]

    store.clear()
    assert store.keys() == []
