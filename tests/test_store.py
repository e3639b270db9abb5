import json

import pytest

from common.store import InMemoryStore, JsonFileStore


def test_in_memory_store_returns_default_for_missing_key():
    store = InMemoryStore()

    assert store.get("missing") is None
    assert store.get("missing", {}) == {}


def test_in_memory_store_isolates_callers_from_stored_state():
    initial = {"opt": {"features": {"category": 1}}}
    store = InMemoryStore(initial)

    initial["opt"]["features"]["category"] = 0
    value = store.get("opt")
    value["features"]["category"] = 0

    assert store.get("opt") == {"features": {"category": 1}}

    payload = {"credentials": {"url": "https://nlu.example.com"}}
    store.set("other", payload)
    payload["credentials"]["url"] = "changed"

    assert store.get("other") == {"credentials": {"url": "https://nlu.example.com"}}


def test_json_file_store_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = JsonFileStore(path)

    assert store.get("opt") is None

    store.set("opt", {"post_types": {"post": 1, "page": None}})
    store.set("flag", True)

    reopened = JsonFileStore(path)
    assert reopened.get("opt") == {"post_types": {"post": 1, "page": None}}
    assert reopened.get("flag") is True
    assert json.loads(path.read_text(encoding="utf-8"))["flag"] is True
    assert [p.name for p in path.parent.iterdir()] == ["settings.json"]


def test_json_file_store_treats_empty_file_as_empty(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("  \n", encoding="utf-8")

    assert JsonFileStore(path).get("opt", "default") == "default"


def test_json_file_store_rejects_non_object_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(ValueError, match="does not contain a JSON object"):
        JsonFileStore(path).get("opt")
