"""Tests for the browser-style local store."""
import json

import pytest

from zxsgit.services.local_store import LocalStore
from zxsgit.utils.exceptions import StorageFullError


def test_get_returns_default_for_missing_key():
    store = LocalStore()
    assert store.get("zxs-users") is None
    assert store.get("zxs-users", []) == []


def test_set_and_get_roundtrip_in_memory():
    store = LocalStore()
    assert store.set("zxs-todos-all", [{"id": "1", "text": "Ship"}]) is True
    assert store.get("zxs-todos-all") == [{"id": "1", "text": "Ship"}]
    assert store.keys() == ["zxs-todos-all"]


def test_unencodable_value_reports_false():
    store = LocalStore()
    assert store.set("zxs-users", {"bad": object()}) is False
    assert store.get("zxs-users") is None


def test_undecodable_slot_returns_default(tmp_path):
    path = tmp_path / "local.json"
    path.write_text(json.dumps({"zxs-users": "{not json"}), encoding="utf-8")
    store = LocalStore(str(path))
    assert store.get("zxs-users", []) == []


def test_unreadable_file_reads_as_empty(tmp_path):
    path = tmp_path / "local.json"
    path.write_text("garbage", encoding="utf-8")
    store = LocalStore(str(path))
    assert store.keys() == []
    assert store.set("zxs-users", []) is True
    assert store.get("zxs-users") == []


def test_quota_exceeded_raises_and_keeps_data():
    store = LocalStore(quota_bytes=200)
    store.set("zxs-companies", [{"id": "1"}])

    with pytest.raises(StorageFullError):
        store.set("zxs-companies", [{"id": "2", "dataUrl": "x" * 500}])

    assert store.get("zxs-companies") == [{"id": "1"}]


def test_two_instances_on_one_file_share_writes(tmp_path):
    path = str(tmp_path / "nested" / "local.json")
    first = LocalStore(path)
    second = LocalStore(path)

    first.set("zxs-users", [{"email": "a@b.co"}])
    assert second.get("zxs-users") == [{"email": "a@b.co"}]

    second.set("zxs-users", [])
    assert first.get("zxs-users") == []


def test_remove_and_clear():
    store = LocalStore()
    store.set("a", 1)
    store.set("b", 2)
    store.remove("a")
    assert store.keys() == ["b"]
    store.clear()
    assert store.keys() == []
    assert store.usage_bytes() == 0
