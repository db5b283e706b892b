"""
KeyValueStore テスト — MemoryStore / YamlFileStore
"""

from __future__ import annotations

import pytest

from steprec.capture.store import MemoryStore, YamlFileStore


@pytest.fixture(params=["memory", "yaml"])
def store(request, store_path):
    if request.param == "memory":
        return MemoryStore()
    return YamlFileStore(store_path)


class TestStoreContract:
    """両ストア共通の get / set の約束事。"""

    def test_missing_keys_are_absent(self, store):
        assert store.get(["steps", "isRecording"]) == {}

    def test_set_is_partial(self, store):
        store.set({"steps": [], "isRecording": True})
        store.set({"isRecording": False})
        assert store.get(["steps", "isRecording"]) == {"steps": [], "isRecording": False}

    def test_returned_values_are_copies(self, store):
        store.set({"steps": [{"action": "Click"}]})
        record = store.get(["steps"])
        record["steps"].append({"action": "Input"})
        assert store.get(["steps"]) == {"steps": [{"action": "Click"}]}


class TestYamlFileStore:
    """YamlFileStore 固有のテスト。"""

    def test_persists_across_instances(self, store_path):
        YamlFileStore(store_path).set({"steps": [{"action": "Click", "description": "Klick auf div"}]})
        record = YamlFileStore(store_path).get(["steps"])
        assert record["steps"][0]["description"] == "Klick auf div"

    def test_unreadable_file_is_empty(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("steps: [unclosed\n", encoding="utf-8")
        assert YamlFileStore(store_path).get(["steps"]) == {}

    def test_non_mapping_file_is_empty(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("- just\n- a list\n", encoding="utf-8")
        assert YamlFileStore(store_path).get(["steps"]) == {}

    def test_no_tmp_file_left(self, store_path):
        YamlFileStore(store_path).set({"isRecording": False})
        assert [p.name for p in store_path.parent.iterdir()] == ["session.yaml"]
