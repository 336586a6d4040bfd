"""Tests for sugarflow.services.state (YAML and in-memory stores)."""

from pathlib import Path

from sugarflow.services.state import (
    ACTIVE_TICKET_KEY,
    STATE_FILE,
    MemoryStateStore,
    YamlStateStore,
)


class TestYamlStateStore:
    def test_missing_file_reads_none(self, tmp_path: Path) -> None:
        assert YamlStateStore.for_workspace(tmp_path).get(ACTIVE_TICKET_KEY) is None

    def test_set_then_get_survives_new_instance(self, tmp_path: Path) -> None:
        YamlStateStore.for_workspace(tmp_path).set(ACTIVE_TICKET_KEY, "ABC-1")
        assert (tmp_path / STATE_FILE).is_file()
        assert YamlStateStore.for_workspace(tmp_path).get(ACTIVE_TICKET_KEY) == "ABC-1"

    def test_set_overwrites_previous_value(self, tmp_path: Path) -> None:
        store = YamlStateStore.for_workspace(tmp_path)
        store.set(ACTIVE_TICKET_KEY, "ABC-1")
        store.set(ACTIVE_TICKET_KEY, "ABC-2")
        assert store.get(ACTIVE_TICKET_KEY) == "ABC-2"

    def test_set_none_removes_key(self, tmp_path: Path) -> None:
        store = YamlStateStore.for_workspace(tmp_path)
        store.set(ACTIVE_TICKET_KEY, "ABC-1")
        store.set("other", 1)
        store.set(ACTIVE_TICKET_KEY, None)
        assert store.get(ACTIVE_TICKET_KEY) is None
        assert store.get("other") == 1

    def test_invalid_yaml_reads_as_empty(self, tmp_path: Path) -> None:
        path = tmp_path / STATE_FILE
        path.parent.mkdir(parents=True)
        path.write_text("key: [unclosed")
        assert YamlStateStore(path).get(ACTIVE_TICKET_KEY) is None


class TestMemoryStateStore:
    def test_initial_values_and_removal(self) -> None:
        store = MemoryStateStore({ACTIVE_TICKET_KEY: "ABC-1"})
        assert store.get(ACTIVE_TICKET_KEY) == "ABC-1"
        store.set(ACTIVE_TICKET_KEY, None)
        assert store.get(ACTIVE_TICKET_KEY) is None
