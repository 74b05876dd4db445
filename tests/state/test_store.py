"""Tests for the state store."""

import json
import threading
import pytest
from infragraph.state.models import STATE_FORMAT_VERSION, ResourceState
from infragraph.state.store import StateStore
from infragraph.utils.errors import StateError


def make_entry(name="main", **kwargs):
    return ResourceState(
        type="compute_network",
        name=name,
        attributes={"name": name},
        provider_id=f"compute_network/{name}",
        **kwargs
    )


class TestStateStore:
    """Test state store persistence."""

    def test_in_memory_store(self):
        store = StateStore()
        store.put(make_entry())

        assert "compute_network.main" in store
        assert store.get("compute_network.main").provider_id == "compute_network/main"
        assert store.get("compute_network.other") is None

    def test_persists_and_reloads(self, tmp_path):
        path = tmp_path / "state.json"
        store = StateStore(str(path))
        store.put(make_entry(outputs={"self_link": "projects/local/compute_network/main"}))

        reloaded = StateStore(str(path))
        entry = reloaded.get("compute_network.main")
        assert entry.outputs["self_link"] == "projects/local/compute_network/main"
        assert reloaded.serial == 1

    def test_load_picks_up_external_writes(self, tmp_path):
        path = tmp_path / "state.json"
        reader = StateStore(str(path))
        StateStore(str(path)).put(make_entry())

        assert len(reader) == 0
        reader.load()
        assert reader.addresses() == ["compute_network.main"]

    def test_serial_increments_on_every_write(self, tmp_path):
        store = StateStore(str(tmp_path / "state.json"))
        store.put(make_entry("a"))
        store.put(make_entry("b"))
        store.remove("compute_network.a")

        assert store.serial == 3
        assert store.addresses() == ["compute_network.b"]

    def test_remove_missing_is_noop(self, tmp_path):
        store = StateStore(str(tmp_path / "state.json"))
        store.remove("compute_network.ghost")

        assert store.serial == 0
        assert not (tmp_path / "state.json").exists()

    def test_no_temp_files_left_behind(self, tmp_path):
        store = StateStore(str(tmp_path / "state.json"))
        for idx in range(5):
            store.put(make_entry(f"n{idx}"))

        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    def test_written_file_is_valid_json(self, tmp_path):
        path = tmp_path / "state.json"
        StateStore(str(path)).put(make_entry(dependencies=[]))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == STATE_FORMAT_VERSION
        assert data["resources"]["compute_network.main"]["provider_id"] == "compute_network/main"

    def test_get_returns_copy(self):
        store = StateStore()
        store.put(make_entry())

        entry = store.get("compute_network.main")
        entry.attributes["name"] = "changed"

        assert store.get("compute_network.main").attributes["name"] == "main"

    def test_snapshot_is_isolated(self):
        store = StateStore()
        store.put(make_entry())
        snapshot = store.snapshot()

        store.remove("compute_network.main")

        assert "compute_network.main" in snapshot

    def test_concurrent_puts(self, tmp_path):
        store = StateStore(str(tmp_path / "state.json"))
        threads = [threading.Thread(target=store.put, args=(make_entry(f"n{idx}"),)) for idx in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store) == 10
        assert store.serial == 10
        assert len(StateStore(str(tmp_path / "state.json"))) == 10

    def test_reads_during_concurrent_writes(self, tmp_path):
        store = StateStore(str(tmp_path / "state.json"))
        errors = []
        done = threading.Event()

        def reader():
            while not done.is_set():
                try:
                    for address in store.addresses():
                        store.get(address)
                    len(store)
                except Exception as e:
                    errors.append(e)
                    return

        readers = [threading.Thread(target=reader) for _ in range(3)]
        for thread in readers:
            thread.start()
        for idx in range(30):
            store.put(make_entry(f"n{idx}"))
            if idx % 3 == 0:
                store.remove(f"compute_network.n{idx}")
        done.set()
        for thread in readers:
            thread.join()

        assert errors == []
        assert len(store) == 20


class TestStateStoreErrors:
    """Test unreadable state files."""

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StateError, match="Invalid JSON"):
            StateStore(str(path))

    def test_invalid_structure(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"resources": {"x": {"name": "no-type"}}}), encoding="utf-8")

        with pytest.raises(StateError, match="Invalid state file"):
            StateStore(str(path))

    def test_newer_version_rejected(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"version": STATE_FORMAT_VERSION + 1}), encoding="utf-8")

        with pytest.raises(StateError, match="newer than supported"):
            StateStore(str(path))
