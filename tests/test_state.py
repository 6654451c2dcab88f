"""Tests for resource record storage."""

import json

import pytest

from consul_roles.resource import ResourceData
from consul_roles.role import ConsulRole
from consul_roles.state import FileStateStore, MemoryStateStore, StateError


@pytest.fixture
def sample_record():
    return ResourceData(
        role=ConsulRole(name="app", backend="consul", policies=["read-only"], ttl=60),
        id="consul/roles/app",
    )


class TestMemoryStateStore:
    """Tests for MemoryStateStore."""

    @pytest.fixture
    def store(self):
        return MemoryStateStore()

    def test_init_empty(self, store):
        assert len(store) == 0
        assert store.list_all() == {}

    def test_put_and_get(self, store, sample_record):
        store.put("consul_role.app", sample_record)
        assert store.get("consul_role.app") is sample_record
        assert store.exists("consul_role.app") is True

    def test_get_nonexistent(self, store):
        assert store.get("consul_role.ghost") is None
        assert store.exists("consul_role.ghost") is False

    def test_remove(self, store, sample_record):
        store.put("consul_role.app", sample_record)
        assert store.remove("consul_role.app") is True
        assert store.remove("consul_role.app") is False
        assert len(store) == 0

    def test_list_all_is_copy(self, store, sample_record):
        store.put("consul_role.app", sample_record)
        listing = store.list_all()
        listing.clear()
        assert len(store) == 1


class TestFileStateStore:
    """Tests for FileStateStore."""

    @pytest.fixture
    def state_path(self, tmp_path):
        return tmp_path / "state" / "roles.json"

    def test_missing_file_is_empty(self, state_path):
        store = FileStateStore(state_path)
        assert len(store) == 0
        assert not state_path.exists()

    def test_put_persists(self, state_path, sample_record):
        store = FileStateStore(state_path)
        store.put("consul_role.app", sample_record)

        data = json.loads(state_path.read_text())
        assert data["version"] == 1
        assert data["resources"]["consul_role.app"]["id"] == "consul/roles/app"
        assert data["resources"]["consul_role.app"]["attributes"]["ttl"] == 60

    def test_reload_from_disk(self, state_path, sample_record):
        FileStateStore(state_path).put("consul_role.app", sample_record)

        store = FileStateStore(state_path)
        record = store.get("consul_role.app")
        assert record is not None
        assert record.id == "consul/roles/app"
        assert record.role == sample_record.role

    def test_remove_persists(self, state_path, sample_record):
        store = FileStateStore(state_path)
        store.put("consul_role.app", sample_record)
        store.remove("consul_role.app")

        assert FileStateStore(state_path).exists("consul_role.app") is False

    def test_no_temp_file_left(self, state_path, sample_record):
        FileStateStore(state_path).put("consul_role.app", sample_record)
        assert [p.name for p in state_path.parent.iterdir()] == ["roles.json"]

    def test_legacy_record_loads(self, state_path):
        """Records written by older releases keep their old ID until refreshed."""
        state_path.parent.mkdir(parents=True)
        state_path.write_text(json.dumps({
            "version": 1,
            "resources": {
                "consul_role.old": {
                    "id": "consul,old",
                    "attributes": {"name": "old", "path": "consul", "policies": ["p"]},
                }
            },
        }))

        record = FileStateStore(state_path).get("consul_role.old")
        assert record.id == "consul,old"
        assert record.role.backend == "consul"
        assert record.role.backend_key == "path"

    def test_corrupt_file(self, state_path):
        state_path.parent.mkdir(parents=True)
        state_path.write_text("{not json")

        with pytest.raises(StateError, match="Failed to load state") as exc_info:
            FileStateStore(state_path)
        assert exc_info.value.code == "STATE_ERROR"

    def test_reload_picks_up_changes(self, state_path, sample_record):
        store = FileStateStore(state_path)
        FileStateStore(state_path).put("consul_role.app", sample_record)

        assert store.exists("consul_role.app") is False
        store.reload()
        assert store.exists("consul_role.app") is True
