"""Persistent storage for role resource records.

Records are keyed by resource address (e.g. ``consul_role.app``) and hold
the role ID plus the last known role attributes.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Optional, Union

from consul_roles.exceptions import RoleError
from consul_roles.logger import Logger, create_logger
from consul_roles.resource import ResourceData

DEFAULT_STATE_FILE = "consul-roles.state.json"
STATE_VERSION = 1


class StateError(RoleError):
    """Raised when the state file cannot be read or written."""

    def __init__(self, message: str, path: Union[str, Path]):
        super().__init__(code="STATE_ERROR", message=message, details={"path": str(path)})


class MemoryStateStore:
    """In-memory record store, for tests and one-shot use."""

    def __init__(self) -> None:
        self._store: Dict[str, ResourceData] = {}

    def get(self, address: str) -> Optional[ResourceData]:
        return self._store.get(address)

    def put(self, address: str, record: ResourceData) -> None:
        self._store[address] = record

    def remove(self, address: str) -> bool:
        return self._store.pop(address, None) is not None

    def list_all(self) -> Dict[str, ResourceData]:
        return self._store.copy()

    def exists(self, address: str) -> bool:
        return address in self._store

    def reload(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._store)


class FileStateStore(MemoryStateStore):
    """JSON file record store with atomic writes.

    The file is rewritten in full on every change; writes go to a temporary
    file that is fsynced and then renamed over the original.

    Example:
        store = FileStateStore("consul-roles.state.json")
        store.put("consul_role.app", record)
        record = store.get("consul_role.app")
    """

    def __init__(
        self,
        path: Union[str, Path] = DEFAULT_STATE_FILE,
        logger: Optional[Logger] = None,
    ) -> None:
        """Initialize the store and load any existing records.

        Args:
            path: Path to the JSON state file
            logger: Optional logger instance

        Raises:
            StateError: If an existing state file cannot be parsed
        """
        super().__init__()
        self.path = Path(path)
        self.logger = logger or create_logger(name="role-state")
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self._store = {}
            self.logger.debug("State initialized as empty", path=str(self.path))
            return

        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            self._store = {
                address: ResourceData.from_dict(record)
                for address, record in data.get("resources", {}).items()
            }
        except (OSError, ValueError, AttributeError) as e:
            self.logger.error("Failed to load state", path=str(self.path), error=str(e))
            raise StateError(f"Failed to load state: {e}", self.path) from e

        self.logger.debug(
            "State loaded from disk",
            resources_count=len(self._store),
            path=str(self.path),
        )

    def _save(self) -> None:
        data = {
            "version": STATE_VERSION,
            "resources": {
                address: record.to_dict() for address, record in sorted(self._store.items())
            },
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            self.logger.error("Failed to save state", path=str(self.path), error=str(e))
            raise StateError(f"Failed to save state: {e}", self.path) from e
        self.logger.debug("State saved", resources_count=len(self._store))

    def put(self, address: str, record: ResourceData) -> None:
        super().put(address, record)
        self._save()

    def remove(self, address: str) -> bool:
        removed = super().remove(address)
        if removed:
            self._save()
        return removed

    def reload(self) -> None:
        """Reload records from disk."""
        self._load()
