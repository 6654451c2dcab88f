"""Consul secret-backend role resource.

Create, read, update, delete, exists and import operations for a role,
each a single call against Vault's logical API keyed by the role's path.
The path doubles as the resource ID; IDs written by older releases in the
``<backend>,<name>`` form are upgraded the first time they are read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from consul_roles.exceptions import (
    InternalInvariantError,
    InvalidRoleIdError,
    MalformedIdentifierError,
    RoleNotFoundError,
    RoleOperationError,
)
from consul_roles.identity import RoleId, upgrade_legacy_id
from consul_roles.logger import Logger, create_logger
from consul_roles.role import ConsulRole
from consul_roles.vault import VaultClient, VaultError


@dataclass
class ResourceData:
    """Local record of a role: its ID plus its last known configuration.

    ``id`` is empty until the role has been written (or after the record
    was dropped because its ID turned out to be invalid).
    """

    role: ConsulRole
    id: str = ""

    @property
    def is_new(self) -> bool:
        return not self.id

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "attributes": self.role.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceData":
        return cls(
            id=data.get("id", ""),
            role=ConsulRole.from_dict(data.get("attributes", {})),
        )


class RoleResource:
    """Orchestrates role operations against Vault.

    Example:
        resource = RoleResource(VaultClient(VaultConfig.from_env()))

        data = ResourceData(role=ConsulRole(name="app", backend="consul", policies=["ro"]))
        resource.create(data)
        data.id  # "consul/roles/app"

        imported = resource.import_role("consul/roles/app")
    """

    def __init__(self, client: VaultClient, logger: Optional[Logger] = None) -> None:
        """Initialize the resource.

        Args:
            client: VaultClient used for every role operation
            logger: Optional logger instance
        """
        self.client = client
        self.logger = logger or create_logger(name="consul-roles")

    def create(self, data: ResourceData) -> ResourceData:
        """Write the role to Vault, set its ID and refresh it from Vault.

        Raises:
            RoleConfigError: If the role definition is incomplete
            RoleOperationError: If Vault rejects the write
        """
        role = data.role
        role.validate()
        path = role.path

        self.logger.debug("Configuring Consul secrets backend role", path=path)
        try:
            self.client.write(path, role.to_request())
        except VaultError as e:
            raise RoleOperationError(
                f"error writing role configuration for {path!r}: {e}",
                path=path,
                operation="write",
            ) from e

        data.id = path
        return self.read(data)

    def update(self, data: ResourceData) -> ResourceData:
        """Rewrite an existing role.

        Name and backend identify the role; when either changed, the role at
        the old path is deleted and a new one created at the new path.
        """
        if data.id:
            current = upgrade_legacy_id(data.id)
            if current != data.role.path:
                self.logger.info(
                    "Role identity changed, replacing",
                    old_path=current,
                    new_path=data.role.path,
                )
                data.id = current
                data.role.validate()
                self.delete(data)
                data.id = ""
        return self.create(data)

    def read(self, data: ResourceData) -> ResourceData:
        """Refresh the local record from Vault.

        Raises:
            InvalidRoleIdError: If the ID cannot be decoded; ``data.id`` is
                cleared before raising
            RoleNotFoundError: If Vault holds no role at the path
            RoleOperationError: If the Vault read fails
        """
        self._upgrade_id(data)

        path = data.id
        try:
            role_id = RoleId.from_path(path)
        except (MalformedIdentifierError, InternalInvariantError) as e:
            self.logger.warning(
                "Removing consul role because its ID is invalid",
                path=path,
                error=e.message,
            )
            data.id = ""
            raise InvalidRoleIdError(path, e) from e

        # The ID must equal the path the role definition builds
        if role_id.path != path:
            self.logger.debug("Normalizing role ID", old_id=path, new_id=role_id.path)
            path = data.id = role_id.path

        self.logger.debug("Reading Consul secrets backend role", path=path)
        secret = self._read(path)
        if secret is None:
            raise RoleNotFoundError(path)

        data.role.name = role_id.name
        data.role.backend = role_id.backend
        data.role.apply_response(secret)
        return data

    def delete(self, data: ResourceData) -> None:
        """Delete the role from Vault.

        Raises:
            RoleOperationError: If the Vault delete fails
        """
        path = data.id

        self.logger.debug("Deleting Consul backend role", path=path)
        try:
            self.client.delete(path)
        except VaultError as e:
            raise RoleOperationError(
                f"error deleting Consul backend role at {path!r}: {e}",
                path=path,
                operation="delete",
            ) from e
        self.logger.debug("Deleted Consul backend role", path=path)

    def exists(self, data: ResourceData) -> bool:
        """Check whether Vault still holds the role."""
        self._upgrade_id(data)

        path = data.id
        self.logger.debug("Checking Consul secrets backend role", path=path)
        return self._read(path) is not None

    def refresh(self, data: ResourceData) -> bool:
        """Exists-then-read, dropping the record when the role is gone.

        Returns:
            False if the role no longer exists (``data.id`` is cleared)
        """
        if not self.exists(data):
            self.logger.warning("Consul role no longer exists", path=data.id)
            data.id = ""
            return False
        self.read(data)
        return True

    def import_role(self, role_id: str) -> ResourceData:
        """Build a record from an existing role's ID and read it from Vault."""
        data = ResourceData(role=ConsulRole(name=""), id=role_id)
        return self.read(data)

    def _upgrade_id(self, data: ResourceData) -> None:
        upgraded = upgrade_legacy_id(data.id)
        if upgraded != data.id:
            self.logger.debug("Upgrading old ID", old_id=data.id, new_id=upgraded)
            data.id = upgraded

    def _read(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            return self.client.read(path)
        except VaultError as e:
            raise RoleOperationError(
                f"error reading role configuration for {path!r}: {e}",
                path=path,
                operation="read",
            ) from e
