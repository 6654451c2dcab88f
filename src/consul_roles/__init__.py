"""consul-roles - Consul secret-backend roles in HashiCorp Vault.

This package provides:
- identity: role ID encoding, decoding and legacy ID upgrade
- role: the role definition and its Vault payload
- resource: create/read/update/delete/exists/import against Vault
- state: persistent record storage for managed roles
- vault: hvac-based Vault client and configuration
- logger: structured logging
- exceptions: structured error classes
"""

__version__ = "1.0.0"

from consul_roles.exceptions import (
    InternalInvariantError,
    InvalidRoleIdError,
    MalformedIdentifierError,
    RoleConfigError,
    RoleError,
    RoleNotFoundError,
    RoleOperationError,
)
from consul_roles.identity import (
    RoleId,
    backend_from_path,
    role_name_from_path,
    role_path,
    upgrade_legacy_id,
)
from consul_roles.logger import Logger, StructuredLogger, create_logger, get_logger
from consul_roles.resource import ResourceData, RoleResource
from consul_roles.role import ConsulRole
from consul_roles.state import FileStateStore, MemoryStateStore

__all__ = [
    "__version__",
    # Identity
    "RoleId",
    "role_path",
    "role_name_from_path",
    "backend_from_path",
    "upgrade_legacy_id",
    # Roles
    "ConsulRole",
    "ResourceData",
    "RoleResource",
    # State
    "FileStateStore",
    "MemoryStateStore",
    # Logger
    "Logger",
    "StructuredLogger",
    "create_logger",
    "get_logger",
    # Exceptions
    "RoleError",
    "MalformedIdentifierError",
    "InternalInvariantError",
    "InvalidRoleIdError",
    "RoleConfigError",
    "RoleNotFoundError",
    "RoleOperationError",
]
