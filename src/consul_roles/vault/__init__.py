"""HashiCorp Vault access for consul-roles.

Usage:
    from consul_roles.vault import VaultClient, VaultConfig

    client = VaultClient(VaultConfig.from_env())
    data = client.read("consul/roles/app")
"""

from .client import (
    VaultAuthenticationError,
    VaultClient,
    VaultConnectionError,
    VaultError,
    VaultPermissionError,
    VaultRequestError,
)
from .config import VaultConfig, VaultConfigError

__all__ = [
    "VaultClient",
    "VaultConfig",
    "VaultConfigError",
    "VaultError",
    "VaultConnectionError",
    "VaultAuthenticationError",
    "VaultPermissionError",
    "VaultRequestError",
]
