"""Vault connection configuration.

Supports token and AppRole authentication. Values come from explicit
arguments or from environment variables with a project prefix, falling back
to the standard ``VAULT_ADDR`` / ``VAULT_TOKEN`` / ``VAULT_NAMESPACE``
variables understood by the Vault CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from consul_roles.exceptions import ConfigurationError

DEFAULT_PREFIX = "CONSUL_ROLES"
DEFAULT_TIMEOUT = 30


class VaultConfigError(ConfigurationError):
    """Raised when Vault configuration is invalid."""

    def __init__(self, message: str):
        super().__init__(code="INVALID_VAULT_CONFIG", message=message)


@dataclass
class VaultConfig:
    """Configuration for connecting to HashiCorp Vault.

    Example:
        # Token auth
        config = VaultConfig(url="https://vault.example.com:8200", token="hvs.xxxxx")

        # AppRole auth
        config = VaultConfig(
            url="https://vault.example.com:8200",
            role_id="xxx-xxx-xxx",
            secret_id="yyy-yyy-yyy",
        )

        # From environment variables
        config = VaultConfig.from_env()

    Attributes:
        url: Vault server URL
        token: Vault token for token-based authentication
        role_id: AppRole role ID
        secret_id: AppRole secret ID
        namespace: Vault namespace (Vault Enterprise)
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify TLS certificates
    """

    url: str
    token: Optional[str] = None
    role_id: Optional[str] = None
    secret_id: Optional[str] = None
    namespace: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        self.url = self.url.rstrip("/")

    @classmethod
    def from_env(cls, prefix: str = DEFAULT_PREFIX) -> "VaultConfig":
        """Create VaultConfig from environment variables.

        Environment variables:
            {PREFIX}_VAULT_URL: Vault server URL (falls back to VAULT_ADDR)
            {PREFIX}_VAULT_TOKEN: Vault token (falls back to VAULT_TOKEN)
            {PREFIX}_VAULT_ROLE_ID: AppRole role ID
            {PREFIX}_VAULT_SECRET_ID: AppRole secret ID
            {PREFIX}_VAULT_NAMESPACE: Vault namespace (falls back to VAULT_NAMESPACE)
            {PREFIX}_VAULT_TIMEOUT: Request timeout (default: 30)
            {PREFIX}_VAULT_VERIFY_SSL: TLS verification (default: "true")

        Raises:
            VaultConfigError: If no Vault URL is configured
        """
        prefix = prefix.upper().replace("-", "_")

        def env(key: str, fallback: Optional[str] = None) -> Optional[str]:
            value = os.environ.get(f"{prefix}_VAULT_{key}")
            if value is None and fallback is not None:
                value = os.environ.get(fallback)
            return value

        url = env("URL", "VAULT_ADDR")
        if not url:
            raise VaultConfigError(
                f"Missing required environment variable: {prefix}_VAULT_URL (or VAULT_ADDR)"
            )

        verify_ssl = (env("VERIFY_SSL") or "true").lower() in ("true", "1", "yes")

        try:
            timeout = int(env("TIMEOUT") or DEFAULT_TIMEOUT)
        except ValueError:
            timeout = DEFAULT_TIMEOUT

        return cls(
            url=url,
            token=env("TOKEN", "VAULT_TOKEN"),
            role_id=env("ROLE_ID"),
            secret_id=env("SECRET_ID"),
            namespace=env("NAMESPACE", "VAULT_NAMESPACE"),
            timeout=timeout,
            verify_ssl=verify_ssl,
        )

    def validate(self) -> None:
        """Validate configuration is complete and usable.

        Raises:
            VaultConfigError: If configuration is invalid
        """
        if not self.url:
            raise VaultConfigError("Vault URL is required")

        if not self.url.startswith(("http://", "https://")):
            raise VaultConfigError(
                f"Vault URL must start with http:// or https://, got: {self.url}"
            )

        has_token = bool(self.token)
        has_approle = bool(self.role_id and self.secret_id)

        if bool(self.role_id) != bool(self.secret_id):
            raise VaultConfigError("AppRole auth requires both 'role_id' and 'secret_id'")

        if not has_token and not has_approle:
            raise VaultConfigError(
                "Must provide either 'token' or both 'role_id' and 'secret_id' for authentication"
            )

        if has_token and has_approle:
            raise VaultConfigError("Provide either 'token' or 'role_id/secret_id', not both")

        if self.timeout <= 0:
            raise VaultConfigError(f"Timeout must be positive, got: {self.timeout}")

    @property
    def auth_method(self) -> str:
        """Return "token" or "approle"."""
        if self.token:
            return "token"
        return "approle"
