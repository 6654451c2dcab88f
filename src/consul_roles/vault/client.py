"""Vault client wrapper for the logical API.

Provides a thin wrapper around the hvac client with:
- Token and AppRole authentication
- Logical read/write/delete against arbitrary secret-engine paths
- Error translation into the VaultError hierarchy
- Health checking and reconnection
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import hvac
from hvac.exceptions import Forbidden, InvalidPath, InvalidRequest

from consul_roles.logger import Logger, create_logger

from .config import VaultConfig


class VaultError(Exception):
    """Base exception for Vault operations."""
    pass


class VaultConnectionError(VaultError):
    """Raised when a request to the Vault server fails."""
    pass


class VaultAuthenticationError(VaultError):
    """Raised when authentication to Vault fails."""
    pass


class VaultPermissionError(VaultError):
    """Raised when permission is denied for an operation."""
    pass


class VaultRequestError(VaultError):
    """Raised when Vault rejects a request payload."""
    pass


class VaultClient:
    """Wrapper around hvac client for logical path operations.

    Example:
        client = VaultClient(VaultConfig(url="https://vault:8200", token="hvs.xxx"))
        client.write("consul/roles/app", {"policies": ["read-only"]})
        data = client.read("consul/roles/app")
        client.delete("consul/roles/app")
    """

    def __init__(
        self,
        config: VaultConfig,
        logger: Optional[Logger] = None,
    ) -> None:
        """Initialize Vault client.

        Args:
            config: VaultConfig with connection settings
            logger: Optional logger instance

        Raises:
            VaultConfigError: If config is invalid
            VaultAuthenticationError: If AppRole login fails
        """
        self.config = config
        self.logger = logger or create_logger(name="vault-client")

        config.validate()

        self._client = self._connect()

        self.logger.debug(
            "VaultClient initialized",
            url=config.url,
            auth_method=config.auth_method,
            namespace=config.namespace,
        )

    def _connect(self) -> hvac.Client:
        client = hvac.Client(
            url=self.config.url,
            token=self.config.token if self.config.auth_method == "token" else None,
            namespace=self.config.namespace,
            verify=self.config.verify_ssl,
            timeout=self.config.timeout,
        )
        if self.config.auth_method == "approle":
            self._authenticate_approle(client)
        return client

    def _authenticate_approle(self, client: hvac.Client) -> None:
        try:
            response = client.auth.approle.login(
                role_id=self.config.role_id,
                secret_id=self.config.secret_id,
            )
            client.token = response["auth"]["client_token"]
            self.logger.info("Authenticated to Vault via AppRole")
        except Exception as e:
            self.logger.error("AppRole authentication failed", error=str(e))
            raise VaultAuthenticationError(f"AppRole authentication failed: {e}") from e

    def is_authenticated(self) -> bool:
        """Check if the client token is valid."""
        try:
            return bool(self._client.is_authenticated())
        except Exception:
            return False

    def health_check(self) -> bool:
        """Check if the Vault server is reachable."""
        try:
            self._client.sys.read_health_status(method="GET")
            return True
        except Exception as e:
            self.logger.warning("Vault health check failed", error=str(e))
            return False

    def reconnect(self) -> None:
        """Re-create the underlying client and re-authenticate.

        Raises:
            VaultAuthenticationError: If re-authentication fails
        """
        self.logger.info("Reconnecting to Vault")
        self._client = self._connect()
        self.logger.info("Reconnected to Vault")

    def read(self, path: str) -> Optional[Dict[str, Any]]:
        """Read the data stored at a logical path.

        Args:
            path: Full logical path (e.g., "consul/roles/app")

        Returns:
            The response ``data`` dict, or None if nothing is stored there

        Raises:
            VaultPermissionError: If permission denied
            VaultConnectionError: If the request fails
        """
        try:
            response = self._client.read(path)
        except InvalidPath:
            self.logger.debug("Nothing stored at path", path=path)
            return None
        except Forbidden as e:
            self.logger.error("Permission denied reading path", path=path)
            raise VaultPermissionError(f"Permission denied: {path}") from e
        except Exception as e:
            self.logger.error("Failed to read path", path=path, error=str(e))
            raise VaultConnectionError(f"Failed to read {path}: {e}") from e

        if not response:
            return None
        data = response.get("data")
        if data is None:
            return None
        return data

    def write(self, path: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Write data to a logical path.

        Args:
            path: Full logical path
            data: Request parameters

        Returns:
            The response body, if Vault returned one

        Raises:
            VaultRequestError: If Vault rejects the payload
            VaultPermissionError: If permission denied
            VaultConnectionError: If the request fails
        """
        try:
            response = self._client.write_data(path, data=data)
        except InvalidRequest as e:
            self.logger.error("Vault rejected write", path=path, error=str(e))
            raise VaultRequestError(f"Invalid request for {path}: {e}") from e
        except Forbidden as e:
            self.logger.error("Permission denied writing path", path=path)
            raise VaultPermissionError(f"Permission denied: {path}") from e
        except Exception as e:
            self.logger.error("Failed to write path", path=path, error=str(e))
            raise VaultConnectionError(f"Failed to write {path}: {e}") from e

        self.logger.debug("Path written", path=path)
        if isinstance(response, dict):
            return response
        return None

    def delete(self, path: str) -> None:
        """Delete whatever is stored at a logical path.

        Raises:
            VaultPermissionError: If permission denied
            VaultConnectionError: If the request fails
        """
        try:
            self._client.delete(path)
        except Forbidden as e:
            self.logger.error("Permission denied deleting path", path=path)
            raise VaultPermissionError(f"Permission denied: {path}") from e
        except Exception as e:
            self.logger.error("Failed to delete path", path=path, error=str(e))
            raise VaultConnectionError(f"Failed to delete {path}: {e}") from e
        self.logger.debug("Path deleted", path=path)
