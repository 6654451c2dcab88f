"""Consul secret-backend role definition.

Holds the declarative fields of a role and converts them to and from the
payload Vault's ``<backend>/roles/<name>`` endpoint speaks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from consul_roles.exceptions import RoleConfigError
from consul_roles.identity import RoleId

TOKEN_TYPES = ("client", "management")
DEFAULT_TOKEN_TYPE = "client"

# Optional request params, sent only when configured
OPTIONAL_PARAMS = ("consul_namespace", "partition")

# Fields older Vault releases (pre 1.10) never return on read
VERSIONED_PARAMS = ("consul_roles", "consul_namespace", "partition")

# Value a field is reset to when Vault omits it from a read
ZERO_VALUES: Dict[str, Any] = {
    "policies": [],
    "consul_roles": [],
    "consul_namespace": None,
    "partition": None,
    "max_ttl": 0,
    "ttl": 0,
    "token_type": "",
    "local": False,
}


@dataclass
class ConsulRole:
    """A Consul secret-backend role.

    Attributes:
        name: Role name (changing it replaces the role)
        backend: Mount path of the Consul secrets engine (changing it replaces the role)
        policies: Consul policies attached to generated tokens
        consul_roles: Consul roles attached to generated tokens (Vault 1.10+)
        consul_namespace: Consul namespace tokens are created in (Vault 1.10+, Consul 1.7+)
        partition: Consul admin partition tokens are created in (Vault 1.10+, Consul 1.11+)
        max_ttl: Maximum lease TTL in seconds
        ttl: Lease TTL in seconds
        token_type: "client" or "management"
        local: Tokens are local to the datacenter instead of replicated
        backend_key: Attribute the backend is stored under; "path" for
            records written with the deprecated key
    """

    name: str
    backend: str = ""
    policies: List[str] = field(default_factory=list)
    consul_roles: List[str] = field(default_factory=list)
    consul_namespace: Optional[str] = None
    partition: Optional[str] = None
    max_ttl: int = 0
    ttl: int = 0
    token_type: str = DEFAULT_TOKEN_TYPE
    local: bool = False
    backend_key: str = "backend"

    def __post_init__(self) -> None:
        self.policies = list(self.policies)
        self.consul_roles = _as_set(self.consul_roles)

    @property
    def role_id(self) -> RoleId:
        return RoleId(backend=self.backend, name=self.name)

    @property
    def path(self) -> str:
        return self.role_id.path

    def validate(self) -> None:
        """Check the role can be written to Vault.

        Raises:
            RoleConfigError: If the role definition is unusable
        """
        if not self.backend:
            raise RoleConfigError(
                f"No backend specified for Consul secret backend role {self.name}",
                details={"name": self.name},
            )
        if not self.policies and not self.consul_roles:
            raise RoleConfigError(
                "policies or consul_roles must be set",
                details={"name": self.name, "backend": self.backend},
            )
        if self.token_type not in TOKEN_TYPES:
            raise RoleConfigError(
                f"token_type must be one of {', '.join(TOKEN_TYPES)}, got: {self.token_type!r}",
                details={"name": self.name, "token_type": self.token_type},
            )
        for key in ("ttl", "max_ttl"):
            if getattr(self, key) < 0:
                raise RoleConfigError(
                    f"{key} must not be negative",
                    details={"name": self.name, key: getattr(self, key)},
                )

    def to_request(self) -> Dict[str, Any]:
        """Build the payload for a Vault write."""
        data: Dict[str, Any] = {
            "policies": list(self.policies),
            "consul_roles": list(self.consul_roles),
            "max_ttl": self.max_ttl,
            "ttl": self.ttl,
            "token_type": self.token_type,
            "local": self.local,
        }
        for key in OPTIONAL_PARAMS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    def apply_response(self, data: Dict[str, Any]) -> None:
        """Reconcile local fields with a Vault read.

        Fields missing from ``data`` are reset to their zero value, except
        those older Vault releases do not return, which keep their local value.
        """
        for key, zero in ZERO_VALUES.items():
            if key not in data:
                if key in VERSIONED_PARAMS:
                    continue
                value = zero
            else:
                value = data[key]
            setattr(self, key, _coerce(key, value))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the state file."""
        result: Dict[str, Any] = {
            "name": self.name,
            self.backend_key: self.backend,
            "policies": list(self.policies),
            "consul_roles": list(self.consul_roles),
            "consul_namespace": self.consul_namespace,
            "partition": self.partition,
            "max_ttl": self.max_ttl,
            "ttl": self.ttl,
            "token_type": self.token_type,
            "local": self.local,
        }
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConsulRole":
        """Deserialize from the state file.

        Records carrying the deprecated ``path`` key instead of ``backend``
        keep using it when written back.
        """
        if data.get("backend"):
            backend, backend_key = data["backend"], "backend"
        elif data.get("path"):
            backend, backend_key = data["path"], "path"
        else:
            backend, backend_key = "", "backend"

        return cls(
            name=data.get("name", ""),
            backend=backend,
            policies=data.get("policies") or [],
            consul_roles=data.get("consul_roles") or [],
            consul_namespace=data.get("consul_namespace"),
            partition=data.get("partition"),
            max_ttl=int(data.get("max_ttl", 0)),
            ttl=int(data.get("ttl", 0)),
            token_type=data.get("token_type", DEFAULT_TOKEN_TYPE),
            local=bool(data.get("local", False)),
            backend_key=backend_key,
        )


def _as_set(values: Optional[Iterable[str]]) -> List[str]:
    """Consul roles are a set; keep them de-duplicated and sorted."""
    return sorted(set(values or []))


def _coerce(key: str, value: Any) -> Any:
    if key == "policies":
        return list(value or [])
    if key == "consul_roles":
        return _as_set(value)
    if key in ("max_ttl", "ttl"):
        return int(value or 0)
    if key == "local":
        return bool(value)
    if key == "token_type":
        return value or ""
    # consul_namespace / partition: Vault returns "" when unset
    return value
