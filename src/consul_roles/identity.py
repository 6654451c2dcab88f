"""Role identifiers.

A Consul secret-backend role is addressed in Vault by a single path,
``<backend>/roles/<name>``, which is also the role's only persisted handle.
This module converts between that path and its two parts, and upgrades the
deprecated ``<backend>,<name>`` handle written by older releases.

Patterns are compiled once at import time and only ever read.

Known edge case: both patterns use a greedy leading group, so when a backend
or name itself contains the literal ``/roles/`` the split happens at the
*last* separator and decoding does not invert :func:`role_path`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from consul_roles.exceptions import InternalInvariantError, MalformedIdentifierError

ROLES_SEPARATOR = "/roles/"
LEGACY_SEPARATOR = ","

_BACKEND_FROM_PATH: re.Pattern[str] = re.compile(r"(.+)/roles/.+")
_NAME_FROM_PATH: re.Pattern[str] = re.compile(r".+/roles/(.+)")


def role_path(backend: str, name: str) -> str:
    """Build the Vault path of a role.

    Leading and trailing slashes are stripped from ``backend``; ``name`` is
    embedded verbatim.

    Example:
        >>> role_path("/consul/", "app")
        'consul/roles/app'
    """
    return backend.strip("/") + ROLES_SEPARATOR + name


def _single_group(pattern: re.Pattern[str], path: str, operation: str, label: str) -> str:
    match = pattern.fullmatch(path)
    if match is None:
        raise MalformedIdentifierError(path, operation, message=f"no {label} found")
    groups = match.groups()
    if len(groups) != 1:
        raise InternalInvariantError(path, operation, len(groups) + 1)
    return groups[0]


def role_name_from_path(path: str) -> str:
    """Return the role name encoded in ``path``.

    Raises:
        MalformedIdentifierError: ``path`` has no ``/roles/`` separator or an
            empty segment on either side of it
        InternalInvariantError: the pattern matched with an unexpected
            number of groups
    """
    return _single_group(_NAME_FROM_PATH, path, "decode-name", "name")


def backend_from_path(path: str) -> str:
    """Return the backend mount encoded in ``path``.

    Raises:
        MalformedIdentifierError: ``path`` has no ``/roles/`` separator or an
            empty segment on either side of it
        InternalInvariantError: the pattern matched with an unexpected
            number of groups
    """
    return _single_group(_BACKEND_FROM_PATH, path, "decode-parent", "backend")


def is_legacy_id(role_id: str) -> bool:
    """True for the deprecated ``<backend>,<name>`` form."""
    parts = role_id.split(LEGACY_SEPARATOR)
    return len(parts) == 2 and all(parts)


def upgrade_legacy_id(role_id: str) -> str:
    """Rewrite a ``<backend>,<name>`` ID into the path form.

    IDs of any other shape, including current paths, are returned unchanged,
    so applying this repeatedly is safe.

    Example:
        >>> upgrade_legacy_id("consul,app")
        'consul/roles/app'
        >>> upgrade_legacy_id("consul/roles/app")
        'consul/roles/app'
    """
    if not is_legacy_id(role_id):
        return role_id
    backend, name = role_id.split(LEGACY_SEPARATOR)
    return role_path(backend, name)


@dataclass(frozen=True)
class RoleId:
    """In-memory identity of a role: the backend mount plus the role name.

    The slash-joined string is only produced at the Vault and state-file
    boundary via :attr:`path`.
    """

    backend: str
    name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "backend", self.backend.strip("/"))

    @property
    def path(self) -> str:
        return role_path(self.backend, self.name)

    @classmethod
    def from_path(cls, path: str) -> "RoleId":
        """Decode a current-format path."""
        return cls(backend=backend_from_path(path), name=role_name_from_path(path))

    @classmethod
    def parse(cls, role_id: str) -> "RoleId":
        """Decode an ID in either the current or the legacy format."""
        return cls.from_path(upgrade_legacy_id(role_id))

    def __str__(self) -> str:
        return self.path
