"""Exceptions for consul-roles.

All exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery

Usage:
    from consul_roles.exceptions import (
        RoleError,
        MalformedIdentifierError,
        RoleNotFoundError,
    )
"""

from consul_roles.exceptions.base import (
    ConfigurationError,
    InternalInvariantError,
    InvalidRoleIdError,
    MalformedIdentifierError,
    ResourceNotFoundError,
    RoleConfigError,
    RoleError,
    RoleNotFoundError,
    RoleOperationError,
    ValidationError,
)

__all__ = [
    # Base exceptions
    "RoleError",
    "ValidationError",
    "ResourceNotFoundError",
    "ConfigurationError",
    # Identifier errors
    "MalformedIdentifierError",
    "InternalInvariantError",
    "InvalidRoleIdError",
    # Role errors
    "RoleConfigError",
    "RoleNotFoundError",
    "RoleOperationError",
]
