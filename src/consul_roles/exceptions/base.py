"""Base exception classes for consul-roles.

Every error raised by the role layer carries structured information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context (identifier, path, operation, ...)
"""

from typing import Any, Dict, Optional


class RoleError(Exception):
    """Base exception for all consul-roles errors.

    Attributes:
        code: Machine-readable error code (e.g., "MALFORMED_IDENTIFIER")
        message: Human-readable error message
        details: Optional additional context for logging/recovery
    """

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for JSON output.

        Returns:
            Dictionary with code, message, and details keys.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(RoleError):
    """Input data fails validation rules."""

    pass


class ResourceNotFoundError(RoleError):
    """A requested resource does not exist."""

    pass


class ConfigurationError(RoleError):
    """Configuration is invalid or incomplete."""

    pass


class MalformedIdentifierError(ValidationError):
    """An identifier does not have the ``<backend>/roles/<name>`` shape.

    Permanent data condition: callers should abandon the operation and
    drop whatever record holds the identifier.
    """

    def __init__(self, identifier: str, operation: str, message: Optional[str] = None):
        self.identifier = identifier
        self.operation = operation
        super().__init__(
            code="MALFORMED_IDENTIFIER",
            message=message or f"no {operation.split('-', 1)[-1]} found in {identifier!r}",
            details={"identifier": identifier, "operation": operation},
        )


class InternalInvariantError(RoleError):
    """A fixed pattern matched with an unexpected number of capture groups."""

    def __init__(self, identifier: str, operation: str, groups: int):
        self.identifier = identifier
        self.operation = operation
        super().__init__(
            code="INTERNAL_INVARIANT_VIOLATION",
            message=f"unexpected number of matches ({groups}) for {operation}",
            details={"identifier": identifier, "operation": operation, "groups": groups},
        )


class InvalidRoleIdError(ValidationError):
    """The stored role ID could not be decoded; the record was dropped."""

    def __init__(self, identifier: str, cause: Optional[RoleError] = None):
        details: Dict[str, Any] = {"identifier": identifier}
        if cause is not None:
            details["cause"] = cause.code
        super().__init__(
            code="INVALID_ROLE_ID",
            message=f"invalid role ID {identifier!r}",
            details=details,
        )


class RoleConfigError(ValidationError):
    """A role definition is incomplete or inconsistent."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="INVALID_ROLE_CONFIG", message=message, details=details)


class RoleNotFoundError(ResourceNotFoundError):
    """Vault holds no role configuration at the given path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            code="ROLE_NOT_FOUND",
            message="resource not found",
            details={"path": path},
        )


class RoleOperationError(RoleError):
    """A Vault call for a role failed."""

    def __init__(self, message: str, path: str, operation: str):
        self.path = path
        self.operation = operation
        super().__init__(
            code="ROLE_OPERATION_FAILED",
            message=message,
            details={"path": path, "operation": operation},
        )
