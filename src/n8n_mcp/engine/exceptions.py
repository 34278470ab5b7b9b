"""Exception hierarchy for tool registration, argument validation and remote calls.

Exception Hierarchy:
    ToolError (base for the dispatch core)
    ├── DuplicateToolError (name registered twice)
    ├── UnknownToolError (lookup miss)
    ├── RegistryFrozenError (registration after startup)
    └── ValidationError (argument payload rejected)
        ├── MissingParameterError
        ├── TypeMismatchError
        ├── InvalidValueError
        └── UnknownParameterError

    RemoteError (base for remote client failures)
    ├── RemoteNotFoundError (resource does not exist)
    ├── RemoteRejectedError (upstream 4xx business error)
    ├── RemoteUnavailableError (network failure or upstream 5xx)
    └── RemoteTimeoutError (transport timeout)

Validation errors are raised before any network activity. Remote errors are
raised by the remote client and mapped to an ErrorKind by the dispatcher.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .resources import ResourceKind


class ToolError(Exception):
    """Base exception for the tool dispatch core."""

    pass


class DuplicateToolError(ToolError):
    """Raised when a tool name is registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' already registered")


class UnknownToolError(ToolError):
    """Raised when a tool name is not present in the registry.

    Attributes:
        name: The tool name that was requested
        available: Registered tool names at lookup time
    """

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available or []
        super().__init__(f"Unknown tool: '{name}'")


class RegistryFrozenError(ToolError):
    """Raised when registration is attempted after the registry was frozen."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Cannot register tool '{name}': registry is frozen (registration is startup-only)"
        )


class ValidationError(ToolError):
    """Base exception for rejected tool arguments.

    Subclasses expose a machine-readable ``reason`` and ``to_details()`` so the
    dispatcher can report which rule was violated.
    """

    reason: str = "invalid_arguments"

    def __init__(self, parameter: str, message: str) -> None:
        self.parameter = parameter
        super().__init__(message)

    def to_details(self) -> dict[str, Any]:
        """Structured description of the violation."""
        return {"reason": self.reason, "parameter": self.parameter}


class MissingParameterError(ValidationError):
    """A required parameter was not supplied."""

    reason = "missing_parameter"

    def __init__(self, parameter: str) -> None:
        super().__init__(parameter, f"Missing required parameter '{parameter}'")


class TypeMismatchError(ValidationError):
    """A parameter value does not match its declared kind.

    Attributes:
        parameter: Parameter name
        expected_kind: Declared kind (e.g. "integer")
        actual_kind: Kind of the supplied value (e.g. "string")
    """

    reason = "type_mismatch"

    def __init__(self, parameter: str, expected_kind: str, actual_kind: str) -> None:
        self.expected_kind = expected_kind
        self.actual_kind = actual_kind
        super().__init__(
            parameter,
            f"Parameter '{parameter}' expects {expected_kind}, got {actual_kind}",
        )

    def to_details(self) -> dict[str, Any]:
        details = super().to_details()
        details["expected"] = self.expected_kind
        details["actual"] = self.actual_kind
        return details


class InvalidValueError(ValidationError):
    """A parameter value has the right kind but breaks a declared constraint."""

    reason = "invalid_value"

    def __init__(self, parameter: str, constraint: str) -> None:
        self.constraint = constraint
        super().__init__(parameter, f"Parameter '{parameter}' {constraint}")

    def to_details(self) -> dict[str, Any]:
        details = super().to_details()
        details["constraint"] = self.constraint
        return details


class UnknownParameterError(ValidationError):
    """An argument key is not declared by the tool."""

    reason = "unknown_parameter"

    def __init__(self, key: str, allowed: list[str] | None = None) -> None:
        self.allowed = allowed or []
        message = f"Unknown parameter '{key}'"
        if self.allowed:
            message += f". Allowed parameters: {', '.join(self.allowed)}"
        super().__init__(key, message)


# =============================================================================
# Remote client errors
# =============================================================================


class RemoteError(Exception):
    """Base exception for failures reported by the remote client.

    A bare RemoteError (not one of the subclasses) means the upstream answered
    but the answer could not be interpreted.
    """

    pass


class RemoteNotFoundError(RemoteError):
    """The requested resource does not exist upstream."""

    def __init__(self, kind: ResourceKind | str, resource_id: str) -> None:
        self.kind = getattr(kind, "value", kind)
        self.resource_id = resource_id
        super().__init__(f"{self.kind} {resource_id} not found")


class RemoteRejectedError(RemoteError):
    """The upstream refused the request (4xx other than 404)."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"Request rejected ({status_code}): {message}")


class RemoteUnavailableError(RemoteError):
    """The upstream could not be reached or failed server-side."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RemoteTimeoutError(RemoteError):
    """The transport gave up waiting for the upstream."""

    pass


__all__ = [
    "ToolError",
    "DuplicateToolError",
    "UnknownToolError",
    "RegistryFrozenError",
    "ValidationError",
    "MissingParameterError",
    "TypeMismatchError",
    "InvalidValueError",
    "UnknownParameterError",
    "RemoteError",
    "RemoteNotFoundError",
    "RemoteRejectedError",
    "RemoteUnavailableError",
    "RemoteTimeoutError",
]
