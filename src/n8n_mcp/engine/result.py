"""Tool call request and result envelope.

ToolCallResult follows the same discriminated-union pattern as a load/execution
result monad: a status enum decides how the remaining fields are read, and
factory methods prevent invalid state combinations.

Envelope shape (``to_response()``):
    {"status": "success", "tool": "get_tag", "result": {...}}
    {"status": "failure", "tool": "get_tag", "kind": "not_found",
     "error": "tag 7 not found", "details": {...}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Machine-readable failure classification."""

    UNKNOWN_TOOL = "unknown_tool"
    INVALID_ARGUMENTS = "invalid_arguments"
    NOT_FOUND = "not_found"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    REMOTE_REJECTED = "remote_rejected"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class ResultStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ToolCallRequest:
    """One inbound tool call: a tool name and its raw arguments."""

    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)


def to_jsonable(payload: Any) -> Any:
    """Convert a handler payload (models, lists of models, plain data) to JSON data."""
    if payload is None:
        return None
    to_payload = getattr(payload, "to_payload", None)
    if callable(to_payload):
        return to_payload()
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    if isinstance(payload, (list, tuple)):
        return [to_jsonable(item) for item in payload]
    if isinstance(payload, dict):
        return {key: to_jsonable(value) for key, value in payload.items()}
    return payload


@dataclass
class ToolCallResult:
    """
    Outcome of a single dispatch (success or failure).

    Usage:
        result = await dispatcher.dispatch(ToolCallRequest("get_tag", {"id": "7"}))
        if result.is_success:
            tag = result.payload
        else:
            print(result.kind, result.message)
    """

    status: ResultStatus
    tool_name: str
    payload: Any = None
    kind: ErrorKind | None = None
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    cause: BaseException | None = None  # Original exception (never serialized)

    def __post_init__(self) -> None:
        """Validate state consistency.

        - SUCCESS results carry no error kind
        - FAILURE results must carry an error kind and message
        """
        if self.status == ResultStatus.SUCCESS and self.kind is not None:
            raise ValueError("Success result cannot have an error kind")
        if self.status == ResultStatus.FAILURE and (self.kind is None or not self.message):
            raise ValueError("Failure result must have an error kind and message")

    @property
    def is_success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == ResultStatus.FAILURE

    @classmethod
    def success(cls, tool_name: str, payload: Any) -> ToolCallResult:
        """Create a successful result wrapping the handler payload."""
        return cls(status=ResultStatus.SUCCESS, tool_name=tool_name, payload=payload)

    @classmethod
    def failure(
        cls,
        tool_name: str,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> ToolCallResult:
        """Create a failed result.

        Args:
            tool_name: Tool that was called
            kind: Error classification
            message: Human-readable explanation
            details: Optional structured context (e.g. validation reason)
            cause: Optional original exception, kept for callers and tests
        """
        return cls(
            status=ResultStatus.FAILURE,
            tool_name=tool_name,
            kind=kind,
            message=message,
            details=details or {},
            cause=cause,
        )

    def to_response(self) -> dict[str, Any]:
        """Format as the uniform response envelope (JSON-serializable)."""
        if self.is_success:
            return {
                "status": self.status.value,
                "tool": self.tool_name,
                "result": to_jsonable(self.payload),
            }

        if self.kind is None:
            raise ValueError(f"Failure result for '{self.tool_name}' has no error kind")
        response: dict[str, Any] = {
            "status": self.status.value,
            "tool": self.tool_name,
            "kind": self.kind.value,
            "error": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


__all__ = ["ErrorKind", "ResultStatus", "ToolCallRequest", "ToolCallResult", "to_jsonable"]
