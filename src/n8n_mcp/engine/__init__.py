"""Tool dispatch core.

Key Components:

- ToolDescriptor / ParameterSpec: Pydantic v2 declarations of tools and parameters
- ToolRegistry: Name -> descriptor mapping, populated at startup then frozen
- validate_arguments: Checks raw arguments against declared parameters
- Dispatcher: Lookup, validation, remote call and result mapping for one call
- ToolCallRequest / ToolCallResult: Inbound call and uniform result envelope
- RemoteClient: Interface for remote operations; N8nClient implements it with httpx
- Execution / Workflow / Tag: Typed upstream resources

Architecture:
- The registry is the single source of truth for both the advertised JSON
  Schema and the enforced validation rules
- Validation failures never reach the remote client
- Remote failures are raised as RemoteError subclasses and classified into
  an ErrorKind by the dispatcher
"""

from .client import RemoteClient
from .dispatcher import Dispatcher, classify_remote_error
from .exceptions import (
    DuplicateToolError,
    InvalidValueError,
    MissingParameterError,
    RegistryFrozenError,
    RemoteError,
    RemoteNotFoundError,
    RemoteRejectedError,
    RemoteTimeoutError,
    RemoteUnavailableError,
    ToolError,
    TypeMismatchError,
    UnknownParameterError,
    UnknownToolError,
    ValidationError,
)
from .n8n_client import N8nClient
from .registry import ToolRegistry
from .resources import (
    Execution,
    ExecutionHandle,
    Resource,
    ResourceKind,
    ResourcePage,
    Tag,
    Workflow,
)
from .result import ErrorKind, ResultStatus, ToolCallRequest, ToolCallResult
from .schema import ParameterKind, ParameterSpec, ToolDescriptor, ToolHints, ValidatedArgs
from .validation import validate_arguments

__all__ = [
    # Schema
    "ParameterKind",
    "ParameterSpec",
    "ToolDescriptor",
    "ToolHints",
    "ValidatedArgs",
    # Registry and dispatch
    "ToolRegistry",
    "validate_arguments",
    "Dispatcher",
    "classify_remote_error",
    "ToolCallRequest",
    "ToolCallResult",
    "ErrorKind",
    "ResultStatus",
    # Remote client
    "RemoteClient",
    "N8nClient",
    # Resources
    "ResourceKind",
    "Resource",
    "ResourcePage",
    "Execution",
    "ExecutionHandle",
    "Tag",
    "Workflow",
    # Exceptions
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
