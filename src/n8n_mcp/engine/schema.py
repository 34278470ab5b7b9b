"""Pydantic v2 schema for tool descriptors.

A ToolDescriptor declares a tool's name, its ordered parameters and the
handler that performs the remote operation. Descriptors are frozen once
constructed; the registry holds them for the lifetime of the process.

The JSON Schema published over MCP (``tools/list``) is generated from the
same ParameterSpec list the validator checks against, so the advertised
schema and the enforced schema cannot drift apart.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from typing import Self

    from .client import RemoteClient

logger = logging.getLogger(__name__)

ValidatedArgs = dict[str, Any]
"""Arguments after validation, keyed in declared parameter order."""

ToolHandler = Callable[["RemoteClient", ValidatedArgs], Awaitable[Any]]
"""Async callable bound to one remote client operation."""


class ParameterKind(str, Enum):
    """Runtime kinds a parameter value may take (JSON Schema type names)."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class ParameterSpec(BaseModel):
    """Declaration of a single tool parameter."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Parameter name (unique within a tool)")
    kind: ParameterKind = Field(description="Expected runtime kind of the value")
    required: bool = Field(default=False, description="Whether the caller must supply it")
    default: Any = Field(default=None, description="Value substituted when omitted")
    description: str = Field(default="", description="Human-readable description")
    min_length: int | None = Field(
        default=None, ge=1, description="Minimum length of a string value (strings only)"
    )
    items: ParameterKind | None = Field(
        default=None, description="Required kind of every element (arrays only)"
    )

    @model_validator(mode="after")
    def validate_required_has_no_default(self) -> Self:
        """A required parameter cannot also declare a default."""
        if self.required and self.default is not None:
            raise ValueError(f"Required parameter '{self.name}' cannot declare a default")
        if self.min_length is not None and self.kind is not ParameterKind.STRING:
            raise ValueError(f"Parameter '{self.name}': min_length applies to strings only")
        if self.items is not None and self.kind is not ParameterKind.ARRAY:
            raise ValueError(f"Parameter '{self.name}': items applies to arrays only")
        return self

    def json_schema(self) -> dict[str, Any]:
        """JSON Schema fragment for this parameter."""
        schema: dict[str, Any] = {"type": self.kind.value}
        if self.description:
            schema["description"] = self.description
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.items is not None:
            schema["items"] = {"type": self.items.value}
        if self.default is not None:
            schema["default"] = self.default
        return schema


class ToolHints(BaseModel):
    """Behavioral hints published alongside the tool (MCP tool annotations)."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    read_only: bool = False
    destructive: bool = False
    idempotent: bool = False
    open_world: bool = True


class ToolDescriptor(BaseModel):
    """Immutable description of one tool and its bound handler.

    Example:
        descriptor = ToolDescriptor(
            name="get_tag",
            description="Retrieve a tag by ID.",
            parameters=[ParameterSpec(name="id", kind=ParameterKind.STRING, required=True)],
            handler=get_tag,
        )
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1, max_length=128)
    description: str = ""
    parameters: tuple[ParameterSpec, ...] = ()
    handler: Any = Field(exclude=True, description="ToolHandler coroutine function")
    hints: ToolHints = Field(default_factory=ToolHints)

    @model_validator(mode="after")
    def validate_unique_parameter_names(self) -> Self:
        """Parameter names must be unique within a descriptor."""
        seen: set[str] = set()
        for spec in self.parameters:
            if spec.name in seen:
                raise ValueError(f"Tool '{self.name}' declares parameter '{spec.name}' twice")
            seen.add(spec.name)
        if not callable(self.handler):
            raise ValueError(f"Tool '{self.name}' handler must be callable")
        return self

    @property
    def parameter_names(self) -> list[str]:
        return [spec.name for spec in self.parameters]

    def input_schema(self) -> dict[str, Any]:
        """Generate the JSON Schema for this tool's arguments.

        Returns:
            JSON Schema object with declared properties, required names and
            additionalProperties disabled (unknown keys are rejected).
        """
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {spec.name: spec.json_schema() for spec in self.parameters},
            "additionalProperties": False,
        }
        required = [spec.name for spec in self.parameters if spec.required]
        if required:
            schema["required"] = required
        return schema


__all__ = [
    "ParameterKind",
    "ParameterSpec",
    "ToolDescriptor",
    "ToolHandler",
    "ToolHints",
    "ValidatedArgs",
]
