"""Typed upstream resources returned by the remote client.

The n8n API returns camelCase JSON. Models accept both the wire names
(aliases) and snake_case field names, and keep any extra upstream fields so
nothing is lost when a payload is echoed back to the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResourceKind(str, Enum):
    """Closed set of upstream resource kinds."""

    EXECUTION = "execution"
    WORKFLOW = "workflow"
    TAG = "tag"


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize using upstream field names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def _coerce_id(cls: type[Any], value: Any) -> Any:
    # Execution ids are numeric upstream; keep ids opaque strings everywhere.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class Tag(_UpstreamModel):
    """A workflow tag."""

    kind: ResourceKind = Field(default=ResourceKind.TAG, exclude=True)
    id: str
    name: str
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    _coerce = field_validator("id", mode="before")(_coerce_id)


class Workflow(_UpstreamModel):
    """A workflow definition."""

    kind: ResourceKind = Field(default=ResourceKind.WORKFLOW, exclude=True)
    id: str
    name: str
    active: bool = False
    nodes: list[dict[str, Any]] = Field(default_factory=list)
    connections: dict[str, Any] = Field(default_factory=dict)
    settings: dict[str, Any] | None = None
    static_data: Any = Field(default=None, alias="staticData")
    tags: list[Tag] = Field(default_factory=list)
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    _coerce = field_validator("id", mode="before")(_coerce_id)


class Execution(_UpstreamModel):
    """A single workflow execution record."""

    kind: ResourceKind = Field(default=ResourceKind.EXECUTION, exclude=True)
    id: str
    workflow_id: str | None = Field(default=None, alias="workflowId")
    status: str | None = None
    finished: bool | None = None
    mode: str | None = None
    started_at: str | None = Field(default=None, alias="startedAt")
    stopped_at: str | None = Field(default=None, alias="stoppedAt")
    data: dict[str, Any] | None = None

    _coerce = field_validator("id", "workflow_id", mode="before")(_coerce_id)


Resource = Execution | Workflow | Tag

RESOURCE_MODELS: dict[ResourceKind, type[Execution] | type[Workflow] | type[Tag]] = {
    ResourceKind.EXECUTION: Execution,
    ResourceKind.WORKFLOW: Workflow,
    ResourceKind.TAG: Tag,
}


class ResourcePage(BaseModel):
    """One page of a paginated listing."""

    kind: ResourceKind
    data: list[Resource] = Field(default_factory=list)
    next_cursor: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "data": [item.to_payload() for item in self.data],
            "nextCursor": self.next_cursor,
        }


class ExecutionHandle(BaseModel):
    """Handle for a workflow run started via its webhook.

    The run continues asynchronously upstream; ``response`` is whatever the
    webhook answered when it acknowledged the trigger.
    """

    id: str = Field(min_length=1)
    workflow_id: str
    status: str = "triggered"
    response: Any = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def parse_resource(kind: ResourceKind, data: dict[str, Any]) -> Resource:
    """Build the typed model for ``kind`` from an upstream JSON object."""
    return RESOURCE_MODELS[kind].model_validate(data)


__all__ = [
    "ResourceKind",
    "Tag",
    "Workflow",
    "Execution",
    "Resource",
    "ResourcePage",
    "ExecutionHandle",
    "parse_resource",
]
