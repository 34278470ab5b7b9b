"""Remote client interface consumed by tool handlers.

The dispatch core never talks HTTP itself. Handlers receive an object
satisfying RemoteClient and call one method per remote operation category.
Implementations own transport, authentication and timeouts, and report
failures by raising RemoteError subclasses (see exceptions.py).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from .resources import ExecutionHandle, Resource, ResourceKind, ResourcePage, Tag, Workflow


@runtime_checkable
class RemoteClient(Protocol):
    """Capability set the tool handlers depend on."""

    async def list(self, kind: ResourceKind, filter: Mapping[str, Any]) -> ResourcePage:  # noqa: A002
        """List resources of ``kind`` matching ``filter`` (one page)."""
        ...

    async def get(
        self, kind: ResourceKind, resource_id: str, params: Mapping[str, Any] | None = None
    ) -> Resource:
        """Fetch one resource. Raises RemoteNotFoundError if it does not exist."""
        ...

    async def create(self, kind: ResourceKind, payload: Mapping[str, Any]) -> Resource:
        ...

    async def update(
        self, kind: ResourceKind, resource_id: str, payload: Mapping[str, Any]
    ) -> Resource:
        ...

    async def delete(self, kind: ResourceKind, resource_id: str) -> Resource | None:
        """Delete one resource, returning it when the upstream echoes it back."""
        ...

    async def trigger(
        self, kind: ResourceKind, resource_id: str, data: Mapping[str, Any] | None = None
    ) -> ExecutionHandle:
        """Start asynchronous remote work (run a workflow via its webhook)."""
        ...

    async def set_active(self, workflow_id: str, active: bool) -> Workflow:
        ...

    async def list_workflow_tags(self, workflow_id: str) -> list[Tag]:
        ...

    async def replace_workflow_tags(self, workflow_id: str, tag_ids: list[str]) -> list[Tag]:
        ...


__all__ = ["RemoteClient"]
