"""Shared test configuration for n8n-mcp tests.

Provides:
- FakeN8nClient: in-memory RemoteClient used by dispatcher and tool tests
- Registry and dispatcher fixtures built from the real tool catalog
- n8n_server: pytest-httpserver instance standing in for an n8n instance
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Mapping
from typing import Any
from unittest.mock import MagicMock

import pytest
from pytest_httpserver import HTTPServer

from n8n_mcp.config import ServerConfig
from n8n_mcp.context import AppContext
from n8n_mcp.engine import (
    Dispatcher,
    ExecutionHandle,
    N8nClient,
    RemoteNotFoundError,
    ResourceKind,
    ResourcePage,
    Tag,
    ToolRegistry,
    Workflow,
)
from n8n_mcp.engine.resources import parse_resource
from n8n_mcp.tools import create_default_registry

API_KEY = "test-api-key"


class FakeN8nClient:
    """
    In-memory stand-in for the n8n API.

    Records every call in ``calls`` as (method, args) tuples so tests can
    assert whether (and how) the remote side was reached. Set ``delay`` to
    make every operation sleep first, or ``error`` to make every operation
    raise.
    """

    def __init__(self) -> None:
        self.store: dict[ResourceKind, dict[str, dict[str, Any]]] = {
            kind: {} for kind in ResourceKind
        }
        self.workflow_tags: dict[str, list[str]] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.delay: float = 0.0
        self.error: BaseException | None = None
        self._next_id = 1

    def seed(self, kind: ResourceKind, **fields: Any) -> str:
        """Insert a resource directly and return its id."""
        resource_id = str(fields.pop("id", self._new_id()))
        self.store[kind][resource_id] = {"id": resource_id, **fields}
        return resource_id

    def _new_id(self) -> str:
        value = self._next_id
        self._next_id += 1
        return str(value)

    async def _enter(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    def _require(self, kind: ResourceKind, resource_id: str) -> dict[str, Any]:
        try:
            return self.store[kind][resource_id]
        except KeyError:
            raise RemoteNotFoundError(kind, resource_id) from None

    # RemoteClient ------------------------------------------------------------

    async def list(self, kind: ResourceKind, filter: Mapping[str, Any]) -> ResourcePage:  # noqa: A002
        await self._enter("list", kind, dict(filter))
        items = [parse_resource(kind, data) for data in self.store[kind].values()]
        limit = filter.get("limit")
        if limit is not None:
            items = items[:limit]
        return ResourcePage(kind=kind, data=items)

    async def get(
        self, kind: ResourceKind, resource_id: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        await self._enter("get", kind, resource_id, dict(params or {}))
        return parse_resource(kind, self._require(kind, resource_id))

    async def create(self, kind: ResourceKind, payload: Mapping[str, Any]) -> Any:
        await self._enter("create", kind, dict(payload))
        resource_id = self.seed(kind, **dict(payload))
        return parse_resource(kind, self.store[kind][resource_id])

    async def update(
        self, kind: ResourceKind, resource_id: str, payload: Mapping[str, Any]
    ) -> Any:
        await self._enter("update", kind, resource_id, dict(payload))
        self._require(kind, resource_id).update(payload)
        return parse_resource(kind, self.store[kind][resource_id])

    async def delete(self, kind: ResourceKind, resource_id: str) -> Any:
        await self._enter("delete", kind, resource_id)
        data = self._require(kind, resource_id)
        del self.store[kind][resource_id]
        return parse_resource(kind, data)

    async def trigger(
        self, kind: ResourceKind, resource_id: str, data: Mapping[str, Any] | None = None
    ) -> ExecutionHandle:
        await self._enter("trigger", kind, resource_id, data)
        execution_id = self.seed(ResourceKind.EXECUTION, workflowId=resource_id, status="running")
        return ExecutionHandle(id=execution_id, workflow_id=resource_id)

    async def set_active(self, workflow_id: str, active: bool) -> Workflow:
        await self._enter("set_active", workflow_id, active)
        data = self._require(ResourceKind.WORKFLOW, workflow_id)
        data["active"] = active
        return Workflow.model_validate(data)

    async def list_workflow_tags(self, workflow_id: str) -> list[Tag]:
        await self._enter("list_workflow_tags", workflow_id)
        self._require(ResourceKind.WORKFLOW, workflow_id)
        return [
            Tag.model_validate(self._require(ResourceKind.TAG, tag_id))
            for tag_id in self.workflow_tags.get(workflow_id, [])
        ]

    async def replace_workflow_tags(self, workflow_id: str, tag_ids: list[str]) -> list[Tag]:
        await self._enter("replace_workflow_tags", workflow_id, list(tag_ids))
        self._require(ResourceKind.WORKFLOW, workflow_id)
        tags = [Tag.model_validate(self._require(ResourceKind.TAG, t)) for t in tag_ids]
        self.workflow_tags[workflow_id] = list(tag_ids)
        return tags


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_client() -> FakeN8nClient:
    return FakeN8nClient()


@pytest.fixture
def registry() -> ToolRegistry:
    """Fresh (unfrozen) registry with the full tool catalog."""
    return create_default_registry()


@pytest.fixture
def dispatcher(registry: ToolRegistry, fake_client: FakeN8nClient) -> Dispatcher:
    return Dispatcher(registry, fake_client, default_timeout=5)


@pytest.fixture
def server_config() -> ServerConfig:
    return ServerConfig(base_url="http://n8n.test", api_key=API_KEY, tool_timeout=5)


@pytest.fixture
def mock_context(server_config: ServerConfig, fake_client: FakeN8nClient) -> MagicMock:
    """MagicMock FastMCP context whose lifespan context uses the fake client."""
    registry = create_default_registry()
    app_context = AppContext(
        config=server_config,
        registry=registry,
        client=fake_client,
        dispatcher=Dispatcher(registry, fake_client, default_timeout=server_config.tool_timeout),
    )
    mock_ctx = MagicMock()
    mock_ctx.request_context.lifespan_context = app_context
    return mock_ctx


@pytest.fixture
def n8n_server(httpserver: HTTPServer) -> HTTPServer:
    """Local HTTP server standing in for an n8n instance."""
    return httpserver


@pytest.fixture
async def n8n_client(n8n_server: HTTPServer) -> AsyncIterator[N8nClient]:
    """N8nClient pointed at the local HTTP server."""
    base_url = n8n_server.url_for("/").rstrip("/")
    async with N8nClient(base_url, API_KEY, timeout=5) as client:
        yield client
