"""n8n REST API client (httpx) implementing RemoteClient.

Features:
- One shared httpx.AsyncClient per server process (safe for concurrent use)
- API key authentication via the X-N8N-API-KEY header
- Optional HTTP basic auth for webhook triggers
- snake_case filters converted to n8n's camelCase query parameters
- Transport and HTTP failures converted to RemoteError subclasses
- No retries: every operation makes exactly one request
"""

from __future__ import annotations

import builtins
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import quote
from uuid import uuid4

import httpx
from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    RemoteError,
    RemoteNotFoundError,
    RemoteRejectedError,
    RemoteTimeoutError,
    RemoteUnavailableError,
)
from .resources import (
    ExecutionHandle,
    Resource,
    ResourceKind,
    ResourcePage,
    Tag,
    Workflow,
    parse_resource,
)

if TYPE_CHECKING:
    from ..config import ServerConfig

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

_COLLECTIONS: dict[ResourceKind, str] = {
    ResourceKind.EXECUTION: f"{API_PREFIX}/executions",
    ResourceKind.WORKFLOW: f"{API_PREFIX}/workflows",
    ResourceKind.TAG: f"{API_PREFIX}/tags",
}


def to_camel_case(name: str) -> str:
    """Convert a snake_case name to camelCase.

    Examples:
        >>> to_camel_case("exclude_pinned_data")
        'excludePinnedData'
        >>> to_camel_case("limit")
        'limit'
    """
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def build_query(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop unset values and camelCase the keys."""
    if not params:
        return {}
    return {to_camel_case(key): value for key, value in params.items() if value is not None}


def resource_path(kind: ResourceKind, resource_id: str, *suffix: str) -> str:
    """Path of a single resource, with the id encoded as exactly one segment.

    Examples:
        >>> resource_path(ResourceKind.TAG, "../workflows/9")
        '/api/v1/tags/..%2Fworkflows%2F9'
        >>> resource_path(ResourceKind.WORKFLOW, "42", "activate")
        '/api/v1/workflows/42/activate'

    Raises:
        RemoteNotFoundError: The id is empty or a dot segment, which no
            resource can be addressed by
    """
    if resource_id in ("", ".", ".."):
        raise RemoteNotFoundError(kind, resource_id)
    return "/".join([_COLLECTIONS[kind], quote(resource_id, safe=""), *suffix])


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text[:500]


class N8nClient:
    """
    Async client for the n8n public REST API.

    Example:
        async with N8nClient("https://n8n.example.com", api_key="...") as client:
            workflow = await client.get(ResourceKind.WORKFLOW, "123")
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        webhook_auth: tuple[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: n8n instance URL (no trailing /api/v1)
            api_key: n8n API key
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify TLS certificates
            webhook_auth: Optional (user, password) for webhook basic auth
            transport: Optional httpx transport (tests)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._webhook_auth = httpx.BasicAuth(*webhook_auth) if webhook_auth else None
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"X-N8N-API-KEY": api_key, "Accept": "application/json"},
            timeout=timeout,
            verify=verify_ssl,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: ServerConfig) -> N8nClient:
        """Create a client from server configuration."""
        webhook_auth = None
        if config.user and config.password is not None:
            webhook_auth = (config.user, config.password.get_secret_value())
        return cls(
            config.base_url,
            config.api_key.get_secret_value(),
            timeout=config.request_timeout,
            verify_ssl=config.verify_ssl,
            webhook_auth=webhook_auth,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> N8nClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # =========================================================================
    # RemoteClient operations
    # =========================================================================

    async def list(self, kind: ResourceKind, filter: Mapping[str, Any]) -> ResourcePage:  # noqa: A002
        body = await self._request("GET", _COLLECTIONS[kind], params=build_query(filter))
        if isinstance(body, builtins.list):
            items, next_cursor = body, None
        elif isinstance(body, dict):
            items, next_cursor = body.get("data") or [], body.get("nextCursor")
        else:
            raise RemoteError(f"Unexpected {kind.value} listing response: {type(body).__name__}")
        return ResourcePage(
            kind=kind,
            data=[self._parse(kind, item) for item in items],
            next_cursor=next_cursor,
        )

    async def get(
        self, kind: ResourceKind, resource_id: str, params: Mapping[str, Any] | None = None
    ) -> Resource:
        body = await self._request(
            "GET",
            resource_path(kind, resource_id),
            params=build_query(params),
            not_found=(kind, resource_id),
        )
        return self._parse(kind, body)

    async def create(self, kind: ResourceKind, payload: Mapping[str, Any]) -> Resource:
        body = await self._request("POST", _COLLECTIONS[kind], json=dict(payload))
        return self._parse(kind, body)

    async def update(
        self, kind: ResourceKind, resource_id: str, payload: Mapping[str, Any]
    ) -> Resource:
        body = await self._request(
            "PUT",
            resource_path(kind, resource_id),
            json=dict(payload),
            not_found=(kind, resource_id),
        )
        return self._parse(kind, body)

    async def delete(self, kind: ResourceKind, resource_id: str) -> Resource | None:
        body = await self._request(
            "DELETE", resource_path(kind, resource_id), not_found=(kind, resource_id)
        )
        if isinstance(body, dict) and body:
            return self._parse(kind, body)
        return None

    async def trigger(
        self, kind: ResourceKind, resource_id: str, data: Mapping[str, Any] | None = None
    ) -> ExecutionHandle:
        """Call the workflow's webhook and return without waiting for the run to finish.

        POSTs ``data`` as JSON when given, otherwise issues a GET.
        """
        if kind is not ResourceKind.WORKFLOW:
            raise ValueError(f"Only workflows can be triggered, got {kind.value}")

        path = resource_id.strip("/")
        body = await self._request(
            "POST" if data is not None else "GET",
            f"/webhook/{path}",
            json=dict(data) if data is not None else None,
            auth=self._webhook_auth,
            not_found=(kind, resource_id),
            expect_json=False,
        )

        execution_id = body.get("executionId") if isinstance(body, dict) else None
        handle_id = str(execution_id) if execution_id else f"trigger_{uuid4().hex[:12]}"
        logger.info(f"Triggered workflow webhook '{path}' (handle {handle_id})")
        return ExecutionHandle(id=handle_id, workflow_id=resource_id, response=body)

    async def set_active(self, workflow_id: str, active: bool) -> Workflow:
        action = "activate" if active else "deactivate"
        body = await self._request(
            "POST",
            resource_path(ResourceKind.WORKFLOW, workflow_id, action),
            not_found=(ResourceKind.WORKFLOW, workflow_id),
        )
        return self._parse(ResourceKind.WORKFLOW, body)  # type: ignore[return-value]

    async def list_workflow_tags(self, workflow_id: str) -> builtins.list[Tag]:
        body = await self._request(
            "GET",
            resource_path(ResourceKind.WORKFLOW, workflow_id, "tags"),
            not_found=(ResourceKind.WORKFLOW, workflow_id),
        )
        return self._parse_tags(body)

    async def replace_workflow_tags(
        self, workflow_id: str, tag_ids: builtins.list[str]
    ) -> builtins.list[Tag]:
        body = await self._request(
            "PUT",
            resource_path(ResourceKind.WORKFLOW, workflow_id, "tags"),
            json=[{"id": tag_id} for tag_id in tag_ids],
            not_found=(ResourceKind.WORKFLOW, workflow_id),
        )
        return self._parse_tags(body)

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        auth: httpx.Auth | None = None,
        not_found: tuple[ResourceKind, str] | None = None,
        expect_json: bool = True,
    ) -> Any:
        """Send one request and decode the response.

        Raises:
            RemoteTimeoutError: Transport timeout
            RemoteUnavailableError: Network failure or 5xx response
            RemoteNotFoundError: 404 for a request that targets one resource
            RemoteRejectedError: Any other 4xx response
            RemoteError: 2xx response whose body is not valid JSON
        """
        request_kwargs: dict[str, Any] = {"params": params or None, "json": json}
        if auth is not None:
            request_kwargs["auth"] = auth

        logger.debug(f"{method} {path} params={params}")
        try:
            response = await self._http.request(method, path, **request_kwargs)
        except httpx.TimeoutException as e:
            raise RemoteTimeoutError(
                f"Request timeout after {self._timeout}s: {method} {path}"
            ) from e
        except httpx.TransportError as e:
            raise RemoteUnavailableError(f"Network error for {method} {path}: {e}") from e

        status = response.status_code
        if status == 404 and not_found is not None:
            raise RemoteNotFoundError(*not_found)
        if 400 <= status < 500:
            raise RemoteRejectedError(status, _error_message(response))
        if status >= 500:
            raise RemoteUnavailableError(
                f"Upstream error ({status}) for {method} {path}: {_error_message(response)}",
                status_code=status,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            if not expect_json:
                return response.text
            raise RemoteError(f"Invalid JSON in response to {method} {path}") from e

    @staticmethod
    def _parse(kind: ResourceKind, body: Any) -> Resource:
        if not isinstance(body, dict):
            raise RemoteError(f"Unexpected {kind.value} response: {type(body).__name__}")
        try:
            return parse_resource(kind, body)
        except PydanticValidationError as e:
            raise RemoteError(f"Malformed {kind.value} in response: {e}") from e

    @classmethod
    def _parse_tags(cls, body: Any) -> builtins.list[Tag]:
        if isinstance(body, dict):
            body = body.get("data") or []
        if not isinstance(body, builtins.list):
            raise RemoteError(f"Unexpected tag list response: {type(body).__name__}")
        return [cls._parse(ResourceKind.TAG, item) for item in body]  # type: ignore[misc]


__all__ = ["N8nClient", "build_query", "resource_path", "to_camel_case"]
