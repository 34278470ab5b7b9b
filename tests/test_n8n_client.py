"""Tests for N8nClient against a local HTTP server standing in for n8n."""

import json
import time

import httpx
import pytest
from conftest import API_KEY
from pytest_httpserver import HTTPServer
from werkzeug.wrappers import Request, Response

from n8n_mcp.config import ServerConfig
from n8n_mcp.engine import (
    Execution,
    N8nClient,
    RemoteError,
    RemoteNotFoundError,
    RemoteRejectedError,
    RemoteTimeoutError,
    RemoteUnavailableError,
    ResourceKind,
    Tag,
    Workflow,
)
from n8n_mcp.engine.n8n_client import build_query, resource_path, to_camel_case

AUTH_HEADERS = {"X-N8N-API-KEY": API_KEY}

WORKFLOW = {
    "id": "wf1",
    "name": "Hello",
    "active": False,
    "nodes": [{"name": "Webhook", "type": "n8n-nodes-base.webhook"}],
    "connections": {},
    "settings": {"executionTimeout": 3600},
    "versionId": "abc",
    "tags": [{"id": "t1", "name": "ops"}],
}


class TestQueryBuilding:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("limit", "limit"),
            ("include_data", "includeData"),
            ("exclude_pinned_data", "excludePinnedData"),
            ("workflow_id", "workflowId"),
        ],
    )
    def test_to_camel_case(self, name: str, expected: str) -> None:
        assert to_camel_case(name) == expected

    def test_build_query_drops_unset_values(self) -> None:
        assert build_query({"limit": 5, "cursor": None, "project_id": "p"}) == {
            "limit": 5,
            "projectId": "p",
        }

    def test_build_query_empty(self) -> None:
        assert build_query(None) == {}


class TestReads:
    async def test_list_workflows(self, n8n_server: HTTPServer, n8n_client: N8nClient) -> None:
        n8n_server.expect_request(
            "/api/v1/workflows",
            method="GET",
            headers=AUTH_HEADERS,
            query_string={"active": "true", "limit": "10"},
        ).respond_with_json({"data": [WORKFLOW], "nextCursor": "next-page"})

        page = await n8n_client.list(ResourceKind.WORKFLOW, {"active": True, "limit": 10, "cursor": None})

        assert page.next_cursor == "next-page"
        assert len(page.data) == 1
        workflow = page.data[0]
        assert isinstance(workflow, Workflow)
        assert workflow.tags[0].name == "ops"
        assert page.to_payload()["data"][0]["versionId"] == "abc"

    async def test_list_accepts_bare_array(self, n8n_server: HTTPServer, n8n_client: N8nClient) -> None:
        n8n_server.expect_request("/api/v1/tags").respond_with_json([{"id": "t1", "name": "ops"}])

        page = await n8n_client.list(ResourceKind.TAG, {})

        assert [tag.name for tag in page.data] == ["ops"]
        assert page.next_cursor is None

    async def test_get_execution_uses_executions_path(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request(
            "/api/v1/executions/42", query_string={"includeData": "true"}
        ).respond_with_json({"id": 42, "workflowId": 7, "status": "success", "finished": True})

        execution = await n8n_client.get(ResourceKind.EXECUTION, "42", {"include_data": True})

        assert isinstance(execution, Execution)
        assert execution.id == "42"
        assert execution.workflow_id == "7"

    async def test_get_missing_raises_not_found(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request("/api/v1/tags/nope").respond_with_json(
            {"message": "Not Found"}, status=404
        )

        with pytest.raises(RemoteNotFoundError, match="tag nope not found"):
            await n8n_client.get(ResourceKind.TAG, "nope")

    async def test_workflow_tags(self, n8n_server: HTTPServer, n8n_client: N8nClient) -> None:
        n8n_server.expect_request("/api/v1/workflows/wf1/tags").respond_with_json(
            [{"id": "t1", "name": "ops"}, {"id": "t2", "name": "billing"}]
        )

        tags = await n8n_client.list_workflow_tags("wf1")

        assert all(isinstance(tag, Tag) for tag in tags)
        assert [tag.id for tag in tags] == ["t1", "t2"]


class TestWrites:
    async def test_create_workflow_sends_body(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        body = {"name": "Hello", "nodes": [], "connections": {}, "settings": {}}
        n8n_server.expect_request(
            "/api/v1/workflows", method="POST", json=body, headers=AUTH_HEADERS
        ).respond_with_json({**body, "id": "wf9"})

        workflow = await n8n_client.create(ResourceKind.WORKFLOW, body)

        assert workflow.id == "wf9"

    async def test_update_tag(self, n8n_server: HTTPServer, n8n_client: N8nClient) -> None:
        n8n_server.expect_request(
            "/api/v1/tags/t1", method="PUT", json={"name": "renamed"}
        ).respond_with_json({"id": "t1", "name": "renamed"})

        tag = await n8n_client.update(ResourceKind.TAG, "t1", {"name": "renamed"})

        assert tag.name == "renamed"

    async def test_delete_returns_deleted_resource(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request("/api/v1/executions/5", method="DELETE").respond_with_json(
            {"id": 5, "status": "success"}
        )

        deleted = await n8n_client.delete(ResourceKind.EXECUTION, "5")

        assert deleted is not None
        assert deleted.id == "5"

    async def test_delete_with_empty_body(self, n8n_server: HTTPServer, n8n_client: N8nClient) -> None:
        n8n_server.expect_request("/api/v1/tags/t1", method="DELETE").respond_with_data(
            "", status=204
        )

        assert await n8n_client.delete(ResourceKind.TAG, "t1") is None

    @pytest.mark.parametrize(("active", "action"), [(True, "activate"), (False, "deactivate")])
    async def test_set_active(
        self, n8n_server: HTTPServer, n8n_client: N8nClient, active: bool, action: str
    ) -> None:
        n8n_server.expect_request(
            f"/api/v1/workflows/wf1/{action}", method="POST"
        ).respond_with_json({**WORKFLOW, "active": active})

        workflow = await n8n_client.set_active("wf1", active)

        assert workflow.active is active

    async def test_replace_workflow_tags(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request(
            "/api/v1/workflows/wf1/tags", method="PUT", json=[{"id": "t1"}, {"id": "t2"}]
        ).respond_with_json([{"id": "t1", "name": "ops"}, {"id": "t2", "name": "billing"}])

        tags = await n8n_client.replace_workflow_tags("wf1", ["t1", "t2"])

        assert [tag.name for tag in tags] == ["ops", "billing"]


ESCAPING_ID = "a/b?c#d"
ESCAPED_ID = "a%2Fb%3Fc%23d"


def recording_client(requests: list[httpx.Request]) -> N8nClient:
    """Client whose transport records every request and answers with canned bodies."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "DELETE":
            return httpx.Response(204)
        if request.url.raw_path.endswith(b"/tags"):
            return httpx.Response(200, json=[])
        return httpx.Response(200, json=WORKFLOW)

    return N8nClient("http://n8n.test", API_KEY, transport=httpx.MockTransport(handler))


class TestResourcePaths:
    def test_resource_path_encodes_id_as_one_segment(self) -> None:
        assert resource_path(ResourceKind.TAG, "t1") == "/api/v1/tags/t1"
        assert resource_path(ResourceKind.TAG, "../workflows/9") == "/api/v1/tags/..%2Fworkflows%2F9"
        assert (
            resource_path(ResourceKind.WORKFLOW, ESCAPING_ID, "tags")
            == f"/api/v1/workflows/{ESCAPED_ID}/tags"
        )

    async def test_delete_tag_cannot_reach_workflows(self) -> None:
        requests: list[httpx.Request] = []

        async with recording_client(requests) as client:
            await client.delete(ResourceKind.TAG, "../workflows/9")

        assert len(requests) == 1
        assert requests[0].method == "DELETE"
        assert requests[0].url.raw_path == b"/api/v1/tags/..%2Fworkflows%2F9"

    @pytest.mark.parametrize(
        ("operation", "expected_path"),
        [
            (lambda c: c.get(ResourceKind.WORKFLOW, ESCAPING_ID), f"/api/v1/workflows/{ESCAPED_ID}"),
            (
                lambda c: c.update(ResourceKind.WORKFLOW, ESCAPING_ID, {"name": "x"}),
                f"/api/v1/workflows/{ESCAPED_ID}",
            ),
            (
                lambda c: c.set_active(ESCAPING_ID, True),
                f"/api/v1/workflows/{ESCAPED_ID}/activate",
            ),
            (
                lambda c: c.list_workflow_tags(ESCAPING_ID),
                f"/api/v1/workflows/{ESCAPED_ID}/tags",
            ),
            (
                lambda c: c.replace_workflow_tags(ESCAPING_ID, ["t1"]),
                f"/api/v1/workflows/{ESCAPED_ID}/tags",
            ),
        ],
        ids=["get", "update", "set_active", "list_workflow_tags", "replace_workflow_tags"],
    )
    async def test_ids_are_percent_encoded(self, operation, expected_path: str) -> None:
        requests: list[httpx.Request] = []

        async with recording_client(requests) as client:
            await operation(client)

        assert len(requests) == 1
        assert requests[0].url.raw_path.split(b"?")[0] == expected_path.encode()

    @pytest.mark.parametrize("resource_id", ["", ".", ".."])
    async def test_unaddressable_id_sends_nothing(self, resource_id: str) -> None:
        requests: list[httpx.Request] = []

        async with recording_client(requests) as client:
            with pytest.raises(RemoteNotFoundError):
                await client.get(ResourceKind.WORKFLOW, resource_id)
            with pytest.raises(RemoteNotFoundError):
                await client.delete(ResourceKind.TAG, resource_id)

        assert requests == []


class TestTrigger:
    async def test_trigger_with_data_posts_json(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request(
            "/webhook/hello", method="POST", json={"x": 1}
        ).respond_with_json({"executionId": "77"})

        handle = await n8n_client.trigger(ResourceKind.WORKFLOW, "hello", {"x": 1})

        assert handle.id == "77"
        assert handle.workflow_id == "hello"
        assert handle.status == "triggered"

    async def test_trigger_without_data_uses_get(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request("/webhook/hello", method="GET").respond_with_data(
            "Workflow was started", content_type="text/plain"
        )

        handle = await n8n_client.trigger(ResourceKind.WORKFLOW, "/hello")

        assert handle.id.startswith("trigger_")
        assert handle.response == "Workflow was started"

    async def test_trigger_unknown_webhook(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request("/webhook/nope").respond_with_json(
            {"message": "The requested webhook is not registered."}, status=404
        )

        with pytest.raises(RemoteNotFoundError):
            await n8n_client.trigger(ResourceKind.WORKFLOW, "nope")

    async def test_trigger_uses_basic_auth(self, n8n_server: HTTPServer) -> None:
        seen: dict[str, str | None] = {}

        def handler(request: Request) -> Response:
            seen["authorization"] = request.headers.get("Authorization")
            return Response(json.dumps({}), content_type="application/json")

        n8n_server.expect_request("/webhook/secure").respond_with_handler(handler)
        base_url = n8n_server.url_for("/").rstrip("/")

        async with N8nClient(base_url, API_KEY, webhook_auth=("user", "pass")) as client:
            await client.trigger(ResourceKind.WORKFLOW, "secure")

        assert seen["authorization"] is not None
        assert seen["authorization"].startswith("Basic ")

    async def test_only_workflows_can_be_triggered(self, n8n_client: N8nClient) -> None:
        with pytest.raises(ValueError):
            await n8n_client.trigger(ResourceKind.TAG, "t1")


class TestErrorMapping:
    async def test_rejected(self, n8n_server: HTTPServer, n8n_client: N8nClient) -> None:
        n8n_server.expect_request("/api/v1/tags", method="POST").respond_with_json(
            {"message": "Tag already exists"}, status=409
        )

        with pytest.raises(RemoteRejectedError) as exc_info:
            await n8n_client.create(ResourceKind.TAG, {"name": "ops"})

        assert exc_info.value.status_code == 409
        assert "Tag already exists" in str(exc_info.value)

    async def test_listing_404_is_rejected_not_not_found(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request("/api/v1/tags").respond_with_data("", status=404)

        with pytest.raises(RemoteRejectedError):
            await n8n_client.list(ResourceKind.TAG, {})

    async def test_unauthorized_is_rejected(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request("/api/v1/workflows/wf1").respond_with_json(
            {"message": "unauthorized"}, status=401
        )

        with pytest.raises(RemoteRejectedError, match="401"):
            await n8n_client.get(ResourceKind.WORKFLOW, "wf1")

    async def test_server_error_is_unavailable(
        self, n8n_server: HTTPServer, n8n_client: N8nClient
    ) -> None:
        n8n_server.expect_request("/api/v1/workflows").respond_with_data("oops", status=502)

        with pytest.raises(RemoteUnavailableError) as exc_info:
            await n8n_client.list(ResourceKind.WORKFLOW, {})

        assert exc_info.value.status_code == 502

    async def test_invalid_json(self, n8n_server: HTTPServer, n8n_client: N8nClient) -> None:
        n8n_server.expect_request("/api/v1/tags/t1").respond_with_data(
            "<html>", content_type="text/html"
        )

        with pytest.raises(RemoteError, match="Invalid JSON"):
            await n8n_client.get(ResourceKind.TAG, "t1")

    async def test_malformed_resource(self, n8n_server: HTTPServer, n8n_client: N8nClient) -> None:
        n8n_server.expect_request("/api/v1/tags/t1").respond_with_json({"id": "t1"})

        with pytest.raises(RemoteError, match="Malformed tag"):
            await n8n_client.get(ResourceKind.TAG, "t1")

    async def test_connection_refused_is_unavailable(self) -> None:
        async with N8nClient("http://127.0.0.1:1", API_KEY, timeout=2) as client:
            with pytest.raises(RemoteUnavailableError):
                await client.list(ResourceKind.TAG, {})

    async def test_timeout(self, n8n_server: HTTPServer) -> None:
        def slow(request: Request) -> Response:
            time.sleep(0.5)
            return Response("[]", content_type="application/json")

        n8n_server.expect_request("/api/v1/tags").respond_with_handler(slow)
        base_url = n8n_server.url_for("/").rstrip("/")

        async with N8nClient(base_url, API_KEY, timeout=0.1) as client:
            with pytest.raises(RemoteTimeoutError):
                await client.list(ResourceKind.TAG, {})

    async def test_transport_errors_via_mock_transport(self) -> None:
        def raise_connect_error(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        client = N8nClient(
            "http://n8n.test", API_KEY, transport=httpx.MockTransport(raise_connect_error)
        )
        async with client:
            with pytest.raises(RemoteUnavailableError, match="Network error"):
                await client.get(ResourceKind.WORKFLOW, "wf1")


class TestFromConfig:
    async def test_from_config(self) -> None:
        config = ServerConfig(
            base_url="https://n8n.example.com/",
            api_key="secret",
            user="bot",
            password="pw",
            request_timeout=12,
        )

        async with N8nClient.from_config(config) as client:
            assert client.base_url == "https://n8n.example.com"
            assert client._http.headers["X-N8N-API-KEY"] == "secret"
            assert client._webhook_auth is not None
            assert client._timeout == 12
