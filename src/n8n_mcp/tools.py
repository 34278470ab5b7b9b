"""MCP tool catalog for the n8n API.

This module holds the fixed registration step: one ToolDescriptor per
supported operation, each bound to a handler that performs a single remote
client call. ``create_default_registry()`` builds the registry the server
freezes at startup.

Tool groups:
- Executions: list_executions, get_execution, delete_execution
- Workflows: create/list/get/update/delete, activate/deactivate,
  get/update workflow tags, run_workflow (webhook trigger)
- Tags: list_tags, get_tag, create_tag, update_tag, delete_tag
"""

from typing import Any

from .engine import (
    ParameterKind,
    ParameterSpec,
    RemoteClient,
    ResourceKind,
    ToolDescriptor,
    ToolHints,
    ToolRegistry,
    ValidatedArgs,
)

# n8n rejects workflows without settings; these match the editor's defaults
DEFAULT_WORKFLOW_SETTINGS: dict[str, Any] = {
    "saveExecutionProgress": False,
    "saveManualExecutions": False,
    "saveDataErrorExecution": "all",
    "saveDataSuccessExecution": "all",
    "executionTimeout": 3600,
}

READ_ONLY = ToolHints(read_only=True, idempotent=True)
CREATES = ToolHints()
UPDATES = ToolHints(idempotent=True)
DELETES = ToolHints(destructive=True, idempotent=True)


def _string(
    name: str, description: str, *, required: bool = False, min_length: int | None = None
) -> ParameterSpec:
    return ParameterSpec(
        name=name,
        kind=ParameterKind.STRING,
        required=required,
        description=description,
        min_length=min_length,
    )


def _id(description: str) -> ParameterSpec:
    return _string("id", description, required=True, min_length=1)


_LIMIT = ParameterSpec(
    name="limit",
    kind=ParameterKind.INTEGER,
    description="Maximum number of items to return (upstream maximum is 250).",
)
_CURSOR = _string(
    "cursor",
    "Pagination cursor. Leave empty for the first page; use nextCursor from the "
    "previous response to fetch the next one.",
)


def _pick(args: ValidatedArgs, *names: str) -> dict[str, Any]:
    return {name: args[name] for name in names}


def _workflow_body(args: ValidatedArgs) -> dict[str, Any]:
    """Request body accepted by n8n for workflow create/update."""
    body: dict[str, Any] = {
        "name": args["name"],
        "nodes": args["nodes"],
        "connections": args["connections"],
        "settings": args["settings"],
    }
    # An explicit empty object is kept; only an omitted value gets the defaults
    if body["settings"] is None:
        body["settings"] = dict(DEFAULT_WORKFLOW_SETTINGS)
    if args["static_data"] is not None:
        body["staticData"] = args["static_data"]
    return body


# =============================================================================
# Handlers
# =============================================================================


async def list_executions(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.list(ResourceKind.EXECUTION, args)


async def get_execution(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.get(
        ResourceKind.EXECUTION, args["id"], _pick(args, "include_data")
    )


async def delete_execution(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.delete(ResourceKind.EXECUTION, args["id"])


async def create_workflow(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.create(ResourceKind.WORKFLOW, _workflow_body(args))


async def list_workflows(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.list(ResourceKind.WORKFLOW, args)


async def get_workflow(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.get(
        ResourceKind.WORKFLOW, args["id"], _pick(args, "exclude_pinned_data")
    )


async def delete_workflow(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.delete(ResourceKind.WORKFLOW, args["id"])


async def update_workflow(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.update(ResourceKind.WORKFLOW, args["id"], _workflow_body(args))


async def activate_workflow(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.set_active(args["id"], True)


async def deactivate_workflow(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.set_active(args["id"], False)


async def get_workflow_tags(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.list_workflow_tags(args["id"])


async def update_workflow_tags(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.replace_workflow_tags(args["id"], args["tag_ids"])


async def run_workflow(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.trigger(ResourceKind.WORKFLOW, args["id"], args["data"])


async def list_tags(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.list(ResourceKind.TAG, args)


async def get_tag(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.get(ResourceKind.TAG, args["id"])


async def create_tag(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.create(ResourceKind.TAG, _pick(args, "name"))


async def update_tag(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.update(ResourceKind.TAG, args["id"], _pick(args, "name"))


async def delete_tag(client: RemoteClient, args: ValidatedArgs) -> Any:
    return await client.delete(ResourceKind.TAG, args["id"])


# =============================================================================
# Descriptors
# =============================================================================


def _workflow_definition_params() -> list[ParameterSpec]:
    return [
        _string("name", "The name of the workflow.", required=True),
        ParameterSpec(
            name="nodes",
            kind=ParameterKind.ARRAY,
            required=True,
            items=ParameterKind.OBJECT,
            description="The nodes of the workflow (n8n node objects).",
        ),
        ParameterSpec(
            name="connections",
            kind=ParameterKind.OBJECT,
            required=True,
            description="The connections between nodes, keyed by source node name.",
        ),
        ParameterSpec(
            name="settings",
            kind=ParameterKind.OBJECT,
            description="Workflow settings. Defaults to n8n's standard settings when omitted.",
        ),
        ParameterSpec(
            name="static_data",
            kind=ParameterKind.OBJECT,
            description="Static data stored with the workflow. Optional.",
        ),
    ]


def build_tool_descriptors() -> list[ToolDescriptor]:
    """Create the descriptors for every supported tool, in listing order."""
    return [
        # Executions
        ToolDescriptor(
            name="list_executions",
            description="Retrieve all executions (with optional filters).",
            parameters=(
                ParameterSpec(
                    name="include_data",
                    kind=ParameterKind.BOOLEAN,
                    description="Whether or not to include the execution's detailed data.",
                ),
                _string(
                    "status",
                    "The status of an execution: 'error', 'success' or 'waiting'. Optional.",
                ),
                _string("workflow_id", "Workflow ID to filter executions by. Optional."),
                _string("project_id", "Project ID to filter executions by. Optional."),
                _LIMIT,
                _CURSOR,
            ),
            handler=list_executions,
            hints=READ_ONLY.model_copy(update={"title": "List Executions"}),
        ),
        ToolDescriptor(
            name="get_execution",
            description="Retrieve an execution by ID.",
            parameters=(
                _id("The execution ID to use."),
                ParameterSpec(
                    name="include_data",
                    kind=ParameterKind.BOOLEAN,
                    description="Whether or not to include the execution's detailed data.",
                ),
            ),
            handler=get_execution,
            hints=READ_ONLY.model_copy(update={"title": "Get Execution"}),
        ),
        ToolDescriptor(
            name="delete_execution",
            description="Delete an execution by ID.",
            parameters=(_id("The execution ID to delete."),),
            handler=delete_execution,
            hints=DELETES.model_copy(update={"title": "Delete Execution"}),
        ),
        # Workflows
        ToolDescriptor(
            name="create_workflow",
            description="Create a new workflow.",
            parameters=tuple(_workflow_definition_params()),
            handler=create_workflow,
            hints=CREATES.model_copy(update={"title": "Create Workflow"}),
        ),
        ToolDescriptor(
            name="list_workflows",
            description=(
                "Retrieve all workflows (with optional filters). For a workflow to be "
                "runnable with run_workflow, its first node must be a webhook node "
                "('n8n-nodes-base.webhook')."
            ),
            parameters=(
                ParameterSpec(
                    name="active",
                    kind=ParameterKind.BOOLEAN,
                    description="Only return active (true) or inactive (false) workflows.",
                ),
                _string("tags", "Comma-separated tag names to filter by."),
                _string("name", "Workflow name to filter by."),
                _string("project_id", "Project ID to filter by."),
                ParameterSpec(
                    name="exclude_pinned_data",
                    kind=ParameterKind.BOOLEAN,
                    description="Leave pinned data out of the response.",
                ),
                _LIMIT,
                _CURSOR,
            ),
            handler=list_workflows,
            hints=READ_ONLY.model_copy(update={"title": "List Workflows"}),
        ),
        ToolDescriptor(
            name="get_workflow",
            description="Retrieve the details of a single workflow by its ID.",
            parameters=(
                _id("The workflow ID to fetch."),
                ParameterSpec(
                    name="exclude_pinned_data",
                    kind=ParameterKind.BOOLEAN,
                    description="Leave pinned data out of the response.",
                ),
            ),
            handler=get_workflow,
            hints=READ_ONLY.model_copy(update={"title": "Get Workflow"}),
        ),
        ToolDescriptor(
            name="delete_workflow",
            description="Delete a single workflow by its ID.",
            parameters=(_id("The workflow ID to delete."),),
            handler=delete_workflow,
            hints=DELETES.model_copy(update={"title": "Delete Workflow"}),
        ),
        ToolDescriptor(
            name="update_workflow",
            description="Update a workflow (replaces its name, nodes, connections and settings).",
            parameters=(_id("The ID of the workflow to update."), *_workflow_definition_params()),
            handler=update_workflow,
            hints=UPDATES.model_copy(update={"title": "Update Workflow"}),
        ),
        ToolDescriptor(
            name="activate_workflow",
            description="Activate a single workflow by ID.",
            parameters=(_id("The workflow ID to activate."),),
            handler=activate_workflow,
            hints=UPDATES.model_copy(update={"title": "Activate Workflow"}),
        ),
        ToolDescriptor(
            name="deactivate_workflow",
            description="Deactivate a single workflow by ID.",
            parameters=(_id("The workflow ID to deactivate."),),
            handler=deactivate_workflow,
            hints=UPDATES.model_copy(update={"title": "Deactivate Workflow"}),
        ),
        ToolDescriptor(
            name="get_workflow_tags",
            description="Get the tags of a single workflow by ID.",
            parameters=(_id("The workflow ID to use."),),
            handler=get_workflow_tags,
            hints=READ_ONLY.model_copy(update={"title": "Get Workflow Tags"}),
        ),
        ToolDescriptor(
            name="update_workflow_tags",
            description="Replace the tags of a single workflow with the provided tags.",
            parameters=(
                _id("The workflow ID to use."),
                ParameterSpec(
                    name="tag_ids",
                    kind=ParameterKind.ARRAY,
                    required=True,
                    items=ParameterKind.STRING,
                    description="The IDs of the tags to assign to this workflow.",
                ),
            ),
            handler=update_workflow_tags,
            hints=UPDATES.model_copy(update={"title": "Update Workflow Tags"}),
        ),
        ToolDescriptor(
            name="run_workflow",
            description=(
                "Run a workflow through its webhook. Returns as soon as the webhook "
                "accepts the call; it does not wait for the run to finish. If you do not "
                "know the webhook path, list workflows first and pick the one matching "
                "the user's request."
            ),
            parameters=(
                _id("The webhook path of the workflow to run."),
                ParameterSpec(
                    name="data",
                    kind=ParameterKind.OBJECT,
                    description=(
                        "JSON data to send to the webhook (sent as a POST body). Leave "
                        "empty unless the user explicitly asked for data to be sent."
                    ),
                ),
            ),
            handler=run_workflow,
            hints=ToolHints(title="Run Workflow"),
        ),
        # Tags
        ToolDescriptor(
            name="list_tags",
            description="Retrieve all tags.",
            parameters=(_LIMIT, _CURSOR),
            handler=list_tags,
            hints=READ_ONLY.model_copy(update={"title": "List Tags"}),
        ),
        ToolDescriptor(
            name="get_tag",
            description="Retrieve a tag by ID.",
            parameters=(_id("The tag ID to use."),),
            handler=get_tag,
            hints=READ_ONLY.model_copy(update={"title": "Get Tag"}),
        ),
        ToolDescriptor(
            name="create_tag",
            description="Create a tag.",
            parameters=(_string("name", "The name of the tag.", required=True),),
            handler=create_tag,
            hints=CREATES.model_copy(update={"title": "Create Tag"}),
        ),
        ToolDescriptor(
            name="update_tag",
            description="Rename a tag by its ID.",
            parameters=(
                _id("The tag ID to use."),
                _string("name", "The new name of the tag.", required=True),
            ),
            handler=update_tag,
            hints=UPDATES.model_copy(update={"title": "Update Tag"}),
        ),
        ToolDescriptor(
            name="delete_tag",
            description="Delete a tag by its ID.",
            parameters=(_id("The ID of the tag to delete."),),
            handler=delete_tag,
            hints=DELETES.model_copy(update={"title": "Delete Tag"}),
        ),
    ]


def create_default_registry() -> ToolRegistry:
    """Create a ToolRegistry with every built-in tool registered (not yet frozen).

    Each call returns a fresh registry, so tests can register extra tools
    without touching shared state.
    """
    return ToolRegistry(build_tool_descriptors())


__all__ = [
    "DEFAULT_WORKFLOW_SETTINGS",
    "build_tool_descriptors",
    "create_default_registry",
]
