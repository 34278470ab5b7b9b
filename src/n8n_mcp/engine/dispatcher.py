"""Tool call dispatcher.

Pipeline for one tool call:
1. Look up the tool in the (frozen) registry
2. Validate the raw arguments against the tool's parameters
3. Await the bound handler against the remote client
4. Wrap the payload as a success result, or map the failure to an ErrorKind

Each dispatch is self-contained; the registry is the only shared state and
it is read-only. The handler await is the only suspension point. Nothing is
retried here.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from .client import RemoteClient
from .exceptions import (
    RemoteError,
    RemoteNotFoundError,
    RemoteRejectedError,
    RemoteTimeoutError,
    RemoteUnavailableError,
    UnknownToolError,
    ValidationError,
)
from .registry import ToolRegistry
from .result import ErrorKind, ToolCallRequest, ToolCallResult
from .validation import validate_arguments

logger = logging.getLogger(__name__)

# Most specific first
_REMOTE_ERROR_KINDS: list[tuple[type[RemoteError], ErrorKind]] = [
    (RemoteNotFoundError, ErrorKind.NOT_FOUND),
    (RemoteRejectedError, ErrorKind.REMOTE_REJECTED),
    (RemoteUnavailableError, ErrorKind.REMOTE_UNAVAILABLE),
    (RemoteTimeoutError, ErrorKind.TIMEOUT),
]


def classify_remote_error(error: RemoteError) -> ErrorKind:
    """Map a remote client error to the closest ErrorKind."""
    for error_type, kind in _REMOTE_ERROR_KINDS:
        if isinstance(error, error_type):
            return kind
    return ErrorKind.UNKNOWN


def _available_hint(names: list[str], limit: int = 5) -> str:
    shown = ", ".join(names[:limit])
    more = " (and more)" if len(names) > limit else ""
    return f"Available tools: {shown}{more}."


class Dispatcher:
    """
    Routes tool calls to remote client operations.

    Example:
        dispatcher = Dispatcher(registry, client, default_timeout=60)
        result = await dispatcher.dispatch(ToolCallRequest("get_workflow", {"id": "123"}))
        response = result.to_response()
    """

    def __init__(
        self,
        registry: ToolRegistry,
        client: RemoteClient,
        default_timeout: float | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            registry: Tool registry (frozen here if the caller has not done so)
            client: Remote client passed to every handler
            default_timeout: Per-call timeout in seconds when dispatch() gets none
        """
        registry.freeze()
        self._registry = registry
        self._client = client
        self._default_timeout = default_timeout

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(
        self,
        request: ToolCallRequest,
        *,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ToolCallResult:
        """Handle one tool call end to end.

        Args:
            request: Tool name and raw arguments
            timeout: Seconds to wait for the remote call (falls back to default_timeout)
            cancel_event: When set while the remote call is in flight, the call is
                abandoned and a CANCELLED failure is returned

        Returns:
            ToolCallResult (never raises for tool-level failures)

        Raises:
            asyncio.CancelledError: If the task running dispatch() is itself cancelled
        """
        started = time.perf_counter()
        result = await self._dispatch(request, timeout, cancel_event)
        elapsed_ms = (time.perf_counter() - started) * 1000

        if result.is_success:
            logger.info(f"Tool '{request.tool_name}' succeeded in {elapsed_ms:.0f}ms")
        else:
            kind = result.kind.value if result.kind is not None else ErrorKind.UNKNOWN.value
            logger.info(
                f"Tool '{request.tool_name}' failed in {elapsed_ms:.0f}ms ({kind}): {result.message}"
            )
        return result

    async def _dispatch(
        self,
        request: ToolCallRequest,
        timeout: float | None,
        cancel_event: asyncio.Event | None,
    ) -> ToolCallResult:
        name = request.tool_name

        # Step 1: registry lookup
        try:
            descriptor = self._registry.lookup(name)
        except UnknownToolError as e:
            return ToolCallResult.failure(
                name,
                ErrorKind.UNKNOWN_TOOL,
                f"{e}. {_available_hint(e.available)}",
                details={"available_tools": e.available},
                cause=e,
            )

        # Step 2: argument validation (never reaches the remote API on failure)
        try:
            args = validate_arguments(descriptor, request.arguments)
        except ValidationError as e:
            return ToolCallResult.failure(
                name, ErrorKind.INVALID_ARGUMENTS, str(e), details=e.to_details(), cause=e
            )

        # Step 3: remote call
        effective_timeout = timeout if timeout is not None else self._default_timeout
        try:
            payload = await self._invoke(descriptor.handler, args, effective_timeout, cancel_event)
        except TimeoutError as e:
            return ToolCallResult.failure(
                name,
                ErrorKind.TIMEOUT,
                f"Tool '{name}' timed out after {effective_timeout}s",
                details={"timeout": effective_timeout},
                cause=e,
            )
        except asyncio.CancelledError as e:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            return ToolCallResult.failure(
                name, ErrorKind.CANCELLED, f"Tool '{name}' was cancelled", cause=e
            )
        except RemoteError as e:
            return ToolCallResult.failure(name, classify_remote_error(e), str(e), cause=e)
        except Exception as e:
            logger.exception(f"Unexpected error in tool '{name}'")
            return ToolCallResult.failure(
                name, ErrorKind.UNKNOWN, f"{type(e).__name__}: {e}", cause=e
            )

        # Step 4: success
        return ToolCallResult.success(name, payload)

    async def _invoke(
        self,
        handler: Any,
        args: dict[str, Any],
        timeout: float | None,
        cancel_event: asyncio.Event | None,
    ) -> Any:
        """Await the handler, racing it against the timeout and cancel event.

        Raises:
            TimeoutError: Timeout expired first
            asyncio.CancelledError: cancel_event fired first, or the handler was cancelled
        """
        if cancel_event is None:
            return await asyncio.wait_for(handler(self._client, args), timeout=timeout)

        call = asyncio.ensure_future(handler(self._client, args))
        cancelled = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {call, cancelled}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for pending in (call, cancelled):
                if not pending.done():
                    pending.cancel()

        if call in done:
            return call.result()
        if cancelled in done:
            raise asyncio.CancelledError("cancelled by caller")
        raise TimeoutError()


__all__ = ["Dispatcher", "classify_remote_error"]
