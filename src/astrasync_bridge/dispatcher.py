"""RequestDispatcher — JSON-RPC 2.0 envelope in, JSON-RPC 2.0 envelope out.

Every inbound message ends in exactly one well-formed response (or, for a
notification, none).  Exceptions never escape :meth:`RequestDispatcher.handle`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from astrasync_bridge import __version__
from astrasync_bridge.errors import (
    InvalidArgumentsError,
    RegistryError,
    RegistryResponseError,
    RegistryUnavailableError,
    TierLimitError,
    UnknownToolError,
)
from astrasync_bridge.protocol.models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolCallResult,
)
from astrasync_bridge.utils.tracing import ATTR_RPC_ERROR_CODE, ATTR_RPC_METHOD, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from astrasync_bridge.handlers.tools import ToolHandlers
    from astrasync_bridge.protocol.catalog import ToolCatalog

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "astrasync-mcp"


class RequestDispatcher:
    """Validates, routes and answers MCP requests.

    Usage::

        dispatcher = RequestDispatcher(catalog, handlers)
        response = await dispatcher.handle({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        wire = response.to_dict()
    """

    def __init__(self, catalog: ToolCatalog, handlers: ToolHandlers) -> None:
        missing = [name for name in catalog.names() if handlers.get(name) is None]
        if missing:
            msg = f"No handler for catalog tool(s): {', '.join(missing)}"
            raise ValueError(msg)
        self._catalog = catalog
        self._handlers = handlers

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    async def handle(self, message: Any) -> JsonRpcResponse | None:
        """Answer one decoded JSON-RPC message.

        Returns ``None`` for notifications (``notifications/*`` without an id).
        """
        request_id = message.get("id") if isinstance(message, dict) else None

        if not _is_valid_envelope(message):
            return JsonRpcResponse.failure(request_id, INVALID_REQUEST, "Invalid Request - must be JSON-RPC 2.0")

        request = JsonRpcRequest(
            method=message["method"],
            id=request_id,
            params=message.get("params") or {},
        )

        if "id" not in message and request.method.startswith("notifications/"):
            logger.debug("Notification received: %s", request.method)
            return None

        with _tracer.start_as_current_span("bridge.rpc") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            response = await self._route(request, span)
            if response.error is not None:
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
            return response

    async def _route(self, request: JsonRpcRequest, span: Any) -> JsonRpcResponse:
        try:
            if request.method == "initialize":
                return JsonRpcResponse.success(request.id, self._initialize())
            if request.method == "ping":
                return JsonRpcResponse.success(request.id, {})
            if request.method == "tools/list":
                return JsonRpcResponse.success(request.id, {"tools": self._catalog.to_wire()})
            if request.method == "tools/call":
                return await self._call_tool(request, span)
        except Exception as exc:
            logger.exception("Unhandled error in %s", request.method)
            return JsonRpcResponse.failure(request.id, INTERNAL_ERROR, "Internal error", str(exc))

        return JsonRpcResponse.failure(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

    @staticmethod
    def _initialize() -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    async def _call_tool(self, request: JsonRpcRequest, span: Any) -> JsonRpcResponse:
        name = request.params.get("name")
        arguments = request.params.get("arguments")
        if arguments is None:
            arguments = {}

        if not isinstance(name, str) or not name:
            return JsonRpcResponse.failure(
                request.id, INVALID_PARAMS, "Invalid params", "tools/call requires a string 'name'"
            )
        span.set_attribute(ATTR_TOOL_NAME, name)

        try:
            result = await self.call_tool(name, arguments)
        except UnknownToolError as exc:
            return JsonRpcResponse.failure(request.id, METHOD_NOT_FOUND, str(exc))
        except InvalidArgumentsError as exc:
            return JsonRpcResponse.failure(request.id, INVALID_PARAMS, "Invalid params", exc.detail)
        except TierLimitError as exc:
            return JsonRpcResponse.failure(request.id, INTERNAL_ERROR, str(exc), exc.upstream or None)
        except RegistryError as exc:
            logger.error("Tool %s failed: %s", name, exc)
            return JsonRpcResponse.failure(
                request.id, INTERNAL_ERROR, f"{exc.operation} failed", exc.body or f"HTTP {exc.status_code}"
            )
        except (RegistryUnavailableError, RegistryResponseError) as exc:
            logger.error("Tool %s failed: %s", name, exc)
            return JsonRpcResponse.failure(request.id, INTERNAL_ERROR, f"{exc.operation} failed", str(exc))
        return JsonRpcResponse.success(request.id, result.model_dump())

    async def call_tool(self, name: str, arguments: Any) -> ToolCallResult:
        """Validate *arguments* against the catalog and run the handler.

        Raises :class:`UnknownToolError` or :class:`InvalidArgumentsError`
        before any network call is made.
        """
        if name not in self._catalog:
            raise UnknownToolError(name)
        if not isinstance(arguments, dict):
            raise InvalidArgumentsError(name, f"Arguments for {name} must be an object")
        missing = self._catalog.missing_arguments(name, arguments)
        if missing:
            raise InvalidArgumentsError(name, missing=missing)

        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownToolError(name)
        return await handler(arguments)


def _is_valid_envelope(message: Any) -> bool:
    return (
        isinstance(message, dict)
        and message.get("jsonrpc") == "2.0"
        and isinstance(message.get("method"), str)
        and isinstance(message.get("params", {}) or {}, dict)
    )
