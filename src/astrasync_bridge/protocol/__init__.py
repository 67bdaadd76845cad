"""MCP protocol layer — JSON-RPC envelopes, tool catalog, stdio transport."""

from astrasync_bridge.protocol.catalog import ToolCatalog, build_catalog
from astrasync_bridge.protocol.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    TextContent,
    ToolCallResult,
    ToolDescriptor,
    ToolInvocation,
)

__all__ = [
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "TextContent",
    "ToolCallResult",
    "ToolCatalog",
    "ToolDescriptor",
    "ToolInvocation",
    "build_catalog",
]
