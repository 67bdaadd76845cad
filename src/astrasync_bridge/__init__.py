"""AstraSync MCP bridge — exposes the AstraSync agent registry as MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "2.0.0"

if TYPE_CHECKING:
    from astrasync_bridge.app import Bridge as Bridge
    from astrasync_bridge.config import BridgeSettings as BridgeSettings

_LAZY_EXPORTS = {
    "Bridge": "astrasync_bridge.app",
    "BridgeSettings": "astrasync_bridge.config",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'astrasync_bridge' has no attribute {name!r}")
