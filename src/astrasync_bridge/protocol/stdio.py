"""Stdio server transport — newline-delimited JSON-RPC on stdin/stdout.

The counterpart of a client-side stdio transport: the MCP client launches
the bridge as a subprocess, writes one JSON message per line and reads one
response per line.  Notifications get no response line.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TextIO

from astrasync_bridge.protocol.models import PARSE_ERROR, JsonRpcResponse

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Any], Awaitable[JsonRpcResponse | None]]


class _ResponseWriter:
    """Serializes response lines onto *stream*; one line per response."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._lock = asyncio.Lock()
        self.written = 0

    async def write(self, response: JsonRpcResponse) -> None:
        line = json.dumps(response.to_dict(), ensure_ascii=False) + "\n"
        async with self._lock:
            self._stream.write(line)
            self._stream.flush()
            self.written += 1


async def serve_stdio(
    handle: MessageHandler,
    *,
    reader: TextIO | None = None,
    writer: TextIO | None = None,
) -> int:
    """Answer messages from *reader* until EOF; return how many were answered.

    Each message is handled in its own task, so responses are written in
    completion order, not arrival order.  Clients match them by ``id``.
    Returns once every in-flight message has been answered.
    """
    reader = reader or sys.stdin
    out = _ResponseWriter(writer or sys.stdout)

    async def _answer(message: Any) -> None:
        response = await handle(message)
        if response is not None:
            await out.write(response)

    async with asyncio.TaskGroup() as tasks:
        while True:
            line = await asyncio.to_thread(reader.readline)
            if not line:
                break
            line = line.strip()
            if not line:
                continue

            try:
                message = json.loads(line)
            except json.JSONDecodeError as exc:
                logger.warning("Discarding unparsable line: %s", exc)
                await out.write(JsonRpcResponse.failure(None, PARSE_ERROR, "Parse error", str(exc)))
                continue
            tasks.create_task(_answer(message))

    logger.info("stdin closed after %d response(s)", out.written)
    return out.written
