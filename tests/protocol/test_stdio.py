"""Tests for the stdio server transport."""

import asyncio
import io
import json
from typing import Any

from astrasync_bridge.protocol.models import JsonRpcResponse
from astrasync_bridge.protocol.stdio import serve_stdio


async def _echo(message: Any) -> JsonRpcResponse | None:
    if message.get("method") == "notifications/initialized":
        return None
    return JsonRpcResponse.success(message.get("id"), {"method": message.get("method")})


class TestServeStdio:
    async def test_answers_one_line_per_request(self) -> None:
        reader = io.StringIO(
            '{"jsonrpc":"2.0","id":1,"method":"initialize"}\n'
            "\n"
            '{"jsonrpc":"2.0","method":"notifications/initialized"}\n'
            '{"jsonrpc":"2.0","id":2,"method":"tools/list"}\n'
        )
        writer = io.StringIO()

        answered = await serve_stdio(_echo, reader=reader, writer=writer)

        responses = {json.loads(line)["id"]: json.loads(line) for line in writer.getvalue().splitlines()}
        assert answered == 2
        assert sorted(responses) == [1, 2]
        assert responses[2]["result"] == {"method": "tools/list"}

    async def test_parse_error(self) -> None:
        reader = io.StringIO("{not json\n")
        writer = io.StringIO()

        await serve_stdio(_echo, reader=reader, writer=writer)

        response = json.loads(writer.getvalue())
        assert response["id"] is None
        assert response["error"]["code"] == -32700

    async def test_non_ascii_text_survives(self) -> None:
        async def _text(message: Any) -> JsonRpcResponse:
            return JsonRpcResponse.success(1, {"text": "✗ not found"})

        writer = io.StringIO()
        await serve_stdio(_text, reader=io.StringIO('{"x":1}\n'), writer=writer)
        assert "✗ not found" in writer.getvalue()

    async def test_fast_request_not_blocked_by_slow_one(self) -> None:
        fast_done = asyncio.Event()

        async def _handle(message: Any) -> JsonRpcResponse:
            if message["id"] == 1:
                await fast_done.wait()
            else:
                fast_done.set()
            return JsonRpcResponse.success(message["id"], {})

        reader = io.StringIO(
            '{"jsonrpc":"2.0","id":1,"method":"slow"}\n'
            '{"jsonrpc":"2.0","id":2,"method":"fast"}\n'
        )
        writer = io.StringIO()

        answered = await asyncio.wait_for(serve_stdio(_handle, reader=reader, writer=writer), timeout=5)

        assert answered == 2
        assert [json.loads(line)["id"] for line in writer.getvalue().splitlines()] == [2, 1]

    async def test_waits_for_in_flight_requests_at_eof(self) -> None:
        async def _slow(message: Any) -> JsonRpcResponse:
            await asyncio.sleep(0.05)
            return JsonRpcResponse.success(message["id"], {})

        reader = io.StringIO("".join(f'{{"jsonrpc":"2.0","id":{i},"method":"ping"}}\n' for i in range(5)))
        writer = io.StringIO()

        answered = await serve_stdio(_slow, reader=reader, writer=writer)

        lines = writer.getvalue().splitlines()
        assert answered == 5
        assert sorted(json.loads(line)["id"] for line in lines) == [0, 1, 2, 3, 4]
        assert all(line.startswith("{") and line.endswith("}") for line in lines)
