"""End-to-end tool handler tests through the bridge and a fake registry."""

import httpx

from astrasync_bridge.config import AuthMode

REGISTER_ARGS = {
    "agentName": "Support Bot",
    "agentDescription": "Answers tickets",
    "agentOwner": "Acme",
    "email": "dev@acme.test",
    "apiKey": "ak_live_1",
}


def _text(response) -> str:
    assert response.error is None, response.error
    return response.result["content"][0]["text"]


class TestRegisterAgent:
    async def test_success_logs_attempt_and_registers(self, registry, make_bridge, call) -> None:
        registry.set(
            "POST /v1/register",
            httpx.Response(200, json={"agentId": "AGT-1", "trustScore": 80, "status": "active"}),
        )
        async with make_bridge() as bridge:
            response = await bridge.handle(call("register_agent", REGISTER_ARGS))

        text = _text(response)
        assert "Agent ID: AGT-1" in text
        assert registry.body("POST /v1/log-attempt")["event"] == "mcp_registration_attempt"
        assert registry.body("POST /v1/register")["agent"] == {
            "name": "Support Bot",
            "description": "Answers tickets",
            "owner": "Acme",
            "capabilities": [],
            "version": "1.0.0",
        }
        assert registry.calls("POST /v1/register")[0].headers["Authorization"] == "Bearer ak_live_1"

    async def test_failure_logs_failed_event(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/register", httpx.Response(409, text="Agent name taken"))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("register_agent", REGISTER_ARGS))

        assert response.error is not None
        assert response.error.code == -32603
        assert response.error.message == "Registration failed"
        assert response.error.data == "Agent name taken"
        events = [
            registry.body("POST /v1/log-attempt", i)["event"]
            for i in range(len(registry.calls("POST /v1/log-attempt")))
        ]
        assert events == ["mcp_registration_attempt", "mcp_registration_failed"]
        assert "Agent name taken" in registry.body("POST /v1/log-attempt")["data"]["error"]

    async def test_numeric_agent_id(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/register", httpx.Response(200, json={"agentId": 123, "trustScore": 70}))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("register_agent", REGISTER_ARGS))

        assert "Agent ID: 123" in _text(response)

    async def test_unreadable_body_logs_failed_event(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/register", httpx.Response(200, text="<html>maintenance</html>"))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("register_agent", REGISTER_ARGS))

        assert response.error is not None
        assert response.error.code == -32603
        assert response.error.message == "Registration failed"
        assert "unexpected registry response" in response.error.data
        assert "validation error" not in response.error.data
        events = [
            registry.body("POST /v1/log-attempt", i)["event"]
            for i in range(len(registry.calls("POST /v1/log-attempt")))
        ]
        assert events == ["mcp_registration_attempt", "mcp_registration_failed"]

    async def test_telemetry_outage_does_not_change_result(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/log-attempt", httpx.ConnectError("telemetry down"))
        registry.set("POST /v1/register", httpx.Response(200, json={"agentId": "AGT-2"}))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("register_agent", REGISTER_ARGS))

        assert "Agent ID: AGT-2" in _text(response)

    async def test_password_login_mode(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/register", httpx.Response(200, json={"agentId": "AGT-3"}))
        args = {k: v for k, v in REGISTER_ARGS.items() if k != "apiKey"}
        args["password"] = "hunter22"
        async with make_bridge(auth_mode=AuthMode.PASSWORD) as bridge:
            response = await bridge.handle(call("register_agent", args))

        assert "AGT-3" in _text(response)
        assert registry.calls("POST /v1/register")[0].headers["Authorization"] == "Bearer tok-123"

    async def test_password_login_mode_requires_password(self, registry, make_bridge, call) -> None:
        args = {k: v for k, v in REGISTER_ARGS.items() if k != "apiKey"}
        async with make_bridge(auth_mode=AuthMode.PASSWORD) as bridge:
            response = await bridge.handle(call("register_agent", args))

        assert response.error is not None
        assert response.error.code == -32602
        assert "password" in response.error.data
        assert registry.requests == []

    async def test_api_key_mode_without_credentials(self, registry, make_bridge, call) -> None:
        args = {k: v for k, v in REGISTER_ARGS.items() if k != "apiKey"}
        async with make_bridge() as bridge:
            response = await bridge.handle(call("register_agent", args))

        assert response.error is not None
        assert response.error.code == -32602
        assert "create_account" in response.error.data
        assert registry.calls("POST /v1/register") == []

    async def test_preview_mode_temporary_credentials(self, registry, make_bridge, call) -> None:
        registry.set(
            "POST /v1/register",
            httpx.Response(
                200,
                json={
                    "agentId": "TEMP-77",
                    "trustScore": {"score": 65, "isTemporary": True},
                    "blockchain": {"status": "pending"},
                },
            ),
        )
        args = {k: v for k, v in REGISTER_ARGS.items() if k != "apiKey"}
        async with make_bridge(auth_mode=AuthMode.NONE) as bridge:
            response = await bridge.handle(call("register_agent", args))

        text = _text(response)
        assert "provisional" in text
        assert "alphaSignup" in text
        assert "Authorization" not in registry.calls("POST /v1/register")[0].headers


class TestVerifyAgent:
    async def test_verified_summary(self, registry, make_bridge, call) -> None:
        registry.set(
            "GET /v1/verify/AGT-1",
            httpx.Response(
                200,
                json={"verified": True, "agent": {"name": "Bot", "owner": "Acme"}, "trustScore": 90},
            ),
        )
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "AGT-1"}))

        text = _text(response)
        assert "is registered and verified" in text
        assert "Name: Bot" in text

    async def test_negative_result_is_not_an_error(self, registry, make_bridge, call) -> None:
        registry.set("GET /v1/verify/TEMP-0001", httpx.Response(200, json={"verified": False}))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "TEMP-0001"}))

        assert response.to_dict() == {
            "jsonrpc": "2.0",
            "id": 1,
            "result": {"content": [{"type": "text", "text": "✗ Agent TEMP-0001 not found in the registry."}]},
        }

    async def test_upstream_404_is_not_found_text(self, registry, make_bridge, call) -> None:
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "NOPE"}))

        assert "not found" in _text(response)

    async def test_error_field_rendered_as_text(self, registry, make_bridge, call) -> None:
        registry.set(
            "GET /v1/verify/bad",
            httpx.Response(200, json={"verified": False, "error": "Malformed agent id"}),
        )
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "bad"}))

        assert _text(response) == "✗ Error verifying agent: Malformed agent id"

    async def test_non_object_body_is_not_found(self, registry, make_bridge, call) -> None:
        registry.set("GET /v1/verify/AGT-9", httpx.Response(200, content=b"null"))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "AGT-9"}))

        assert _text(response) == "✗ Agent AGT-9 not found in the registry."

    async def test_epoch_registered_at(self, registry, make_bridge, call) -> None:
        registry.set(
            "GET /v1/verify/AGT-1",
            httpx.Response(200, json={"verified": True, "registeredAt": 1700000000000}),
        )
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "AGT-1"}))

        assert "Registered: 2023-11-14 22:13:20 UTC" in _text(response)

    async def test_upstream_500_is_rpc_error(self, registry, make_bridge, call) -> None:
        registry.set("GET /v1/verify/AGT-1", httpx.Response(500, text="boom"))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "AGT-1"}))

        assert response.error is not None
        assert response.error.code == -32603
        assert response.error.data == "boom"

    async def test_legacy_exists_uses_details(self, registry, make_bridge, call) -> None:
        registry.set("GET /v1/verify/TEMP-5", httpx.Response(200, json={"exists": True, "status": "active"}))
        registry.set("GET /v1/agent/TEMP-5", httpx.Response(200, json={"name": "Old Bot", "owner": "Acme"}))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "TEMP-5"}))

        text = _text(response)
        assert "registered and active" in text
        assert "Name: Old Bot" in text

    async def test_legacy_exists_details_failure_ignored(self, registry, make_bridge, call) -> None:
        registry.set("GET /v1/verify/TEMP-5", httpx.Response(200, json={"exists": True}))
        registry.set("GET /v1/agent/TEMP-5", httpx.Response(500, text="oops"))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "TEMP-5"}))

        assert _text(response) == "✓ Agent TEMP-5 is registered and active."

    async def test_legacy_exists_malformed_details_ignored(self, registry, make_bridge, call) -> None:
        registry.set("GET /v1/verify/TEMP-5", httpx.Response(200, json={"exists": True}))
        registry.set("GET /v1/agent/TEMP-5", httpx.Response(200, json={"name": ["not", "a", "name"]}))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("verify_agent", {"agentId": "TEMP-5"}))

        assert _text(response) == "✓ Agent TEMP-5 is registered and active."

    async def test_register_then_verify_round_trip(self, registry, make_bridge, call) -> None:
        agents: dict[str, dict] = {}

        def _register(request: httpx.Request) -> httpx.Response:
            import json

            body = json.loads(request.content)
            agents["AGT-RT"] = body["agent"]
            return httpx.Response(200, json={"agentId": "AGT-RT"})

        def _verify(request: httpx.Request) -> httpx.Response:
            agent = agents["AGT-RT"]
            return httpx.Response(
                200,
                json={"verified": True, "agent": {"name": agent["name"], "owner": agent["owner"]}},
            )

        registry.set("POST /v1/register", _register)
        registry.set("GET /v1/verify/AGT-RT", _verify)
        async with make_bridge() as bridge:
            await bridge.handle(call("register_agent", REGISTER_ARGS))
            response = await bridge.handle(call("verify_agent", {"agentId": "AGT-RT"}))

        text = _text(response)
        assert "Name: Support Bot" in text
        assert "Owner: Acme" in text


class TestAccountTools:
    async def test_create_account_defaults_type(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/accounts", httpx.Response(201, json={"id": "acc-1"}))
        async with make_bridge() as bridge:
            response = await bridge.handle(
                call("create_account", {"email": "a@b.c", "password": "longpassword", "fullName": "Ada"})
            )

        assert "Type: individual" in _text(response)
        assert registry.body("POST /v1/accounts")["accountType"] == "individual"

    async def test_generate_api_key_warns(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/api-keys", httpx.Response(200, json={"apiKey": "ak_new"}))
        async with make_bridge() as bridge:
            response = await bridge.handle(
                call("generate_api_key", {"email": "a@b.c", "password": "pw", "keyName": "ci"})
            )

        text = _text(response)
        assert "You won't be able to see it again." in text
        assert "API Key: ak_new" in text
        assert registry.calls("POST /v1/api-keys")[0].headers["Authorization"] == "Bearer tok-123"

    async def test_generate_api_key_bad_login(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/auth/login", httpx.Response(401, text="Invalid credentials"))
        async with make_bridge() as bridge:
            response = await bridge.handle(
                call("generate_api_key", {"email": "a@b.c", "password": "bad", "keyName": "ci"})
            )

        assert response.error is not None
        assert response.error.message == "Login failed"
        assert response.error.data == "Invalid credentials"
        assert registry.calls("POST /v1/api-keys") == []

    async def test_keypair_success(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/crypto-keypairs", httpx.Response(200, json={"publicKey": "0xpub"}))
        async with make_bridge() as bridge:
            response = await bridge.handle(
                call("create_crypto_keypair", {"email": "a@b.c", "password": "pw", "keyName": "signer"})
            )

        text = _text(response)
        assert "Public Key: 0xpub" in text
        assert "mnemonic phrase has been sent to a@b.c" in text

    async def test_keypair_tier_limit(self, registry, make_bridge, call) -> None:
        registry.set(
            "POST /v1/crypto-keypairs",
            httpx.Response(403, text="Keypair limit reached for free tier"),
        )
        async with make_bridge() as bridge:
            response = await bridge.handle(call("create_crypto_keypair", {"email": "a@b.c", "password": "pw"}))

        assert response.error is not None
        assert "Upgrade to Developer tier" in response.error.message
        assert response.error.data == "Keypair limit reached for free tier"

    async def test_keypair_other_failure(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/crypto-keypairs", httpx.Response(500, text="HSM offline"))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("create_crypto_keypair", {"email": "a@b.c", "password": "pw"}))

        assert response.error is not None
        assert response.error.message == "Keypair generation failed"
        assert response.error.data == "HSM offline"

    async def test_keypair_tier_match_is_whole_word(self, registry, make_bridge, call) -> None:
        registry.set("POST /v1/crypto-keypairs", httpx.Response(503, text="Frontier region unavailable"))
        async with make_bridge() as bridge:
            response = await bridge.handle(call("create_crypto_keypair", {"email": "a@b.c", "password": "pw"}))

        assert response.error is not None
        assert response.error.message == "Keypair generation failed"
        assert response.error.data == "Frontier region unavailable"
