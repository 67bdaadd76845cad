"""ToolHandlers — one choreography of registry calls per tool.

Handlers hold no state between invocations.  Each one returns a
:class:`ToolCallResult` or raises; the dispatcher turns exceptions into
JSON-RPC errors.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from astrasync_bridge.errors import BridgeError, RegistryError, TierLimitError
from astrasync_bridge.handlers import formatting
from astrasync_bridge.protocol.catalog import (
    CREATE_ACCOUNT,
    CREATE_CRYPTO_KEYPAIR,
    GENERATE_API_KEY,
    REGISTER_AGENT,
    VERIFY_AGENT,
)
from astrasync_bridge.protocol.models import ToolCallResult
from astrasync_bridge.registry.telemetry import REGISTRATION_ATTEMPT, REGISTRATION_FAILED

if TYPE_CHECKING:
    from astrasync_bridge.registry.auth import AuthStrategy
    from astrasync_bridge.registry.client import RegistryClient
    from astrasync_bridge.registry.telemetry import TelemetrySink

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolCallResult]]

DEFAULT_ACCOUNT_TYPE = "individual"
# Placeholder identity for detail lookups made on behalf of anonymous callers.
ANONYMOUS_LOOKUP_EMAIL = "unknown@mcp.com"
_TIER_PATTERN = re.compile(r"\btier\b", re.IGNORECASE)


class ToolHandlers:
    """Routes a tool name to the coroutine implementing it."""

    def __init__(
        self,
        client: RegistryClient,
        auth: AuthStrategy,
        telemetry: TelemetrySink,
    ) -> None:
        self._client = client
        self._auth = auth
        self._telemetry = telemetry
        self._handlers: dict[str, ToolHandler] = {
            REGISTER_AGENT: self.register_agent,
            VERIFY_AGENT: self.verify_agent,
            CREATE_ACCOUNT: self.create_account,
            GENERATE_API_KEY: self.generate_api_key,
            CREATE_CRYPTO_KEYPAIR: self.create_crypto_keypair,
        }

    def names(self) -> list[str]:
        return list(self._handlers)

    def get(self, name: str) -> ToolHandler | None:
        return self._handlers.get(name)

    # ------------------------------------------------------------------

    async def register_agent(self, args: dict[str, Any]) -> ToolCallResult:
        attempt = {"email": args["email"], "agentName": args["agentName"]}
        self._telemetry.log_attempt(REGISTRATION_ATTEMPT, attempt)

        try:
            token = await self._auth.resolve_token(self._client, args)
            result = await self._client.register_agent(
                email=str(args["email"]),
                agent={
                    "name": args["agentName"],
                    "description": args["agentDescription"],
                    "owner": args["agentOwner"],
                    "capabilities": [],
                    "version": "1.0.0",
                },
                token=token,
            )
        except BridgeError as exc:
            self._telemetry.log_attempt(REGISTRATION_FAILED, {**attempt, "error": str(exc)})
            raise

        return ToolCallResult.from_text(formatting.format_registration(str(args["agentName"]), result))

    async def verify_agent(self, args: dict[str, Any]) -> ToolCallResult:
        agent_id = str(args["agentId"])
        try:
            verification = await self._client.verify_agent(agent_id)
        except RegistryError as exc:
            if exc.is_not_found:
                return ToolCallResult.from_text(formatting.format_not_found(agent_id))
            raise

        if verification.verified is True:
            text = formatting.format_verification(agent_id, verification)
        elif verification.error:
            text = formatting.format_verification_error(verification.error)
        elif verification.verified is None and verification.exists:
            logger.warning("Registry answered legacy 'exists' flag for %s; expected 'verified'", agent_id)
            text = await self._legacy_presence(agent_id, verification.status)
        else:
            text = formatting.format_not_found(agent_id)
        return ToolCallResult.from_text(text)

    async def create_account(self, args: dict[str, Any]) -> ToolCallResult:
        account_type = str(args.get("accountType") or DEFAULT_ACCOUNT_TYPE)
        await self._client.create_account(
            email=str(args["email"]),
            password=str(args["password"]),
            full_name=str(args["fullName"]),
            account_type=account_type,
        )
        return ToolCallResult.from_text(formatting.format_account(str(args["email"]), account_type))

    async def generate_api_key(self, args: dict[str, Any]) -> ToolCallResult:
        login = await self._client.login(email=str(args["email"]), password=str(args["password"]))
        key_name = str(args["keyName"])
        result = await self._client.generate_api_key(token=login.token, key_name=key_name)
        return ToolCallResult.from_text(formatting.format_api_key(key_name, result))

    async def create_crypto_keypair(self, args: dict[str, Any]) -> ToolCallResult:
        key_name = args.get("keyName")
        try:
            login = await self._client.login(email=str(args["email"]), password=str(args["password"]))
            result = await self._client.create_crypto_keypair(
                token=login.token,
                key_name=str(key_name) if key_name else None,
            )
        except RegistryError as exc:
            if _TIER_PATTERN.search(exc.body):
                raise TierLimitError(formatting.TIER_LIMIT_MESSAGE, upstream=exc.body) from exc
            raise
        return ToolCallResult.from_text(
            formatting.format_keypair(str(args["email"]), str(key_name) if key_name else None, result)
        )

    # ------------------------------------------------------------------

    async def _legacy_presence(self, agent_id: str, status: str | None) -> str:
        try:
            details = await self._client.get_agent_details(agent_id, ANONYMOUS_LOOKUP_EMAIL)
        except BridgeError as exc:
            logger.info("Agent details unavailable for %s: %s", agent_id, exc)
            details = None
        return formatting.format_legacy_presence(agent_id, status, details)
