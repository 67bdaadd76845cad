"""RegistryClient — typed calls against the AstraSync registry REST API."""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from astrasync_bridge.config import BridgeSettings
from astrasync_bridge.errors import RegistryError, RegistryResponseError, RegistryUnavailableError
from astrasync_bridge.registry.models import (
    AccountResult,
    AgentDetails,
    ApiKeyResult,
    KeypairResult,
    LoginResult,
    RegistrationResult,
    VerificationResult,
)
from astrasync_bridge.utils.tracing import ATTR_REGISTRY_OPERATION, ATTR_REGISTRY_STATUS, get_tracer

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

_Model = TypeVar("_Model", bound=BaseModel)


class RegistryClient:
    """Async client for one registry base URL.

    Every request carries the ``X-Source`` header.  Non-2xx responses raise
    :class:`RegistryError` with the upstream body verbatim; transport
    failures raise :class:`RegistryUnavailableError`; a 2xx body that does
    not fit the expected shape raises :class:`RegistryResponseError`.
    Requests are made once: only connection-level failures are retried,
    ``settings.retries`` times, by the underlying transport.

    Usage::

        async with RegistryClient(settings) as client:
            verification = await client.verify_agent("TEMP-0001")
    """

    def __init__(
        self,
        settings: BridgeSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or BridgeSettings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._settings.api_url

    async def __aenter__(self) -> RegistryClient:
        transport = self._transport or httpx.AsyncHTTPTransport(retries=self._settings.retries)
        self._client = httpx.AsyncClient(
            base_url=self._settings.api_url,
            headers={"X-Source": self._settings.source},
            timeout=self._settings.timeout,
            transport=transport,
        )
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "RegistryClient must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    async def register_agent(
        self,
        *,
        email: str,
        agent: dict[str, Any],
        token: str | None = None,
    ) -> RegistrationResult:
        """``POST /v1/register``."""
        response = await self._request(
            "Registration",
            "POST",
            "/v1/register",
            json={"email": email, "agent": agent},
            token=token,
        )
        return _parse("Registration", RegistrationResult, response)

    async def verify_agent(self, agent_id: str) -> VerificationResult:
        """``GET /v1/verify/{agentId}``; a 404 raises :class:`RegistryError`.

        A body that is not a JSON object reads as an empty result, which
        the caller renders as "not found".
        """
        response = await self._request("Verification", "GET", f"/v1/verify/{quote(agent_id, safe='')}")
        payload = _decode("Verification", response)
        if not isinstance(payload, dict):
            logger.warning("Verification: non-object body for %s: %r", agent_id, payload)
            payload = {}
        return _validate("Verification", VerificationResult, payload)

    async def get_agent_details(self, agent_id: str, email: str) -> AgentDetails | None:
        """``GET /v1/agent/{agentId}``; returns ``None`` when the agent is unknown."""
        try:
            response = await self._request(
                "Agent details lookup",
                "GET",
                f"/v1/agent/{quote(agent_id, safe='')}",
                params={"email": email},
            )
        except RegistryError as exc:
            if exc.is_not_found:
                return None
            raise
        return _parse("Agent details lookup", AgentDetails, response)

    # ------------------------------------------------------------------
    # Accounts and credentials
    # ------------------------------------------------------------------

    async def login(self, *, email: str, password: str) -> LoginResult:
        """Exchange email and password for a bearer token."""
        response = await self._request(
            "Login",
            "POST",
            "/v1/auth/login",
            json={"email": email, "password": password},
        )
        return _parse("Login", LoginResult, response)

    async def create_account(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        account_type: str = "individual",
    ) -> AccountResult:
        response = await self._request(
            "Account creation",
            "POST",
            "/v1/accounts",
            json={
                "email": email,
                "password": password,
                "fullName": full_name,
                "accountType": account_type,
            },
        )
        return _parse("Account creation", AccountResult, response)

    async def generate_api_key(self, *, token: str, key_name: str) -> ApiKeyResult:
        response = await self._request(
            "API key generation",
            "POST",
            "/v1/api-keys",
            json={"keyName": key_name},
            token=token,
        )
        return _parse("API key generation", ApiKeyResult, response)

    async def create_crypto_keypair(self, *, token: str, key_name: str | None = None) -> KeypairResult:
        body: dict[str, Any] = {}
        if key_name:
            body["keyName"] = key_name
        response = await self._request(
            "Keypair generation",
            "POST",
            "/v1/crypto-keypairs",
            json=body,
            token=token,
        )
        return _parse("Keypair generation", KeypairResult, response)

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------

    async def log_attempt(self, event: str, data: dict[str, Any]) -> None:
        """``POST /v1/log-attempt``.  Raises like any other call.

        Callers on the request path go through
        :class:`~astrasync_bridge.registry.telemetry.TelemetrySink`, which
        never raises.
        """
        await self._request("Attempt logging", "POST", "/v1/log-attempt", json={"event": event, "data": data})

    # ------------------------------------------------------------------

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        token: str | None = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        with _tracer.start_as_current_span("bridge.registry.request") as span:
            span.set_attribute(ATTR_REGISTRY_OPERATION, operation)
            try:
                response = await self._http().request(method, path, json=json, params=params, headers=headers)
            except httpx.HTTPError as exc:
                logger.error("%s: %s %s unreachable: %s", operation, method, path, exc)
                raise RegistryUnavailableError(operation, str(exc)) from exc

            span.set_attribute(ATTR_REGISTRY_STATUS, response.status_code)
            if not response.is_success:
                logger.info("%s: %s %s -> HTTP %d", operation, method, path, response.status_code)
                raise RegistryError(operation, response.status_code, response.text)
            return response


def _decode(operation: str, response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        logger.warning("%s: body is not JSON: %s", operation, exc)
        raise RegistryResponseError(operation, "body is not JSON") from exc


def _validate(operation: str, model: type[_Model], payload: Any) -> _Model:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        logger.warning("%s: unexpected body: %s", operation, exc)
        fields = sorted({".".join(str(part) for part in err["loc"]) or "body" for err in exc.errors()})
        raise RegistryResponseError(operation, f"unexpected value for {', '.join(fields)}") from exc


def _parse(operation: str, model: type[_Model], response: httpx.Response) -> _Model:
    return _validate(operation, model, _decode(operation, response))
