"""Authentication strategies for agent registration.

The strategy is chosen once at startup from :class:`AuthMode` and decides
two things: which credential arguments ``register_agent`` advertises and
requires, and how those arguments become a bearer token.

Account-scoped tools (API keys, keypairs) always use the password login
exchange, whatever the strategy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from astrasync_bridge.config import AuthMode
from astrasync_bridge.errors import MissingCredentialsError

if TYPE_CHECKING:
    from astrasync_bridge.registry.client import RegistryClient

_PASSWORD_PROPERTY = {
    "type": "string",
    "description": "Your AstraSync account password (for authentication).",
}
_API_KEY_PROPERTY = {
    "type": "string",
    "description": "Your AstraSync API key (alternative to email/password authentication)",
}


@runtime_checkable
class AuthStrategy(Protocol):
    """Turns per-call credential arguments into a bearer token."""

    mode: AuthMode

    def schema_properties(self) -> dict[str, dict[str, Any]]:
        """Extra ``inputSchema`` properties advertised by ``register_agent``."""
        ...

    def required_arguments(self) -> list[str]:
        """Extra required arguments for ``register_agent``."""
        ...

    async def resolve_token(self, client: RegistryClient, arguments: dict[str, Any]) -> str | None:
        """Return the bearer token to send, or ``None`` for anonymous calls."""
        ...


class NoAuth:
    """Developer-preview mode: registrations are anonymous and temporary."""

    mode = AuthMode.NONE

    def schema_properties(self) -> dict[str, dict[str, Any]]:
        return {}

    def required_arguments(self) -> list[str]:
        return []

    async def resolve_token(self, client: RegistryClient, arguments: dict[str, Any]) -> str | None:
        return None


class ApiKeyAuth:
    """Accept either an API key or an account password."""

    mode = AuthMode.API_KEY

    def schema_properties(self) -> dict[str, dict[str, Any]]:
        password = {
            **_PASSWORD_PROPERTY,
            "description": _PASSWORD_PROPERTY["description"] + " Not required if using apiKey.",
        }
        return {"password": password, "apiKey": dict(_API_KEY_PROPERTY)}

    def required_arguments(self) -> list[str]:
        return []

    async def resolve_token(self, client: RegistryClient, arguments: dict[str, Any]) -> str | None:
        api_key = arguments.get("apiKey")
        if api_key:
            return str(api_key)
        password = arguments.get("password")
        if password:
            login = await client.login(email=str(arguments["email"]), password=str(password))
            return login.token
        raise MissingCredentialsError(
            "register_agent",
            "Authentication required: provide either apiKey or password. "
            "No account yet? Create one with the create_account tool.",
        )


class PasswordLoginAuth:
    """Every registration logs in with email and password first."""

    mode = AuthMode.PASSWORD

    def schema_properties(self) -> dict[str, dict[str, Any]]:
        return {"password": dict(_PASSWORD_PROPERTY)}

    def required_arguments(self) -> list[str]:
        return ["password"]

    async def resolve_token(self, client: RegistryClient, arguments: dict[str, Any]) -> str | None:
        login = await client.login(email=str(arguments["email"]), password=str(arguments["password"]))
        return login.token


_STRATEGIES: dict[AuthMode, type[NoAuth | ApiKeyAuth | PasswordLoginAuth]] = {
    AuthMode.NONE: NoAuth,
    AuthMode.API_KEY: ApiKeyAuth,
    AuthMode.PASSWORD: PasswordLoginAuth,
}


def build_auth_strategy(mode: AuthMode | str) -> AuthStrategy:
    """Instantiate the strategy for *mode*."""
    return _STRATEGIES[AuthMode(mode)]()
