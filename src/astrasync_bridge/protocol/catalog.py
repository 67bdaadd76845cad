"""ToolCatalog — the fixed, ordered set of tools advertised by ``tools/list``."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from astrasync_bridge.protocol.models import ToolDescriptor

if TYPE_CHECKING:
    from astrasync_bridge.registry.auth import AuthStrategy

REGISTER_AGENT = "register_agent"
VERIFY_AGENT = "verify_agent"
CREATE_ACCOUNT = "create_account"
GENERATE_API_KEY = "generate_api_key"
CREATE_CRYPTO_KEYPAIR = "create_crypto_keypair"


class ToolCatalog:
    """Immutable catalog of :class:`ToolDescriptor` objects.

    Built once at startup and injected into the dispatcher.  Order is
    preserved for ``tools/list``; names are unique.
    """

    def __init__(self, descriptors: Iterable[ToolDescriptor]) -> None:
        items = tuple(descriptors)
        by_name: dict[str, ToolDescriptor] = {}
        for descriptor in items:
            if descriptor.name in by_name:
                msg = f"Duplicate tool name: {descriptor.name}"
                raise ValueError(msg)
            by_name[descriptor.name] = descriptor
        self._items = items
        self._by_name: Mapping[str, ToolDescriptor] = by_name

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def list(self) -> list[ToolDescriptor]:
        return list(self._items)

    def names(self) -> list[str]:
        return [d.name for d in self._items]

    def describe(self, name: str) -> ToolDescriptor | None:
        return self._by_name.get(name)

    def missing_arguments(self, name: str, arguments: Mapping[str, Any]) -> list[str]:
        """Required arguments of *name* that are absent, ``None`` or blank."""
        descriptor = self._by_name[name]
        return [
            field
            for field in descriptor.required
            if arguments.get(field) is None or (isinstance(arguments[field], str) and not arguments[field].strip())
        ]

    def to_wire(self) -> list[dict[str, Any]]:
        """Descriptors as JSON objects, ``inputSchema`` keyed as MCP expects."""
        return [d.to_dict() for d in self._items]


def _string(description: str, **extra: Any) -> dict[str, Any]:
    return {"type": "string", "description": description, **extra}


def _schema(properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


def build_catalog(auth: AuthStrategy) -> ToolCatalog:
    """Build the five canonical tools.

    ``register_agent`` advertises the credential arguments of *auth*.
    New tools are appended; existing names keep their meaning.
    """
    register_properties: dict[str, Any] = {
        "agentName": _string("Name of the AI agent"),
        "agentDescription": _string("What the agent does"),
        "agentOwner": _string("Name of the agent owner or company"),
        "email": _string("Your AstraSync account email (used to link the agent to your account)"),
        **auth.schema_properties(),
    }
    register_required = ["agentName", "agentDescription", "agentOwner", "email", *auth.required_arguments()]

    return ToolCatalog([
        ToolDescriptor(
            name=REGISTER_AGENT,
            description="Register a new AI agent with AstraSync for compliance tracking",
            input_schema=_schema(register_properties, register_required),
        ),
        ToolDescriptor(
            name=VERIFY_AGENT,
            description="Verify if an agent is registered with AstraSync",
            input_schema=_schema({"agentId": _string("The agent ID to verify (e.g. TEMP-XXXXX)")}, ["agentId"]),
        ),
        ToolDescriptor(
            name=CREATE_ACCOUNT,
            description="Create a new AstraSync developer account",
            input_schema=_schema(
                {
                    "email": _string("Email address for the account"),
                    "password": _string("Password for the account (min 8 characters)"),
                    "fullName": _string("Full name of the developer"),
                    "accountType": _string(
                        "Account type: individual or business",
                        enum=["individual", "business"],
                    ),
                },
                ["email", "password", "fullName"],
            ),
        ),
        ToolDescriptor(
            name=GENERATE_API_KEY,
            description="Generate a new API key for your AstraSync account (requires authentication)",
            input_schema=_schema(
                {
                    "email": _string("Account email address"),
                    "password": _string("Account password"),
                    "keyName": _string("Name/label for this API key"),
                },
                ["email", "password", "keyName"],
            ),
        ),
        ToolDescriptor(
            name=CREATE_CRYPTO_KEYPAIR,
            description=(
                "Generate a crypto keypair for signing agent registrations "
                "(requires authentication, Developer tier)"
            ),
            input_schema=_schema(
                {
                    "email": _string("Account email address"),
                    "password": _string("Account password"),
                    "keyName": _string("Name/label for this keypair"),
                },
                ["email", "password"],
            ),
        ),
    ])
