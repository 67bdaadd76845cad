"""Human-readable renderings of registry results, one text block per tool.

Missing optional fields are rendered as explicit placeholders ("Unknown",
"pending", ...) rather than being left out.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from astrasync_bridge.registry.models import (
        AgentDetails,
        ApiKeyResult,
        KeypairResult,
        RegistrationResult,
        TrustScore,
        VerificationResult,
    )

DASHBOARD_URL = "https://astrasync.ai/dashboard"
SIGNUP_URL = "https://www.astrasync.ai/alphaSignup"
DEVELOPER_TOOLS_URL = "https://astrasync.ai/settings/developer-tools"
PRICING_URL = "https://astrasync.ai/pricing"

API_KEY_WARNING = "You won't be able to see it again."
TIER_LIMIT_MESSAGE = (
    "Free tier allows 1 crypto keypair. "
    f"Upgrade to Developer tier for unlimited keypairs: {PRICING_URL}"
)


def _trust_score(score: TrustScore | None, placeholder: str) -> str:
    if score is None or score.score is None:
        return placeholder
    return str(score.score)


def _timestamp(raw: str) -> str:
    try:
        if raw.isdigit():
            # Epoch milliseconds.
            parsed = datetime.fromtimestamp(int(raw) / 1000, tz=timezone.utc)
        else:
            parsed = datetime.fromisoformat(raw)
    except (ValueError, OverflowError, OSError):
        return raw
    if parsed.tzinfo is not None:
        return parsed.strftime("%Y-%m-%d %H:%M:%S %Z").rstrip()
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def format_registration(agent_name: str, result: RegistrationResult) -> str:
    trust = _trust_score(result.trust_score, "Pending calculation")
    if result.is_temporary:
        trust += " (provisional until your account is created)"

    lines = [
        f"✓ Successfully registered agent: {agent_name}",
        f"Agent ID: {result.agent_id or 'Unknown'}",
        f"Trust Score: {trust}",
        f"Status: {result.status or 'active'}",
        f"Blockchain Status: {result.blockchain_status or 'pending'}",
        "",
    ]
    if result.is_temporary:
        lines += [
            "These are temporary credentials.",
            f"Convert them to permanent ones by creating an account: {SIGNUP_URL}",
            "Save this Agent ID for future reference.",
        ]
    else:
        lines.append(f"Manage your agent: {DASHBOARD_URL}")
    return "\n".join(lines)


def format_verification(agent_id: str, result: VerificationResult) -> str:
    agent = result.agent
    lines = [
        f"✓ Agent {agent_id} is registered and verified.",
        f"Name: {(agent.name if agent else None) or 'Unknown'}",
        f"Owner: {(agent.owner if agent else None) or 'Unknown'}",
        f"Trust Score: {_trust_score(result.trust_score, 'Unknown')}",
        f"Status: {result.status or 'active'}",
        f"Blockchain Status: {result.blockchain_status or 'pending'}",
    ]
    if result.registered_at:
        lines.append(f"Registered: {_timestamp(result.registered_at)}")
    if result.is_temporary:
        lines += [
            "",
            "Note: this trust score is temporary. It becomes permanent once the owner",
            f"creates an AstraSync account: {SIGNUP_URL}",
        ]
    return "\n".join(lines)


def format_legacy_presence(agent_id: str, status: str | None, details: AgentDetails | None) -> str:
    """Summary for registries that answer ``exists`` instead of ``verified``."""
    headline = f"✓ Agent {agent_id} is registered and active."
    if details is None:
        return headline
    lines = [
        headline,
        f"Name: {details.name or 'Unknown'}",
        f"Owner: {details.owner or 'Unknown'}",
    ]
    if details.registered_at:
        lines.append(f"Registered: {_timestamp(details.registered_at)}")
    lines.append(f"Status: {status or 'active'}")
    return "\n".join(lines)


def format_verification_error(error: str) -> str:
    return f"✗ Error verifying agent: {error}"


def format_not_found(agent_id: str) -> str:
    return f"✗ Agent {agent_id} not found in the registry."


def format_account(email: str, account_type: str) -> str:
    return "\n".join([
        "✓ Account created successfully!",
        f"Email: {email}",
        f"Type: {account_type}",
        "",
        "You can now:",
        "• Generate API keys with generate_api_key",
        "• Create crypto keypairs with create_crypto_keypair (Developer tier)",
        "• Register agents with your account",
        "",
        f"Login to your dashboard: {DASHBOARD_URL}",
    ])


def format_api_key(key_name: str, result: ApiKeyResult) -> str:
    return "\n".join([
        "✓ API key generated successfully!",
        "",
        f"Key Name: {key_name}",
        f"API Key: {result.api_key}",
        "",
        "⚠️  IMPORTANT: Save this API key securely!",
        API_KEY_WARNING,
        "",
        "Use this key to authenticate API requests:",
        f"Authorization: Bearer {result.api_key}",
        "",
        f"Manage your API keys: {DEVELOPER_TOOLS_URL}",
    ])


def format_keypair(email: str, key_name: str | None, result: KeypairResult) -> str:
    return "\n".join([
        "✓ Crypto keypair generated successfully!",
        "",
        f"Key Name: {key_name or 'Default'}",
        f"Public Key: {result.public_key}",
        "",
        "⚠️  IMPORTANT SECURITY NOTICE:",
        f"• Your mnemonic phrase has been sent to {email}",
        "• Save it securely offline - it cannot be recovered!",
        "• Never share your mnemonic or private key",
        "• This keypair is stored securely in your account",
        "",
        "You can now:",
        "• Sign agent registrations cryptographically",
        "• Prove ownership for secure transfers",
        "• Boost trust scores with verified authenticity",
        "",
        "Tier note: Free tier allows 1 keypair, Developer tier allows unlimited.",
        "",
        f"Manage keypairs: {DEVELOPER_TOOLS_URL}",
    ])
