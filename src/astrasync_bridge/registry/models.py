"""Registry models — payloads returned by the AstraSync REST API.

The registry has shipped several response shapes over time (trust score
as a bare number or as an object, blockchain status nested or flat, the
agent identifier as ``id`` or ``agentId``).  The models below accept all
of them and expose one normalized view; unknown fields are ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

TEMP_ID_PREFIX = "TEMP-"

# ---------------------------------------------------------------------------
# Shared fragments
# ---------------------------------------------------------------------------


class _RegistryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class TrustScore(_RegistryModel):
    """A registry-assigned rating, possibly provisional."""

    score: float | int | str | None = None
    temporary: bool = Field(default=False, alias="isTemporary")

    @model_validator(mode="before")
    @classmethod
    def _from_scalar(cls, data: Any) -> Any:
        if isinstance(data, (int, float, str)) and not isinstance(data, bool):
            return {"score": data}
        return data


def _lift_blockchain_status(data: Any) -> Any:
    """Flatten ``{"blockchain": {"status": ...}}`` into ``blockchainStatus``."""
    if isinstance(data, dict) and "blockchainStatus" not in data:
        blockchain = data.get("blockchain")
        if isinstance(blockchain, dict) and blockchain.get("status") is not None:
            return {**data, "blockchainStatus": blockchain["status"]}
    return data


# ---------------------------------------------------------------------------
# Operation results
# ---------------------------------------------------------------------------


class RegistrationResult(_RegistryModel):
    """Body of ``POST /v1/register``."""

    agent_id: str | None = Field(default=None, alias="agentId")
    trust_score: TrustScore | None = Field(default=None, alias="trustScore")
    status: str | None = None
    blockchain_status: str | None = Field(default=None, alias="blockchainStatus")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        data = _lift_blockchain_status(data)
        if isinstance(data, dict) and not data.get("agentId") and data.get("id"):
            data = {**data, "agentId": str(data["id"])}
        return data

    @property
    def is_temporary(self) -> bool:
        if self.trust_score is not None and self.trust_score.temporary:
            return True
        return bool(self.agent_id and self.agent_id.startswith(TEMP_ID_PREFIX))


class AgentSummary(_RegistryModel):
    name: str | None = None
    owner: str | None = None


class VerificationResult(_RegistryModel):
    """Body of ``GET /v1/verify/{agentId}``.

    ``verified`` is the canonical flag; ``exists`` is what older registry
    deployments returned instead.
    """

    verified: bool | None = None
    exists: bool | None = None
    agent: AgentSummary | None = None
    trust_score: TrustScore | None = Field(default=None, alias="trustScore")
    status: str | None = None
    blockchain_status: str | None = Field(default=None, alias="blockchainStatus")
    registered_at: str | None = Field(default=None, alias="registeredAt")
    error: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        return _lift_blockchain_status(data)

    @property
    def is_temporary(self) -> bool:
        return self.trust_score is not None and self.trust_score.temporary


class AgentDetails(_RegistryModel):
    """Body of ``GET /v1/agent/{agentId}``."""

    name: str | None = None
    owner: str | None = None
    description: str | None = None
    registered_at: str | None = Field(default=None, alias="registeredAt")


class LoginResult(_RegistryModel):
    """Body of ``POST /v1/auth/login``."""

    token: str

    @model_validator(mode="before")
    @classmethod
    def _accept_access_token(cls, data: Any) -> Any:
        if isinstance(data, dict) and "token" not in data and "accessToken" in data:
            return {**data, "token": data["accessToken"]}
        return data


class AccountResult(_RegistryModel):
    """Body of ``POST /v1/accounts``."""

    id: str | None = None
    email: str | None = None
    account_type: str | None = Field(default=None, alias="accountType")


class ApiKeyResult(_RegistryModel):
    """Body of ``POST /v1/api-keys``. The key is only ever shown once."""

    api_key: str = Field(alias="apiKey")
    key_name: str | None = Field(default=None, alias="keyName")


class KeypairResult(_RegistryModel):
    """Body of ``POST /v1/crypto-keypairs``."""

    public_key: str = Field(alias="publicKey")
    key_name: str | None = Field(default=None, alias="keyName")
