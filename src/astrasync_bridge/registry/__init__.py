"""AstraSync registry integration — REST client, auth strategies, telemetry."""

from astrasync_bridge.registry.auth import ApiKeyAuth, AuthStrategy, NoAuth, PasswordLoginAuth, build_auth_strategy
from astrasync_bridge.registry.client import RegistryClient
from astrasync_bridge.registry.telemetry import TelemetrySink

__all__ = [
    "ApiKeyAuth",
    "AuthStrategy",
    "NoAuth",
    "PasswordLoginAuth",
    "RegistryClient",
    "TelemetrySink",
    "build_auth_strategy",
]
