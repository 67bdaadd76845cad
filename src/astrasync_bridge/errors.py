"""Shared error types for the bridge."""


class BridgeError(Exception):
    """Base error for all bridge failures."""


class ConfigurationError(BridgeError):
    """Settings could not be loaded or failed validation."""


class UnknownToolError(BridgeError):
    """Requested tool does not exist in the catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidArgumentsError(BridgeError):
    """A tool invocation is missing required arguments or is malformed."""

    def __init__(self, tool_name: str, detail: str = "", missing: list[str] | None = None) -> None:
        self.tool_name = tool_name
        self.missing = list(missing or [])
        if not detail and self.missing:
            detail = f"Missing required argument(s) for {tool_name}: {', '.join(self.missing)}"
        self.detail = detail
        super().__init__(detail or f"Invalid arguments for {tool_name}")


class MissingCredentialsError(InvalidArgumentsError):
    """The active authentication strategy needs credentials the caller did not send."""


class RegistryError(BridgeError):
    """The registry answered with a non-2xx status.

    ``body`` is the upstream response text, kept verbatim.
    """

    def __init__(self, operation: str, status_code: int, body: str = "") -> None:
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(f"{operation} failed: {body}" if body else f"{operation} failed: HTTP {status_code}")

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class RegistryUnavailableError(BridgeError):
    """The registry could not be reached (connection error, timeout)."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: registry unreachable" + (f" ({detail})" if detail else ""))


class TierLimitError(BridgeError):
    """The registry refused an operation because of the caller's plan tier."""

    def __init__(self, message: str, upstream: str = "") -> None:
        self.upstream = upstream
        super().__init__(message)


class RegistryResponseError(BridgeError):
    """The registry answered 2xx with a body the bridge cannot interpret."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: unexpected registry response" + (f" ({detail})" if detail else ""))
