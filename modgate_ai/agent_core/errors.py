"""Error types for the agent core.

Defines a small hierarchy of exceptions raised by the registry, the approval
workflow and the model provider. The dispatcher never lets these escape: it
converts them into ``InvocationResult`` failures (see ``ErrorKind``).
"""

from __future__ import annotations

from .schemas.domain import ErrorKind


class GatewayError(Exception):
    """Base error for all gateway exceptions."""

    kind: ErrorKind | None = None


class PluginNotFoundError(GatewayError):
    """Raised when no plugin source matches the requested module id."""

    kind = ErrorKind.module_not_found

    def __init__(self, module_id: str) -> None:
        self.module_id = module_id
        super().__init__(f"Module not found: '{module_id}'")


class PluginLoadError(GatewayError):
    """Raised when a plugin source exists but fails to initialize.

    The underlying exception is available as ``cause`` and ``__cause__``.
    """

    kind = ErrorKind.module_not_found

    def __init__(self, module_id: str, cause: BaseException) -> None:
        self.module_id = module_id
        self.cause = cause
        super().__init__(f"Failed to load module '{module_id}': {type(cause).__name__}: {cause}")


class RequestNotFoundError(GatewayError):
    """Raised when an approval decision references an unknown or consumed request id."""

    kind = ErrorKind.request_not_found

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"No pending request found for id '{request_id}'")


class RequestExpiredError(GatewayError):
    """Raised when an approval decision arrives after the pending invocation expired."""

    kind = ErrorKind.request_expired

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Pending request '{request_id}' has expired")


class ProviderError(GatewayError):
    """Raised when the model provider call fails (network, auth, rate limit)."""

    kind = ErrorKind.provider_error
