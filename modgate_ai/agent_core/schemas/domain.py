from __future__ import annotations

import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import BaseSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_request_id() -> str:
    """Return an opaque, unguessable identifier for a pending invocation."""
    return secrets.token_urlsafe(24)


class Capability(str, Enum):
    read = "READ"
    write = "WRITE"
    search = "SEARCH"


class ErrorKind(str, Enum):
    module_not_found = "ModuleNotFound"
    command_not_found = "CommandNotFound"
    invalid_arguments = "InvalidArguments"
    handler_error = "HandlerError"
    parse_ambiguous = "ParseAmbiguous"
    request_not_found = "RequestNotFound"
    request_expired = "RequestExpired"
    provider_error = "ProviderError"
    chain_limit_exceeded = "ChainLimitExceeded"


class ApprovalState(str, Enum):
    proposed = "proposed"
    auto_approved = "auto_approved"
    awaiting_approval = "awaiting_approval"
    executed = "executed"
    denied = "denied"


class ConversationStatus(str, Enum):
    completed = "completed"
    approval_required = "approval_required"
    denied = "denied"
    failed = "failed"


class InvocationIntent(BaseSchema):
    """A parsed request to run ``command`` of ``module``."""

    module: str = Field(pattern=r"^[A-Za-z0-9_]+$")
    command: str = Field(pattern=r"^[A-Za-z0-9_]+$")
    args: Dict[str, Any] = Field(default_factory=dict)


class InvocationResult(BaseSchema):
    """Uniform success/failure envelope produced by the dispatcher.

    Exactly one of the two shapes is populated:

    - success: ``ok=True`` and ``result`` holds the handler's return value;
    - failure: ``ok=False`` with ``error_kind`` and ``message``.
    """

    ok: bool
    result: Any = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, result: Any) -> "InvocationResult":
        return cls(ok=True, result=result)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "InvocationResult":
        return cls(ok=False, error_kind=kind, message=message)


class ToolOutput(BaseSchema):
    """One executed invocation as seen by the model on the next turn."""

    module: str
    command: str
    args: Dict[str, Any] = Field(default_factory=dict)
    result: InvocationResult


class PendingInvocation(BaseSchema):
    request_id: str = Field(default_factory=new_request_id)

    module: str
    command: str
    args: Dict[str, Any] = Field(default_factory=dict)

    original_prompt: str
    last_model_reply: str
    prior_results: List[ToolOutput] = Field(default_factory=list)
    depth: int = 0

    created_at: datetime = Field(default_factory=_utc_now)
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or _utc_now()) >= self.expires_at


class ConversationOutcome(BaseSchema):
    """Terminal (or suspended) state of one orchestration run."""

    status: ConversationStatus
    message: str

    request_id: Optional[str] = None
    module: Optional[str] = None
    command: Optional[str] = None

    module_result: Any = None
    error_kind: Optional[ErrorKind] = None
    tool_outputs: List[ToolOutput] = Field(default_factory=list)
