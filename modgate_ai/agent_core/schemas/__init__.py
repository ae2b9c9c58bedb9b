"""Domain schemas shared by the registry, dispatcher, approval workflow and engine."""

from .base import BaseSchema
from .domain import (
    ApprovalState,
    Capability,
    ConversationOutcome,
    ConversationStatus,
    ErrorKind,
    InvocationIntent,
    InvocationResult,
    PendingInvocation,
    ToolOutput,
)

__all__ = [
    "BaseSchema",
    "ApprovalState",
    "Capability",
    "ConversationOutcome",
    "ConversationStatus",
    "ErrorKind",
    "InvocationIntent",
    "InvocationResult",
    "PendingInvocation",
    "ToolOutput",
]
