from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field

from ..schemas.base import BaseSchema


class ApprovalPolicy(BaseSchema):
    """
    Configuration for the human-in-the-loop approval gate.

    Invocations of a trusted module execute immediately; every other module
    is held as a pending invocation until an explicit decision arrives or the
    entry expires.
    """

    trusted_modules: set[str] = Field(
        default_factory=lambda: {"list"},
        description="Module ids that bypass the approval gate (introspection, read-only).",
    )
    approval_ttl_seconds: float = Field(default=900.0, gt=0.0, le=86400.0)
    max_chain_depth: int = Field(
        default=8,
        ge=1,
        description="Maximum number of chained tool calls per original user request.",
    )


class PolicyConfig(BaseSchema):
    """Top-level policy configuration handed to ``GlobalPolicy``."""

    approval_policy: ApprovalPolicy = Field(default_factory=ApprovalPolicy)


@dataclass(frozen=True)
class PolicyDecision:
    """
    Result of a policy check for a single invocation.

    Attributes:
        require_approval: True when the invocation must wait for a decision.
        reason: Short explanation, surfaced in logs.
    """

    require_approval: bool
    reason: str
