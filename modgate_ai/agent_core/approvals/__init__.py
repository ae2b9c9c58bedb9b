"""Human-in-the-loop approval gate and the pending invocation store."""

from .store import PendingInvocationStore
from .workflow import ApprovalWorkflow, Decision, Proposal

__all__ = ["ApprovalWorkflow", "Decision", "PendingInvocationStore", "Proposal"]
