from __future__ import annotations

"""Global policy decisions for module invocations.

``GlobalPolicy`` is the single authority the approval workflow consults to
decide whether an invocation may run within the current request or must be
suspended behind an approval.

The decision is a pure function of the module id: trusted modules are
auto-approved, everything else awaits a human decision. Commands are accepted
for logging and future per-command rules but do not affect the outcome.
"""

from .models import PolicyConfig, PolicyDecision


class GlobalPolicy:
    """Approval gating configured by ``PolicyConfig``."""

    def __init__(self, config: PolicyConfig | None = None) -> None:
        self._cfg = config or PolicyConfig()

    @property
    def config(self) -> PolicyConfig:
        """Return the underlying configuration object."""
        return self._cfg

    @property
    def approval_ttl_seconds(self) -> float:
        return self._cfg.approval_policy.approval_ttl_seconds

    @property
    def max_chain_depth(self) -> int:
        return self._cfg.approval_policy.max_chain_depth

    def is_trusted(self, module: str) -> bool:
        return module in self._cfg.approval_policy.trusted_modules

    def decide(self, module: str, command: str) -> PolicyDecision:
        """
        Decide whether ``module.command`` needs an approval.

        Args:
            module: Target module id.
            command: Target command name.

        Returns:
            PolicyDecision: ``require_approval=False`` for trusted modules.
        """
        if self.is_trusted(module):
            return PolicyDecision(require_approval=False, reason=f"module '{module}' is trusted")
        return PolicyDecision(require_approval=True, reason=f"module '{module}' requires approval for '{command}'")
