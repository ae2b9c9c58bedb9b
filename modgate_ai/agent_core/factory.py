from __future__ import annotations

"""Convenience factories for wiring the agent core.

These helpers build the default module registry, the approval policy and a
ready-to-use ``GatewayService``. Applications and tests can pass their own
registry, store or model client to replace any piece.
"""

from pathlib import Path
from typing import Iterable, Optional, Union

from .approvals import ApprovalWorkflow, PendingInvocationStore
from .dispatch import CommandDispatcher
from .model_provider import ModelClient
from .parsing import CommandParser
from .policy import ApprovalPolicy, GlobalPolicy, PolicyConfig
from .registry import ModuleRegistry
from .runtime import ConversationEngine, EngineDeps
from .service import GatewayService


def build_default_registry(modules_dir: Union[str, Path, None] = None) -> ModuleRegistry:
    """Build a registry over the built-in plugins, installed entry points and
    an optional directory of plugin files."""
    return ModuleRegistry(modules_dir=modules_dir)


def build_policy(
    *,
    trusted_modules: Iterable[str] = ("list",),
    approval_ttl_seconds: float = 900.0,
    max_chain_depth: int = 8,
) -> GlobalPolicy:
    """Construct a ``GlobalPolicy`` from plain values."""
    return GlobalPolicy(
        PolicyConfig(
            approval_policy=ApprovalPolicy(
                trusted_modules=set(trusted_modules),
                approval_ttl_seconds=approval_ttl_seconds,
                max_chain_depth=max_chain_depth,
            )
        )
    )


def build_service(
    *,
    model: ModelClient,
    registry: Optional[ModuleRegistry] = None,
    policy: Optional[GlobalPolicy] = None,
    store: Optional[PendingInvocationStore] = None,
) -> GatewayService:
    """Wire registry, dispatcher, approval workflow and engine into a service."""
    registry = registry or build_default_registry()
    policy = policy or GlobalPolicy()
    store = store or PendingInvocationStore(ttl_seconds=policy.approval_ttl_seconds)
    workflow = ApprovalWorkflow(policy, store, CommandDispatcher(registry))
    engine = ConversationEngine(
        deps=EngineDeps(model=model, workflow=workflow, parser=CommandParser(), registry=registry),
        max_chain_depth=policy.max_chain_depth,
    )
    return GatewayService(engine=engine, workflow=workflow, registry=registry)
