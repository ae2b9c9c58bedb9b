from __future__ import annotations

"""Application service behind the HTTP routes.

``OrchestratorService`` owns the process-wide gateway objects (module
registry, pending invocation store, gateway service) built from ``Settings``
and converts ``ConversationOutcome`` values into API response bodies.
"""

import asyncio
from typing import Optional

from modgate_ai.agent_core.approvals import PendingInvocationStore
from modgate_ai.agent_core.factory import build_default_registry, build_policy, build_service
from modgate_ai.agent_core.model_provider import ModelClient, PydanticAIModelClient
from modgate_ai.agent_core.registry import ModuleRegistry
from modgate_ai.agent_core.schemas.domain import ConversationOutcome, ConversationStatus
from modgate_ai.agent_core.service import GatewayService
from modgate_ai.core.logging_config import get_logger
from modgate_ai.server.core.config import Settings, settings as default_settings
from modgate_ai.server.schemas import GatewayResponse

logger = get_logger(__name__)

SUPPORTED_TASK_TYPES = ("llm",)


def to_response(outcome: ConversationOutcome) -> GatewayResponse:
    """Map a conversation outcome onto the wire shape."""
    if outcome.status == ConversationStatus.approval_required:
        return GatewayResponse(
            success=True,
            requires_approval=True,
            request_id=outcome.request_id,
            module=outcome.module,
            command=outcome.command,
            message=outcome.message,
            module_result=outcome.module_result,
        )
    if outcome.status == ConversationStatus.denied:
        return GatewayResponse(success=True, denied=True, message=outcome.message)
    if outcome.status == ConversationStatus.failed:
        return GatewayResponse(
            success=False,
            message=outcome.message,
            error_kind=outcome.error_kind.value if outcome.error_kind else None,
        )
    return GatewayResponse(success=True, message=outcome.message, module_result=outcome.module_result)


class OrchestratorService:
    """
    Service layer for conversations and approval decisions.
    Wraps the core ``GatewayService`` and owns the expiry sweeper task.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        model: Optional[ModelClient] = None,
        registry: Optional[ModuleRegistry] = None,
    ) -> None:
        self.settings = settings or default_settings
        self.registry = registry or build_default_registry(self.settings.modules_dir)
        self.policy = build_policy(
            trusted_modules=self.settings.trusted_modules,
            approval_ttl_seconds=self.settings.approval_ttl_seconds,
            max_chain_depth=self.settings.max_chain_depth,
        )
        self.store = PendingInvocationStore(ttl_seconds=self.settings.approval_ttl_seconds)
        self.model = model or PydanticAIModelClient(self.settings.model, structured=self.settings.structured_calls)
        self.service: GatewayService = build_service(
            model=self.model, registry=self.registry, policy=self.policy, store=self.store
        )
        self._sweeper: Optional[asyncio.Task[None]] = None

    def module_ids(self) -> list[str]:
        return self.registry.list_modules()

    def load_modules(self) -> None:
        """Eagerly load every module, logging (not raising) load failures."""
        results = self.registry.load_all()
        failed = [k for k, v in results.items() if isinstance(v, Exception)]
        if failed:
            logger.warning(f"Modules failed to load: {failed}")

    async def handle_message(self, userprompt: str, typoftask: str) -> GatewayResponse:
        if typoftask not in SUPPORTED_TASK_TYPES:
            return GatewayResponse(success=False, message=f"Unknown task type: {typoftask}")
        outcome = await self.service.converse(userprompt)
        return to_response(outcome)

    async def approve_module(self, request_id: str, approved: bool) -> GatewayResponse:
        outcome = await self.service.decide(request_id, approved)
        return to_response(outcome)

    # ------------------------------------------------------------------
    # Expiry sweeper
    # ------------------------------------------------------------------

    async def _sweep_forever(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            evicted = await self.store.purge_expired()
            if evicted:
                logger.info(f"Sweeper evicted {len(evicted)} expired approval request(s)")

    def start_sweeper(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever(self.settings.sweep_interval_seconds))
            logger.debug("Pending invocation sweeper started")

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None


# Global singleton
_orchestrator: Optional[OrchestratorService] = None


def get_orchestrator() -> OrchestratorService:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = OrchestratorService()
    return _orchestrator
