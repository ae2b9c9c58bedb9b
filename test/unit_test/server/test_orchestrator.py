from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from modgate_ai.agent_core.approvals import PendingInvocationStore
from modgate_ai.agent_core.registry import ModuleRegistry
from modgate_ai.agent_core.schemas import (
    ConversationOutcome,
    ConversationStatus,
    ErrorKind,
    PendingInvocation,
)
from modgate_ai.server.core.config import Settings
from modgate_ai.server.services.orchestrator import OrchestratorService, to_response

pytestmark = pytest.mark.asyncio


async def test_to_response_approval_required() -> None:
    outcome = ConversationOutcome(
        status=ConversationStatus.approval_required,
        message="Module 'file' command 'readFile' requires approval.",
        request_id="rid",
        module="file",
        command="readFile",
    )
    body = to_response(outcome).model_dump(by_alias=True, exclude_none=True)
    assert body == {
        "success": True,
        "message": "Module 'file' command 'readFile' requires approval.",
        "requiresApproval": True,
        "requestId": "rid",
        "module": "file",
        "command": "readFile",
    }


async def test_to_response_failure_carries_error_kind() -> None:
    outcome = ConversationOutcome(
        status=ConversationStatus.failed, message="boom", error_kind=ErrorKind.provider_error
    )
    body = to_response(outcome).model_dump(by_alias=True, exclude_none=True)
    assert body == {"success": False, "message": "boom", "errorKind": "ProviderError"}


async def test_to_response_denied() -> None:
    body = to_response(ConversationOutcome(status=ConversationStatus.denied, message="no")).model_dump(
        by_alias=True, exclude_none=True
    )
    assert body == {"success": True, "message": "no", "denied": True}


async def test_unknown_task_type_is_rejected(make_orchestrator) -> None:
    orchestrator = make_orchestrator("never used")
    res = await orchestrator.handle_message("hello", "image")
    assert res.success is False
    assert res.message == "Unknown task type: image"
    assert orchestrator.model.calls == []


async def test_settings_flow_into_policy_and_store(make_orchestrator) -> None:
    orchestrator = make_orchestrator(
        "x", MODGATE_AI_TRUSTED_MODULES=["list", "file"], MODGATE_AI_APPROVAL_TTL_SECONDS=30, MODGATE_AI_MAX_CHAIN_DEPTH=2
    )
    assert orchestrator.policy.is_trusted("file")
    assert orchestrator.policy.max_chain_depth == 2
    assert orchestrator.store.ttl_seconds == 30


async def test_load_modules_logs_failures(scripted_model) -> None:
    def broken(ctx):
        raise RuntimeError("cannot start")

    registry = ModuleRegistry(include_builtin=False, include_entry_points=False, factories={"broken": broken})
    orchestrator = OrchestratorService(Settings(), model=scripted_model("x"), registry=registry)

    with patch("modgate_ai.server.services.orchestrator.logger") as mock_logger:
        orchestrator.load_modules()

    assert "broken" in mock_logger.warning.call_args.args[0]


async def test_sweeper_evicts_expired_requests(make_orchestrator) -> None:
    orchestrator = make_orchestrator("x", MODGATE_AI_SWEEP_INTERVAL_SECONDS=0.01)
    clock = [datetime.now(timezone.utc)]
    orchestrator.store = PendingInvocationStore(ttl_seconds=1, clock=lambda: clock[0])
    await orchestrator.store.put(
        PendingInvocation(module="file", command="readFile", original_prompt="p", last_model_reply="r")
    )
    clock[0] += timedelta(seconds=5)

    orchestrator.start_sweeper()
    for _ in range(50):
        if await orchestrator.store.size() == 0:
            break
        await asyncio.sleep(0.01)
    await orchestrator.stop_sweeper()

    assert await orchestrator.store.size() == 0
    assert orchestrator._sweeper is None


async def test_stop_sweeper_without_start_is_noop(make_orchestrator) -> None:
    orchestrator = make_orchestrator("x")
    await orchestrator.stop_sweeper()
    assert orchestrator._sweeper is None
