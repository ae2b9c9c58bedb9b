from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from modgate_ai.agent_core.approvals import ApprovalWorkflow, PendingInvocationStore
from modgate_ai.agent_core.dispatch import CommandDispatcher
from modgate_ai.agent_core.errors import RequestExpiredError, RequestNotFoundError
from modgate_ai.agent_core.policy import GlobalPolicy
from modgate_ai.agent_core.registry import CommandSpec, ModuleDescriptor, ModuleRegistry, PluginContext
from modgate_ai.agent_core.schemas import ApprovalState, Capability, InvocationIntent, PendingInvocation

pytestmark = pytest.mark.asyncio


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _pending(**overrides) -> PendingInvocation:
    data = dict(module="file", command="readFile", original_prompt="read it", last_model_reply="/run module file readFile/")
    data.update(overrides)
    return PendingInvocation(**data)


@pytest.fixture
def executions() -> List[str]:
    return []


@pytest.fixture
def workflow(executions: List[str]) -> ApprovalWorkflow:
    def listing(ctx: PluginContext) -> ModuleDescriptor:
        return ModuleDescriptor(
            id="list",
            name="Listing",
            capabilities=[Capability.read],
            commands={"listAllModules": CommandSpec("List", lambda: executions.append("list") or ["list", "file"])},
        )

    def files(ctx: PluginContext) -> ModuleDescriptor:
        return ModuleDescriptor(
            id="file",
            name="File",
            capabilities=[Capability.read, Capability.write],
            commands={"readFile": CommandSpec("Read", lambda: executions.append("file") or "content")},
        )

    registry = ModuleRegistry(
        include_builtin=False, include_entry_points=False, factories={"list": listing, "file": files}
    )
    return ApprovalWorkflow(GlobalPolicy(), PendingInvocationStore(ttl_seconds=60), CommandDispatcher(registry))


# ---------------------------------------------------------------------------
# PendingInvocationStore
# ---------------------------------------------------------------------------


async def test_store_put_stamps_expiry_and_pop_consumes_once() -> None:
    clock = _Clock()
    store = PendingInvocationStore(ttl_seconds=30, clock=clock)
    stored = await store.put(_pending())

    assert stored.expires_at == clock.now + timedelta(seconds=30)
    assert await store.size() == 1

    popped = await store.pop(stored.request_id)
    assert popped.request_id == stored.request_id
    assert await store.size() == 0

    with pytest.raises(RequestNotFoundError):
        await store.pop(stored.request_id)


async def test_store_pop_expired_raises_and_removes() -> None:
    clock = _Clock()
    store = PendingInvocationStore(ttl_seconds=30, clock=clock)
    stored = await store.put(_pending())
    clock.advance(31)

    assert await store.get(stored.request_id) is None
    with pytest.raises(RequestExpiredError):
        await store.pop(stored.request_id)
    with pytest.raises(RequestNotFoundError):
        await store.pop(stored.request_id)


async def test_store_pop_after_eviction_still_reports_expired() -> None:
    clock = _Clock()
    store = PendingInvocationStore(ttl_seconds=10, clock=clock)
    stored = await store.put(_pending())
    clock.advance(11)

    assert await store.purge_expired() == [stored.request_id]
    with pytest.raises(RequestExpiredError):
        await store.pop(stored.request_id)
    with pytest.raises(RequestNotFoundError):
        await store.pop(stored.request_id)


async def test_store_eviction_by_later_put_still_reports_expired() -> None:
    clock = _Clock()
    store = PendingInvocationStore(ttl_seconds=10, clock=clock)
    stale = await store.put(_pending())
    clock.advance(11)
    await store.put(_pending())

    with pytest.raises(RequestExpiredError):
        await store.pop(stale.request_id)


async def test_store_tombstones_are_forgotten_after_another_ttl() -> None:
    clock = _Clock()
    store = PendingInvocationStore(ttl_seconds=10, clock=clock)
    stored = await store.put(_pending())
    clock.advance(11)
    await store.purge_expired()
    clock.advance(10)
    await store.purge_expired()

    with pytest.raises(RequestNotFoundError):
        await store.pop(stored.request_id)


async def test_store_tombstones_are_capped() -> None:
    clock = _Clock()
    store = PendingInvocationStore(ttl_seconds=10, clock=clock, max_tombstones=2)
    first, second, third = [await store.put(_pending()) for _ in range(3)]
    clock.advance(11)
    await store.purge_expired()

    with pytest.raises(RequestNotFoundError):
        await store.pop(first.request_id)
    for entry in (second, third):
        with pytest.raises(RequestExpiredError):
            await store.pop(entry.request_id)


async def test_store_purge_expired_evicts_only_stale_entries() -> None:
    clock = _Clock()
    store = PendingInvocationStore(ttl_seconds=30, clock=clock)
    old = await store.put(_pending())
    clock.advance(20)
    fresh = await store.put(_pending())
    clock.advance(15)

    assert await store.purge_expired() == [old.request_id]
    assert await store.get(fresh.request_id) is not None
    assert await store.size() == 1


async def test_store_request_ids_are_unique_and_opaque() -> None:
    store = PendingInvocationStore()
    ids = {(await store.put(_pending())).request_id for _ in range(50)}
    assert len(ids) == 50
    assert all(len(rid) >= 32 for rid in ids)


async def test_store_concurrent_pops_hand_out_entry_once() -> None:
    store = PendingInvocationStore()
    stored = await store.put(_pending())

    results = await asyncio.gather(*(store.pop(stored.request_id) for _ in range(5)), return_exceptions=True)

    assert sum(isinstance(r, PendingInvocation) for r in results) == 1
    assert sum(isinstance(r, RequestNotFoundError) for r in results) == 4


# ---------------------------------------------------------------------------
# ApprovalWorkflow
# ---------------------------------------------------------------------------


async def test_trusted_module_is_auto_approved_and_executed(workflow: ApprovalWorkflow, executions: List[str]) -> None:
    proposal = await workflow.propose(
        InvocationIntent(module="list", command="listAllModules"),
        original_prompt="what modules?",
        last_model_reply="/run module list listAllModules/",
    )

    assert proposal.state == ApprovalState.auto_approved
    assert proposal.pending is None
    assert proposal.result.ok is True
    assert proposal.result.result == ["list", "file"]
    assert executions == ["list"]
    assert await workflow.store.size() == 0


async def test_untrusted_module_awaits_approval(workflow: ApprovalWorkflow, executions: List[str]) -> None:
    proposal = await workflow.propose(
        InvocationIntent(module="file", command="readFile"),
        original_prompt="read my notes",
        last_model_reply="/run module file readFile/",
        depth=2,
    )

    assert proposal.state == ApprovalState.awaiting_approval
    assert proposal.result is None
    assert proposal.pending.module == "file"
    assert proposal.pending.original_prompt == "read my notes"
    assert proposal.pending.depth == 2
    assert executions == []
    assert await workflow.store.get(proposal.pending.request_id) is not None


async def test_approve_executes_once_and_consumes_request(workflow: ApprovalWorkflow, executions: List[str]) -> None:
    proposal = await workflow.propose(
        InvocationIntent(module="file", command="readFile"), original_prompt="p", last_model_reply="r"
    )
    rid = proposal.pending.request_id

    decision = await workflow.decide(rid, approved=True)
    assert decision.state == ApprovalState.executed
    assert decision.result.result == "content"
    assert executions == ["file"]

    with pytest.raises(RequestNotFoundError):
        await workflow.decide(rid, approved=True)
    assert executions == ["file"]


async def test_deny_never_executes(workflow: ApprovalWorkflow, executions: List[str]) -> None:
    proposal = await workflow.propose(
        InvocationIntent(module="file", command="readFile"), original_prompt="p", last_model_reply="r"
    )
    rid = proposal.pending.request_id

    decision = await workflow.decide(rid, approved=False)
    assert decision.state == ApprovalState.denied
    assert decision.result is None
    assert executions == []

    with pytest.raises(RequestNotFoundError):
        await workflow.decide(rid, approved=True)
    assert executions == []


async def test_decide_unknown_request_raises(workflow: ApprovalWorkflow) -> None:
    with pytest.raises(RequestNotFoundError):
        await workflow.decide("does-not-exist", approved=True)
