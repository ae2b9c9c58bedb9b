"""End-to-end flows over HTTP with the built-in modules and a scripted model."""

from __future__ import annotations

from pathlib import Path
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from modgate_ai.server.core.config import Settings
from modgate_ai.server.main import app
from modgate_ai.server.services.orchestrator import OrchestratorService, get_orchestrator

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def gateway(scripted_model) -> AsyncGenerator[Callable[..., AsyncClient], None]:
    clients = []

    def _start(*replies: str) -> AsyncClient:
        orchestrator = OrchestratorService(Settings(_env_file=None), model=scripted_model(*replies))
        orchestrator.load_modules()
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost")
        clients.append(client)
        return client

    yield _start

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()


async def test_listing_flow_needs_no_approval(gateway) -> None:
    client = gateway("/run module list listAllModules", "You can use math, string, crypto and more.")

    res = await client.post("/message", json={"userprompt": "what modules are available?", "typoftask": "llm"})

    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "You can use math, string, crypto and more."}


async def test_file_read_requires_approval_and_denial_is_final(gateway) -> None:
    client = gateway("/run module list listAllModules", "/run module file readFile")

    pending = await client.post("/message", json={"userprompt": "show me my notes", "typoftask": "llm"})
    body = pending.json()
    assert body["success"] is True
    assert body["requiresApproval"] is True
    assert body["module"] == "file"
    assert body["command"] == "readFile"
    request_id = body["requestId"]

    denied = await client.post("/approve-module", json={"requestId": request_id, "approved": False})
    assert denied.json()["success"] is True
    assert denied.json()["denied"] is True

    replay = await client.post("/approve-module", json={"requestId": request_id, "approved": True})
    assert replay.json()["success"] is False


async def test_approved_file_read_with_arguments(gateway, tmp_path: Path) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("buy milk", encoding="utf-8")
    client = gateway(f'/run module file readFile {{"filePath": "{notes.as_posix()}"}}/', "Your note: buy milk")

    pending = (await client.post("/message", json={"userprompt": "read my notes", "typoftask": "llm"})).json()
    res = await client.post("/approve-module", json={"requestId": pending["requestId"], "approved": True})

    assert res.json() == {"success": True, "message": "Your note: buy milk", "moduleResult": "buy milk"}


async def test_math_chain_after_approval(gateway) -> None:
    client = gateway('/run module math fibonacci {"n": 10}/', '/run module math isPrime {"num": 55}/', "55 is not prime.")

    first = (await client.post("/message", json={"userprompt": "is fib(10) prime?", "typoftask": "llm"})).json()
    second = (await client.post("/approve-module", json={"requestId": first["requestId"], "approved": True})).json()

    assert second["requiresApproval"] is True
    assert second["command"] == "isPrime"
    assert second["moduleResult"] == 55

    final = (await client.post("/approve-module", json={"requestId": second["requestId"], "approved": True})).json()
    assert final == {"success": True, "message": "55 is not prime.", "moduleResult": False}
