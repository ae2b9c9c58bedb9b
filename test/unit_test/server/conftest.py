from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from modgate_ai.agent_core.registry import CommandSpec, ModuleDescriptor, ModuleRegistry, PluginContext
from modgate_ai.agent_core.schemas import Capability
from modgate_ai.server.core.config import Settings
from modgate_ai.server.services.orchestrator import OrchestratorService


def _listing(ctx: PluginContext) -> ModuleDescriptor:
    return ModuleDescriptor(
        id="list",
        name="Listing Module",
        capabilities=[Capability.read],
        commands={"listAllModules": CommandSpec("Lists modules", lambda: ctx.registry.list_modules())},
    )


def _files(ctx: PluginContext) -> ModuleDescriptor:
    return ModuleDescriptor(
        id="file",
        name="File Module",
        capabilities=[Capability.read, Capability.write],
        commands={"readFile": CommandSpec("Reads file content", lambda: "file body")},
    )


@pytest.fixture
def make_orchestrator(scripted_model) -> Callable[..., OrchestratorService]:
    """Build an orchestrator over a two-module registry and a scripted model."""

    def _make(*replies: str, **settings_overrides) -> OrchestratorService:
        registry = ModuleRegistry(
            include_builtin=False, include_entry_points=False, factories={"list": _listing, "file": _files}
        )
        return OrchestratorService(Settings(**settings_overrides), model=scripted_model(*replies), registry=registry)

    return _make


@pytest_asyncio.fixture(name="client_for")
async def client_for_fixture() -> AsyncGenerator[Callable[[OrchestratorService], AsyncClient], None]:
    """Create async HTTP clients bound to a given orchestrator via dependency override."""
    from modgate_ai.server.main import app
    from modgate_ai.server.services.orchestrator import get_orchestrator

    clients = []

    def _client(orchestrator: OrchestratorService) -> AsyncClient:
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost")
        clients.append(client)
        return client

    yield _client

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()
