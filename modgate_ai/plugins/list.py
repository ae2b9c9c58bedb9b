"""Introspection module: lists every available module and its commands."""

from typing import Any, Dict, List

from ..agent_core.registry import CommandSpec, ModuleDescriptor, PluginContext
from ..agent_core.schemas import Capability


def create_module(ctx: PluginContext) -> ModuleDescriptor:
    def list_all_modules() -> List[Dict[str, Any]]:
        return ctx.registry.describe()

    return ModuleDescriptor(
        id="list",
        name="Listing Module",
        capabilities=[Capability.read],
        commands={
            "listAllModules": CommandSpec(
                description="Returns all Module names with their commands and capabilities",
                handler=list_all_modules,
            ),
        },
    )
