from __future__ import annotations

"""Module descriptor types and the plugin factory protocol.

A *module* is a named capability unit exposing one or more commands. Plugin
sources build a ``ModuleDescriptor`` through a ``create_module`` factory:

.. code-block:: python

    def create_module(ctx: PluginContext) -> ModuleDescriptor:
        return ModuleDescriptor(
            id="math",
            name="Math Module",
            capabilities=[Capability.read],
            commands={
                "fibonacci": CommandSpec(
                    description="Calculates the nth Fibonacci number",
                    handler=fibonacci,
                    args_model=FibonacciArgs,
                ),
            },
        )

Commands without an ``args_model`` are schema-less and are invoked with zero
arguments.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Protocol, Type

from pydantic import BaseModel

from ..schemas.domain import Capability

if TYPE_CHECKING:
    from .registry import ModuleRegistry


@dataclass(frozen=True)
class CommandSpec:
    """A named operation within a module.

    Attributes:
        description: Human/model readable summary of what the command does.
        handler: Sync or async callable run by the dispatcher.
        args_model: Optional pydantic model describing the keyword arguments
            accepted by ``handler``.
    """

    description: str
    handler: Callable[..., Any]
    args_model: Optional[Type[BaseModel]] = None

    def describe(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {"description": self.description or "No description available"}
        if self.args_model is not None:
            info["args"] = self.args_model.model_json_schema().get("properties", {})
        return info


@dataclass(frozen=True)
class ModuleDescriptor:
    """Immutable description of a loaded module."""

    id: str
    name: str
    capabilities: FrozenSet[Capability] = field(default_factory=frozenset)
    commands: Mapping[str, CommandSpec] = field(default_factory=dict)
    description: str = ""

    def __post_init__(self) -> None:
        caps: Iterable[Any] = self.capabilities or ()
        object.__setattr__(self, "capabilities", frozenset(Capability(c) for c in caps))
        object.__setattr__(self, "commands", MappingProxyType(dict(self.commands)))

    def command(self, name: str) -> Optional[CommandSpec]:
        return self.commands.get(name)

    def describe(self) -> Dict[str, Any]:
        """Return the listing payload for this module."""
        return {
            "id": self.id,
            "name": self.name or self.id,
            "capabilities": sorted(c.value for c in self.capabilities),
            "commands": {name: spec.describe() for name, spec in self.commands.items()},
        }


@dataclass(frozen=True)
class PluginContext:
    """Handles made available to plugin factories.

    Attributes:
        registry: The registry loading the plugin (used by introspection modules).
    """

    registry: "ModuleRegistry"


class PluginFactory(Protocol):
    """Callable building a ``ModuleDescriptor`` for a plugin source."""

    def __call__(self, ctx: PluginContext) -> ModuleDescriptor: ...
