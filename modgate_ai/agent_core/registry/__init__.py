"""Plugin registry.

 A *module* is a capability plugin exposing named commands.

 - Plugin sources define ``create_module(ctx) -> ModuleDescriptor``.
 - ``ModuleRegistry`` discovers sources, loads them on demand and caches the
   resulting descriptors.
 - The dispatcher resolves ``{module, command}`` pairs through the registry.

 This package exports:

 - ``ModuleDescriptor`` / ``CommandSpec``: immutable module metadata.
 - ``PluginContext`` / ``PluginFactory``: the plugin construction contract.
 - ``ModuleRegistry``: discovery and caching.
 """

from .base import CommandSpec, ModuleDescriptor, PluginContext, PluginFactory
from .registry import PLUGIN_ENTRY_POINT_GROUP, ModuleRegistry, PluginSource

__all__ = [
    "CommandSpec",
    "ModuleDescriptor",
    "PluginContext",
    "PluginFactory",
    "ModuleRegistry",
    "PluginSource",
    "PLUGIN_ENTRY_POINT_GROUP",
]
