"""Built-in modules.

Every submodule not starting with an underscore is discovered by the
``ModuleRegistry`` and must define ``create_module(ctx) -> ModuleDescriptor``.
The submodule name is the module id.
"""
