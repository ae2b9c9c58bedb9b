"""Command dispatch: ``{module, command}`` to ``InvocationResult``."""

from .dispatcher import CommandDispatcher

__all__ = ["CommandDispatcher"]
