"""Directive parsing: free-form model text to ``InvocationIntent``."""

from .parser import CommandParser, parse, render_directive

__all__ = ["CommandParser", "parse", "render_directive"]
