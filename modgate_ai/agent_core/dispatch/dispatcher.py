from __future__ import annotations

"""Command dispatcher.

``CommandDispatcher.run`` resolves ``{module, command}`` through the
``ModuleRegistry``, validates arguments against the command's schema, invokes
exactly one handler and normalizes the outcome into an ``InvocationResult``.

The dispatcher never propagates a fault to its caller:

- unknown or unloadable module  -> ``ModuleNotFound``
- unknown command               -> ``CommandNotFound``
- arguments rejected by schema  -> ``InvalidArguments``
- exception raised by handler   -> ``HandlerError``

Coroutine handlers are awaited on the event loop; plain functions run in a
worker thread so a slow plugin never stalls other conversations.
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ...core.monitoring import log_module_invocation
from ..errors import PluginLoadError, PluginNotFoundError
from ..registry import ModuleRegistry
from ..schemas.domain import ErrorKind, InvocationResult

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Run module commands and wrap their results."""

    def __init__(self, registry: ModuleRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    async def run(self, module: str, command: str, args: Optional[Dict[str, Any]] = None) -> InvocationResult:
        """
        Invoke ``command`` of ``module``.

        Args:
            module: Module identifier.
            command: Command name within the module.
            args: Keyword arguments for commands declaring an ``args_model``.
                Schema-less commands are called with no arguments.

        Returns:
            InvocationResult: success with the handler's return value, or a
            failure carrying an ``ErrorKind`` and message.
        """
        started = time.perf_counter()
        result = await self._run(module, command, args or {})
        duration_ms = (time.perf_counter() - started) * 1000
        log_module_invocation(
            module,
            command,
            ok=result.ok,
            duration_ms=duration_ms,
            error_kind=result.error_kind.value if result.error_kind else None,
        )
        logger.debug(f"Invoked {module}.{command} ok={result.ok} in {duration_ms:.1f}ms")
        return result

    async def _run(self, module: str, command: str, args: Dict[str, Any]) -> InvocationResult:
        try:
            descriptor = self._registry.load_module(module)
        except (PluginNotFoundError, PluginLoadError) as e:
            return InvocationResult.failure(ErrorKind.module_not_found, str(e))

        spec = descriptor.command(command)
        if spec is None:
            return InvocationResult.failure(
                ErrorKind.command_not_found,
                f"Command '{command}' not found in module '{module}'",
            )

        if spec.args_model is None:
            if args:
                return InvocationResult.failure(
                    ErrorKind.invalid_arguments,
                    f"Command '{module}.{command}' takes no arguments",
                )
            kwargs: Dict[str, Any] = {}
        else:
            try:
                kwargs = dict(spec.args_model.model_validate(args))
            except ValidationError as e:
                return InvocationResult.failure(
                    ErrorKind.invalid_arguments,
                    f"Invalid arguments for '{module}.{command}': {e.errors(include_url=False)}",
                )

        try:
            if inspect.iscoroutinefunction(spec.handler):
                value = await spec.handler(**kwargs)
            else:
                value = await asyncio.to_thread(spec.handler, **kwargs)
                if inspect.isawaitable(value):
                    value = await value
        except Exception as e:
            logger.warning(f"Handler {module}.{command} raised {type(e).__name__}: {e}", exc_info=True)
            return InvocationResult.failure(ErrorKind.handler_error, f"{type(e).__name__}: {e}")

        return InvocationResult.success(value)
