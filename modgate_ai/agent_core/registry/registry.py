from __future__ import annotations

"""Module registry.

The registry discovers plugin sources, materializes them into
``ModuleDescriptor`` objects on demand and caches the result.

Sources are collected from:

1. the built-in ``modgate_ai.plugins`` package,
2. installed packages advertising the ``modgate_ai.modules`` entry point group,
3. an optional directory of ``*.py`` files (hot-added plugins),
4. factories registered explicitly with ``register``.

Later sources override earlier ones with the same id. Discovery runs on every
``list_modules`` call so newly added plugins show up without a restart.
"""

import importlib
import importlib.metadata
import importlib.util
import logging
import os
import pkgutil
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from ..errors import PluginLoadError, PluginNotFoundError
from .base import ModuleDescriptor, PluginContext, PluginFactory

logger = logging.getLogger(__name__)

BUILTIN_PLUGIN_PACKAGE = "modgate_ai.plugins"
PLUGIN_ENTRY_POINT_GROUP = "modgate_ai.modules"
FACTORY_ATTRIBUTE = "create_module"

_ID_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


@dataclass(frozen=True)
class PluginSource:
    """Where a module id comes from and how to import it.

    Attributes:
        module_id: Identifier used by directives and the HTTP surface.
        origin: One of ``builtin``, ``entry_point``, ``directory`` or ``registered``.
        target: Import path, entry point value or file path.
    """

    module_id: str
    origin: str
    target: str


def _factory_from(obj: Any, module_id: str) -> Callable[[PluginContext], Any]:
    if isinstance(obj, ModuleType):
        factory = getattr(obj, FACTORY_ATTRIBUTE, None)
        if factory is None:
            raise AttributeError(f"plugin '{module_id}' does not define {FACTORY_ATTRIBUTE}()")
        return factory
    if callable(obj):
        return obj
    raise TypeError(f"plugin '{module_id}' entry point is neither a module nor a factory")


def _file_stamp(source: PluginSource) -> Optional[Tuple[int, int]]:
    """Modification time and size of a directory plugin file, else None."""
    if source.origin != "directory":
        return None
    try:
        st = os.stat(source.target)
    except OSError:
        return None
    return st.st_mtime_ns, st.st_size


class ModuleRegistry:
    """
    Discover, load and cache module descriptors.

    Loading is idempotent: once a module is materialized its descriptor is
    cached until ``reload_module`` or ``invalidate`` is called. A failure to
    load one module never affects the others. Failures of directory plugins
    are remembered until the file changes on disk, so a broken file is not
    re-executed on every lookup; other failures are retried on the next
    attempt.

    The cache is shared between concurrent conversations and is guarded by a
    re-entrant lock.
    """

    def __init__(
        self,
        *,
        modules_dir: Union[str, Path, None] = None,
        include_builtin: bool = True,
        include_entry_points: bool = True,
        factories: Optional[Mapping[str, PluginFactory]] = None,
    ) -> None:
        self._modules_dir = Path(modules_dir) if modules_dir else None
        self._include_builtin = include_builtin
        self._include_entry_points = include_entry_points
        self._factories: Dict[str, PluginFactory] = {}
        self._cache: Dict[str, ModuleDescriptor] = {}
        self._failures: Dict[str, Tuple[Tuple[int, int], PluginLoadError]] = {}
        self._lock = threading.RLock()
        for module_id, factory in (factories or {}).items():
            self.register(module_id, factory)

    def register(self, module_id: str, factory: PluginFactory) -> None:
        """
        Register a plugin factory explicitly.

        Args:
            module_id: The module identifier (letters, digits and underscore).
            factory: Callable building the descriptor from a ``PluginContext``.

        Raises:
            ValueError: If ``module_id`` does not match the identifier grammar.
        """
        if not _ID_PATTERN.match(module_id):
            raise ValueError(f"invalid module id: {module_id!r}")
        with self._lock:
            self._factories[module_id] = factory
            self._cache.pop(module_id, None)
            self._failures.pop(module_id, None)

    def list_modules(self) -> List[str]:
        """Enumerate the currently available module identifiers."""
        ids = sorted(self._discover())
        logger.debug(f"Found {len(ids)} modules: {ids}")
        return ids

    def load_module(self, module_id: str) -> ModuleDescriptor:
        """
        Resolve and materialize a module.

        Args:
            module_id: The module identifier.

        Returns:
            The cached or freshly loaded ``ModuleDescriptor``.

        Raises:
            PluginNotFoundError: If no source matches ``module_id``.
            PluginLoadError: If the source exists but fails to initialize.
        """
        with self._lock:
            cached = self._cache.get(module_id)
            if cached is not None:
                return cached

            source = self._discover().get(module_id)
            if source is None:
                raise PluginNotFoundError(module_id)

            stamp = _file_stamp(source)
            failed = self._failures.get(module_id)
            if failed is not None and stamp is not None and failed[0] == stamp:
                raise failed[1]

            try:
                descriptor = self._materialize(source, reload=False)
            except PluginLoadError as e:
                if stamp is not None:
                    self._failures[module_id] = (stamp, e)
                raise
            self._failures.pop(module_id, None)
            self._cache[module_id] = descriptor
            logger.debug(f"Loaded module '{module_id}' from {source.origin}:{source.target}")
            return descriptor

    def reload_module(self, module_id: str) -> ModuleDescriptor:
        """Drop the cached descriptor and re-resolve it from its source."""
        with self._lock:
            self._cache.pop(module_id, None)
            self._failures.pop(module_id, None)
            source = self._discover().get(module_id)
            if source is None:
                raise PluginNotFoundError(module_id)
            descriptor = self._materialize(source, reload=True)
            self._cache[module_id] = descriptor
            logger.info(f"Reloaded module '{module_id}'")
            return descriptor

    def load_all(self) -> Dict[str, Union[ModuleDescriptor, PluginLoadError]]:
        """
        Best-effort bulk load.

        Returns:
            Mapping of module id to its descriptor, or to the ``PluginLoadError``
            raised while loading it.
        """
        results: Dict[str, Union[ModuleDescriptor, PluginLoadError]] = {}
        for module_id in self.list_modules():
            try:
                results[module_id] = self.load_module(module_id)
            except PluginLoadError as e:
                logger.error(f"Failed to load module '{module_id}': {e}")
                results[module_id] = e
            except PluginNotFoundError:
                # Source disappeared between listing and loading.
                logger.warning(f"Module '{module_id}' vanished during load_all")

        loaded = [k for k, v in results.items() if isinstance(v, ModuleDescriptor)]
        logger.info(f"All modules loaded: {loaded}")
        return results

    def describe(self) -> List[Dict[str, Any]]:
        """Return the listing payload for every available module.

        Modules that fail to load are still listed, with empty commands and an
        ``error`` marker.
        """
        out: List[Dict[str, Any]] = []
        for module_id in self.list_modules():
            try:
                out.append(self.load_module(module_id).describe())
            except (PluginLoadError, PluginNotFoundError):
                out.append(
                    {
                        "id": module_id,
                        "name": module_id,
                        "capabilities": [],
                        "commands": {},
                        "error": "Failed to load module",
                    }
                )
        return out

    def loaded(self) -> List[str]:
        """Identifiers currently held in the cache."""
        with self._lock:
            return sorted(self._cache)

    def invalidate(self, module_id: Optional[str] = None) -> None:
        """Forget one cached descriptor, or all of them."""
        with self._lock:
            if module_id is None:
                self._cache.clear()
                self._failures.clear()
            else:
                self._cache.pop(module_id, None)
                self._failures.pop(module_id, None)

    def _discover(self) -> Dict[str, PluginSource]:
        sources: Dict[str, PluginSource] = {}
        if self._include_builtin:
            sources.update(self._discover_builtin())
        if self._include_entry_points:
            sources.update(self._discover_entry_points())
        if self._modules_dir is not None:
            sources.update(self._discover_directory(self._modules_dir))
        with self._lock:
            for module_id in self._factories:
                sources[module_id] = PluginSource(module_id, "registered", module_id)
        return sources

    def _discover_builtin(self) -> Dict[str, PluginSource]:
        package = importlib.import_module(BUILTIN_PLUGIN_PACKAGE)
        found: Dict[str, PluginSource] = {}
        for info in pkgutil.iter_modules(package.__path__):
            if info.name.startswith("_") or not _ID_PATTERN.match(info.name):
                continue
            found[info.name] = PluginSource(info.name, "builtin", f"{BUILTIN_PLUGIN_PACKAGE}.{info.name}")
        return found

    def _discover_entry_points(self) -> Dict[str, PluginSource]:
        found: Dict[str, PluginSource] = {}
        for ep in importlib.metadata.entry_points(group=PLUGIN_ENTRY_POINT_GROUP):
            if not _ID_PATTERN.match(ep.name):
                logger.warning(f"Ignoring entry point with invalid module id: {ep.name!r}")
                continue
            found[ep.name] = PluginSource(ep.name, "entry_point", ep.value)
        return found

    def _discover_directory(self, directory: Path) -> Dict[str, PluginSource]:
        found: Dict[str, PluginSource] = {}
        if not directory.is_dir():
            logger.warning(f"Modules directory does not exist: {directory}")
            return found
        for path in sorted(directory.glob("*.py")):
            if path.stem.startswith("_") or not _ID_PATTERN.match(path.stem):
                continue
            found[path.stem] = PluginSource(path.stem, "directory", str(path))
        return found

    def _materialize(self, source: PluginSource, *, reload: bool) -> ModuleDescriptor:
        try:
            factory = self._resolve_factory(source, reload=reload)
            descriptor = factory(PluginContext(registry=self))
            if not isinstance(descriptor, ModuleDescriptor):
                raise TypeError(f"{FACTORY_ATTRIBUTE}() returned {type(descriptor).__name__}, expected ModuleDescriptor")
            if descriptor.id != source.module_id:
                raise ValueError(f"descriptor id {descriptor.id!r} does not match source id {source.module_id!r}")
            return descriptor
        except Exception as e:
            raise PluginLoadError(source.module_id, e) from e

    def _resolve_factory(self, source: PluginSource, *, reload: bool) -> Callable[[PluginContext], Any]:
        if source.origin == "registered":
            with self._lock:
                return self._factories[source.module_id]

        if source.origin == "builtin":
            module = importlib.import_module(source.target)
            if reload:
                module = importlib.reload(module)
            return _factory_from(module, source.module_id)

        if source.origin == "entry_point":
            ep = next(
                e for e in importlib.metadata.entry_points(group=PLUGIN_ENTRY_POINT_GROUP) if e.name == source.module_id
            )
            return _factory_from(ep.load(), source.module_id)

        # Directory sources are executed fresh every time they are materialized.
        spec = importlib.util.spec_from_file_location(f"modgate_ai_ext_{source.module_id}", source.target)
        if spec is None or spec.loader is None:
            raise ImportError(f"cannot import plugin file {source.target}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return _factory_from(module, source.module_id)
