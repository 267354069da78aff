"""Name-keyed adapter registry shared by the imagery and geocoder factories.

Built-in adapters are declared as ``"package.module:ClassName"`` paths and
imported only when first looked up, so selecting Mapbox never imports the
Bing module.  Adapters registered at runtime (tests use this for fakes)
take precedence over a built-in of the same name.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

T = TypeVar("T")


class AdapterRegistry(Generic[T]):
    """Map adapter names to adapter classes."""

    def __init__(self, builtins: Mapping[str, str]) -> None:
        self._builtins = dict(builtins)
        self._loaders: dict[str, Callable[[], type[T]]] = {}

    def register(self, name: str, loader: Callable[[], type[T]]) -> None:
        """Register *loader*, a zero-argument callable returning the class.

        Raises:
            ValueError: If *name* is empty.
        """
        if not name:
            msg = "Adapter name must be non-empty"
            raise ValueError(msg)
        self._loaders[name] = loader

    def unregister(self, name: str) -> None:
        self._loaders.pop(name, None)

    def lookup(self, name: str) -> type[T] | None:
        """Return the adapter class for *name*, or ``None`` if unknown."""
        loader = self._loaders.get(name)
        if loader is not None:
            return loader()
        path = self._builtins.get(name)
        if path is None:
            return None
        module_name, _, class_name = path.partition(":")
        return getattr(importlib.import_module(module_name), class_name)

    def names(self) -> list[str]:
        return sorted({*self._builtins, *self._loaders})
