"""Registry of IP range source factories keyed by module ID."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .config import RefreshConfig
from .source import MODULE_ID, ParspackIPRange

SourceFactory = Callable[[RefreshConfig], ParspackIPRange]


class SourceRegistry:
    """Look up source implementations by their module ID."""

    def __init__(self) -> None:
        self._factories: Dict[str, SourceFactory] = {}

    def register(self, module_id: str, factory: SourceFactory) -> None:
        if module_id in self._factories:
            raise ValueError(f"source '{module_id}' already registered")
        self._factories[module_id] = factory

    def unregister(self, module_id: str) -> None:
        self._factories.pop(module_id, None)

    def module_ids(self) -> List[str]:
        return sorted(self._factories)

    def create(
        self, module_id: str, config: Optional[RefreshConfig] = None
    ) -> ParspackIPRange:
        try:
            factory = self._factories[module_id]
        except KeyError:
            raise KeyError(f"unknown IP range source '{module_id}'") from None
        return factory(config or RefreshConfig())


def default_registry() -> SourceRegistry:
    """Return a registry with the built-in sources registered."""

    registry = SourceRegistry()
    registry.register(MODULE_ID, ParspackIPRange)
    return registry
