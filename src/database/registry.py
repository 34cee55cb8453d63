"""In-memory registry of named backend configurations."""

import logging
from typing import Dict, Iterable, List, Optional

from core.config import BackendConfig
from core.exceptions import UnknownBackendError

logger = logging.getLogger(__name__)


class BackendRegistry:
    """Maps backend name to its immutable connection configuration.

    Populated once at startup; iteration follows registration order.
    """

    def __init__(self, configs: Optional[Iterable[BackendConfig]] = None):
        self._configs: Dict[str, BackendConfig] = {}
        for config in configs or []:
            self.register(config.name, config)

    def register(self, name: str, config: BackendConfig):
        """Store a config, replacing any earlier entry with the same name."""
        if name in self._configs:
            logger.debug(f"Replacing configuration for database '{name}'")
        self._configs[name] = config

    def list_names(self) -> List[str]:
        return list(self._configs.keys())

    def get(self, name: str) -> BackendConfig:
        """Return the config for `name`.

        Raises:
            UnknownBackendError: If no backend is registered under `name`
        """
        try:
            return self._configs[name]
        except KeyError:
            raise UnknownBackendError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._configs

    def __len__(self) -> int:
        return len(self._configs)


def select_default_backend(registry: BackendRegistry, preferred: Optional[str] = None) -> Optional[str]:
    """Pick the default backend name.

    A preferred name wins only if it is registered; anything else falls back
    to the first registered backend. Returns None for an empty registry.
    """
    if preferred and preferred in registry:
        return preferred

    names = registry.list_names()
    if preferred:
        logger.debug(f"Default database '{preferred}' is not configured, falling back to first entry")
    return names[0] if names else None
