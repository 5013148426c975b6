"""
Flag client registry.

Maps project name -> provider. Built once at startup from settings and
shared by every request; closed at shutdown.

Example:
```python
registry = FlagClientRegistry.from_settings(settings.flags)
provider = registry.get("payment")
```
"""

from typing import Callable, Iterator

import structlog

from toggle_demo.core.config import FeatureFlagSettings, FlagProjectSettings

from .backends import ConfigCatFlagProvider, MemoryFlagProvider
from .exceptions import FlagConfigurationError, UnknownProjectError
from .interfaces import FlagProject, FlagProvider

logger = structlog.get_logger()

ProviderFactory = Callable[[str, FlagProjectSettings], FlagProvider]

provider_factories: dict[str, ProviderFactory] = {
    "configcat": ConfigCatFlagProvider.from_settings,
    "memory": MemoryFlagProvider.from_settings,
}


def _project_name(project: FlagProject | str) -> str:
    return project.value if isinstance(project, FlagProject) else project


class FlagClientRegistry:
    """Holds one flag provider per project."""

    def __init__(self, providers: dict[str, FlagProvider] | None = None):
        self._providers: dict[str, FlagProvider] = {}
        for project, provider in (providers or {}).items():
            self.register(project, provider)

    @classmethod
    def from_settings(cls, config: FeatureFlagSettings) -> "FlagClientRegistry":
        """Create a provider for every configured project."""
        factory = provider_factories.get(config.backend)
        if factory is None:
            raise FlagConfigurationError(f"Unknown flag backend '{config.backend}'")

        registry = cls()
        try:
            for project, project_config in config.projects().items():
                registry.register(project, factory(project, project_config))
        except Exception:
            registry.close()
            raise
        return registry

    def register(self, project: FlagProject | str, provider: FlagProvider) -> None:
        name = _project_name(project)
        if name in self._providers:
            raise FlagConfigurationError(f"Project '{name}' already registered")
        self._providers[name] = provider
        logger.debug("Registered flag client", project=name, backend=provider.backend_name)

    def get(self, project: FlagProject | str) -> FlagProvider:
        name = _project_name(project)
        try:
            return self._providers[name]
        except KeyError:
            raise UnknownProjectError(name) from None

    def projects(self) -> list[str]:
        return list(self._providers)

    def items(self) -> Iterator[tuple[str, FlagProvider]]:
        return iter(list(self._providers.items()))

    def close(self) -> None:
        """Close every provider, logging failures so the rest still close."""
        for project, provider in self._providers.items():
            try:
                provider.close()
            except Exception:
                logger.exception("Failed to close flag client", project=project)
        self._providers.clear()

    def __contains__(self, project: object) -> bool:
        if isinstance(project, (FlagProject, str)):
            return _project_name(project) in self._providers
        return False

    def __len__(self) -> int:
        return len(self._providers)
