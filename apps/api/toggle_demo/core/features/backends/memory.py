"""
In-memory backend for feature flags.

For development and testing. Definitions come from settings overrides or
from `load()`; nothing is fetched over the network.
"""

import threading
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

from toggle_demo.core.config import FlagProjectSettings
from toggle_demo.utils.timezone import utc_now

from ..exceptions import FlagNotFoundError
from ..interfaces import FlagProvider, TargetingContext

# A definition is either a fixed value or a function of the targeting context
FlagDefinition = Any


class MemoryFlagProvider(FlagProvider):
    """
    In-memory flag definitions.

    Useful for:
    - Running the service without ConfigCat credentials
    - Unit testing
    - Quick prototyping

    `load()` replaces the whole definition set in one reference swap, so a
    concurrent reader sees either the old set or the new one.
    """

    backend_name = "memory"

    def __init__(self, flags: Mapping[str, FlagDefinition] | None = None):
        self._lock = threading.Lock()
        self._flags: Mapping[str, FlagDefinition] = MappingProxyType({})
        self.loaded_at: datetime | None = None
        if flags is not None:
            self.load(flags)

    @classmethod
    def from_settings(cls, project: str, config: FlagProjectSettings) -> "MemoryFlagProvider":
        return cls(config.overrides)

    def load(self, flags: Mapping[str, FlagDefinition]) -> None:
        """Replace all flag definitions."""
        snapshot = MappingProxyType(dict(flags))
        with self._lock:
            self._flags = snapshot
            self.loaded_at = utc_now()

    def set_flag(self, flag_key: str, definition: FlagDefinition) -> None:
        """Add or replace a single flag."""
        with self._lock:
            updated = dict(self._flags)
            updated[flag_key] = definition
            self._flags = MappingProxyType(updated)
            self.loaded_at = utc_now()

    def get_value(
        self,
        flag_key: str,
        default_value: Any,
        context: TargetingContext | None = None,
    ) -> Any:
        flags = self._flags
        if flag_key not in flags:
            raise FlagNotFoundError(flag_key)

        definition = flags[flag_key]
        if callable(definition):
            return definition(context)
        return definition

    def get_all_keys(self) -> list[str]:
        return list(self._flags)
