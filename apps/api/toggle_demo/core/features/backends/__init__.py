"""
Feature flag provider backends.
"""

from .configcat import ConfigCatFlagProvider, to_configcat_user
from .memory import MemoryFlagProvider

__all__ = [
    "ConfigCatFlagProvider",
    "MemoryFlagProvider",
    "to_configcat_user",
]
