"""
Feature Flag Interfaces - Core abstractions.

These define the contracts between the toggle service and flag providers.
Targeting rules (attribute matching, percentage rollouts) are the provider's
business; nothing here evaluates them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from toggle_demo.utils.timezone import utc_now


class FlagProject(str, Enum):
    """Logical flag projects, each backed by its own client."""

    USER_MANAGEMENT = "user-management"
    PAYMENT = "payment"


@dataclass(frozen=True)
class TargetingContext:
    """
    Attributes describing who a flag is being evaluated for.

    Attributes:
        identifier: Subject identifier (e.g., user id)
        email: Secondary identifier
        attributes: String attributes (country, subscription, amount_range, ...)
    """
    identifier: str | None = None
    email: str | None = None
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the mapping so a built context can't be mutated later
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @classmethod
    def anonymous(cls) -> "TargetingContext":
        return cls()

    @property
    def is_anonymous(self) -> bool:
        return self.identifier is None and self.email is None and not self.attributes


@dataclass(frozen=True)
class FlagEvaluation:
    """
    Result of a single flag lookup.

    `is_default_value` and `error` are for logs only; the API exposes
    project, flag key, value and evaluation time.
    """
    project: str
    flag_key: str
    value: Any
    evaluated_at: datetime = field(default_factory=utc_now)
    is_default_value: bool = False
    error: str | None = None


class FlagProvider(ABC):
    """
    Handle to one project's flag definitions.

    Implementations:
    - ConfigCatFlagProvider: ConfigCat SDK in auto-poll mode (production)
    - MemoryFlagProvider: In-memory (dev/testing)

    `get_value` must only read locally cached definitions. Any background
    refreshing belongs to the implementation.
    """

    backend_name: str = "abstract"

    @abstractmethod
    def get_value(
        self,
        flag_key: str,
        default_value: Any,
        context: TargetingContext | None = None,
    ) -> Any:
        """
        Evaluate a flag against cached definitions.

        Raises:
            FlagNotFoundError: Definitions are loaded but lack this key
            FlagProviderError: Definitions unavailable or evaluation failed
        """
        pass

    @abstractmethod
    def get_all_keys(self) -> list[str]:
        """List the keys of all cached flags."""
        pass

    def close(self) -> None:
        """Stop background work. Override if the provider holds resources."""
        pass
