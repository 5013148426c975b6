"""
Feature flag errors.

The toggle service absorbs all of these at evaluation time; the `code`
ends up in the log line as `reason` so operators can tell a missing flag
from a provider outage.
"""


class FlagError(Exception):
    """Base class for feature flag errors."""

    code = "flag_error"


class FlagConfigurationError(FlagError):
    """Raised at startup when a flag client can't be built from settings."""

    code = "configuration_error"


class UnknownProjectError(FlagError):
    """Raised when no flag client is registered for a project."""

    code = "unknown_project"

    def __init__(self, project: str):
        super().__init__(f"No flag client registered for project '{project}'")
        self.project = project


class InvalidFlagKeyError(FlagError):
    """Raised for an empty or malformed flag key."""

    code = "invalid_flag_key"


class FlagNotFoundError(FlagError):
    """Raised when the provider has definitions but not for this key."""

    code = "flag_not_found"

    def __init__(self, flag_key: str):
        super().__init__(f"Flag '{flag_key}' not found")
        self.flag_key = flag_key


class FlagTypeMismatchError(FlagError):
    """Raised when a flag's value doesn't match the requested type."""

    code = "type_mismatch"


class FlagProviderError(FlagError):
    """Raised when the provider can't evaluate (unreachable, empty cache, ...)."""

    code = "provider_error"
