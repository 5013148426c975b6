"""
ConfigCat backend for feature flags.

Each project gets its own SDK client in auto-poll mode. The SDK refreshes
its local cache on a background thread; lookups only read that cache.
"""

from typing import Any

import configcatclient
import structlog
from configcatclient import ConfigCatClientException, ConfigCatOptions, PollingMode
from configcatclient.user import User

from toggle_demo.core.config import FlagProjectSettings

from ..exceptions import FlagConfigurationError, FlagNotFoundError, FlagProviderError
from ..interfaces import FlagProvider, TargetingContext

logger = structlog.get_logger()


def to_configcat_user(context: TargetingContext | None) -> User | None:
    """
    Map a targeting context to a ConfigCat user.

    Anonymous contexts map to no user at all, so only unconditioned
    values apply. Attributes are sent as custom attributes.
    """
    if context is None or context.is_anonymous:
        return None

    return User(
        context.identifier or "anonymous",
        email=context.email,
        custom=dict(context.attributes) or None,
    )


class ConfigCatFlagProvider(FlagProvider):
    """Flag definitions served by a ConfigCat SDK client."""

    backend_name = "configcat"

    def __init__(self, project: str, client: Any):
        self.project = project
        self._client = client

    @classmethod
    def from_settings(cls, project: str, config: FlagProjectSettings) -> "ConfigCatFlagProvider":
        if not config.sdk_key:
            raise FlagConfigurationError(f"Missing ConfigCat SDK key for project '{project}'")

        logger.info(
            "Initializing ConfigCat client",
            project=project,
            sdk_key=config.masked_sdk_key,
            poll_interval_seconds=config.poll_interval_seconds,
        )

        options = ConfigCatOptions(
            polling_mode=PollingMode.auto_poll(
                poll_interval_seconds=config.poll_interval_seconds,
                max_init_wait_time_seconds=config.max_init_wait_seconds,
            ),
        )
        try:
            client = configcatclient.get(config.sdk_key, options)
        except ConfigCatClientException as e:
            raise FlagConfigurationError(
                f"Could not create ConfigCat client for project '{project}': {e}"
            ) from e

        return cls(project, client)

    def get_value(
        self,
        flag_key: str,
        default_value: Any,
        context: TargetingContext | None = None,
    ) -> Any:
        details = self._client.get_value_details(
            flag_key, default_value, to_configcat_user(context)
        )
        if details.error:
            # The SDK reports every failure the same way; check the cached
            # keys to tell a missing flag from a missing config.
            keys = self._client.get_all_keys()
            if keys and flag_key not in keys:
                raise FlagNotFoundError(flag_key)
            raise FlagProviderError(details.error)

        return details.value

    def get_all_keys(self) -> list[str]:
        return list(self._client.get_all_keys())

    def close(self) -> None:
        logger.info("Closing ConfigCat client", project=self.project)
        self._client.close()
