"""
Tests for flag provider backends and the client registry.
"""

import threading
from types import SimpleNamespace

import pytest
from configcatclient import ConfigCatClientException

from toggle_demo.core.config import FeatureFlagSettings, FlagProjectSettings
from toggle_demo.core.features import (
    ConfigCatFlagProvider,
    FlagClientRegistry,
    FlagConfigurationError,
    FlagNotFoundError,
    FlagProject,
    FlagProviderError,
    MemoryFlagProvider,
    UnknownProjectError,
    build_targeting_context,
)
from toggle_demo.core.features.backends import configcat as configcat_backend
from toggle_demo.core.features.backends.configcat import to_configcat_user
from toggle_demo.utils.health import HealthStatus, check_flag_client


# ============ Memory backend ============


def test_memory_provider_missing_flag_raises():
    provider = MemoryFlagProvider({"a": True})

    with pytest.raises(FlagNotFoundError):
        provider.get_value("b", False)


def test_memory_provider_callable_definitions_get_context():
    provider = MemoryFlagProvider({"ui_version": lambda ctx: ctx.attributes["subscription"]})
    context = build_targeting_context(identifier="u1", attributes={"subscription": "enterprise"})

    assert provider.get_value("ui_version", "v1", context) == "enterprise"


def test_memory_provider_load_replaces_whole_set():
    provider = MemoryFlagProvider({"a": True, "b": True})
    provider.load({"c": False})

    assert provider.get_all_keys() == ["c"]
    assert provider.loaded_at is not None


def test_memory_provider_set_flag_keeps_others():
    provider = MemoryFlagProvider({"a": True})
    provider.set_flag("b", "v2")

    assert sorted(provider.get_all_keys()) == ["a", "b"]


def test_memory_provider_readers_never_see_partial_swap():
    """Each flag set is internally consistent: all values equal."""
    provider = MemoryFlagProvider({f"flag_{i}": 0 for i in range(50)})
    stop = threading.Event()

    def writer():
        generation = 0
        while not stop.is_set():
            generation += 1
            provider.load({f"flag_{i}": generation for i in range(50)})

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        for _ in range(200):
            snapshot = provider._flags
            assert len(set(snapshot.values())) == 1
    finally:
        stop.set()
        thread.join()


def test_memory_provider_from_settings_uses_overrides():
    config = FlagProjectSettings(overrides={"ui_version": "v3"})
    provider = MemoryFlagProvider.from_settings("user-management", config)

    assert provider.get_value("ui_version", "v1") == "v3"


# ============ ConfigCat backend ============


class FakeConfigCatClient:
    """Stands in for configcatclient.ConfigCatClient."""

    def __init__(self, values=None, error=None):
        self.values = values or {}
        self.error = error
        self.lookups = []
        self.closed = False

    def get_value_details(self, key, default_value, user=None):
        self.lookups.append((key, default_value, user))
        if self.error or key not in self.values:
            return SimpleNamespace(value=default_value, is_default_value=True, error=self.error or "not found")
        return SimpleNamespace(value=self.values[key], is_default_value=False, error=None)

    def get_all_keys(self):
        return [] if self.error else list(self.values)

    def close(self):
        self.closed = True


def test_to_configcat_user_anonymous_is_none():
    assert to_configcat_user(None) is None
    assert to_configcat_user(build_targeting_context()) is None


def test_to_configcat_user_maps_fields():
    context = build_targeting_context(
        email="someone@example.com",
        attributes={"country": "BR", "subscription": "premium"},
    )

    user = to_configcat_user(context)

    assert user.get_identifier() == "anonymous"
    assert user.get_attribute("Email") == "someone@example.com"
    assert user.get_attribute("country") == "BR"
    assert user.get_attribute("subscription") == "premium"


def test_configcat_provider_returns_value():
    client = FakeConfigCatClient({"express_checkout_enabled": True})
    provider = ConfigCatFlagProvider("payment", client)
    context = build_targeting_context(identifier="u1", attributes={"currency": "BRL"})

    assert provider.get_value("express_checkout_enabled", False, context) is True
    assert client.lookups[0][2].get_identifier() == "u1"


def test_configcat_provider_missing_flag():
    provider = ConfigCatFlagProvider("payment", FakeConfigCatClient({"other_flag": True}))

    with pytest.raises(FlagNotFoundError):
        provider.get_value("express_checkout_enabled", False)


def test_configcat_provider_empty_cache_is_provider_error():
    provider = ConfigCatFlagProvider("payment", FakeConfigCatClient(error="Config JSON is not present"))

    with pytest.raises(FlagProviderError):
        provider.get_value("express_checkout_enabled", False)


def test_configcat_provider_close():
    client = FakeConfigCatClient()
    ConfigCatFlagProvider("payment", client).close()

    assert client.closed


def test_configcat_from_settings_requires_sdk_key():
    with pytest.raises(FlagConfigurationError):
        ConfigCatFlagProvider.from_settings("payment", FlagProjectSettings(sdk_key=""))


def test_configcat_from_settings_uses_auto_poll(monkeypatch):
    created = {}

    def fake_get(sdk_key, options=None):
        created["sdk_key"] = sdk_key
        created["options"] = options
        return FakeConfigCatClient()

    monkeypatch.setattr(configcat_backend.configcatclient, "get", fake_get)

    provider = ConfigCatFlagProvider.from_settings(
        "payment",
        FlagProjectSettings(sdk_key="configcat-sdk-1/abc/def", poll_interval_seconds=45),
    )

    assert provider.project == "payment"
    assert created["sdk_key"] == "configcat-sdk-1/abc/def"
    assert created["options"] is not None


def test_configcat_client_creation_failure_is_configuration_error(monkeypatch):
    def fake_get(sdk_key, options=None):
        raise ConfigCatClientException(f"SDK Key '{sdk_key}' is invalid.")

    monkeypatch.setattr(configcat_backend.configcatclient, "get", fake_get)

    with pytest.raises(FlagConfigurationError) as exc_info:
        ConfigCatFlagProvider.from_settings("payment", FlagProjectSettings(sdk_key="not-a-key"))

    assert isinstance(exc_info.value.__cause__, ConfigCatClientException)


@pytest.mark.asyncio
async def test_configcat_provider_without_config_reports_degraded():
    """The SDK answers an empty key list, not an error, before its first download."""
    provider = ConfigCatFlagProvider("payment", FakeConfigCatClient(error="Config JSON is not present"))

    health = await check_flag_client("payment", provider)

    assert health.status == HealthStatus.DEGRADED
    assert health.details == {"backend": "configcat", "flags": 0}


# ============ Registry ============


def test_registry_lookup_by_enum_or_name():
    provider = MemoryFlagProvider()
    registry = FlagClientRegistry({FlagProject.PAYMENT: provider})

    assert registry.get("payment") is provider
    assert registry.get(FlagProject.PAYMENT) is provider
    assert "payment" in registry
    assert len(registry) == 1


def test_registry_unknown_project():
    with pytest.raises(UnknownProjectError):
        FlagClientRegistry().get("payment")


def test_registry_rejects_duplicate_project():
    registry = FlagClientRegistry({"payment": MemoryFlagProvider()})

    with pytest.raises(FlagConfigurationError):
        registry.register(FlagProject.PAYMENT, MemoryFlagProvider())


def test_registry_from_settings_builds_every_project():
    config = FeatureFlagSettings(backend="memory")

    registry = FlagClientRegistry.from_settings(config)

    assert sorted(registry.projects()) == ["payment", "user-management"]


def test_registry_from_settings_closes_clients_on_failure(monkeypatch):
    client = FakeConfigCatClient()
    monkeypatch.setattr(configcat_backend.configcatclient, "get", lambda key, options=None: client)

    config = FeatureFlagSettings(
        backend="configcat",
        user_management={"sdk_key": "configcat-sdk-1/abc/def"},
        payment={"sdk_key": ""},
    )

    with pytest.raises(FlagConfigurationError):
        FlagClientRegistry.from_settings(config)

    assert client.closed


def test_registry_close_closes_all_providers():
    first, second = FakeConfigCatClient(), FakeConfigCatClient()
    registry = FlagClientRegistry({
        "user-management": ConfigCatFlagProvider("user-management", first),
        "payment": ConfigCatFlagProvider("payment", second),
    })

    registry.close()

    assert first.closed and second.closed
    assert len(registry) == 0
