"""
Pytest fixtures for testing.

Provides:
- Fake flag providers (fixed values, failing, context-recording)
- Feature toggle service wired to those providers
- Test client with the service dependency overridden
"""

import os
from typing import Any, AsyncGenerator

# Settings are read at import time; keep tests off the network
os.environ.setdefault("CONFIGCAT_BACKEND", "memory")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
import pytest_asyncio
import structlog
from httpx import AsyncClient, ASGITransport

from toggle_demo.main import app
from toggle_demo.core.features import (
    FeatureToggleService,
    FlagClientRegistry,
    FlagProject,
    FlagProvider,
    FlagProviderError,
    MemoryFlagProvider,
    TargetingContext,
    get_feature_toggles,
)


USER_MANAGEMENT_FLAGS = {
    "beta_features_enabled": lambda ctx: bool(ctx and ctx.attributes.get("country") == "BR"),
    "premium_account_features": lambda ctx: bool(
        ctx and ctx.attributes.get("subscription") in ("premium", "enterprise")
    ),
    "ui_version": lambda ctx: "v2" if ctx and ctx.attributes.get("subscription") == "premium" else "v1",
}

PAYMENT_FLAGS = {
    "express_checkout_enabled": True,
    "recurring_payments_enabled": True,
    "fraud_detection_level": lambda ctx: (
        "high" if ctx and ctx.attributes.get("amount_range") in ("high", "very_high") else "standard"
    ),
}


# ============ Fake Providers ============


class UnreachableFlagProvider(FlagProvider):
    """Provider whose cache never filled (e.g., first poll failed)."""

    backend_name = "unreachable"

    def get_value(self, flag_key: str, default_value: Any, context: TargetingContext | None = None) -> Any:
        raise FlagProviderError("Config JSON is not present")

    def get_all_keys(self) -> list[str]:
        raise FlagProviderError("Config JSON is not present")


class RecordingFlagProvider(MemoryFlagProvider):
    """Memory provider that snapshots the ambient log context on each lookup."""

    def __init__(self, flags):
        super().__init__(flags)
        self.calls: list[dict[str, Any]] = []

    def get_value(self, flag_key: str, default_value: Any, context: TargetingContext | None = None) -> Any:
        self.calls.append({
            "flag_key": flag_key,
            "context": context,
            "ambient": structlog.contextvars.get_contextvars(),
        })
        return super().get_value(flag_key, default_value, context)


# ============ Service Fixtures ============


@pytest.fixture
def user_management_provider() -> RecordingFlagProvider:
    return RecordingFlagProvider(USER_MANAGEMENT_FLAGS)


@pytest.fixture
def payment_provider() -> RecordingFlagProvider:
    return RecordingFlagProvider(PAYMENT_FLAGS)


@pytest.fixture
def registry(user_management_provider, payment_provider) -> FlagClientRegistry:
    return FlagClientRegistry({
        FlagProject.USER_MANAGEMENT: user_management_provider,
        FlagProject.PAYMENT: payment_provider,
    })


@pytest.fixture
def toggles(registry: FlagClientRegistry) -> FeatureToggleService:
    return FeatureToggleService(registry)


@pytest.fixture
def unreachable_toggles() -> FeatureToggleService:
    return FeatureToggleService(FlagClientRegistry({
        FlagProject.USER_MANAGEMENT: UnreachableFlagProvider(),
        FlagProject.PAYMENT: UnreachableFlagProvider(),
    }))


@pytest.fixture(autouse=True)
def clean_ambient_context():
    """Every test starts and ends with an empty ambient log context."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


# ============ Client Fixtures ============


async def _client_for(service: FeatureToggleService) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_feature_toggles] = lambda: service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(toggles: FeatureToggleService) -> AsyncGenerator[AsyncClient, None]:
    """Test client backed by in-memory flag definitions."""
    async for c in _client_for(toggles):
        yield c


@pytest_asyncio.fixture(scope="function")
async def unreachable_client(unreachable_toggles: FeatureToggleService) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose flag provider can't serve anything."""
    async for c in _client_for(unreachable_toggles):
        yield c
