"""
Feature Flag System.

Two ConfigCat projects (user-management, payment), each with its own
polling client, behind one fail-safe evaluation service.

Usage:

Level 1 - Boolean flag (fails closed):
    from toggle_demo.core.features import FeatureToggles, FlagProject

    @router.get("/dashboard")
    async def dashboard(toggles: FeatureToggles):
        context = build_targeting_context(identifier=user_id)
        if toggles.evaluate_boolean_flag(FlagProject.USER_MANAGEMENT, "new_dashboard", context):
            return new_data()
        return old_data()

Level 2 - String flag (fails to default):
    version = toggles.evaluate_string_flag(
        FlagProject.USER_MANAGEMENT, "ui_version", "v1", context
    )

Level 3 - Detailed result for response metadata:
    evaluation = toggles.evaluate(FlagProject.PAYMENT, "fraud_detection_level", "standard", context)
    evaluation.value, evaluation.evaluated_at
"""

from .interfaces import (
    FlagProject,
    TargetingContext,
    FlagEvaluation,
    FlagProvider,
)

from .exceptions import (
    FlagError,
    FlagConfigurationError,
    UnknownProjectError,
    InvalidFlagKeyError,
    FlagNotFoundError,
    FlagTypeMismatchError,
    FlagProviderError,
)

from .targeting import (
    build_targeting_context,
    amount_range,
)

from .registry import FlagClientRegistry

from .service import FeatureToggleService

from .dependencies import (
    FeatureToggles,
    get_feature_toggles,
)

from .backends import (
    ConfigCatFlagProvider,
    MemoryFlagProvider,
)

__all__ = [
    # Interfaces
    "FlagProject",
    "TargetingContext",
    "FlagEvaluation",
    "FlagProvider",
    # Errors
    "FlagError",
    "FlagConfigurationError",
    "UnknownProjectError",
    "InvalidFlagKeyError",
    "FlagNotFoundError",
    "FlagTypeMismatchError",
    "FlagProviderError",
    # Targeting
    "build_targeting_context",
    "amount_range",
    # Service
    "FlagClientRegistry",
    "FeatureToggleService",
    # Dependencies
    "FeatureToggles",
    "get_feature_toggles",
    # Backends
    "ConfigCatFlagProvider",
    "MemoryFlagProvider",
]
