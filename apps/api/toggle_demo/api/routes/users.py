"""
User profile routes.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Header, Query

from toggle_demo.core.features import (
    FeatureToggles,
    FlagEvaluation,
    FlagProject,
    build_targeting_context,
)
from toggle_demo.core.features.targeting import COUNTRY, SUBSCRIPTION
from toggle_demo.schemas.common import ResponseMetadata
from toggle_demo.schemas.user import UserFeatures, UserProfile, UserResponse
from toggle_demo.utils.context import get_correlation_id
from toggle_demo.utils.timezone import to_iso8601, utc_now

router = APIRouter()
logger = structlog.get_logger()

MB = 1024 * 1024


def max_file_upload_size(premium_account: bool, beta_features_enabled: bool) -> int:
    """Upload limit in bytes for the user's flag combination."""
    if premium_account:
        return 100 * MB
    if beta_features_enabled:
        return 50 * MB
    return 10 * MB


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_profile(
    user_id: str,
    toggles: FeatureToggles,
    email: Annotated[str | None, Query()] = None,
    country: Annotated[str | None, Header(alias="X-User-Country")] = None,
    subscription: Annotated[str | None, Header(alias="X-User-Subscription")] = None,
) -> UserResponse:
    """
    Get a user profile with feature flags.

    Flags evaluated against the user-management project:
    - beta_features_enabled
    - premium_account_features
    - ui_version (defaults to "v1")
    """
    correlation_id = get_correlation_id() or "unknown"
    timestamp = to_iso8601(utc_now())

    logger.info("Getting user profile", user_id=user_id)

    context = build_targeting_context(
        identifier=user_id,
        email=email,
        attributes={COUNTRY: country, SUBSCRIPTION: subscription},
    )

    evaluations: list[FlagEvaluation] = []

    def flag(key: str, default: bool | str) -> bool | str:
        evaluation = toggles.evaluate(FlagProject.USER_MANAGEMENT, key, default, context)
        evaluations.append(evaluation)
        return evaluation.value

    beta_features_enabled = flag("beta_features_enabled", False)
    premium_account = flag("premium_account_features", False)
    ui_version = flag("ui_version", "v1")

    response = UserResponse(
        user_id=user_id,
        email=email or f"user{user_id}@example.com",
        profile=UserProfile(
            first_name="User",
            last_name=user_id,
            preferred_language="pt-BR" if country == "BR" else "en-US",
            avatar_url=(
                f"https://premium-avatars.example.com/{user_id}" if premium_account else None
            ),
        ),
        features=UserFeatures(
            beta_features_enabled=beta_features_enabled,
            premium_account=premium_account,
            ui_version=ui_version,
            max_file_upload_size=max_file_upload_size(premium_account, beta_features_enabled),
        ),
        metadata=ResponseMetadata.build(correlation_id, timestamp, evaluations),
    )

    logger.info(
        "User profile response generated",
        user_id=user_id,
        beta_features=beta_features_enabled,
        premium=premium_account,
        ui_version=ui_version,
    )

    return response
