"""
User profile schemas.
"""

from pydantic import Field

from toggle_demo.schemas.common import CamelModel, ResponseMetadata


class UserProfile(CamelModel):
    """User profile information."""
    first_name: str
    last_name: str
    preferred_language: str = Field(..., examples=["pt-BR"])
    avatar_url: str | None = None


class UserFeatures(CamelModel):
    """Feature flags evaluated from the user-management project."""
    beta_features_enabled: bool
    premium_account: bool
    ui_version: str = Field(..., examples=["v2"])
    max_file_upload_size: int = Field(..., description="Bytes", examples=[104857600])


class UserResponse(CamelModel):
    """User profile response with evaluated feature flags."""
    user_id: str
    email: str
    profile: UserProfile
    features: UserFeatures
    metadata: ResponseMetadata
