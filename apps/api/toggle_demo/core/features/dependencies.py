"""
FastAPI dependencies for feature flags.

The service is created in the app lifespan and kept on `app.state`.

Usage:
    from toggle_demo.core.features import FeatureToggles

    @router.get("/dashboard")
    async def dashboard(toggles: FeatureToggles):
        ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import FeatureToggleService


def get_feature_toggles(request: Request) -> FeatureToggleService:
    """Get the application's feature toggle service."""
    service = getattr(request.app.state, "feature_toggles", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Feature flag clients not initialized",
        )
    return service


# Type alias for cleaner injection
FeatureToggles = Annotated[FeatureToggleService, Depends(get_feature_toggles)]
