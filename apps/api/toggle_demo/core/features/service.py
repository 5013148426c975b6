"""
Feature Toggle Service - Main evaluation entry point.

Wraps every project's flag client behind one interface:
- Boolean flags fail closed (False on any error)
- String flags fail to the caller's default
- Project, flag key and result are bound to the ambient log context
  for the duration of each lookup
"""

from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars

from toggle_demo.utils.context import get_correlation_id

from .exceptions import FlagError, FlagTypeMismatchError, InvalidFlagKeyError
from .interfaces import FlagEvaluation, FlagProject, TargetingContext
from .registry import FlagClientRegistry

logger = structlog.get_logger()

_AMBIENT_KEYS = ("flag_project", "flag_key", "flag_result")


class FeatureToggleService:
    """
    Feature flag evaluation service.

    Lookups never raise: whatever goes wrong is logged with a `reason`
    and the safe default is returned instead.
    """

    def __init__(self, registry: FlagClientRegistry):
        self.registry = registry

    # ============================================================
    # MAIN EVALUATION
    # ============================================================

    def evaluate_boolean_flag(
        self,
        project: FlagProject | str,
        flag_key: str,
        context: TargetingContext | None = None,
    ) -> bool:
        """Evaluate a boolean flag. Missing or failing flags are off."""
        return self.evaluate(project, flag_key, False, context).value

    def evaluate_string_flag(
        self,
        project: FlagProject | str,
        flag_key: str,
        default_value: str,
        context: TargetingContext | None = None,
    ) -> str:
        """Evaluate a string flag, falling back to `default_value`."""
        return self.evaluate(project, flag_key, default_value, context).value

    def evaluate(
        self,
        project: FlagProject | str,
        flag_key: str,
        default_value: Any,
        context: TargetingContext | None = None,
    ) -> FlagEvaluation:
        """
        Evaluate a flag with a detailed result.

        The returned value always has the same type as `default_value`.
        """
        project_name = project.value if isinstance(project, FlagProject) else project
        correlation_id = get_correlation_id() or "unknown"
        user_id = context.identifier if context else None

        bind_contextvars(flag_project=project_name, flag_key=flag_key)
        try:
            if not flag_key or not flag_key.strip():
                raise InvalidFlagKeyError(f"Invalid flag key {flag_key!r}")

            provider = self.registry.get(project_name)
            value = provider.get_value(flag_key, default_value, context)

            if not isinstance(value, type(default_value)):
                raise FlagTypeMismatchError(
                    f"Flag '{flag_key}' returned {type(value).__name__}, "
                    f"expected {type(default_value).__name__}"
                )

            bind_contextvars(flag_result=str(value))
            logger.info(
                "Feature flag evaluated",
                project=project_name,
                flag=flag_key,
                user_id=user_id,
                result=value,
                correlation_id=correlation_id,
            )
            return FlagEvaluation(project=project_name, flag_key=flag_key, value=value)

        except Exception as e:
            # Provider SDKs can fail in arbitrary ways; none of it may reach
            # the request handler.
            reason = e.code if isinstance(e, FlagError) else "unexpected_error"
            logger.error(
                "Error evaluating feature flag",
                project=project_name,
                flag=flag_key,
                user_id=user_id,
                reason=reason,
                default=default_value,
                correlation_id=correlation_id,
                exc_info=True,
            )
            return FlagEvaluation(
                project=project_name,
                flag_key=flag_key,
                value=default_value,
                is_default_value=True,
                error=reason,
            )

        finally:
            unbind_contextvars(*_AMBIENT_KEYS)

