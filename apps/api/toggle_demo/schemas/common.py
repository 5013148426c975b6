"""
Shared response schemas.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from toggle_demo.core.features import FlagEvaluation
from toggle_demo.utils.timezone import to_iso8601


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FlagEvaluationResponse(CamelModel):
    """Individual feature flag evaluation result."""
    project: str = Field(..., examples=["user-management"])
    flag_key: str = Field(..., examples=["beta_features_enabled"])
    value: bool | str = Field(..., examples=[True])
    evaluated_at: str = Field(..., examples=["2025-10-05T10:30:00.123Z"])

    @classmethod
    def from_evaluation(cls, evaluation: FlagEvaluation) -> "FlagEvaluationResponse":
        return cls(
            project=evaluation.project,
            flag_key=evaluation.flag_key,
            value=evaluation.value,
            evaluated_at=to_iso8601(evaluation.evaluated_at),
        )


class ResponseMetadata(CamelModel):
    """Correlation ID, timestamp and every flag evaluated for the request."""
    correlation_id: str
    timestamp: str
    configcat_evaluations: list[FlagEvaluationResponse] = Field(
        default_factory=list,
        alias="configcat_evaluations",
    )

    @classmethod
    def build(
        cls,
        correlation_id: str,
        timestamp: str,
        evaluations: list[FlagEvaluation],
    ) -> "ResponseMetadata":
        return cls(
            correlation_id=correlation_id,
            timestamp=timestamp,
            configcat_evaluations=[
                FlagEvaluationResponse.from_evaluation(e) for e in evaluations
            ],
        )


class ErrorResponse(BaseModel):
    """Error body returned by the global exception handler."""
    error: str
    message: str

    @classmethod
    def internal(cls, exc: Exception, debug: bool = False) -> "ErrorResponse":
        return cls(
            error="internal_server_error",
            message=str(exc) if debug else "An error occurred",
        )
