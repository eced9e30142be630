"""Error response schemas.

Every error response is a problem-detail body:
{"type": URI, "title": ..., "status": ..., "detail": ..., "instance": path,
 "timestamp": ..., <context fields>}.
Handlers in records.problems build these from exceptions.
"""

from datetime import datetime

from pydantic import ConfigDict

from records.schemas.base import ApiModel


class FieldError(ApiModel):
    """One failed field constraint inside a validation-failed problem."""

    field: str
    rejected_value: object = None
    message: str
    code: str | None = None


class ProblemDetail(ApiModel):
    """Machine-readable error body. Context fields travel as extra keys.

    Clients should dispatch on ``type``; ``title`` is stable per type,
    ``detail`` is human-readable and may vary.
    """

    model_config = ConfigDict(extra="allow")

    type: str
    title: str
    status: int
    detail: str | None = None
    instance: str
    timestamp: datetime
    errors: list[FieldError] | None = None
