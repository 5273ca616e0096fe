"""Request and response schemas for the share API.

JSON keys are camelCase to match the web client; Python attributes stay
snake_case through aliases.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from domain.exams.models import ExamRecord


def to_iso8601(epoch_seconds: int) -> str:
    """Format epoch seconds as a UTC ISO-8601 timestamp with milliseconds.

    Example:
        >>> to_iso8601(0)
        '1970-01-01T00:00:00.000Z'
    """
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.000Z")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateShareRequest(_CamelModel):
    """Body of POST /api/share."""

    data: ExamRecord
    expires_in: StrictInt = Field(alias="expiresIn", description="Lifetime in seconds, must be > 0")


class ShareCreatedResponse(_CamelModel):
    id: str
    url: str
    expires_at: str = Field(alias="expiresAt", description="ISO-8601 UTC expiry")


class SharedExamResponse(_CamelModel):
    data: ExamRecord
    expires_at: int = Field(alias="expiresAt", description="Expiry in epoch seconds")
