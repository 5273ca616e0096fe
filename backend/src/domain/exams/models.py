"""Pydantic schemas for extracted exam records.

Field names are the JSON keys the extraction prompt asks the model to emit,
so the same models validate model output, share request bodies and stored
share payloads.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MeasurementStatus(str, Enum):
    """Result flag relative to the document's reference range."""

    NORMAL = "normal"
    HIGH = "high"
    LOW = "low"
    ABNORMAL = "abnormal"
    UNKNOWN = "unknown"


def _coerce_text(value: Any) -> Any:
    """Render absent and scalar values as text.

    null becomes "", numbers and booleans become their string form. Anything
    else is handed to pydantic unchanged so that objects and lists in a string
    slot still fail validation.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class _ExamModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Patient(_ExamModel):
    """Patient identity block. Unknown fields are empty strings."""

    name: str = ""
    age: str = ""
    gender: str = ""
    id: str = ""

    @field_validator("name", "age", "gender", "id", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _coerce_text(v)


class Measurement(_ExamModel):
    """One measured parameter, in document order."""

    parameter: str = ""
    value: str = ""
    unit: str = ""
    reference_range: str = ""
    status: MeasurementStatus = MeasurementStatus.UNKNOWN

    @field_validator("parameter", "value", "unit", "reference_range", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _coerce_text(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        """Match status tokens case-insensitively; blank means unknown.

        Tokens outside the five tags are left as-is so enum validation
        rejects them.
        """
        if v is None:
            return MeasurementStatus.UNKNOWN
        if isinstance(v, str):
            token = v.strip().lower()
            return token or MeasurementStatus.UNKNOWN
        return v


class ExamRecord(_ExamModel):
    """Normalized extraction result for one exam document."""

    exam_type: str = ""
    exam_date: str = ""
    laboratory_or_clinic: str = ""
    patient: Patient = Field(default_factory=Patient)
    results: list[Measurement] = Field(default_factory=list)
    physician: str = ""
    notes: str = ""

    @field_validator(
        "exam_type", "exam_date", "laboratory_or_clinic", "physician", "notes",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _coerce_text(v)

    @field_validator("patient", mode="before")
    @classmethod
    def default_patient(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("results", mode="before")
    @classmethod
    def default_results(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def flagged_results(self) -> list[Measurement]:
        """Results outside their reference range (high, low or abnormal)."""
        return [
            m for m in self.results
            if m.status in (MeasurementStatus.HIGH, MeasurementStatus.LOW, MeasurementStatus.ABNORMAL)
        ]
