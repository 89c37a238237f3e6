import math
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.report import ReportPriority

SEVERITIES = frozenset(p.value for p in ReportPriority)
DEFAULT_SEVERITY = ReportPriority.MEDIUM.value
DEFAULT_PRIORITY_SCORE = 5
MIN_PRIORITY_SCORE = 1
MAX_PRIORITY_SCORE = 10

ANALYSIS_FIELDS = ("animalType", "condition", "severity", "description", "priorityScore")


class AnalysisResult(BaseModel):
    """Classification of one photo, normalized from the model's raw JSON.

    The model is asked for a fixed schema but may ignore it, so every field
    has a default, ``priorityScore`` is clamped to 1..10 and an unrecognised
    ``severity`` is replaced by ``medium`` with the original value kept in
    ``description``.
    """

    animal_type: str = Field(default="unknown", alias="animalType")
    condition: str = "unknown"
    severity: str = DEFAULT_SEVERITY
    description: str = ""
    priority_score: int = Field(
        default=DEFAULT_PRIORITY_SCORE,
        alias="priorityScore",
        ge=MIN_PRIORITY_SCORE,
        le=MAX_PRIORITY_SCORE,
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def _normalize_severity(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw = data.get("severity")
        if raw is None or not str(raw).strip():
            data["severity"] = DEFAULT_SEVERITY
            return data

        label = str(raw).strip().lower()
        if label in SEVERITIES:
            data["severity"] = label
            return data

        description = data.get("description")
        description = "" if description is None else str(description)
        data["severity"] = DEFAULT_SEVERITY
        data["description"] = f"{description} (reported severity: {raw})".strip()
        return data

    @field_validator("animal_type", "condition", mode="before")
    @classmethod
    def _text_or_unknown(cls, value: Any) -> str:
        if value is None:
            return "unknown"
        text = str(value).strip()
        return text or "unknown"

    @field_validator("description", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("priority_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        if isinstance(value, bool):
            return DEFAULT_PRIORITY_SCORE
        if isinstance(value, int):
            # arbitrarily large ints do not fit in a float
            return max(MIN_PRIORITY_SCORE, min(MAX_PRIORITY_SCORE, value))
        try:
            score = float(value)
        except (TypeError, ValueError, OverflowError):
            return DEFAULT_PRIORITY_SCORE
        if math.isnan(score):
            return DEFAULT_PRIORITY_SCORE
        if math.isinf(score):
            return MAX_PRIORITY_SCORE if score > 0 else MIN_PRIORITY_SCORE
        return max(MIN_PRIORITY_SCORE, min(MAX_PRIORITY_SCORE, round(score)))

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class AnalyzeRequest(BaseModel):
    image: str


class AnalyzeResponse(BaseModel):
    analysis: AnalysisResult
    guidance: str | None = None


class SubmissionRequest(BaseModel):
    image: str | None = None
    description: str | None = None
    location_lat: float | None = None
    location_lng: float | None = None
    city: str | None = None
    state: str | None = None
