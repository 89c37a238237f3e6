import json
from typing import Any

from pydantic import BaseModel, field_validator

from app.models.report import ReportPriority, ReportStatus


class NewReportInput(BaseModel):
    image_url: str | None = None
    description: str | None = None
    location_lat: float | None = None
    location_lng: float | None = None
    city: str | None = None
    state: str | None = None
    priority: str = ReportPriority.MEDIUM.value
    ai_analysis: str | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def _coerce_priority(cls, value: Any) -> str:
        # Unknown labels fall back to the default rather than rejecting the report
        if isinstance(value, str):
            label = value.strip().lower()
            if label in {p.value for p in ReportPriority}:
                return label
        return ReportPriority.MEDIUM.value

    @field_validator("ai_analysis", mode="before")
    @classmethod
    def _serialize_analysis(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value)


class ReportResponse(BaseModel):
    id: int
    image_url: str | None = None
    description: str | None = None
    location_lat: float | None = None
    location_lng: float | None = None
    city: str | None = None
    state: str | None = None
    status: str
    priority: str
    ai_analysis: str | None = None
    created_at: str

    model_config = {"from_attributes": True}


class ReportCreated(BaseModel):
    id: int


class StatusUpdate(BaseModel):
    status: ReportStatus
