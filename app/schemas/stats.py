from pydantic import BaseModel, Field


class Stats(BaseModel):
    total: int = Field(ge=0)
    pending: int = Field(ge=0)
    resolved: int = Field(ge=0)
    critical: int = Field(ge=0)
