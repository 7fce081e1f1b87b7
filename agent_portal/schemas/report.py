from datetime import date
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

ReportType = Literal["appointments", "revenue", "doctors", "hospitals"]


class ReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: ReportType
    date_from: date = Field(alias="dateFrom")
    date_to: date = Field(alias="dateTo")

    @model_validator(mode="after")
    def validate_range(self) -> "ReportRequest":
        if self.date_from > self.date_to:
            raise ValueError("dateFrom must not be after dateTo")
        return self


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    type: ReportType
    date_from: str = Field(alias="dateFrom")
    date_to: str = Field(alias="dateTo")
    data: Optional[Any] = None
    generated_at: str = Field(alias="generatedAt")


class ReportListResponse(BaseModel):
    total: int
    items: List[Report]
