from __future__ import annotations

from pydantic import BaseModel, Field


class Period(BaseModel):
    start: str = Field(description="YYYY-MM-DD")
    end: str = Field(description="YYYY-MM-DD")


class StatusGroup(BaseModel):
    status: int
    type: str | None = None
    count: int
    total_value: float


class StatsTotals(BaseModel):
    total: int
    pending: int
    delivered: int
    returned: int
    total_value: float
    success_rate: float = Field(description="delivered / (delivered + returned) * 100")


class StatsResponse(BaseModel):
    period: Period
    conductor: str | None = None
    groups: list[StatusGroup]
    totals: StatsTotals


class ConductorPerformance(BaseModel):
    conductor_id: int
    conductor: str
    is_active: bool
    total: int
    pending: int
    delivered: int
    returned: int
    total_value: float
    success_rate: float


class ConductorsResponse(BaseModel):
    period: Period
    items: list[ConductorPerformance]


class PlatformShare(BaseModel):
    type: str
    count: int
    percentage: float
    total_value: float


class PlatformsResponse(BaseModel):
    period: Period
    items: list[PlatformShare]


class DailyPoint(BaseModel):
    date: str = Field(description="YYYY-MM-DD")
    total: int
    pending: int
    delivered: int
    returned: int


class DailyResponse(BaseModel):
    period: Period
    series: list[DailyPoint]


class PdfReportIn(BaseModel):
    start: str | None = Field(None, description="YYYY-MM-DD o ISO datetime")
    end: str | None = Field(None, description="YYYY-MM-DD o ISO datetime")
    conductor: str | None = None
