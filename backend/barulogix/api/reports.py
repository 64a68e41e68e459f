from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from barulogix.core.dates import resolve_period
from barulogix.core.errors import Forbidden
from barulogix.core.settings import Settings
from barulogix.deps import get_current_user, get_db, get_settings
from barulogix.models.user import User
from barulogix.schemas.common import Envelope, ok
from barulogix.schemas.reports import (
    ConductorsResponse,
    DailyResponse,
    PdfReportIn,
    PlatformsResponse,
    StatsResponse,
)
from barulogix.services import stats
from barulogix.services.report_pdf import build_stats_pdf, record_report

router = APIRouter(prefix="/reports", tags=["reports"])


def _period(start_dt: datetime, end_dt: datetime) -> dict:
    return {"start": start_dt.date().isoformat(), "end": end_dt.date().isoformat()}


def _clean_conductor(conductor: str | None) -> str | None:
    return (conductor or "").strip() or None


@router.get("/stats", response_model=Envelope[StatsResponse])
def get_stats(
    start: str | None = Query(None, description="YYYY-MM-DD o ISO datetime"),
    end: str | None = Query(None, description="YYYY-MM-DD o ISO datetime"),
    conductor: str | None = Query(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    start_dt, end_dt = resolve_period(start, end, default_days=settings.REPORTS_DEFAULT_DAYS)
    conductor = _clean_conductor(conductor)
    data = stats.compute_stats(db, user.id, start_dt, end_dt, conductor)
    return ok({"period": _period(start_dt, end_dt), "conductor": conductor, **data})


@router.get("/conductors", response_model=Envelope[ConductorsResponse])
def get_conductor_performance(
    start: str | None = Query(None, description="YYYY-MM-DD o ISO datetime"),
    end: str | None = Query(None, description="YYYY-MM-DD o ISO datetime"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    start_dt, end_dt = resolve_period(start, end, default_days=settings.REPORTS_DEFAULT_DAYS)
    items = stats.by_conductor(db, user.id, start_dt, end_dt)
    return ok({"period": _period(start_dt, end_dt), "items": items})


@router.get("/platforms", response_model=Envelope[PlatformsResponse])
def get_platforms(
    start: str | None = Query(None, description="YYYY-MM-DD o ISO datetime"),
    end: str | None = Query(None, description="YYYY-MM-DD o ISO datetime"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    start_dt, end_dt = resolve_period(start, end, default_days=settings.REPORTS_DEFAULT_DAYS)
    items = stats.by_platform(db, user.id, start_dt, end_dt)
    return ok({"period": _period(start_dt, end_dt), "items": items})


@router.get("/daily", response_model=Envelope[DailyResponse])
def get_daily(
    start: str | None = Query(None, description="YYYY-MM-DD o ISO datetime"),
    end: str | None = Query(None, description="YYYY-MM-DD o ISO datetime"),
    conductor: str | None = Query(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    start_dt, end_dt = resolve_period(start, end, default_days=settings.REPORTS_DEFAULT_DAYS)
    series = stats.daily(db, user.id, start_dt, end_dt, _clean_conductor(conductor))
    return ok({"period": _period(start_dt, end_dt), "series": series})


@router.post("/pdf")
def export_pdf(
    payload: PdfReportIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    if not user.can_access_reports:
        raise Forbidden("Sin permiso para generar reportes", code="PERMISSION_REQUIRED")

    start_dt, end_dt = resolve_period(payload.start, payload.end, default_days=settings.REPORTS_DEFAULT_DAYS)
    conductor = _clean_conductor(payload.conductor)
    period = _period(start_dt, end_dt)

    pdf_bytes = build_stats_pdf(
        title="BaruLogix - Reporte de entregas",
        tenant_name=user.company or user.name,
        period=period,
        conductor=conductor,
        stats=stats.compute_stats(db, user.id, start_dt, end_dt, conductor),
        conductors=[] if conductor else stats.by_conductor(db, user.id, start_dt, end_dt),
        platforms=stats.by_platform(db, user.id, start_dt, end_dt),
    )
    rep = record_report(db, user.id, start_dt=start_dt, end_dt=end_dt, conductor=conductor)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{rep.file_name}"'},
    )
