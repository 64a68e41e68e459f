from __future__ import annotations

from datetime import date, datetime, timedelta

from barulogix.core.errors import InvalidInput
from barulogix.db import utcnow


def parse_iso_date_or_datetime(s: str | None, *, is_end: bool = False, field: str = "date") -> datetime:
    """Acepta ISO date (YYYY-MM-DD) o ISO datetime (YYYY-MM-DDTHH:MM:SS[.fff][Z|±HH:MM]).
    Para date-only:
      - inicio => 00:00:00
      - fin    => 23:59:59.999999
    Datetimes con zona se normalizan a UTC naive.
    """
    raw = (s or "").strip()
    if not raw:
        raise InvalidInput("Fecha vacía", code="INVALID_DATE", details={"field": field, "value": s})

    s2 = raw.replace(" ", "T")
    if s2.endswith("Z"):
        s2 = s2[:-1] + "+00:00"

    if "T" in s2:
        try:
            dt = datetime.fromisoformat(s2)
        except ValueError:
            dt = None
        if dt is not None:
            if dt.tzinfo is not None:
                dt = (dt - dt.utcoffset()).replace(tzinfo=None)
            return dt

    try:
        if len(s2) != 10:
            raise ValueError(raw)
        d = date.fromisoformat(s2)
    except ValueError:
        raise InvalidInput(
            "Fecha inválida",
            code="INVALID_DATE",
            details={"field": field, "value": raw, "expected": ["YYYY-MM-DD", "YYYY-MM-DDTHH:MM:SS"]},
        )

    if is_end:
        return datetime(d.year, d.month, d.day, 23, 59, 59, 999999)
    return datetime(d.year, d.month, d.day, 0, 0, 0)


def resolve_period(start: str | None, end: str | None, *, default_days: int = 30) -> tuple[datetime, datetime]:
    now = utcnow()

    if start is None and end is None:
        end_dt = now
        start_dt = now - timedelta(days=default_days)
    elif start is not None and end is None:
        start_dt = parse_iso_date_or_datetime(start, is_end=False, field="start")
        end_dt = now
    elif start is None and end is not None:
        end_dt = parse_iso_date_or_datetime(end, is_end=True, field="end")
        start_dt = end_dt - timedelta(days=default_days)
    else:
        start_dt = parse_iso_date_or_datetime(start, is_end=False, field="start")
        end_dt = parse_iso_date_or_datetime(end, is_end=True, field="end")

    if start_dt > end_dt:
        raise InvalidInput(
            "start no puede ser mayor que end",
            code="INVALID_PERIOD",
            details={"start": start_dt.date().isoformat(), "end": end_dt.date().isoformat()},
        )
    return start_dt, end_dt
