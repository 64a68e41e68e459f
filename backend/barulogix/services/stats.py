from __future__ import annotations

from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from barulogix.models.conductor import Conductor
from barulogix.models.delivery import Delivery, DeliveryStatus


def success_rate(delivered: int, returned: int) -> float:
    # entregados / (entregados + devueltos); los pendientes no cuentan
    done = delivered + returned
    return round(delivered * 100.0 / done, 1) if done else 0.0


def _base_conditions(tenant_id: int, start_dt: datetime, end_dt: datetime, conductor: str | None) -> list:
    conds = [
        Delivery.user_id == tenant_id,
        Delivery.delivery_date >= start_dt,
        Delivery.delivery_date <= end_dt,
    ]
    if conductor and conductor.strip():
        conds.append(
            Delivery.conductor_id.in_(
                select(Conductor.id)
                .where(Conductor.user_id == tenant_id)
                .where(Conductor.name == conductor.strip())
            )
        )
    return conds


def _status_sum(status: DeliveryStatus):
    return func.coalesce(func.sum(case((Delivery.status == int(status), 1), else_=0)), 0)


def compute_stats(
    db: Session,
    tenant_id: int,
    start_dt: datetime,
    end_dt: datetime,
    conductor: str | None = None,
) -> dict:
    """Conteo y suma de valor por estado (por tipo+estado si se filtra conductor)."""
    conds = _base_conditions(tenant_id, start_dt, end_dt, conductor)
    scoped = bool(conductor and conductor.strip())

    cnt = func.count(Delivery.id).label("cnt")
    total_value = func.coalesce(func.sum(Delivery.value), 0).label("total_value")
    if scoped:
        q = (
            select(Delivery.type, Delivery.status, cnt, total_value)
            .where(*conds)
            .group_by(Delivery.type, Delivery.status)
            .order_by(Delivery.type.asc(), Delivery.status.asc())
        )
    else:
        q = (
            select(Delivery.status, cnt, total_value)
            .where(*conds)
            .group_by(Delivery.status)
            .order_by(Delivery.status.asc())
        )

    groups: list[dict] = []
    by_status = {s: 0 for s in DeliveryStatus}
    value_sum = 0.0
    for r in db.execute(q).all():
        count = int(r.cnt or 0)
        value = float(r.total_value or 0)
        groups.append(
            {
                "status": int(r.status),
                "type": r.type if scoped else None,
                "count": count,
                "total_value": value,
            }
        )
        by_status[DeliveryStatus(int(r.status))] += count
        value_sum += value

    delivered = by_status[DeliveryStatus.DELIVERED]
    returned = by_status[DeliveryStatus.RETURNED]
    totals = {
        "total": sum(by_status.values()),
        "pending": by_status[DeliveryStatus.NOT_DELIVERED],
        "delivered": delivered,
        "returned": returned,
        "total_value": round(value_sum, 2),
        "success_rate": success_rate(delivered, returned),
    }
    return {"groups": groups, "totals": totals}


def by_conductor(db: Session, tenant_id: int, start_dt: datetime, end_dt: datetime) -> list[dict]:
    total = func.count(Delivery.id).label("total")
    q = (
        select(
            Conductor.id,
            Conductor.name,
            Conductor.is_active,
            total,
            _status_sum(DeliveryStatus.NOT_DELIVERED).label("pending"),
            _status_sum(DeliveryStatus.DELIVERED).label("delivered"),
            _status_sum(DeliveryStatus.RETURNED).label("returned"),
            func.coalesce(func.sum(Delivery.value), 0).label("total_value"),
        )
        .select_from(Delivery)
        .join(Conductor, Conductor.id == Delivery.conductor_id)
        .where(*_base_conditions(tenant_id, start_dt, end_dt, None))
        .group_by(Conductor.id, Conductor.name, Conductor.is_active)
        .order_by(total.desc(), Conductor.name.asc())
    )

    out: list[dict] = []
    for r in db.execute(q).all():
        delivered = int(r.delivered or 0)
        returned = int(r.returned or 0)
        out.append(
            {
                "conductor_id": r.id,
                "conductor": r.name,
                "is_active": bool(r.is_active),
                "total": int(r.total or 0),
                "pending": int(r.pending or 0),
                "delivered": delivered,
                "returned": returned,
                "total_value": float(r.total_value or 0),
                "success_rate": success_rate(delivered, returned),
            }
        )
    return out


def by_platform(db: Session, tenant_id: int, start_dt: datetime, end_dt: datetime) -> list[dict]:
    cnt = func.count(Delivery.id).label("cnt")
    q = (
        select(Delivery.type, cnt, func.coalesce(func.sum(Delivery.value), 0).label("total_value"))
        .where(*_base_conditions(tenant_id, start_dt, end_dt, None))
        .group_by(Delivery.type)
        .order_by(cnt.desc())
    )
    rows = db.execute(q).all()
    grand = sum(int(r.cnt or 0) for r in rows)

    return [
        {
            "type": r.type,
            "count": int(r.cnt or 0),
            "percentage": round(int(r.cnt or 0) * 100.0 / grand, 1) if grand else 0.0,
            "total_value": float(r.total_value or 0),
        }
        for r in rows
    ]


def daily(db: Session, tenant_id: int, start_dt: datetime, end_dt: datetime, conductor: str | None = None) -> list[dict]:
    day = func.date(Delivery.delivery_date).label("day")
    q = (
        select(
            day,
            func.count(Delivery.id).label("total"),
            _status_sum(DeliveryStatus.NOT_DELIVERED).label("pending"),
            _status_sum(DeliveryStatus.DELIVERED).label("delivered"),
            _status_sum(DeliveryStatus.RETURNED).label("returned"),
        )
        .where(*_base_conditions(tenant_id, start_dt, end_dt, conductor))
        .group_by(day)
        .order_by(day.asc())
    )
    return [
        {
            "date": str(r.day),
            "total": int(r.total or 0),
            "pending": int(r.pending or 0),
            "delivered": int(r.delivered or 0),
            "returned": int(r.returned or 0),
        }
        for r in db.execute(q).all()
    ]
