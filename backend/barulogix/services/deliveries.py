"""Entregas: importación masiva, consulta filtrada, cambios de estado y borrado.

Toda consulta filtra por ``user_id`` (tenant). La unicidad de
``(tracking, user_id)`` la garantiza el índice del store; el chequeo previo de
duplicados solo sirve para reportarlos al usuario.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Iterator, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from barulogix.core.dates import parse_iso_date_or_datetime
from barulogix.core.errors import InvalidInput, NotFound
from barulogix.db import utcnow
from barulogix.models.conductor import Conductor
from barulogix.models.delivery import PLATFORM_DROPI, PLATFORMS, Delivery, DeliveryStatus
from barulogix.services.conductors import get_active_by_name

logger = logging.getLogger(__name__)

TRACKING_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]{3,49}$")
MAX_VALUE = Decimal("1000000000000")
# límite de parámetros por IN (...)
_IN_CHUNK = 500


@dataclass
class DeliveryFilters:
    conductor: str | None = None
    status: int | None = None
    type: str | None = None
    start: str | None = None
    end: str | None = None
    tracking: str | None = None


def _chunks(items: Sequence[str], size: int = _IN_CHUNK) -> Iterator[Sequence[str]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def is_valid_tracking(tracking: Any) -> bool:
    return isinstance(tracking, str) and bool(TRACKING_RE.match(tracking.strip()))


def parse_value(raw: Any) -> Decimal:
    """Valor monetario de un paquete Dropi. Ausente => 0; levanta ValueError si es inválido."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return Decimal("0")
    if isinstance(raw, bool):
        raise ValueError("boolean")
    try:
        v = Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValueError("not a number")
    if not v.is_finite() or v < 0 or v >= MAX_VALUE:
        raise ValueError("out of range")
    return v.quantize(Decimal("0.01"))


def validate_status(status: Any) -> int:
    if isinstance(status, bool) or status not in (0, 1, 2):
        raise InvalidInput(
            "Estado inválido (0=no entregado, 1=entregado, 2=devuelto)",
            code="INVALID_STATUS",
            details={"value": status},
        )
    return int(status)


def validate_type(type_: Any) -> str:
    if type_ not in PLATFORMS:
        raise InvalidInput("Tipo de paquete inválido", code="INVALID_TYPE", details={"value": type_, "expected": list(PLATFORMS)})
    return type_


def clean_trackings(trackings: Iterable[Any] | None) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for t in trackings or []:
        if not isinstance(t, str):
            continue
        s = t.strip()
        if s and s not in seen:
            seen.add(s)
            out.append(s)
    if not out:
        raise InvalidInput("Lista de trackings es requerida")
    return out


def _existing_trackings(db: Session, tenant_id: int, candidates: list[str]) -> set[str]:
    found: set[str] = set()
    for chunk in _chunks(candidates):
        found.update(
            db.scalars(
                select(Delivery.tracking)
                .where(Delivery.user_id == tenant_id)
                .where(Delivery.tracking.in_(chunk))
            )
        )
    return found


def _insert_rows(db: Session, rows: list[dict]) -> tuple[int, list[str]]:
    """Inserta el lote; si el índice único rechaza algo, reintenta fila por fila."""
    if not rows:
        return 0, []
    try:
        db.add_all([Delivery(**r) for r in rows])
        db.commit()
        return len(rows), []
    except IntegrityError:
        db.rollback()
        logger.warning("batch insert hit unique index, retrying row by row (%s rows)", len(rows))

    created = 0
    rejected: list[str] = []
    for r in rows:
        try:
            with db.begin_nested():
                db.add(Delivery(**r))
            created += 1
        except IntegrityError:
            rejected.append(r["tracking"])
    db.commit()
    return created, rejected


def import_deliveries(
    db: Session,
    tenant_id: int,
    conductor_name: str | None,
    type_: str | None,
    delivery_date: str | None,
    packages: Sequence[Any] | None,
    *,
    max_packages: int = 1000,
) -> dict:
    if not (conductor_name or "").strip() or not type_ or not delivery_date or packages is None:
        raise InvalidInput("Conductor, tipo, fecha de entrega y paquetes son requeridos")
    if len(packages) == 0:
        raise InvalidInput("La lista de paquetes está vacía")
    if len(packages) > max_packages:
        raise InvalidInput(
            f"Máximo {max_packages} paquetes por importación",
            code="TOO_MANY_PACKAGES",
            details={"max": max_packages, "received": len(packages)},
        )
    validate_type(type_)

    conductor = get_active_by_name(db, tenant_id, conductor_name)
    if conductor is None:
        raise NotFound("Conductor no encontrado", code="CONDUCTOR_NOT_FOUND", details={"conductor": conductor_name})

    try:
        date_dt = parse_iso_date_or_datetime(delivery_date, field="deliveryDate")
    except InvalidInput as e:
        raise InvalidInput("Fecha de entrega inválida", code=e.code, details=e.details)

    def _field(pkg: Any, name: str) -> Any:
        return pkg.get(name) if isinstance(pkg, dict) else getattr(pkg, name, None)

    candidates = [
        _field(p, "tracking").strip() for p in packages if is_valid_tracking(_field(p, "tracking"))
    ]
    existing = _existing_trackings(db, tenant_id, list(dict.fromkeys(candidates)))

    rows: list[dict] = []
    duplicates: list[str] = []
    errors: list[str] = []
    seen: set[str] = set()

    for pkg in packages:
        raw_tracking = _field(pkg, "tracking")
        raw_value = _field(pkg, "value")

        if not is_valid_tracking(raw_tracking):
            errors.append(f"Tracking inválido: {raw_tracking}")
            continue
        tracking = raw_tracking.strip()

        # ya persistido, o repetido dentro del mismo lote
        if tracking in existing or tracking in seen:
            duplicates.append(tracking)
            continue

        value = Decimal("0")
        if type_ == PLATFORM_DROPI:
            try:
                value = parse_value(raw_value)
            except ValueError:
                errors.append(f"Valor inválido para {tracking}: {raw_value}")
                continue

        seen.add(tracking)
        rows.append(
            {
                "user_id": tenant_id,
                "conductor_id": conductor.id,
                "tracking": tracking,
                "type": type_,
                "status": int(DeliveryStatus.NOT_DELIVERED),
                "delivery_date": date_dt,
                "value": value,
            }
        )

    created, rejected = _insert_rows(db, rows)
    duplicates.extend(rejected)

    logger.info(
        "deliveries imported tenant=%s conductor_id=%s created=%s duplicates=%s errors=%s",
        tenant_id,
        conductor.id,
        created,
        len(duplicates),
        len(errors),
    )
    return {
        "created": created,
        "duplicates": len(duplicates),
        "errors": len(errors),
        "duplicate_trackings": duplicates,
        "error_messages": errors,
    }


def _escape_like(s: str) -> str:
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _filter_conditions(tenant_id: int, f: DeliveryFilters) -> list:
    conds = [Delivery.user_id == tenant_id]

    if f.conductor:
        # cualquier conductor del tenant con ese nombre (incluye inactivos: historial)
        conds.append(
            Delivery.conductor_id.in_(
                select(Conductor.id)
                .where(Conductor.user_id == tenant_id)
                .where(Conductor.name == f.conductor.strip())
            )
        )
    if f.status is not None:
        conds.append(Delivery.status == validate_status(f.status))
    if f.type:
        conds.append(Delivery.type == validate_type(f.type))
    if f.tracking and f.tracking.strip():
        pattern = f"%{_escape_like(f.tracking.strip())}%"
        conds.append(Delivery.tracking.ilike(pattern, escape="\\"))
    if f.start:
        conds.append(Delivery.delivery_date >= parse_iso_date_or_datetime(f.start, field="startDate"))
    if f.end:
        conds.append(Delivery.delivery_date <= parse_iso_date_or_datetime(f.end, is_end=True, field="endDate"))
    return conds


def list_deliveries(
    db: Session,
    tenant_id: int,
    filters: DeliveryFilters,
    page: int = 1,
    page_size: int = 50,
) -> dict:
    if page < 1 or page_size < 1:
        raise InvalidInput("page y limit deben ser >= 1")

    conds = _filter_conditions(tenant_id, filters)
    total = int(db.scalar(select(func.count(Delivery.id)).where(*conds)) or 0)

    items = list(
        db.scalars(
            select(Delivery)
            .options(joinedload(Delivery.conductor))
            .where(*conds)
            .order_by(Delivery.delivery_date.desc(), Delivery.created_at.desc(), Delivery.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
    )
    return {
        "items": items,
        "pagination": {
            "page": page,
            "limit": page_size,
            "total": total,
            "pages": math.ceil(total / page_size) if total else 0,
        },
    }


def update_status(
    db: Session,
    tenant_id: int,
    trackings: Iterable[Any],
    new_status: Any,
    conductor: str | None = None,
) -> int:
    ts = clean_trackings(trackings)
    status = validate_status(new_status)

    now = utcnow()
    values: dict[str, Any] = {"status": status, "updated_at": now}
    if status == DeliveryStatus.RETURNED:
        # devolución: la fecha pasa a ser la del evento de devolución
        values["delivery_date"] = now

    updated = 0
    for chunk in _chunks(ts):
        stmt = (
            update(Delivery)
            .where(Delivery.user_id == tenant_id)
            .where(Delivery.tracking.in_(chunk))
        )
        if status != DeliveryStatus.RETURNED:
            # solo cuenta filas que realmente cambian de estado
            stmt = stmt.where(Delivery.status != status)
        if conductor and conductor.strip():
            stmt = stmt.where(
                Delivery.conductor_id.in_(
                    select(Conductor.id)
                    .where(Conductor.user_id == tenant_id)
                    .where(Conductor.name == conductor.strip())
                )
            )
        res = db.execute(stmt.values(**values).execution_options(synchronize_session=False))
        updated += int(res.rowcount or 0)
    db.commit()

    logger.info("delivery status updated tenant=%s status=%s updated=%s", tenant_id, status, updated)
    return updated


def delete_deliveries(db: Session, tenant_id: int, trackings: Iterable[Any]) -> int:
    ts = clean_trackings(trackings)

    deleted = 0
    for chunk in _chunks(ts):
        res = db.execute(
            delete(Delivery)
            .where(Delivery.user_id == tenant_id)
            .where(Delivery.tracking.in_(chunk))
            .execution_options(synchronize_session=False)
        )
        deleted += int(res.rowcount or 0)
    db.commit()

    logger.info("deliveries deleted tenant=%s deleted=%s", tenant_id, deleted)
    return deleted
