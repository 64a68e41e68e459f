from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from barulogix.core.errors import Conflict, InvalidInput, NotFound
from barulogix.models.conductor import Conductor
from barulogix.models.delivery import Delivery

logger = logging.getLogger(__name__)

_EDITABLE = ("phone", "email", "vehicle_type", "license_plate")


def _clean(value: str | None) -> str | None:
    v = (value or "").strip()
    return v or None


def _clean_name(name: str | None) -> str:
    n = (name or "").strip()
    if len(n) < 2:
        raise InvalidInput("El nombre del conductor es requerido (mínimo 2 caracteres)")
    return n


def _active_name_taken(db: Session, tenant_id: int, name: str, *, exclude_id: int | None = None) -> bool:
    q = (
        select(Conductor.id)
        .where(Conductor.user_id == tenant_id)
        .where(Conductor.name == name)
        .where(Conductor.is_active.is_(True))
    )
    if exclude_id is not None:
        q = q.where(Conductor.id != exclude_id)
    return db.scalar(q) is not None


def _duplicate(name: str) -> Conflict:
    return Conflict("Ya existe un conductor con ese nombre", code="DUPLICATE_CONDUCTOR", details={"name": name})


def list_conductors(db: Session, tenant_id: int) -> list[Conductor]:
    return list(
        db.scalars(
            select(Conductor)
            .where(Conductor.user_id == tenant_id)
            .where(Conductor.is_active.is_(True))
            .order_by(Conductor.name.asc())
        )
    )


def get_conductor(db: Session, tenant_id: int, conductor_id: int) -> Conductor:
    c = db.scalar(select(Conductor).where(Conductor.id == conductor_id).where(Conductor.user_id == tenant_id))
    if c is None:
        raise NotFound("Conductor no encontrado", code="CONDUCTOR_NOT_FOUND")
    return c


def get_active_by_name(db: Session, tenant_id: int, name: str) -> Conductor | None:
    return db.scalar(
        select(Conductor)
        .where(Conductor.user_id == tenant_id)
        .where(Conductor.name == (name or "").strip())
        .where(Conductor.is_active.is_(True))
    )


def create_conductor(
    db: Session,
    tenant_id: int,
    name: str,
    phone: str | None = None,
    email: str | None = None,
    vehicle_type: str | None = None,
    license_plate: str | None = None,
) -> Conductor:
    name_n = _clean_name(name)
    if _active_name_taken(db, tenant_id, name_n):
        raise _duplicate(name_n)

    email_n = _clean(email)
    c = Conductor(
        user_id=tenant_id,
        name=name_n,
        phone=_clean(phone),
        email=email_n.lower() if email_n else None,
        vehicle_type=_clean(vehicle_type),
        license_plate=(_clean(license_plate) or "").upper() or None,
        is_active=True,
    )
    db.add(c)
    try:
        db.commit()
    except IntegrityError:
        # índice parcial (user_id, name) de activos
        db.rollback()
        raise _duplicate(name_n)
    db.refresh(c)
    logger.info("conductor created tenant=%s conductor_id=%s", tenant_id, c.id)
    return c


def update_conductor(db: Session, tenant_id: int, conductor_id: int, fields: dict) -> Conductor:
    c = get_conductor(db, tenant_id, conductor_id)
    if not c.is_active:
        raise NotFound("Conductor no encontrado", code="CONDUCTOR_NOT_FOUND")

    if fields.get("name") is not None:
        name_n = _clean_name(fields["name"])
        if name_n != c.name and _active_name_taken(db, tenant_id, name_n, exclude_id=c.id):
            raise _duplicate(name_n)
        c.name = name_n

    for key in _EDITABLE:
        if key in fields:
            value = _clean(fields[key])
            if value and key == "email":
                value = value.lower()
            elif value and key == "license_plate":
                value = value.upper()
            setattr(c, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _duplicate(c.name)
    db.refresh(c)
    return c


def deactivate_conductor(db: Session, tenant_id: int, conductor_id: int, cascade_delete_deliveries: bool) -> int:
    """Soft delete. Devuelve cuántas entregas se borraron (0 sin cascade)."""
    c = get_conductor(db, tenant_id, conductor_id)

    deleted = 0
    if cascade_delete_deliveries:
        res = db.execute(
            delete(Delivery)
            .where(Delivery.user_id == tenant_id)
            .where(Delivery.conductor_id == c.id)
            .execution_options(synchronize_session=False)
        )
        deleted = int(res.rowcount or 0)

    c.is_active = False
    db.commit()
    logger.info(
        "conductor deactivated tenant=%s conductor_id=%s deleted_deliveries=%s",
        tenant_id,
        c.id,
        deleted,
    )
    return deleted
