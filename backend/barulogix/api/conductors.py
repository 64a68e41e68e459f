from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from barulogix.deps import get_current_tenant_id, get_db
from barulogix.schemas.common import Envelope, ok
from barulogix.schemas.conductor import ConductorCreate, ConductorOut, ConductorUpdate, DeactivateOut
from barulogix.services import conductors as svc

router = APIRouter(prefix="/conductors", tags=["conductors"])


@router.get("", response_model=Envelope[list[ConductorOut]])
def list_conductors(db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return ok(svc.list_conductors(db, tenant_id))


@router.post("", response_model=Envelope[ConductorOut], status_code=201)
def create_conductor(payload: ConductorCreate, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    c = svc.create_conductor(
        db,
        tenant_id,
        payload.name,
        phone=payload.phone,
        email=payload.email,
        vehicle_type=payload.vehicle_type,
        license_plate=payload.license_plate,
    )
    return ok(c, "Conductor creado exitosamente")


@router.get("/{conductor_id}", response_model=Envelope[ConductorOut])
def get_conductor(conductor_id: int, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    return ok(svc.get_conductor(db, tenant_id, conductor_id))


@router.patch("/{conductor_id}", response_model=Envelope[ConductorOut])
def update_conductor(
    conductor_id: int,
    payload: ConductorUpdate,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    c = svc.update_conductor(db, tenant_id, conductor_id, payload.model_dump(exclude_unset=True))
    return ok(c, "Conductor actualizado")


@router.delete("", response_model=Envelope[DeactivateOut])
def deactivate_conductor(
    conductor_id: int = Query(..., alias="id", ge=1),
    delete_deliveries: bool = Query(False, alias="deleteDeliveries"),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    deleted = svc.deactivate_conductor(db, tenant_id, conductor_id, delete_deliveries)
    msg = (
        f"Conductor eliminado junto con {deleted} paquetes"
        if delete_deliveries
        else "Conductor eliminado (paquetes conservados)"
    )
    return ok({"id": conductor_id, "deleted_deliveries": deleted}, msg)
