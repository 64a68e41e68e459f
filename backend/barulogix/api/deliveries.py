from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from barulogix.core.settings import Settings
from barulogix.deps import get_current_tenant_id, get_db, get_settings
from barulogix.schemas.common import Envelope, ok
from barulogix.schemas.delivery import (
    DeletedOut,
    DeliveryImportIn,
    DeliveryPage,
    ImportResult,
    StatusUpdateIn,
    UpdatedOut,
)
from barulogix.services import deliveries as svc

router = APIRouter(prefix="/deliveries", tags=["deliveries"])


@router.get("", response_model=Envelope[DeliveryPage])
def list_deliveries(
    conductor: str | None = Query(None),
    status: int | None = Query(None),
    type: str | None = Query(None),
    start_date: str | None = Query(None, alias="startDate", description="YYYY-MM-DD o ISO datetime"),
    end_date: str | None = Query(None, alias="endDate", description="YYYY-MM-DD o ISO datetime"),
    tracking: str | None = Query(None, max_length=50),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
    settings: Settings = Depends(get_settings),
):
    page_size = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    filters = svc.DeliveryFilters(
        conductor=conductor,
        status=status,
        type=type,
        start=start_date,
        end=end_date,
        tracking=tracking,
    )
    return ok(svc.list_deliveries(db, tenant_id, filters, page=page, page_size=page_size))


@router.post("", response_model=Envelope[ImportResult])
def import_deliveries(
    payload: DeliveryImportIn,
    response: Response,
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
    settings: Settings = Depends(get_settings),
):
    result = svc.import_deliveries(
        db,
        tenant_id,
        payload.conductor,
        payload.type,
        payload.delivery_date,
        payload.packages,
        max_packages=settings.MAX_IMPORT_PACKAGES,
    )
    response.status_code = 201 if result["created"] > 0 else 200
    msg = (
        f"Importación completada: {result['created']} creados, "
        f"{result['duplicates']} duplicados, {result['errors']} errores"
    )
    return ok(result, msg)


@router.put("", response_model=Envelope[UpdatedOut])
def update_status(payload: StatusUpdateIn, db: Session = Depends(get_db), tenant_id: int = Depends(get_current_tenant_id)):
    updated = svc.update_status(db, tenant_id, payload.trackings, payload.status, conductor=payload.conductor)
    return ok({"updated": updated}, f"{updated} paquetes actualizados")


@router.delete("", response_model=Envelope[DeletedOut])
def delete_deliveries(
    trackings: str = Query("", description="Trackings separados por coma"),
    db: Session = Depends(get_db),
    tenant_id: int = Depends(get_current_tenant_id),
):
    deleted = svc.delete_deliveries(db, tenant_id, trackings.split(","))
    return ok({"deleted": deleted}, f"{deleted} paquetes eliminados")
