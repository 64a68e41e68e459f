from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from barulogix.core.settings import Settings
from barulogix.deps import get_db, get_settings, require_admin
from barulogix.models.user import User
from barulogix.schemas.admin import BootstrapIn, SubscriptionUpdateIn
from barulogix.schemas.auth import UserOut
from barulogix.schemas.common import Envelope, ok
from barulogix.services import accounts

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/bootstrap", response_model=Envelope[UserOut])
def bootstrap(payload: BootstrapIn, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    user, created = accounts.bootstrap_admin(db, settings, payload.admin_key)
    msg = "Usuario administrador creado exitosamente" if created else "Usuario administrador ya existe"
    return ok(user, msg)


@router.get("/users", response_model=Envelope[list[UserOut]])
def list_users(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return ok(accounts.list_users(db))


@router.post("/users/{user_id}/subscription", response_model=Envelope[UserOut])
def update_subscription(
    user_id: int,
    payload: SubscriptionUpdateIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = accounts.update_subscription(
        db,
        user_id,
        status=payload.status,
        months=payload.months,
        plan=payload.plan,
        payment=payload.payment.model_dump() if payload.payment else None,
    )
    return ok(user, f"Suscripción actualizada: {user.subscription_status}")
