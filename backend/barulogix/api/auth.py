from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from barulogix.auth.providers import Principal
from barulogix.core.errors import NotFound
from barulogix.core.security import create_access_token
from barulogix.core.settings import Settings
from barulogix.deps import get_db, get_principal, get_settings
from barulogix.models.user import User
from barulogix.schemas.auth import LoginIn, LoginOut, RegisterIn, UserOut
from barulogix.schemas.common import Envelope, ok
from barulogix.services import accounts

router = APIRouter(prefix="/auth", tags=["auth"])


def _require_local(settings: Settings) -> None:
    if settings.AUTH_PROVIDER != "local":
        raise NotFound("Auth local deshabilitado (AUTH_PROVIDER externo)")


@router.post("/register", response_model=Envelope[UserOut], status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    _require_local(settings)
    user = accounts.register_user(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        company=payload.company,
        phone=payload.phone,
    )
    return ok(user, "Usuario registrado exitosamente. Procede con el pago para activar tu cuenta.")


@router.post("/login", response_model=Envelope[LoginOut])
def login(payload: LoginIn, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    _require_local(settings)
    user = accounts.authenticate(db, email=payload.email, password=payload.password)
    token = create_access_token(settings, sub=str(user.id), claims={"email": user.email, "role": user.role})
    return ok({"user": user, "token": token}, "Login exitoso")


@router.get("/me", response_model=Envelope[UserOut])
def me(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    # no exige suscripción activa
    user = db.get(User, principal.user_id)
    if user is None:
        raise NotFound("Usuario no encontrado")
    return ok(user)
