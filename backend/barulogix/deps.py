from typing import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from barulogix.auth.providers import IdentityProvider, Principal
from barulogix.core.errors import Forbidden
from barulogix.core.settings import Settings
from barulogix.models.user import User
from barulogix.services.accounts import ensure_subscription_active
from barulogix.tenant_context import set_tenant_on_session


# dependency FastAPI: una sesión por request
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


def get_principal(
    request: Request,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Principal:
    return provider.authenticate(request, db)


def get_current_user(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> User:
    """Usuario autenticado con suscripción vigente; fija el tenant en la sesión."""
    user = db.get(User, principal.user_id)
    if user is None:
        raise Forbidden("Usuario no pertenece a ningún tenant")
    ensure_subscription_active(db, user)
    set_tenant_on_session(db, user.id)
    return user


def get_current_tenant_id(user: User = Depends(get_current_user)) -> int:
    return user.id


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise Forbidden("Se requiere rol de administrador", code="ROLE_REQUIRED")
    return user
