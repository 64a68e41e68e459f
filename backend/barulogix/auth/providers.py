from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from fastapi import Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from barulogix.core.errors import Forbidden, Internal, Unauthorized
from barulogix.core.security import decode_token
from barulogix.core.settings import Settings
from barulogix.models.user import User

logger = logging.getLogger(__name__)


# -----------------------------
# Contract: Identity Provider
# -----------------------------

@dataclass(frozen=True)
class Principal:
    """Identidad resuelta para un request: el tenant es ``user_id``."""
    user_id: int
    email: str
    role: str


class IdentityProvider(Protocol):
    name: str

    def authenticate(self, request: Request, db: Session) -> Principal:
        """Resuelve el Principal del request o levanta Unauthorized/Forbidden."""
        ...


def _bearer_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def _principal(user: User) -> Principal:
    return Principal(user_id=user.id, email=user.email, role=user.role)


class LocalJWTProvider:
    """Usuarios en el store + bearer token HS256 emitido por /auth/login."""

    name = "local"

    def __init__(self, settings: Settings):
        self.settings = settings

    def authenticate(self, request: Request, db: Session) -> Principal:
        token = _bearer_token(request)
        if not token:
            raise Unauthorized("No autenticado")

        claims = decode_token(self.settings, token)
        try:
            user_id = int(claims.get("sub"))
        except (TypeError, ValueError):
            raise Unauthorized("Token inválido (sub ausente)", code="TOKEN_INVALID")

        user = db.get(User, user_id)
        if user is None:
            raise Unauthorized("Usuario del token no existe")
        return _principal(user)


class SupabaseIdentityProvider:
    """Auth hospedado: valida el access token contra ``/auth/v1/user``.

    El token llega como bearer o en la cookie de sesión. El email devuelto se
    mapea al ``User`` local; si no existe se crea en estado ``pending`` hasta
    que un admin active la suscripción.
    """

    name = "supabase"

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self.settings = settings
        self.transport = transport

    def _fetch_user(self, token: str) -> dict:
        url = f"{self.settings.SUPABASE_URL}/auth/v1/user"
        headers = {
            "apikey": self.settings.SUPABASE_ANON_KEY,
            "Authorization": f"Bearer {token}",
        }
        try:
            with httpx.Client(timeout=self.settings.SUPABASE_TIMEOUT_S, transport=self.transport) as client:
                r = client.get(url, headers=headers)
        except httpx.HTTPError:
            logger.exception("identity provider unreachable")
            raise Internal("Proveedor de identidad no disponible")

        if r.status_code in (401, 403):
            raise Unauthorized("Sesión inválida o expirada", code="TOKEN_INVALID")
        if r.status_code >= 400:
            logger.error("identity provider error status=%s", r.status_code)
            raise Internal("Proveedor de identidad no disponible")
        return r.json()

    def authenticate(self, request: Request, db: Session) -> Principal:
        token = _bearer_token(request) or request.cookies.get(self.settings.AUTH_COOKIE_NAME)
        if not token:
            raise Unauthorized("No autenticado")

        data = self._fetch_user(token)
        email = str(data.get("email") or "").strip().lower()
        if not email:
            raise Forbidden("La identidad externa no tiene email")

        user = db.scalar(select(User).where(User.email == email))
        if user is None:
            meta = data.get("user_metadata") or {}
            user = User(
                email=email,
                name=str(meta.get("name") or email.split("@")[0]),
                role="user",
                subscription_status="pending",
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                # otro request provisionó el mismo email primero
                db.rollback()
                user = db.scalar(select(User).where(User.email == email))
                if user is None:
                    raise
            else:
                logger.info("provisioned user_id=%s from identity provider", user.id)
        return _principal(user)


def get_identity_provider(settings: Settings, transport: httpx.BaseTransport | None = None) -> IdentityProvider:
    """Factory: AUTH_PROVIDER -> implementación."""
    n = (settings.AUTH_PROVIDER or "local").strip().lower()
    if n == "local":
        return LocalJWTProvider(settings)
    if n == "supabase":
        return SupabaseIdentityProvider(settings, transport=transport)
    raise ValueError(f"Unknown auth provider: {n!r}")
