"""Cuentas (tenants): registro, login y suscripción."""
from __future__ import annotations

import logging
import re
import secrets
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from barulogix.core.errors import Conflict, Forbidden, InvalidInput, NotFound, Unauthorized
from barulogix.core.security import hash_password, verify_password
from barulogix.core.settings import Settings
from barulogix.db import utcnow
from barulogix.models.payment import Payment
from barulogix.models.user import User

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def is_valid_password(password: str) -> bool:
    # mínimo 6 caracteres, con letras y números
    return (
        len(password or "") >= 6
        and any(c.isalpha() for c in password)
        and any(c.isdigit() for c in password)
    )


def register_user(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    company: str | None = None,
    phone: str | None = None,
) -> User:
    email_n = normalize_email(email)
    name_n = (name or "").strip()

    if not email_n or not password or not name_n:
        raise InvalidInput("Email, contraseña y nombre son requeridos")
    if not is_valid_email(email_n):
        raise InvalidInput("Email inválido", code="INVALID_EMAIL")
    if not is_valid_password(password):
        raise InvalidInput(
            "La contraseña debe tener al menos 6 caracteres, incluyendo letras y números",
            code="WEAK_PASSWORD",
        )
    if len(name_n) < 2:
        raise InvalidInput("El nombre debe tener al menos 2 caracteres")

    if db.scalar(select(User.id).where(User.email == email_n)) is not None:
        raise Conflict("Ya existe un usuario con este email", code="DUPLICATE_EMAIL")

    user = User(
        email=email_n,
        password_hash=hash_password(password),
        name=name_n,
        company=(company or "").strip() or None,
        phone=(phone or "").strip() or None,
        role="user",
        subscription_status="pending",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # índice único de email: otro registro concurrente ganó
        db.rollback()
        raise Conflict("Ya existe un usuario con este email", code="DUPLICATE_EMAIL")
    db.refresh(user)
    logger.info("user registered user_id=%s", user.id)
    return user


def ensure_subscription_active(db: Session, user: User) -> None:
    """Levanta Forbidden si la suscripción no está activa.

    Una suscripción activa con fecha de expiración pasada se marca
    ``inactive`` (persistido) antes de rechazar.
    """
    if user.subscription_status != "active":
        raise Forbidden(
            "Suscripción inactiva. Por favor, renueva tu suscripción.",
            code="SUBSCRIPTION_INACTIVE",
        )
    if user.subscription_expiry is not None and utcnow() > user.subscription_expiry:
        user.subscription_status = "inactive"
        db.commit()
        logger.info("subscription expired user_id=%s", user.id)
        raise Forbidden(
            "Suscripción expirada. Por favor, renueva tu suscripción.",
            code="SUBSCRIPTION_EXPIRED",
        )


def authenticate(db: Session, *, email: str, password: str) -> User:
    email_n = normalize_email(email)
    if not email_n or not password:
        raise InvalidInput("Email y contraseña son requeridos")
    if not is_valid_email(email_n):
        raise InvalidInput("Email inválido", code="INVALID_EMAIL")

    user = db.scalar(select(User).where(User.email == email_n))
    # misma respuesta para usuario inexistente y contraseña incorrecta
    if user is None or not verify_password(password, user.password_hash):
        raise Unauthorized("Credenciales inválidas", code="INVALID_CREDENTIALS")

    ensure_subscription_active(db, user)
    return user


def bootstrap_admin(db: Session, settings: Settings, admin_key: str) -> tuple[User, bool]:
    """Crea la cuenta admin configurada. Devuelve (user, created)."""
    expected = settings.ADMIN_BOOTSTRAP_KEY or ""
    if not expected:
        raise NotFound("Bootstrap de administrador deshabilitado")
    if not secrets.compare_digest(admin_key or "", expected):
        raise Unauthorized("Clave de administrador incorrecta", code="INVALID_ADMIN_KEY")
    if not settings.ADMIN_PASSWORD:
        raise InvalidInput("ADMIN_PASSWORD no configurado")

    email = normalize_email(settings.ADMIN_EMAIL)
    existing = db.scalar(select(User).where(User.email == email))
    if existing is not None:
        return existing, False

    now = utcnow()
    admin = User(
        email=email,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        name=settings.ADMIN_NAME,
        company="BaruLogix",
        role="admin",
        plan="enterprise",
        subscription_status="active",
        subscription_expiry=now + timedelta(days=365),
        unlimited_deliveries=True,
        unlimited_conductors=True,
        advanced_reports=True,
        api_access=True,
        can_manage_users=True,
        can_access_reports=True,
        can_manage_payments=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("admin bootstrapped user_id=%s", admin.id)
    return admin, True


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.created_at.desc(), User.id.desc())))


def update_subscription(
    db: Session,
    user_id: int,
    *,
    status: str,
    months: int = 1,
    plan: str | None = None,
    payment: dict | None = None,
) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("Usuario no encontrado")

    user.subscription_status = status
    if plan:
        user.plan = plan
    if status == "active":
        # extiende desde la expiración vigente si todavía no venció
        base = utcnow()
        if user.subscription_expiry is not None and user.subscription_expiry > base:
            base = user.subscription_expiry
        user.subscription_expiry = base + timedelta(days=30 * months)

    if payment is not None:
        db.add(
            Payment(
                user_id=user.id,
                amount=payment["amount"],
                currency=payment.get("currency") or "COP",
                payment_method=payment.get("payment_method") or "Manual",
                transaction_id=payment.get("transaction_id"),
                status="completed",
                subscription_months=months,
            )
        )

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("transaction_id de pago ya registrado", code="DUPLICATE_PAYMENT")
    db.refresh(user)
    logger.info("subscription updated user_id=%s status=%s months=%s", user.id, status, months)
    return user
