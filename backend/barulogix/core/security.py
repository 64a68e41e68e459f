from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.hash import pbkdf2_sha256

from barulogix.core.errors import Unauthorized
from barulogix.core.settings import Settings

_ALGORITHM = "HS256"
_LAB_SECRET: str | None = None


def hash_password(plain: str) -> str:
    return pbkdf2_sha256.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return pbkdf2_sha256.verify(plain, hashed)
    except ValueError:
        # hash con formato desconocido
        return False


def _secret(settings: Settings) -> str:
    global _LAB_SECRET
    sec = (settings.AUTH_JWT_SECRET or "").strip()
    if sec:
        return sec
    if settings.ENV == "prod":
        raise RuntimeError("SECURITY: AUTH_JWT_SECRET obligatorio en ENV=prod")
    # lab sin secreto: uno aleatorio por proceso
    if _LAB_SECRET is None:
        _LAB_SECRET = secrets.token_urlsafe(48)
    return _LAB_SECRET


def create_access_token(settings: Settings, sub: str, claims: Dict[str, Any] | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": sub,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=int(settings.AUTH_JWT_TTL_MIN))).timestamp()),
    }
    if claims:
        payload.update(claims)
    return jwt.encode(payload, _secret(settings), algorithm=_ALGORITHM)


def decode_token(settings: Settings, token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, _secret(settings), algorithms=[_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expirado", code="TOKEN_EXPIRED")
    except jwt.PyJWTError:
        raise Unauthorized("Token inválido", code="TOKEN_INVALID")
