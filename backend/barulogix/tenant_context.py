from sqlalchemy import text
from sqlalchemy.orm import Session


def set_tenant_on_session(db: Session, tenant_id: int) -> None:
    """
    Define el tenant_id en la sesión activa.

    - Postgres: SET app.tenant_id = <id> (para RLS / policies)
    - SQLite (lab): se guarda en db.info["tenant_id"]

    Las consultas igual filtran por user_id explícitamente.
    """
    dialect = db.get_bind().dialect.name
    if str(dialect).startswith("postgres"):
        db.execute(text("SELECT set_config('app.tenant_id', :tid, false)"), {"tid": str(tenant_id)})
    db.info["tenant_id"] = tenant_id


def current_tenant_id(db: Session) -> int | None:
    return db.info.get("tenant_id")
