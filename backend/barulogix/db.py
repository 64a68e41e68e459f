from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session


class Base(DeclarativeBase):
    pass


def import_all_models() -> None:
    # import explícito de los modelos para registrarlos en Base.metadata
    import barulogix.models.user  # noqa: F401
    import barulogix.models.conductor  # noqa: F401
    import barulogix.models.delivery  # noqa: F401
    import barulogix.models.payment  # noqa: F401
    import barulogix.models.report  # noqa: F401


def _enable_sqlite_fks(dbapi_conn, _record) -> None:
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


class Database:
    """Handle del store: engine + fábrica de sesiones.

    Lo crea ``create_app()`` y vive en ``app.state.database``; ``dispose()``
    se llama al apagar la aplicación.
    """

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.is_sqlite = url.startswith("sqlite")
        kwargs = {}
        if not self.is_sqlite:
            kwargs.update(pool_pre_ping=True, pool_size=5, max_overflow=10, pool_recycle=3600)
        self.engine: Engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False} if self.is_sqlite else {},
            **kwargs,
        )
        if self.is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_fks)
        self.session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False)

    def create_all(self) -> None:
        import_all_models()
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        import_all_models()
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


def utcnow() -> datetime:
    # el backend guarda datetimes naive en UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)
