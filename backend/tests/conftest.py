from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from barulogix.core.settings import Settings
from barulogix.db import utcnow
from barulogix.main import create_app
from barulogix.models.user import User

TEST_SECRET = "test-secret-0123456789-abcdefghijklmnop"
PASSWORD = "Clave123"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        ENV="lab",
        AUTH_PROVIDER="local",
        AUTH_JWT_SECRET=TEST_SECRET,
        ADMIN_BOOTSTRAP_KEY="bootstrap-key-123",
        ADMIN_PASSWORD="Admin12345",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture()
def app(settings):
    return create_app(settings)


# cada test tiene su propio sqlite en tmp_path; el lifespan crea las tablas
@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db(app, client):
    s = app.state.database.session()
    yield s
    s.close()


def activate_user(app, email: str, *, days: int = 30, **fields) -> None:
    with app.state.database.session() as s:
        u = s.scalar(select(User).where(User.email == email))
        u.subscription_status = "active"
        u.subscription_expiry = utcnow() + timedelta(days=days)
        for k, v in fields.items():
            setattr(u, k, v)
        s.commit()


@pytest.fixture()
def make_tenant(client, app):
    """Registra, activa y loguea una cuenta; devuelve el header Authorization."""

    def _make(email: str, name: str = "Cuenta Test", **fields) -> dict:
        r = client.post("/auth/register", json={"name": name, "email": email, "password": PASSWORD})
        assert r.status_code == 201, r.text
        activate_user(app, email, **fields)
        r = client.post("/auth/login", json={"email": email, "password": PASSWORD})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['data']['token']}"}

    return _make


@pytest.fixture()
def auth_header(make_tenant):
    return make_tenant("tenant.a@example.com", name="Tenant A")


@pytest.fixture()
def other_auth_header(make_tenant):
    return make_tenant("tenant.b@example.com", name="Tenant B")


@pytest.fixture()
def conductor(client, auth_header):
    r = client.post("/conductors", json={"name": "Juan Perez", "phone": "3001234567"}, headers=auth_header)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def import_packages(client, headers, packages, *, conductor="Juan Perez", type_="Dropi", date=None):
    body = {
        "conductor": conductor,
        "type": type_,
        "deliveryDate": date or utcnow().date().isoformat(),
        "packages": packages,
    }
    return client.post("/deliveries", json=body, headers=headers)
