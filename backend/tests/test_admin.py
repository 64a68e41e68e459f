from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy import select

from barulogix.db import utcnow
from barulogix.main import create_app
from barulogix.models.payment import Payment
from barulogix.models.user import User

from conftest import PASSWORD, make_settings


def _bootstrap(client, key="bootstrap-key-123"):
    return client.post("/admin/bootstrap", json={"adminKey": key})


def _admin_header(client):
    assert _bootstrap(client).status_code == 200
    r = client.post("/auth/login", json={"email": "admin@barulogix.com", "password": "Admin12345"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['data']['token']}"}


def test_bootstrap_creates_admin_once(client):
    r = _bootstrap(client)
    assert r.status_code == 200
    admin = r.json()["data"]
    assert admin["role"] == "admin"
    assert admin["plan"] == "enterprise"
    assert admin["subscription_status"] == "active"
    assert r.json()["message"] == "Usuario administrador creado exitosamente"

    r = _bootstrap(client)
    assert r.status_code == 200
    assert r.json()["data"]["id"] == admin["id"]
    assert r.json()["message"] == "Usuario administrador ya existe"


def test_bootstrap_wrong_key_is_401(client):
    r = _bootstrap(client, key="nope")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_ADMIN_KEY"


def test_bootstrap_disabled_without_key(tmp_path):
    app = create_app(make_settings(tmp_path, ADMIN_BOOTSTRAP_KEY=""))
    with TestClient(app) as client:
        r = _bootstrap(client, key="")
        assert r.status_code == 404


def test_admin_lists_users(client):
    headers = _admin_header(client)
    client.post("/auth/register", json={"name": "Cliente Uno", "email": "uno@example.com", "password": PASSWORD})

    r = client.get("/admin/users", headers=headers)
    assert r.status_code == 200
    emails = {u["email"] for u in r.json()["data"]}
    assert emails == {"admin@barulogix.com", "uno@example.com"}


def test_non_admin_is_forbidden(client, auth_header):
    r = client.get("/admin/users", headers=auth_header)
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "ROLE_REQUIRED"


def test_activate_subscription_with_payment(client, db):
    headers = _admin_header(client)
    user = client.post("/auth/register", json={"name": "Cliente Uno", "email": "uno@example.com", "password": PASSWORD}).json()["data"]

    r = client.post(
        f"/admin/users/{user['id']}/subscription",
        json={
            "status": "active",
            "months": 3,
            "plan": "pro",
            "payment": {"amount": "150000", "currency": "COP", "payment_method": "Nequi", "transaction_id": "NQ-1"},
        },
        headers=headers,
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["subscription_status"] == "active"
    assert data["plan"] == "pro"

    u = db.get(User, user["id"])
    expected = utcnow() + timedelta(days=90)
    assert abs((u.subscription_expiry - expected).total_seconds()) < 60

    pay = db.scalar(select(Payment).where(Payment.user_id == user["id"]))
    assert pay.status == "completed"
    assert pay.subscription_months == 3
    assert pay.payment_method == "Nequi"

    # ya activo: puede loguearse
    r = client.post("/auth/login", json={"email": "uno@example.com", "password": PASSWORD})
    assert r.status_code == 200


def test_duplicate_payment_transaction_is_409(client):
    headers = _admin_header(client)
    user = client.post("/auth/register", json={"name": "Cliente Uno", "email": "uno@example.com", "password": PASSWORD}).json()["data"]
    body = {"status": "active", "payment": {"amount": 10, "transaction_id": "TX-1"}}

    assert client.post(f"/admin/users/{user['id']}/subscription", json=body, headers=headers).status_code == 200
    r = client.post(f"/admin/users/{user['id']}/subscription", json=body, headers=headers)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "DUPLICATE_PAYMENT"


def test_deactivate_subscription_blocks_tenant(client, auth_header, db):
    headers = _admin_header(client)
    tenant = db.scalar(select(User).where(User.email == "tenant.a@example.com"))

    r = client.post(f"/admin/users/{tenant.id}/subscription", json={"status": "inactive"}, headers=headers)
    assert r.status_code == 200

    r = client.get("/conductors", headers=auth_header)
    assert r.status_code == 403


def test_subscription_rejects_unknown_status(client):
    headers = _admin_header(client)
    r = client.post("/admin/users/1/subscription", json={"status": "vip"}, headers=headers)
    assert r.status_code == 400


def test_subscription_for_unknown_user_is_404(client):
    headers = _admin_header(client)
    r = client.post("/admin/users/99999/subscription", json={"status": "active"}, headers=headers)
    assert r.status_code == 404
