from datetime import datetime

from sqlalchemy import select

from barulogix.models.delivery import Delivery

from conftest import import_packages, make_settings


def test_import_creates_deliveries(client, auth_header, conductor):
    r = import_packages(
        client,
        auth_header,
        [{"tracking": "DRP-0001", "value": 15000}, {"tracking": "DRP-0002", "value": "2500.5"}],
        date="2024-03-10",
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["data"]["created"] == 2
    assert body["data"]["duplicates"] == 0
    assert body["data"]["errors"] == 0

    items = client.get("/deliveries", headers=auth_header).json()["data"]["items"]
    by_tracking = {d["tracking"]: d for d in items}
    assert by_tracking["DRP-0001"]["value"] == 15000.0
    assert by_tracking["DRP-0002"]["value"] == 2500.5
    assert all(d["status"] == 0 for d in items)
    assert all(d["conductor"] == "Juan Perez" for d in items)
    assert all(d["delivery_date"].startswith("2024-03-10") for d in items)


def test_reimport_reports_duplicates_and_returns_200(client, auth_header, conductor):
    import_packages(client, auth_header, [{"tracking": "DRP-0001"}])

    r = import_packages(client, auth_header, [{"tracking": "DRP-0001"}])
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["created"] == 0
    assert data["duplicates"] == 1
    assert data["duplicate_trackings"] == ["DRP-0001"]

    assert client.get("/deliveries", headers=auth_header).json()["data"]["pagination"]["total"] == 1


def test_repeated_tracking_within_batch_counts_as_duplicate(client, auth_header, conductor):
    r = import_packages(client, auth_header, [{"tracking": "DRP-0001"}, {"tracking": " DRP-0001 "}, {"tracking": "DRP-0002"}])
    data = r.json()["data"]
    assert data["created"] == 2
    assert data["duplicates"] == 1


def test_invalid_trackings_are_reported_not_fatal(client, auth_header, conductor):
    r = import_packages(
        client,
        auth_header,
        [{"tracking": "ABC"}, {"tracking": "has space"}, {"tracking": None}, {"tracking": 12345}, {"tracking": "OK-12345"}],
    )
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["created"] == 1
    assert data["errors"] == 4
    assert "Tracking inválido: ABC" in data["error_messages"]


def test_dropi_invalid_values_are_errors(client, auth_header, conductor):
    r = import_packages(
        client,
        auth_header,
        [
            {"tracking": "DRP-0001", "value": "abc"},
            {"tracking": "DRP-0002", "value": -5},
            {"tracking": "DRP-0003", "value": "NaN"},
            {"tracking": "DRP-0004"},
            {"tracking": "DRP-0005", "value": ""},
        ],
    )
    data = r.json()["data"]
    assert data["created"] == 2
    assert data["errors"] == 3
    assert data["error_messages"][0] == "Valor inválido para DRP-0001: abc"

    values = {d["tracking"]: d["value"] for d in client.get("/deliveries", headers=auth_header).json()["data"]["items"]}
    assert values == {"DRP-0004": 0.0, "DRP-0005": 0.0}


def test_shein_temu_value_is_forced_to_zero(client, auth_header, conductor):
    r = import_packages(client, auth_header, [{"tracking": "SHN-0001", "value": 99999}, {"tracking": "SHN-0002", "value": "abc"}], type_="Shein/Temu")
    data = r.json()["data"]
    assert data["created"] == 2
    assert data["errors"] == 0

    items = client.get("/deliveries", headers=auth_header).json()["data"]["items"]
    assert {d["value"] for d in items} == {0.0}
    assert {d["type"] for d in items} == {"Shein/Temu"}


def test_unknown_conductor_is_404(client, auth_header, conductor):
    r = import_packages(client, auth_header, [{"tracking": "DRP-0001"}], conductor="Nadie")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "CONDUCTOR_NOT_FOUND"


def test_invalid_type_is_400(client, auth_header, conductor):
    r = import_packages(client, auth_header, [{"tracking": "DRP-0001"}], type_="Amazon")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_TYPE"


def test_empty_packages_is_400(client, auth_header, conductor):
    r = import_packages(client, auth_header, [])
    assert r.status_code == 400


def test_invalid_date_is_400(client, auth_header, conductor):
    r = import_packages(client, auth_header, [{"tracking": "DRP-0001"}], date="2024-13-45")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_DATE"


def test_missing_fields_are_400(client, auth_header, conductor):
    r = client.post("/deliveries", json={"conductor": "Juan Perez", "packages": []}, headers=auth_header)
    assert r.status_code == 400


def test_too_many_packages_is_400(tmp_path):
    from fastapi.testclient import TestClient

    from barulogix.main import create_app
    from conftest import PASSWORD, activate_user

    app = create_app(make_settings(tmp_path, MAX_IMPORT_PACKAGES=3))
    with TestClient(app) as client:
        client.post("/auth/register", json={"name": "Limite", "email": "limite@example.com", "password": PASSWORD})
        activate_user(app, "limite@example.com")
        token = client.post("/auth/login", json={"email": "limite@example.com", "password": PASSWORD}).json()["data"]["token"]
        headers = {"Authorization": f"Bearer {token}"}
        client.post("/conductors", json={"name": "Juan Perez"}, headers=headers)

        r = import_packages(client, headers, [{"tracking": f"DRP-000{i}"} for i in range(4)])
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "TOO_MANY_PACKAGES"


def test_datetime_delivery_date_is_normalized_to_utc(client, auth_header, conductor, db):
    import_packages(client, auth_header, [{"tracking": "DRP-0001"}], date="2024-03-10T20:30:00-05:00")
    d = db.scalar(select(Delivery).where(Delivery.tracking == "DRP-0001"))
    assert d.delivery_date == datetime(2024, 3, 11, 1, 30)


def test_unique_index_rejects_rows_missed_by_precheck(client, auth_header, conductor, db):
    from barulogix.models.user import User
    from barulogix.services import deliveries as svc

    import_packages(client, auth_header, [{"tracking": "RACE-0001"}])
    tenant_id = db.scalar(select(User.id).where(User.email == "tenant.a@example.com"))

    # simula otro import concurrente que ganó RACE-0001 después del chequeo previo
    rows = [
        {
            "user_id": tenant_id,
            "conductor_id": conductor["id"],
            "tracking": t,
            "type": "Dropi",
            "status": 0,
            "delivery_date": datetime(2024, 3, 10),
            "value": 0,
        }
        for t in ("RACE-0002", "RACE-0001", "RACE-0003")
    ]
    created, rejected = svc._insert_rows(db, rows)
    assert created == 2
    assert rejected == ["RACE-0001"]

    trackings = db.scalars(
        select(Delivery.tracking).where(Delivery.user_id == tenant_id).order_by(Delivery.tracking)
    ).all()
    assert trackings == ["RACE-0001", "RACE-0002", "RACE-0003"]


def test_import_reports_store_rejections_as_duplicates(client, auth_header, conductor, monkeypatch):
    from barulogix.services import deliveries as svc

    import_packages(client, auth_header, [{"tracking": "RACE-0001"}])
    monkeypatch.setattr(svc, "_existing_trackings", lambda db, tenant_id, candidates: set())

    r = import_packages(client, auth_header, [{"tracking": "RACE-0001"}, {"tracking": "RACE-0002"}])
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["created"] == 1
    assert data["duplicates"] == 1
    assert data["duplicate_trackings"] == ["RACE-0001"]

    items = client.get("/deliveries", headers=auth_header).json()["data"]["items"]
    assert sorted(d["tracking"] for d in items) == ["RACE-0001", "RACE-0002"]


def test_malformed_date_suffix_is_400(client, auth_header, conductor):
    for bad in ("2024-03-10garbage", "2024-03-10Tnope"):
        r = import_packages(client, auth_header, [{"tracking": "DRP-0001"}], date=bad)
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "INVALID_DATE"
