from conftest import import_packages


def _create(client, headers, name, **extra):
    return client.post("/conductors", json={"name": name, **extra}, headers=headers)


def test_create_and_list_conductors(client, auth_header):
    r = _create(client, auth_header, "  Zoe Diaz ", email="ZOE@Example.com", vehicleType="moto", licensePlate="abc12d")
    assert r.status_code == 201
    c = r.json()["data"]
    assert c["name"] == "Zoe Diaz"
    assert c["email"] == "zoe@example.com"
    assert c["vehicle_type"] == "moto"
    assert c["license_plate"] == "ABC12D"
    assert c["is_active"] is True

    assert _create(client, auth_header, "Ana Gomez").status_code == 201

    r = client.get("/conductors", headers=auth_header)
    assert r.status_code == 200
    names = [x["name"] for x in r.json()["data"]]
    assert names == ["Ana Gomez", "Zoe Diaz"]


def test_create_conductor_requires_name(client, auth_header):
    r = _create(client, auth_header, " J ")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_INPUT"


def test_duplicate_active_name_is_409(client, auth_header, conductor):
    r = _create(client, auth_header, "Juan Perez")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "DUPLICATE_CONDUCTOR"


def test_get_conductor(client, auth_header, conductor):
    r = client.get(f"/conductors/{conductor['id']}", headers=auth_header)
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Juan Perez"

    r = client.get("/conductors/999999", headers=auth_header)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "CONDUCTOR_NOT_FOUND"


def test_update_conductor(client, auth_header, conductor):
    r = client.patch(
        f"/conductors/{conductor['id']}",
        json={"name": "Juan P. Perez", "licensePlate": "xyz987"},
        headers=auth_header,
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Juan P. Perez"
    assert data["license_plate"] == "XYZ987"
    # campos no enviados no se tocan
    assert data["phone"] == "3001234567"


def test_update_conductor_rename_to_taken_name_is_409(client, auth_header, conductor):
    other = _create(client, auth_header, "Ana Gomez").json()["data"]
    r = client.patch(f"/conductors/{other['id']}", json={"name": "Juan Perez"}, headers=auth_header)
    assert r.status_code == 409


def test_rename_keeps_deliveries_attached(client, auth_header, conductor):
    import_packages(client, auth_header, [{"tracking": "TRK0001", "value": 5}])
    client.patch(f"/conductors/{conductor['id']}", json={"name": "Juan Renombrado"}, headers=auth_header)

    r = client.get("/deliveries", params={"conductor": "Juan Renombrado"}, headers=auth_header)
    items = r.json()["data"]["items"]
    assert [d["tracking"] for d in items] == ["TRK0001"]
    assert items[0]["conductor"] == "Juan Renombrado"


def test_deactivate_keeps_deliveries_by_default(client, auth_header, conductor):
    r = import_packages(client, auth_header, [{"tracking": "TRK0001"}, {"tracking": "TRK0002"}])
    assert r.json()["data"]["created"] == 2

    r = client.delete("/conductors", params={"id": conductor["id"]}, headers=auth_header)
    assert r.status_code == 200
    assert r.json()["data"] == {"id": conductor["id"], "deleted_deliveries": 0}

    assert client.get("/conductors", headers=auth_header).json()["data"] == []

    # el historial del conductor inactivo sigue consultable
    r = client.get("/deliveries", params={"conductor": "Juan Perez"}, headers=auth_header)
    assert r.json()["data"]["pagination"]["total"] == 2


def test_deactivate_with_cascade_deletes_deliveries(client, auth_header, conductor):
    import_packages(client, auth_header, [{"tracking": "TRK0001"}, {"tracking": "TRK0002"}])

    r = client.delete(
        "/conductors",
        params={"id": conductor["id"], "deleteDeliveries": "true"},
        headers=auth_header,
    )
    assert r.status_code == 200
    assert r.json()["data"]["deleted_deliveries"] == 2

    r = client.get("/deliveries", headers=auth_header)
    assert r.json()["data"]["pagination"]["total"] == 0


def test_name_is_reusable_after_deactivation(client, auth_header, conductor):
    client.delete("/conductors", params={"id": conductor["id"]}, headers=auth_header)
    r = _create(client, auth_header, "Juan Perez")
    assert r.status_code == 201
    assert r.json()["data"]["id"] != conductor["id"]


def test_inactive_conductor_cannot_receive_imports(client, auth_header, conductor):
    client.delete("/conductors", params={"id": conductor["id"]}, headers=auth_header)
    r = import_packages(client, auth_header, [{"tracking": "TRK0001"}])
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "CONDUCTOR_NOT_FOUND"


def test_deactivate_requires_id(client, auth_header):
    r = client.delete("/conductors", headers=auth_header)
    assert r.status_code == 400


def test_deactivate_unknown_conductor_is_404(client, auth_header):
    r = client.delete("/conductors", params={"id": 4242}, headers=auth_header)
    assert r.status_code == 404
