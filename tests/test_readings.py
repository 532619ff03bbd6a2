from datetime import datetime, timedelta

import pytest

from gestion_eolica import db
from gestion_eolica.models import Lectura


@pytest.fixture()
def readings(make_user):
    owner, other = make_user(username="owner"), make_user(username="other")
    base = datetime(2025, 5, 1, 12, 0, 0)
    rows = [
        Lectura(usuario_id=owner.id, voltaje=12.5, bateria=80, consumo=1.2, fecha_lectura=base),
        Lectura(usuario_id=owner.id, voltaje=9.1, bateria=50, consumo=0.8, fecha_lectura=base + timedelta(hours=1)),
        Lectura(usuario_id=other.id, voltaje=12.0, bateria=15, consumo=2.0, fecha_lectura=base + timedelta(hours=2)),
        Lectura(usuario_id=other.id, voltaje=12.2, bateria=90, consumo=2.1, fecha_lectura=base + timedelta(hours=3)),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return owner, other


def test_admin_sees_all_readings_newest_first(client, auth, readings):
    res = client.get("/readings", headers=auth)

    assert res.status_code == 200
    items = res.get_json()["items"]
    assert len(items) == 4
    assert items[0]["battery"] == 90


def test_admin_can_filter_by_user(client, auth, readings):
    owner, _other = readings
    items = client.get(f"/readings?userId={owner.id}", headers=auth).get_json()["items"]
    assert {i["userId"] for i in items} == {owner.id}


def test_user_only_sees_own_readings(client, readings, make_token):
    owner, other = readings
    headers = {"Authorization": f"Bearer {make_token(owner)}"}

    items = client.get(f"/readings?userId={other.id}", headers=headers).get_json()["items"]

    assert len(items) == 2
    assert {i["userId"] for i in items} == {owner.id}


def test_alerts_low_battery_or_voltage(client, auth, readings, make_token):
    owner, _other = readings

    items = client.get("/alerts", headers=auth).get_json()["items"]
    assert [(i["battery"], i["voltage"]) for i in items] == [(15, 12.0), (50, 9.1)]

    headers = {"Authorization": f"Bearer {make_token(owner)}"}
    items = client.get("/alerts", headers=headers).get_json()["items"]
    assert [i["voltage"] for i in items] == [9.1]


def test_readings_require_token(client):
    assert client.get("/readings").status_code == 401
    assert client.get("/alerts").status_code == 401
