import pytest


@pytest.fixture()
def rented(client, auth, make_user, make_equipment):
    user = make_user(username="carla")
    eolico = make_equipment(code="EO-900", tariff="50.00")
    res = client.put(f"/equipment/{eolico.id}/assign", json={"userId": user.id}, headers=auth)
    assert res.status_code == 200
    return eolico


def _generate(client, auth, equipment_id, **body):
    return client.post(f"/equipment/{equipment_id}/installments/generate", json=body, headers=auth)


def test_generate_plan_with_explicit_amount(client, auth, rented):
    res = _generate(
        client,
        auth,
        rented.id,
        concept="otro",
        numberOfInstallments=3,
        totalAmount="100",
        firstDueDate="2025-01-31",
    )

    assert res.status_code == 201
    body = res.get_json()
    assert body["createdCount"] == 3
    assert body["totalAmount"] == "100.00"

    res = client.get(f"/equipment/{rented.id}/installments", headers=auth)
    assert res.status_code == 200
    payload = res.get_json()
    assert payload["rental"]["code"] == "EO-900"
    assert [i["amount"] for i in payload["installments"]] == ["33.33", "33.33", "33.34"]
    assert [i["dueDate"] for i in payload["installments"]] == [
        "2025-01-31",
        "2025-02-28",
        "2025-03-31",
    ]
    assert payload["summary"]["otro"]["total"] == "100.00"
    assert payload["summary"]["otro"]["pending"] == "100.00"


def test_generate_tariff_plan_derives_total(client, auth, rented):
    res = _generate(client, auth, rented.id, concept="tarifa", numberOfInstallments=6, periodicity="mensual")
    assert res.status_code == 201
    assert res.get_json()["totalAmount"] == "300.00"


def test_generate_duplicate_is_conflict(client, auth, rented):
    assert _generate(client, auth, rented.id, concept="tarifa", numberOfInstallments=2).status_code == 201
    res = _generate(client, auth, rented.id, concept="tarifa", numberOfInstallments=2)
    assert res.status_code == 409
    assert res.get_json()["error"]["kind"] == "conflict"


@pytest.mark.parametrize(
    "body",
    [
        {"concept": "operativo", "numberOfInstallments": 3},
        {"concept": "tarifa", "numberOfInstallments": 0},
        {"concept": "tarifa", "numberOfInstallments": 121},
        {"concept": "tarifa"},
        {"concept": "nada", "numberOfInstallments": 1},
        {"concept": "tarifa", "numberOfInstallments": 1, "firstDueDate": "31/01/2025"},
        {"concept": "otro", "numberOfInstallments": 1, "totalAmount": "-5"},
        {"concept": "tarifa", "numberOfInstallments": 1, "periodicity": "anual"},
    ],
)
def test_generate_validation(client, auth, rented, body):
    res = client.post(f"/equipment/{rented.id}/installments/generate", json=body, headers=auth)
    assert res.status_code == 400


def test_generate_without_active_rental(client, auth, make_equipment):
    eolico = make_equipment()
    res = _generate(client, auth, eolico.id, concept="tarifa", numberOfInstallments=2)
    assert res.status_code == 404
    assert client.get(f"/equipment/{eolico.id}/installments", headers=auth).status_code == 404


def test_pay_installment_once(client, auth, rented):
    _generate(client, auth, rented.id, concept="deposito", numberOfInstallments=2)
    items = client.get(f"/equipment/{rented.id}/installments", headers=auth).get_json()["installments"]
    target = items[0]["id"]

    res = client.put(f"/installments/{target}/pay", json={"paymentMethod": "transferencia"}, headers=auth)
    assert res.status_code == 200
    installment = res.get_json()["installment"]
    assert installment["paid"] is True
    assert installment["paymentMethod"] == "transferencia"
    assert installment["paidAt"]

    again = client.put(f"/installments/{target}/pay", json={}, headers=auth)
    assert again.status_code == 404
    assert client.put("/installments/999/pay", headers=auth).status_code == 404

    summary = client.get(f"/equipment/{rented.id}/installments", headers=auth).get_json()["summary"]
    assert summary["deposito"]["paid"] == "50.00"


def test_export_csv(client, auth, rented):
    _generate(client, auth, rented.id, concept="otro", numberOfInstallments=2, totalAmount="10")

    res = client.get(f"/equipment/{rented.id}/installments/export.csv", headers=auth)

    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert "cuotas_EO-900.csv" in res.headers["Content-Disposition"]
    lines = res.get_data(as_text=True).strip().splitlines()
    assert lines[0].startswith("id,concept,number")
    assert len(lines) == 3
    assert ",5.00," in lines[1]


def test_pdf(client, auth, rented):
    _generate(client, auth, rented.id, concept="tarifa", numberOfInstallments=3)

    res = client.get(f"/equipment/{rented.id}/installments/pdf", headers=auth)

    assert res.status_code == 200
    assert res.mimetype == "application/pdf"
    assert res.data.startswith(b"%PDF")
    assert res.headers.get("Cache-Control") == "no-store"


def test_pdf_requires_active_rental(client, auth, make_equipment):
    eolico = make_equipment()
    assert client.get(f"/equipment/{eolico.id}/installments/pdf", headers=auth).status_code == 404


@pytest.mark.parametrize("amount", ["1e30", "10000000000", "1e-40x"])
def test_generate_rejects_unrepresentable_amount(client, auth, rented, amount):
    res = _generate(client, auth, rented.id, concept="otro", numberOfInstallments=2, totalAmount=amount)
    assert res.status_code == 400
    assert res.get_json()["error"]["kind"] == "validation"
    assert client.get(f"/equipment/{rented.id}/installments", headers=auth).get_json()["installments"] == []


def test_generate_first_due_date_at_end_of_calendar(client, auth, rented):
    res = _generate(
        client,
        auth,
        rented.id,
        concept="otro",
        numberOfInstallments=2,
        totalAmount="10",
        firstDueDate="9999-12-15",
    )
    assert res.status_code == 400
    assert "firstDueDate" in res.get_json()["error"]["message"]
    assert client.get(f"/equipment/{rented.id}/installments", headers=auth).get_json()["installments"] == []
