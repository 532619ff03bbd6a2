from gestion_eolica import db
from gestion_eolica.models import AuditoriaUsuario, BitacoraAcceso, Lectura, User
from gestion_eolica.services import assignment_service


def test_list_users_with_active_code(client, auth, make_user, make_equipment):
    renter = make_user(username="renter")
    make_user(username="idle")
    eolico = make_equipment(code="EO-321")
    assignment_service.assign_by_equipment(eolico.id, renter.id)

    res = client.get("/users", headers=auth)

    assert res.status_code == 200
    body = res.get_json()
    by_name = {u["username"]: u for u in body["items"]}
    assert by_name["renter"]["activeEquipmentCode"] == "EO-321"
    assert by_name["idle"]["activeEquipmentCode"] is None
    assert body["meta"]["total"] == 3


def test_list_users_search_and_pagination(client, auth, make_user):
    for name in ("ana", "anabel", "bruno"):
        make_user(username=name)

    res = client.get("/users?q=ana&per_page=1&page=2", headers=auth)

    body = res.get_json()
    assert body["meta"]["total"] == 2
    assert body["meta"]["page"] == 2
    assert [u["username"] for u in body["items"]] == ["anabel"]


def test_create_user(client, auth):
    payload = {"username": "nuevo", "email": "Nuevo@Example.com", "password": "secret123"}

    res = client.post("/users", json=payload, headers=auth)
    assert res.status_code == 201
    user = res.get_json()["user"]
    assert user["email"] == "nuevo@example.com"
    assert user["role"] == "user"

    assert client.post("/users", json=payload, headers=auth).status_code == 409


def test_create_user_validation(client, auth):
    base = {"username": "valido", "email": "ok@example.com", "password": "secret123"}
    assert client.post("/users", json={**base, "email": "bad"}, headers=auth).status_code == 400
    assert client.post("/users", json={**base, "password": "123"}, headers=auth).status_code == 400
    assert client.post("/users", json={**base, "role": "root"}, headers=auth).status_code == 400
    assert client.post("/users", json={**base, "username": "x"}, headers=auth).status_code == 400


def test_users_require_admin(client, make_user, make_token):
    user = make_user()
    headers = {"Authorization": f"Bearer {make_token(user)}"}
    assert client.get("/users", headers=headers).status_code == 403
    assert client.post("/users", json={}, headers=headers).status_code == 403


def test_users_export_csv(client, auth, make_user):
    make_user(username="beto", email="beto@example.com")

    res = client.get("/users/export.csv", headers=auth)

    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    lines = res.get_data(as_text=True).strip().splitlines()
    assert lines[0] == "id,username,email,full_name,phone,role,created_at"
    assert any("beto@example.com" in line for line in lines[1:])


def test_create_user_writes_audit_row(client, auth, admin_user):
    payload = {"username": "auditado", "email": "auditado@example.com", "password": "secret123"}

    user = client.post("/users", json=payload, headers=auth).get_json()["user"]

    rows = AuditoriaUsuario.query.filter_by(objetivo_id=user["id"]).all()
    assert [r.accion for r in rows] == ["CREAR"]
    assert rows[0].actor_id == admin_user.id
    assert rows[0].detalle == {"username": "auditado", "role": "user"}


def test_get_user_detail(client, auth, make_user, make_equipment):
    renter = make_user(username="detalle")
    eolico = make_equipment(code="EO-777")
    assignment_service.assign_by_equipment(eolico.id, renter.id)

    res = client.get(f"/users/{renter.id}", headers=auth)

    assert res.status_code == 200
    body = res.get_json()["user"]
    assert body["username"] == "detalle"
    assert body["activeEquipmentCode"] == "EO-777"
    assert client.get("/users/9999", headers=auth).status_code == 404


def test_update_user(client, auth, admin_user, make_user):
    user = make_user(username="editable")

    res = client.put(
        f"/users/{user.id}",
        json={"email": "Nuevo.Correo@Example.com", "fullName": "Edith Able", "role": "ADMIN"},
        headers=auth,
    )

    assert res.status_code == 200
    body = res.get_json()["user"]
    assert body["email"] == "nuevo.correo@example.com"
    assert body["fullName"] == "Edith Able"
    assert body["role"] == "admin"
    assert body["phone"] is None

    audit = AuditoriaUsuario.query.filter_by(objetivo_id=user.id, accion="ACTUALIZAR").one()
    assert audit.actor_id == admin_user.id
    assert audit.detalle == {"fields": ["email", "full_name", "role"], "role": "admin"}


def test_update_user_can_deactivate(client, auth, make_user):
    user = make_user(username="inactivo")

    res = client.put(f"/users/{user.id}", json={"isActive": False}, headers=auth)

    assert res.status_code == 200
    assert res.get_json()["user"]["isActive"] is False
    assert db.session.get(User, user.id).is_active is False


def test_update_user_validation(client, auth, make_user):
    make_user(username="ocupado", email="ocupado@example.com")
    user = make_user(username="cambiante")
    url = f"/users/{user.id}"

    res = client.put(url, json={"email": "ocupado@example.com"}, headers=auth)
    assert res.status_code == 409
    assert res.get_json()["error"]["kind"] == "conflict"

    assert client.put(url, json={"email": "bad"}, headers=auth).status_code == 400
    assert client.put(url, json={"role": "root"}, headers=auth).status_code == 400
    assert client.put(url, json={"isActive": "quizas"}, headers=auth).status_code == 400
    assert client.put("/users/9999", json={"phone": "555"}, headers=auth).status_code == 404

    assert db.session.get(User, user.id).email == "cambiante@example.com"
    assert AuditoriaUsuario.query.filter_by(objetivo_id=user.id).count() == 0


def test_admin_cannot_demote_or_deactivate_self(client, auth, admin_user):
    url = f"/users/{admin_user.id}"

    for body in ({"role": "user"}, {"isActive": False}):
        res = client.put(url, json=body, headers=auth)
        assert res.status_code == 400
        assert res.get_json()["error"]["kind"] == "precondition"

    assert db.session.get(User, admin_user.id).role == "admin"
    # Editar el propio perfil sí está permitido
    assert client.put(url, json={"phone": "555-0101"}, headers=auth).status_code == 200


def test_delete_user(client, auth, admin_user, make_user):
    user = make_user(username="borrable", email="borrable@example.com")
    db.session.add(Lectura(usuario_id=user.id, voltaje=12.5, bateria=80.0, consumo=1.2))
    db.session.add(
        BitacoraAcceso(cuenta_id=user.id, usuario_intento="borrable", exito=True, motivo="ok")
    )
    db.session.commit()
    user_id = user.id

    res = client.delete(f"/users/{user_id}", headers=auth)

    assert res.status_code == 200
    assert res.get_json()["message"] == "User deleted."
    assert db.session.get(User, user_id) is None
    assert Lectura.query.filter_by(usuario_id=user_id).count() == 0
    assert BitacoraAcceso.query.filter_by(usuario_intento="borrable").one().cuenta_id is None

    audit = AuditoriaUsuario.query.filter_by(objetivo_id=user_id, accion="ELIMINAR").one()
    assert audit.actor_id == admin_user.id
    assert audit.detalle == {"username": "borrable", "email": "borrable@example.com"}

    assert client.delete(f"/users/{user_id}", headers=auth).status_code == 404


def test_delete_user_rules(client, auth, admin_user, make_user, make_equipment):
    renter = make_user(username="arrendatario")
    eolico = make_equipment()
    assignment_service.assign_by_equipment(eolico.id, renter.id)

    res = client.delete(f"/users/{renter.id}", headers=auth)
    assert res.status_code == 409
    assert res.get_json()["error"]["kind"] == "conflict"
    assert db.session.get(User, renter.id) is not None

    res = client.delete(f"/users/{admin_user.id}", headers=auth)
    assert res.status_code == 400
    assert res.get_json()["error"]["kind"] == "precondition"
    assert AuditoriaUsuario.query.filter_by(accion="ELIMINAR").count() == 0


def test_user_management_requires_admin(client, make_user, make_token):
    user = make_user()
    other = make_user()
    headers = {"Authorization": f"Bearer {make_token(user)}"}

    assert client.get(f"/users/{other.id}", headers=headers).status_code == 403
    assert client.put(f"/users/{other.id}", json={}, headers=headers).status_code == 403
    assert client.delete(f"/users/{other.id}", headers=headers).status_code == 403
    assert client.get("/users/report.pdf", headers=headers).status_code == 403
    assert client.delete(f"/users/{other.id}").status_code == 401


def test_users_report_pdf(client, auth, make_user):
    for n in range(70):
        make_user(username=f"cliente{n:02d}")

    res = client.get("/users/report.pdf", headers=auth)

    assert res.status_code == 200
    assert res.mimetype == "application/pdf"
    assert res.get_data().startswith(b"%PDF")
    assert "reporte_usuarios.pdf" in res.headers["Content-Disposition"]
