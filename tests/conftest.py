import sys
from decimal import Decimal
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from gestion_eolica import create_app, db
from gestion_eolica.extensions import limiter
from gestion_eolica.models import User
from gestion_eolica.security.jwt import encode_jwt
from gestion_eolica.services.assignment_service import Costs, create_equipment


@pytest.fixture()
def app():
    flask_app = create_app("testing")

    with flask_app.app_context():
        db.create_all()
        try:
            yield flask_app
        finally:
            db.session.remove()
            db.drop_all()
            try:
                limiter.reset()
            except Exception:
                pass


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def make_user(app):
    counter = {"n": 0}

    def _mk(
        username: str | None = None,
        email: str | None = None,
        password: str = "secret123",
        role: str = "user",
    ) -> User:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(username=username, email=email or f"{username}@example.com", role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _mk


@pytest.fixture()
def make_token(app):
    def _token(user: User) -> str:
        return encode_jwt({"sub": user.id, "role": user.role, "username": user.username})

    return _token


@pytest.fixture()
def admin_user(make_user):
    return make_user(username="admin", email="admin@example.com", password="admin123", role="admin")


@pytest.fixture()
def admin_token(admin_user, make_token):
    return make_token(admin_user)


@pytest.fixture()
def auth(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture()
def make_equipment(app):
    counter = {"n": 0}

    def _mk(
        code: str | None = None,
        tariff: str = "50.00",
        install_cost: str = "300.00",
        deposit: str = "100.00",
        daily_op_cost: str = "2.50",
    ):
        counter["n"] += 1
        costs = Costs(
            tariff=Decimal(tariff),
            install_cost=Decimal(install_cost),
            deposit=Decimal(deposit),
            daily_op_cost=Decimal(daily_op_cost),
        )
        return create_equipment(code or f"EO-{counter['n']:03d}", costs)

    return _mk
