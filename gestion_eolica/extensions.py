"""Extensiones compartidas para autenticación y utilidades globales."""

from __future__ import annotations

from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

bcrypt = Bcrypt()
cors = CORS()
migrate = Migrate()

# Base de datos
db = SQLAlchemy()

# Rate limiting (lazy init, se inicializa en create_app)
limiter = Limiter(key_func=get_remote_address, headers_enabled=True, default_limits=[])


def init_extensions(app):
    """Inicializa las extensiones sobre la app ya configurada."""
    db.init_app(app)
    # Vincula Flask-Migrate/Alembic a la app y al objeto db
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    limiter.init_app(app)
    cors.init_app(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGIN", "*")}},
    )
