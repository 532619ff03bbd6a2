"""Fábrica de la app Flask para Gestión Eólica."""

from __future__ import annotations

import os
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from flask import Flask

from .config import engine_options, load_config
from .errors import register_error_handlers
from .extensions import db, init_extensions
from .registry import register_blueprints
from .security_headers import set_security_headers
from .telemetry import setup_logging


def _normalize_db_url(raw: str | None) -> str:
    """
    Normaliza la DATABASE_URL para evitar errores:
    - Convierte postgres:// -> postgresql+psycopg://
    - Si es SQLite, elimina cualquier query (?sslmode=...)
    - Si es Postgres, asegura sslmode=require (si no está presente)
    """

    if not raw:
        return "sqlite:///dev.db"

    if raw.startswith("postgres://"):
        raw = raw.replace("postgres://", "postgresql+psycopg://", 1)
    elif raw.startswith("postgresql://"):
        raw = raw.replace("postgresql://", "postgresql+psycopg://", 1)

    parts = urlsplit(raw)
    scheme = parts.scheme

    if scheme.startswith("sqlite"):
        base = raw.split("?", 1)[0]
        base = base.split("#", 1)[0]
        fragment = f"#{parts.fragment}" if parts.fragment else ""
        return f"{base}{fragment}"

    if scheme.startswith("postgresql"):
        query_params = dict(parse_qsl(parts.query))
        query_params.setdefault("sslmode", "require")
        return urlunsplit(
            (
                scheme,
                parts.netloc,
                parts.path,
                urlencode(query_params),
                parts.fragment,
            )
        )

    return raw


def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__)

    app.config.from_object(load_config(config_name))
    app.config.setdefault("LOG_LEVEL", "INFO")

    raw_uri = "" if app.config.get("TESTING") else os.environ.get("DATABASE_URL", "")
    configured_uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
    uri = _normalize_db_url(raw_uri or configured_uri)
    app.config["SQLALCHEMY_DATABASE_URI"] = uri
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options(uri)

    setup_logging(app)

    db_uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
    app.logger.info("DB URI -> %s", db_uri.split("@")[-1])

    if db_uri.startswith("sqlite:///") and ":memory:" not in db_uri:
        os.makedirs(os.path.dirname(db_uri.replace("sqlite:///", "", 1)) or ".", exist_ok=True)

    init_extensions(app)
    set_security_headers(app)
    register_error_handlers(app)

    # Modelos y blueprints
    from . import models  # noqa: F401

    register_blueprints(app)

    from .commands import register_commands

    register_commands(app)

    secret_key = app.config.get("SECRET_KEY", "")
    if not secret_key or len(secret_key) < 32:
        app.logger.warning(
            "SECRET_KEY is shorter than 32 characters. Provide a secure 32+ byte key for production.",
        )

    return app


__all__ = ["create_app", "db"]
