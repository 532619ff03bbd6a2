"""Centraliza el registro de blueprints de la aplicación."""

from __future__ import annotations

from flask import Blueprint, Flask

from gestion_eolica.api.auth import bp as auth_bp
from gestion_eolica.api.equipment import bp as equipment_bp
from gestion_eolica.api.health import bp as health_bp
from gestion_eolica.api.installments import bp as installments_bp
from gestion_eolica.api.metrics import bp as metrics_bp
from gestion_eolica.api.readings import bp as readings_bp
from gestion_eolica.api.users import bp as users_bp


def register_blueprints(app: Flask) -> dict[str, Blueprint]:
    """Registra todos los blueprints conocidos y devuelve un índice por nombre."""

    entries: list[tuple[Blueprint, dict[str, object]]] = [
        (auth_bp, {}),
        (users_bp, {}),
        (equipment_bp, {}),
        (installments_bp, {}),
        (readings_bp, {}),
        (metrics_bp, {}),
        (health_bp, {}),
    ]

    registry: dict[str, Blueprint] = {}
    for blueprint, options in entries:
        app.register_blueprint(blueprint, **options)
        registry[blueprint.name] = blueprint

    return registry
