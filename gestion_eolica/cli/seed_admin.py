"""CLI helper para crear/asegurar un usuario administrador."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from gestion_eolica.services.auth_service import ensure_admin_user


@click.command("seed-admin")
@click.option("--email", required=True, help="Email del administrador a asegurar")
@click.option("--password", required=True, help="Contraseña del administrador")
@click.option(
    "--username",
    required=False,
    help="Username opcional (por defecto se deriva del email)",
)
@with_appcontext
def seed_admin(email: str, password: str, username: str | None = None) -> None:
    """Crear o actualizar un administrador de forma idempotente."""

    try:
        user, created = ensure_admin_user(email=email, password=password, username=username)
    except ValueError:
        click.echo("Email inválido", err=True)
        raise SystemExit(1)
    except SQLAlchemyError as exc:
        current_app.logger.exception("No se pudo crear/actualizar el admin", exc_info=exc)
        click.echo("No se pudo crear/actualizar el usuario administrador.", err=True)
        raise SystemExit(1)

    action = "creado" if created else "actualizado"
    click.echo(f"[seed-admin] OK -> {user.email} ({action})")
