"""Comandos personalizados para la CLI de Flask."""

from __future__ import annotations

from .equipment import create_equipment_command
from .seed_admin import seed_admin


def register_cli(app):
    app.cli.add_command(seed_admin)
    app.cli.add_command(create_equipment_command)


__all__ = ["register_cli"]
