"""Registro perezoso de comandos CLI."""

from __future__ import annotations


def register_commands(app):
    """Registrar los comandos CLI principales evitando ciclos tempranos."""

    from .cli import register_cli

    register_cli(app)
