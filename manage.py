"""Entrada de CLI: ``python manage.py seed-admin --email ... --password ...``."""

from flask.cli import FlaskGroup

from gestion_eolica import create_app

cli = FlaskGroup(create_app=create_app)


if __name__ == "__main__":
    cli()
