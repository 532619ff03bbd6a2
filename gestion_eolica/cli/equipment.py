from __future__ import annotations

import click
from flask.cli import with_appcontext

from gestion_eolica.services.assignment_service import Costs, create_equipment
from gestion_eolica.services.errors import ServiceError
from gestion_eolica.utils.money import MAX_MONEY, to_money


@click.command("create-equipment")
@click.argument("code")
@click.option("--tariff", type=click.FLOAT, default=0.0, show_default=True)
@click.option("--install-cost", type=click.FLOAT, default=0.0, show_default=True)
@click.option("--deposit", type=click.FLOAT, default=0.0, show_default=True)
@click.option("--daily-op-cost", type=click.FLOAT, default=0.0, show_default=True)
@with_appcontext
def create_equipment_command(
    code: str,
    tariff: float,
    install_cost: float,
    deposit: float,
    daily_op_cost: float,
) -> None:
    """Registrar un eólico nuevo (sin asignar)."""

    try:
        costs = Costs(
            tariff=to_money(tariff),
            install_cost=to_money(install_cost),
            deposit=to_money(deposit),
            daily_op_cost=to_money(daily_op_cost),
        )
    except ValueError:
        click.echo("[create-equipment] Montos inválidos", err=True)
        raise SystemExit(1)
    if max(costs.tariff, costs.install_cost, costs.deposit, costs.daily_op_cost) > MAX_MONEY:
        click.echo(f"[create-equipment] Los montos no pueden superar {MAX_MONEY}", err=True)
        raise SystemExit(1)

    try:
        eolico = create_equipment(code, costs)
    except ServiceError as exc:
        click.echo(f"[create-equipment] {exc.message}", err=True)
        raise SystemExit(1)

    click.echo(f"[create-equipment] OK -> {eolico.codigo} (id={eolico.id})")
