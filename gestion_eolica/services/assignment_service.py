"""Equipment registry and rental assignment operations.

Every write runs inside :func:`~gestion_eolica.services.common.transaction`:
the equipment row (and the target user row for assignments) is locked first,
the steps execute in order, and a single commit publishes the result. A
failure at any step rolls back all previous steps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from gestion_eolica import metrics
from gestion_eolica.extensions import db
from gestion_eolica.models import Alquiler, Eolico
from gestion_eolica.models.alquiler import ESTADO_ACTIVO
from gestion_eolica.services.common import (
    active_rental_for,
    close_active_rentals,
    get_equipment,
    lock_equipment,
    lock_user,
    transaction,
    utcnow,
)
from gestion_eolica.services.errors import (
    ConflictError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from gestion_eolica.utils.strings import normalize_code

log = logging.getLogger(__name__)

CODE_MIN_LEN = 3
CODE_MAX_LEN = 20

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class Costs:
    tariff: Decimal = ZERO
    install_cost: Decimal = ZERO
    deposit: Decimal = ZERO
    daily_op_cost: Decimal = ZERO


@dataclass(frozen=True)
class CostsUpdate:
    equipment: Eolico
    rental_updated: bool

    @property
    def note(self) -> str | None:
        if self.rental_updated:
            return None
        return "No active rental; only the equipment costs were updated."


def _validate_code(raw: object) -> str:
    code = normalize_code(raw)
    if not CODE_MIN_LEN <= len(code) <= CODE_MAX_LEN:
        raise ValidationError(
            f"Field 'code' must have between {CODE_MIN_LEN} and {CODE_MAX_LEN} characters."
        )
    return code


# --------------------------------------------------------------------------
# Registry
# --------------------------------------------------------------------------


def create_equipment(code: object, costs: Costs | None = None) -> Eolico:
    normalized = _validate_code(code)
    costs = costs or Costs()
    if Eolico.query.filter_by(codigo=normalized).first() is not None:
        raise ConflictError("That equipment code already exists.")

    eolico = Eolico(
        codigo=normalized,
        tarifa_mes=costs.tariff,
        costo_instalacion=costs.install_cost,
        deposito=costs.deposit,
        costo_operativo_dia=costs.daily_op_cost,
        activo=False,
        habilitado=False,
    )
    with transaction(
        "could not create equipment",
        on_integrity=lambda _exc: ConflictError("That equipment code already exists."),
    ):
        db.session.add(eolico)

    log.info(
        "equipment created",
        extra={"event": "equipment_created", "equipment_id": eolico.id},
    )
    return eolico


def list_equipment(search: str | None = None) -> list[Eolico]:
    stmt = select(Eolico).options(joinedload(Eolico.usuario)).order_by(Eolico.id.asc())
    term = normalize_code(search)
    if term:
        stmt = stmt.where(Eolico.codigo.like(f"%{term}%"))
    return list(db.session.execute(stmt).scalars())


def find_by_code(code: object) -> Eolico:
    normalized = _validate_code(code)
    eolico = Eolico.query.filter_by(codigo=normalized).first()
    if eolico is None:
        raise NotFoundError("No equipment exists with that code.")
    return eolico


def list_rentals(equipment_id: int) -> list[Alquiler]:
    get_equipment(equipment_id)
    stmt = (
        select(Alquiler)
        .options(joinedload(Alquiler.usuario))
        .where(Alquiler.eolico_id == equipment_id)
        .order_by(Alquiler.fecha_inicio.desc(), Alquiler.id.desc())
    )
    return list(db.session.execute(stmt).scalars())


# --------------------------------------------------------------------------
# Assignment steps
# --------------------------------------------------------------------------


def _attach_equipment(eolico: Eolico, user_id: int) -> None:
    eolico.usuario_id = user_id
    eolico.activo = True
    eolico.habilitado = True
    db.session.flush()


def _open_rental(eolico: Eolico, user_id: int, started_at: datetime) -> Alquiler:
    rental = Alquiler(
        eolico_id=eolico.id,
        usuario_id=user_id,
        estado=ESTADO_ACTIVO,
        fecha_inicio=started_at,
        tarifa_mes=eolico.tarifa_mes,
        costo_instalacion=eolico.costo_instalacion,
        deposito=eolico.deposito,
    )
    db.session.add(rental)
    db.session.flush()
    return rental


def _assign(eolico: Eolico, user_id: int) -> Alquiler:
    now = utcnow()
    closed_equipment = close_active_rentals(Alquiler.eolico_id == eolico.id, now)
    closed_user = close_active_rentals(Alquiler.usuario_id == user_id, now)
    _attach_equipment(eolico, user_id)
    rental = _open_rental(eolico, user_id, now)
    log.debug(
        "closed %s equipment rental(s) and %s user rental(s)",
        closed_equipment,
        closed_user,
        extra={"event": "rentals_closed", "equipment_id": eolico.id, "user_id": user_id},
    )
    return rental


def assign_by_equipment(equipment_id: int, user_id: int, *, mode: str = "id") -> Alquiler:
    """Hand ``equipment_id`` to ``user_id`` opening a new rental.

    Closes the unit's current rental and any rental the user holds on
    another unit, so both stay with at most one active rental.
    """

    if user_id < 1:
        raise ValidationError("Field 'userId' must be >= 1.")

    with transaction("could not assign equipment"):
        eolico = lock_equipment(equipment_id)
        lock_user(user_id)
        rental = _assign(eolico, user_id)

    metrics.equipment_assignments_total.labels(mode=mode).inc()
    log.info(
        "equipment assigned",
        extra={
            "event": "equipment_assigned",
            "equipment_id": equipment_id,
            "user_id": user_id,
            "rental_id": rental.id,
        },
    )
    return rental


def assign_by_code(code: object, user_id: int) -> Alquiler:
    eolico = find_by_code(code)
    return assign_by_equipment(eolico.id, user_id, mode="code")


def unassign(equipment_id: int) -> int:
    """Detach the unit from its user and finish its active rental.

    Returns how many rentals were closed (0 when the unit was already free).
    """

    with transaction("could not unassign equipment"):
        eolico = lock_equipment(equipment_id)
        eolico.usuario_id = None
        eolico.activo = False
        eolico.habilitado = False
        db.session.flush()
        closed = close_active_rentals(Alquiler.eolico_id == equipment_id, utcnow())

    metrics.equipment_unassignments_total.inc()
    log.info(
        "equipment unassigned",
        extra={"event": "equipment_unassigned", "equipment_id": equipment_id},
    )
    return closed


def toggle_active(equipment_id: int, active: bool) -> Eolico:
    with transaction("could not update equipment state"):
        eolico = lock_equipment(equipment_id)
        if eolico.usuario_id is None:
            raise PreconditionError("Assign this equipment to a user before activating it.")
        eolico.activo = bool(active)

    log.info(
        "equipment toggled",
        extra={"event": "equipment_toggled", "equipment_id": equipment_id},
    )
    return eolico


def update_costs(equipment_id: int, costs: Costs, apply_to_active_rental: bool = False) -> CostsUpdate:
    rental_updated = False
    with transaction("could not update equipment costs"):
        eolico = lock_equipment(equipment_id)
        eolico.tarifa_mes = costs.tariff
        eolico.costo_instalacion = costs.install_cost
        eolico.deposito = costs.deposit
        eolico.costo_operativo_dia = costs.daily_op_cost

        if apply_to_active_rental:
            rental = active_rental_for(equipment_id, for_update=True)
            if rental is not None:
                rental.tarifa_mes = costs.tariff
                rental.costo_instalacion = costs.install_cost
                rental.deposito = costs.deposit
                rental_updated = True

    log.info(
        "equipment costs updated",
        extra={"event": "equipment_costs_updated", "equipment_id": equipment_id},
    )
    return CostsUpdate(equipment=eolico, rental_updated=rental_updated)
