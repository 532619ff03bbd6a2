"""Installment plans ("cuotas") for the active rental of a unit."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from sqlalchemy import select, update

from gestion_eolica import metrics
from gestion_eolica.extensions import db
from gestion_eolica.models import Alquiler, Cuota, Eolico
from gestion_eolica.models.cuota import CONCEPTOS
from gestion_eolica.services.common import (
    active_rental_for,
    get_equipment,
    lock_equipment,
    transaction,
    utcnow,
)
from gestion_eolica.services.errors import ConflictError, NotFoundError, ValidationError
from gestion_eolica.utils.money import MAX_MONEY, to_money, truncate_cents

log = logging.getLogger(__name__)

PERIODICIDADES = ("mensual", "semanal", "diaria")
MAX_CUOTAS = 120
DESCRIPTION_MAX_LEN = 120

# Conceptos cuyo monto no se puede deducir de los costos del equipo
EXPLICIT_AMOUNT_CONCEPTS = frozenset({"operativo", "otro"})

_CONCEPT_LABELS = {
    "tarifa": "Tarifa mensual",
    "instalacion": "Instalación",
    "deposito": "Depósito",
    "operativo": "Costo operativo",
    "otro": "Otro",
}


@dataclass(frozen=True)
class PlanRequest:
    concept: str
    number_of_installments: int
    periodicity: str = "mensual"
    first_due_date: date | None = None
    total_amount: Decimal | None = None
    description: str | None = None

    def validate(self) -> None:
        if self.concept not in CONCEPTOS:
            raise ValidationError(f"Field 'concept' must be one of: {', '.join(CONCEPTOS)}.")
        if not 1 <= self.number_of_installments <= MAX_CUOTAS:
            raise ValidationError(
                f"Field 'numberOfInstallments' must be between 1 and {MAX_CUOTAS}."
            )
        if self.periodicity not in PERIODICIDADES:
            raise ValidationError(
                f"Field 'periodicity' must be one of: {', '.join(PERIODICIDADES)}."
            )
        if self.total_amount is not None and self.total_amount <= 0:
            raise ValidationError("Field 'totalAmount' must be greater than zero.")
        if self.total_amount is not None and self.total_amount > MAX_MONEY:
            raise ValidationError(f"Field 'totalAmount' must be at most {MAX_MONEY}.")
        if self.description is not None and len(self.description) > DESCRIPTION_MAX_LEN:
            raise ValidationError(
                f"Field 'description' must have at most {DESCRIPTION_MAX_LEN} characters."
            )
        if self.total_amount is None and self.concept in EXPLICIT_AMOUNT_CONCEPTS:
            raise ValidationError("Amount required for this concept.")


@dataclass(frozen=True)
class PlanResult:
    rental_id: int
    concept: str
    created_count: int
    total_amount: Decimal


@dataclass
class ConceptSummary:
    count: int = 0
    total: Decimal = field(default_factory=lambda: Decimal("0.00"))
    paid: Decimal = field(default_factory=lambda: Decimal("0.00"))

    @property
    def pending(self) -> Decimal:
        return self.total - self.paid

    def to_dict(self) -> dict[str, object]:
        return {
            "count": self.count,
            "total": str(self.total),
            "paid": str(self.paid),
            "pending": str(self.pending),
        }


# --------------------------------------------------------------------------
# Pure helpers
# --------------------------------------------------------------------------


def distribute_amount(total: Decimal, installments: int) -> list[Decimal]:
    """Split ``total`` into ``installments`` amounts that add up exactly.

    Every installment gets ``total / n`` truncated to cents and the last one
    absorbs the remainder, e.g. 100.00 / 3 -> [33.33, 33.33, 33.34].
    """

    if installments < 1:
        raise ValueError("installments must be >= 1")
    total = to_money(total)
    base = truncate_cents(total / installments)
    last = total - base * (installments - 1)
    return [base] * (installments - 1) + [last]


def advance(start: date, periodicity: str, steps: int) -> date:
    if periodicity == "mensual":
        # relativedelta ajusta al último día del mes (31 ene + 1 mes -> 28/29 feb)
        return start + relativedelta(months=steps)
    if periodicity == "semanal":
        return start + timedelta(weeks=steps)
    if periodicity == "diaria":
        return start + timedelta(days=steps)
    raise ValueError(f"unknown periodicity: {periodicity}")


def due_dates(first: date, installments: int, periodicity: str = "mensual") -> list[date]:
    # Siempre desde la primera fecha para no arrastrar el ajuste de fin de mes
    try:
        return [advance(first, periodicity, i) for i in range(installments)]
    except (ValueError, OverflowError):
        # El calendario termina en 9999-12-31
        raise ValidationError(
            "Field 'firstDueDate' is out of range for the requested installments."
        ) from None


def _derive_total(concept: str, installments: int, rental: Alquiler, eolico: Eolico) -> Decimal:
    def pick(snapshot: Decimal | None, fallback: Decimal | None) -> Decimal:
        value = snapshot if snapshot is not None else fallback
        return to_money(value if value is not None else 0)

    if concept == "tarifa":
        total = pick(rental.tarifa_mes, eolico.tarifa_mes) * installments
    elif concept == "instalacion":
        total = pick(rental.costo_instalacion, eolico.costo_instalacion)
    elif concept == "deposito":
        total = pick(rental.deposito, eolico.deposito)
    else:
        raise ValidationError("Amount required for this concept.")

    if total <= 0:
        raise ValidationError(
            "The equipment has no cost configured for this concept; provide 'totalAmount'."
        )
    return to_money(total)


def _build_rows(rental_id: int, request: PlanRequest, total: Decimal, first: date) -> list[Cuota]:
    n = request.number_of_installments
    amounts = distribute_amount(total, n)
    dates = due_dates(first, n, request.periodicity)
    label = _CONCEPT_LABELS[request.concept]
    rows = []
    for number, (amount, due) in enumerate(zip(amounts, dates), start=1):
        rows.append(
            Cuota(
                alquiler_id=rental_id,
                concepto=request.concept,
                numero=number,
                descripcion=request.description or f"{label} {number}/{n}",
                fecha_vencimiento=due,
                monto=amount,
                pagado=False,
            )
        )
    return rows


# --------------------------------------------------------------------------
# Operations
# --------------------------------------------------------------------------


def generate_plan(equipment_id: int, request: PlanRequest) -> PlanResult:
    """Persist the installment plan of ``request.concept`` for the unit's active rental."""

    request.validate()

    with transaction(
        "could not generate installment plan",
        on_integrity=lambda _exc: ConflictError(
            "An installment plan already exists for this concept."
        ),
    ):
        eolico = lock_equipment(equipment_id)
        rental = active_rental_for(equipment_id, for_update=True)
        if rental is None:
            raise NotFoundError("The equipment has no active rental.")

        exists = db.session.execute(
            select(Cuota.id)
            .where(Cuota.alquiler_id == rental.id, Cuota.concepto == request.concept)
            .limit(1)
        ).first()
        if exists is not None:
            raise ConflictError("An installment plan already exists for this concept.")

        if request.total_amount is not None:
            total = to_money(request.total_amount)
        else:
            total = _derive_total(
                request.concept, request.number_of_installments, rental, eolico
            )

        first = request.first_due_date or utcnow().date()
        rows = _build_rows(rental.id, request, total, first)
        db.session.add_all(rows)
        rental_id = rental.id

    metrics.installment_plans_total.labels(concept=request.concept).inc()
    log.info(
        "installment plan generated",
        extra={
            "event": "plan_generated",
            "equipment_id": equipment_id,
            "rental_id": rental_id,
            "concept": request.concept,
        },
    )
    return PlanResult(
        rental_id=rental_id,
        concept=request.concept,
        created_count=len(rows),
        total_amount=total,
    )


def list_installments(equipment_id: int) -> tuple[Alquiler, list[Cuota]]:
    get_equipment(equipment_id)
    rental = active_rental_for(equipment_id)
    if rental is None:
        raise NotFoundError("The equipment has no active rental.")
    cuotas = (
        Cuota.query.filter_by(alquiler_id=rental.id)
        .order_by(Cuota.concepto.asc(), Cuota.numero.asc())
        .all()
    )
    return rental, cuotas


def installment_summary(cuotas: list[Cuota]) -> dict[str, ConceptSummary]:
    summary: dict[str, ConceptSummary] = {}
    for cuota in cuotas:
        item = summary.setdefault(cuota.concepto, ConceptSummary())
        amount = to_money(cuota.monto)
        item.count += 1
        item.total += amount
        if cuota.pagado:
            item.paid += amount
    return summary


def mark_paid(installment_id: int, payment_method: str | None = None, notes: str | None = None) -> Cuota:
    """Flag an unpaid installment as paid.

    The ``pagado = false`` guard lives in the UPDATE itself, so a second
    call matches no row and fails without touching ``fecha_pago``.
    """

    with transaction("could not register the payment"):
        result = db.session.execute(
            update(Cuota)
            .where(Cuota.id == installment_id, Cuota.pagado.is_(False))
            .values(
                pagado=True,
                fecha_pago=utcnow(),
                metodo_pago=payment_method,
                observaciones=notes,
            )
            .execution_options(synchronize_session="fetch")
        )
        if not result.rowcount:
            raise NotFoundError("Installment not found or already paid.")

    cuota = db.session.get(Cuota, installment_id)
    metrics.installments_paid_total.inc()
    log.info(
        "installment paid",
        extra={"event": "installment_paid", "installment_id": installment_id},
    )
    return cuota
