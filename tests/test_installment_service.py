from datetime import date
from decimal import Decimal

import pytest

from gestion_eolica import db
from gestion_eolica.models import Cuota
from gestion_eolica.services import assignment_service, installment_service
from gestion_eolica.services.errors import ConflictError, NotFoundError, ValidationError
from gestion_eolica.services.installment_service import PlanRequest


@pytest.fixture()
def rented(make_user, make_equipment):
    user = make_user()
    eolico = make_equipment(tariff="50.00", install_cost="300.00", deposit="100.00")
    rental = assignment_service.assign_by_equipment(eolico.id, user.id)
    return eolico, rental


def test_explicit_total_is_split_exactly(rented):
    eolico, rental = rented
    request = PlanRequest(
        concept="otro",
        number_of_installments=3,
        first_due_date=date(2025, 1, 31),
        total_amount=Decimal("100.00"),
    )

    result = installment_service.generate_plan(eolico.id, request)

    assert result.created_count == 3
    assert result.total_amount == Decimal("100.00")
    assert result.rental_id == rental.id
    rows = Cuota.query.filter_by(alquiler_id=rental.id).order_by(Cuota.numero).all()
    assert [r.monto for r in rows] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert [r.fecha_vencimiento for r in rows] == [
        date(2025, 1, 31),
        date(2025, 2, 28),
        date(2025, 3, 31),
    ]
    assert [r.numero for r in rows] == [1, 2, 3]
    assert all(r.pagado is False for r in rows)
    assert rows[0].descripcion == "Otro 1/3"


def test_tariff_total_is_monthly_rate_times_installments(rented):
    eolico, rental = rented

    result = installment_service.generate_plan(
        eolico.id, PlanRequest(concept="tarifa", number_of_installments=12)
    )

    assert result.total_amount == Decimal("600.00")
    rows = Cuota.query.filter_by(alquiler_id=rental.id, concepto="tarifa").all()
    assert len(rows) == 12
    assert {r.monto for r in rows} == {Decimal("50.00")}


def test_installation_and_deposit_use_snapshot(rented):
    eolico, _rental = rented

    inst = installment_service.generate_plan(
        eolico.id, PlanRequest(concept="instalacion", number_of_installments=3)
    )
    dep = installment_service.generate_plan(
        eolico.id, PlanRequest(concept="deposito", number_of_installments=1)
    )

    assert inst.total_amount == Decimal("300.00")
    assert dep.total_amount == Decimal("100.00")


def test_custom_description_is_used(rented):
    eolico, rental = rented
    installment_service.generate_plan(
        eolico.id,
        PlanRequest(concept="deposito", number_of_installments=2, description="Garantía"),
    )
    descriptions = {c.descripcion for c in Cuota.query.filter_by(alquiler_id=rental.id)}
    assert descriptions == {"Garantía"}


def test_duplicate_plan_for_concept_is_rejected(rented):
    eolico, rental = rented
    request = PlanRequest(concept="tarifa", number_of_installments=2)
    installment_service.generate_plan(eolico.id, request)

    with pytest.raises(ConflictError):
        installment_service.generate_plan(eolico.id, request)

    assert Cuota.query.filter_by(alquiler_id=rental.id).count() == 2


@pytest.mark.parametrize("concept", ["operativo", "otro"])
def test_explicit_concepts_need_amount(rented, concept):
    eolico, _rental = rented
    with pytest.raises(ValidationError):
        installment_service.generate_plan(
            eolico.id, PlanRequest(concept=concept, number_of_installments=3)
        )
    assert Cuota.query.count() == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"concept": "alquiler", "number_of_installments": 1},
        {"concept": "tarifa", "number_of_installments": 0},
        {"concept": "tarifa", "number_of_installments": 121},
        {"concept": "tarifa", "number_of_installments": 1, "periodicity": "anual"},
        {"concept": "otro", "number_of_installments": 1, "total_amount": Decimal("0")},
    ],
)
def test_invalid_requests(rented, kwargs):
    eolico, _rental = rented
    with pytest.raises(ValidationError):
        installment_service.generate_plan(eolico.id, PlanRequest(**kwargs))


def test_zero_cost_equipment_needs_amount(make_user, make_equipment):
    user = make_user()
    eolico = make_equipment(tariff="0", install_cost="0", deposit="0")
    assignment_service.assign_by_equipment(eolico.id, user.id)

    with pytest.raises(ValidationError):
        installment_service.generate_plan(
            eolico.id, PlanRequest(concept="instalacion", number_of_installments=2)
        )


def test_no_active_rental(make_equipment):
    eolico = make_equipment()
    with pytest.raises(NotFoundError):
        installment_service.generate_plan(
            eolico.id, PlanRequest(concept="tarifa", number_of_installments=2)
        )
    with pytest.raises(NotFoundError):
        installment_service.list_installments(eolico.id)


def test_new_rental_starts_without_plans(rented, make_user):
    eolico, _rental = rented
    installment_service.generate_plan(
        eolico.id, PlanRequest(concept="tarifa", number_of_installments=2)
    )
    assignment_service.assign_by_equipment(eolico.id, make_user().id)

    result = installment_service.generate_plan(
        eolico.id, PlanRequest(concept="tarifa", number_of_installments=2)
    )
    assert result.created_count == 2


def test_mark_paid_once(rented):
    eolico, _rental = rented
    installment_service.generate_plan(
        eolico.id, PlanRequest(concept="deposito", number_of_installments=2)
    )
    _rental, cuotas = installment_service.list_installments(eolico.id)
    target = cuotas[0]

    paid = installment_service.mark_paid(target.id, payment_method="efectivo", notes="recibo 12")

    assert paid.pagado is True
    assert paid.fecha_pago is not None
    assert paid.metodo_pago == "efectivo"
    first_paid_at = paid.fecha_pago

    with pytest.raises(NotFoundError):
        installment_service.mark_paid(target.id)

    db.session.expire_all()
    again = db.session.get(Cuota, target.id)
    assert again.fecha_pago == first_paid_at
    assert again.metodo_pago == "efectivo"


def test_mark_paid_unknown(app):
    with pytest.raises(NotFoundError):
        installment_service.mark_paid(4242)


def test_summary_per_concept(rented):
    eolico, _rental = rented
    installment_service.generate_plan(
        eolico.id,
        PlanRequest(concept="otro", number_of_installments=3, total_amount=Decimal("100.00")),
    )
    _rental, cuotas = installment_service.list_installments(eolico.id)
    installment_service.mark_paid(cuotas[0].id)

    _rental, cuotas = installment_service.list_installments(eolico.id)
    summary = installment_service.installment_summary(cuotas)

    assert summary["otro"].count == 3
    assert summary["otro"].total == Decimal("100.00")
    assert summary["otro"].paid == Decimal("33.33")
    assert summary["otro"].pending == Decimal("66.67")


def test_total_above_column_range_is_rejected(rented):
    eolico, _rental = rented
    request = PlanRequest(
        concept="otro", number_of_installments=2, total_amount=Decimal("10000000000.00")
    )
    with pytest.raises(ValidationError):
        installment_service.generate_plan(eolico.id, request)
    assert Cuota.query.count() == 0


def test_first_due_date_out_of_calendar(rented):
    eolico, _rental = rented
    request = PlanRequest(
        concept="otro",
        number_of_installments=2,
        total_amount=Decimal("10.00"),
        first_due_date=date(9999, 12, 15),
    )
    with pytest.raises(ValidationError):
        installment_service.generate_plan(eolico.id, request)
    assert Cuota.query.count() == 0
