"""Installment plan endpoints."""

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request

from gestion_eolica.security.guards import requires_auth, requires_role
from gestion_eolica.services import installment_service, report_service
from gestion_eolica.services.installment_service import PERIODICIDADES, PlanRequest
from gestion_eolica.utils.validators import (
    money_field,
    optional_date,
    optional_string,
    require_int,
    require_string,
)

bp = Blueprint("installments_api", __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.post("/equipment/<int:equipment_id>/installments/generate")
@requires_auth
@requires_role("admin")
def generate(equipment_id: int):
    data = _json_body()
    periodicity = optional_string(data, "periodicity", max_len=20)
    plan = PlanRequest(
        concept=require_string(data, "concept", max_len=20).lower(),
        number_of_installments=require_int(
            data,
            "numberOfInstallments",
            minimum=1,
            maximum=installment_service.MAX_CUOTAS,
        ),
        periodicity=(periodicity or PERIODICIDADES[0]).lower(),
        first_due_date=optional_date(data, "firstDueDate"),
        total_amount=money_field(data, "totalAmount", positive=True),
        description=optional_string(
            data, "description", max_len=installment_service.DESCRIPTION_MAX_LEN
        ),
    )
    result = installment_service.generate_plan(equipment_id, plan)
    return (
        jsonify(
            message="Installment plan generated.",
            createdCount=result.created_count,
            totalAmount=str(result.total_amount),
            rentalId=result.rental_id,
            concept=result.concept,
        ),
        201,
    )


@bp.get("/equipment/<int:equipment_id>/installments")
@requires_auth
@requires_role("admin")
def list_installments(equipment_id: int):
    rental, cuotas = installment_service.list_installments(equipment_id)
    summary = installment_service.installment_summary(cuotas)
    return (
        jsonify(
            rental=rental.to_dict(),
            installments=[c.to_dict() for c in cuotas],
            summary={concept: item.to_dict() for concept, item in summary.items()},
        ),
        200,
    )


@bp.get("/equipment/<int:equipment_id>/installments/export.csv")
@requires_auth
@requires_role("admin")
def export_csv(equipment_id: int):
    rental, cuotas = installment_service.list_installments(equipment_id)
    filename = f"cuotas_{rental.eolico.codigo}.csv"
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "Content-Type": "text/csv; charset=utf-8",
    }
    return Response(report_service.installments_csv(cuotas), headers=headers)


@bp.get("/equipment/<int:equipment_id>/installments/pdf")
@requires_auth
@requires_role("admin")
def export_pdf(equipment_id: int):
    rental, cuotas = installment_service.list_installments(equipment_id)
    body = report_service.installments_pdf(rental, cuotas)
    filename = f"cuotas_{rental.eolico.codigo}.pdf"
    return Response(
        body,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@bp.put("/installments/<int:installment_id>/pay")
@requires_auth
@requires_role("admin")
def pay(installment_id: int):
    data = _json_body()
    cuota = installment_service.mark_paid(
        installment_id,
        payment_method=optional_string(data, "paymentMethod", max_len=40),
        notes=optional_string(data, "notes", max_len=255),
    )
    return jsonify(message="Installment marked as paid.", installment=cuota.to_dict()), 200
