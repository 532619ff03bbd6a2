"""Equipment registry and assignment endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from gestion_eolica.security.guards import requires_auth, requires_role
from gestion_eolica.services import assignment_service
from gestion_eolica.services.assignment_service import Costs
from gestion_eolica.services.common import get_equipment
from gestion_eolica.utils.validators import (
    money_field,
    optional_bool,
    require_bool,
    require_int,
    require_string,
)

bp = Blueprint("equipment_api", __name__, url_prefix="/equipment")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _parse_costs(data: dict, *, required: bool) -> Costs:
    zero = assignment_service.ZERO
    return Costs(
        tariff=money_field(data, "tariff", required=required, default=zero),
        install_cost=money_field(data, "installCost", required=required, default=zero),
        deposit=money_field(data, "deposit", required=required, default=zero),
        daily_op_cost=money_field(data, "dailyOpCost", required=required, default=zero),
    )


@bp.get("")
@requires_auth
@requires_role("admin")
def list_equipment():
    rows = assignment_service.list_equipment(request.args.get("q"))
    return jsonify(items=[row.to_dict() for row in rows]), 200


@bp.post("")
@requires_auth
@requires_role("admin")
def create_equipment():
    data = _json_body()
    code = require_string(
        data,
        "code",
        min_len=assignment_service.CODE_MIN_LEN,
        max_len=assignment_service.CODE_MAX_LEN,
    )
    eolico = assignment_service.create_equipment(code, _parse_costs(data, required=False))
    return jsonify(id=eolico.id, code=eolico.codigo), 201


@bp.get("/<int:equipment_id>")
@requires_auth
@requires_role("admin")
def get_equipment_detail(equipment_id: int):
    return jsonify(get_equipment(equipment_id).to_dict()), 200


@bp.put("/<int:equipment_id>/assign")
@requires_auth
@requires_role("admin")
def assign(equipment_id: int):
    user_id = require_int(_json_body(), "userId", minimum=1)
    rental = assignment_service.assign_by_equipment(equipment_id, user_id)
    return jsonify(message="Equipment assigned.", rentalId=rental.id), 200


@bp.post("/assign-by-code")
@requires_auth
@requires_role("admin")
def assign_by_code():
    data = _json_body()
    code = require_string(
        data,
        "code",
        min_len=assignment_service.CODE_MIN_LEN,
        max_len=assignment_service.CODE_MAX_LEN,
    )
    user_id = require_int(data, "userId", minimum=1)
    rental = assignment_service.assign_by_code(code, user_id)
    return (
        jsonify(message="Equipment assigned.", rentalId=rental.id, equipmentId=rental.eolico_id),
        200,
    )


@bp.put("/<int:equipment_id>/unassign")
@requires_auth
@requires_role("admin")
def unassign(equipment_id: int):
    closed = assignment_service.unassign(equipment_id)
    return jsonify(message="Equipment unassigned.", closedRentals=closed), 200


@bp.put("/<int:equipment_id>/toggle")
@requires_auth
@requires_role("admin")
def toggle(equipment_id: int):
    active = require_bool(_json_body(), "active")
    eolico = assignment_service.toggle_active(equipment_id, active)
    label = "activated" if eolico.activo else "deactivated"
    return jsonify(message=f"Equipment {label}.", active=bool(eolico.activo)), 200


@bp.put("/<int:equipment_id>/costs")
@requires_auth
@requires_role("admin")
def update_costs(equipment_id: int):
    data = _json_body()
    costs = _parse_costs(data, required=True)
    apply = optional_bool(data, "applyToActiveRental", default=False)
    result = assignment_service.update_costs(equipment_id, costs, apply)
    payload = {
        "message": "Costs updated.",
        "equipment": result.equipment.to_dict(),
        "rentalUpdated": result.rental_updated,
    }
    if apply and result.note:
        payload["note"] = result.note
    return jsonify(payload), 200


@bp.get("/<int:equipment_id>/rentals")
@requires_auth
@requires_role("admin")
def rentals(equipment_id: int):
    rows = assignment_service.list_rentals(equipment_id)
    return jsonify(items=[row.to_dict() for row in rows]), 200
