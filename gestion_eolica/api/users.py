from __future__ import annotations

from flask import Blueprint, Response, jsonify, request

from gestion_eolica.security.guards import current_identity, requires_auth, requires_role
from gestion_eolica.services import report_service, user_service
from gestion_eolica.utils.validators import optional_string, require_bool, require_string

bp = Blueprint("users_api", __name__, url_prefix="/users")


def _parse_positive_int(raw: str | None, default: int, *, upper: int | None = None) -> int:
    try:
        value = int(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default
    if value <= 0:
        value = default
    if upper is not None and value > upper:
        value = upper
    return value


@bp.get("")
@requires_auth
@requires_role("admin")
def list_users():
    """Return users supporting search and pagination."""

    search = request.args.get("q")
    page = _parse_positive_int(request.args.get("page"), 1)
    per_page = _parse_positive_int(request.args.get("per_page"), 20, upper=100)

    rows, meta = user_service.list_users(search=search, page=page, per_page=per_page)
    codes = user_service.active_codes_by_user([u.id for u in rows])
    items = [{**u.to_dict(), "activeEquipmentCode": codes.get(u.id)} for u in rows]
    return jsonify(items=items, meta=meta), 200


@bp.post("")
@requires_auth
@requires_role("admin")
def create_user():
    data = request.get_json(silent=True) or {}
    user = user_service.create_user(
        username=require_string(data, "username", min_len=3, max_len=64),
        email=require_string(data, "email", max_len=254),
        password=require_string(data, "password", min_len=1, max_len=100),
        role=(optional_string(data, "role", max_len=20) or "user").lower(),
        full_name=optional_string(data, "fullName", max_len=160),
        phone=optional_string(data, "phone", max_len=32),
        actor_id=current_identity().user_id,
    )
    return jsonify(user=user.to_dict()), 201


@bp.get("/export.csv")
@requires_auth
@requires_role("admin")
def export_users_csv():
    """Stream a CSV export with the full user list matching the search."""

    rows, _meta = user_service.list_users(search=request.args.get("q"))
    headers = {
        "Content-Disposition": 'attachment; filename="reporte_usuarios.csv"',
        "Content-Type": "text/csv; charset=utf-8",
    }
    return Response(report_service.users_csv(rows), headers=headers)


@bp.get("/report.pdf")
@requires_auth
@requires_role("admin")
def users_report_pdf():
    rows, _meta = user_service.list_users(search=request.args.get("q"))
    headers = {
        "Content-Disposition": 'attachment; filename="reporte_usuarios.pdf"',
        "Content-Type": "application/pdf",
    }
    return Response(report_service.users_pdf(rows), headers=headers)


@bp.get("/<int:user_id>")
@requires_auth
@requires_role("admin")
def get_user(user_id: int):
    user = user_service.get_user(user_id)
    codes = user_service.active_codes_by_user([user.id])
    return jsonify(user={**user.to_dict(), "activeEquipmentCode": codes.get(user.id)}), 200


@bp.put("/<int:user_id>")
@requires_auth
@requires_role("admin")
def update_user(user_id: int):
    """Update profile, role or active flag; only the fields sent change."""

    data = request.get_json(silent=True) or {}
    changes: dict[str, object] = {}
    if "email" in data:
        changes["email"] = require_string(data, "email", max_len=254)
    if "fullName" in data:
        changes["full_name"] = optional_string(data, "fullName", max_len=160)
    if "phone" in data:
        changes["phone"] = optional_string(data, "phone", max_len=32)
    if "role" in data:
        changes["role"] = require_string(data, "role", max_len=20).lower()
    if "isActive" in data:
        changes["is_active"] = require_bool(data, "isActive")

    user = user_service.update_user(user_id, changes, actor_id=current_identity().user_id)
    return jsonify(user=user.to_dict()), 200


@bp.delete("/<int:user_id>")
@requires_auth
@requires_role("admin")
def delete_user(user_id: int):
    user_service.delete_user(user_id, actor_id=current_identity().user_id)
    return jsonify(message="User deleted."), 200
