from __future__ import annotations

from flask import Blueprint, jsonify, request

from gestion_eolica.security.guards import current_identity, requires_auth
from gestion_eolica.services import reading_service

bp = Blueprint("readings_api", __name__)


def _scope() -> dict:
    identity = current_identity()
    raw = request.args.get("userId")
    try:
        user_id = int(raw) if raw else None
    except ValueError:
        user_id = None
    return {"viewer_id": identity.user_id, "is_admin": identity.is_admin, "user_id": user_id}


@bp.get("/readings")
@requires_auth
def readings():
    """Latest sensor readings; regular users only see their own."""

    rows = reading_service.list_readings(**_scope())
    return jsonify(items=[row.to_dict() for row in rows]), 200


@bp.get("/alerts")
@requires_auth
def alerts():
    rows = reading_service.list_alerts(**_scope())
    return jsonify(items=[row.to_dict() for row in rows]), 200
