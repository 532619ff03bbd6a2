"""Authentication API endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from gestion_eolica.extensions import limiter
from gestion_eolica.security.guards import current_identity, requires_auth
from gestion_eolica.security.jwt import encode_jwt
from gestion_eolica.services.auth_service import authenticate
from gestion_eolica.services.user_service import active_codes_by_user, get_user
from gestion_eolica.utils.validators import require_string

bp = Blueprint("auth_api", __name__, url_prefix="/auth")


def _login_limit() -> str:
    return current_app.config.get("LOGIN_RATE_LIMIT", "100 per 15 minutes")


@bp.post("/login")
@limiter.limit(_login_limit)
def login():
    """Validate credentials and return a JWT token."""

    payload = request.get_json(silent=True) or {}
    username = require_string(payload, "username", min_len=3, max_len=120)
    password = require_string(payload, "password", min_len=1, max_len=100)

    ip = (request.headers.get("X-Forwarded-For") or request.remote_addr or "").split(",")[0]
    user = authenticate(
        username,
        password,
        ip=ip.strip(),
        agent=request.headers.get("User-Agent"),
    )

    access_token = encode_jwt({"sub": user.id, "role": user.role, "username": user.username})
    return (
        jsonify(
            {
                "access_token": access_token,
                "token_type": "bearer",
                "role": user.role,
                "username": user.username,
            }
        ),
        200,
    )


@bp.get("/me")
@requires_auth
def me():
    """Return current user basic information."""

    identity = current_identity()
    user = get_user(identity.user_id)
    return jsonify(id=user.id, username=user.username, role=user.role), 200


@bp.get("/me/detail")
@requires_auth
def me_detail():
    """Return the full profile of the current user and its rented unit."""

    user = get_user(current_identity().user_id)
    codes = active_codes_by_user([user.id])
    return jsonify({**user.to_dict(), "activeEquipmentCode": codes.get(user.id)}), 200
