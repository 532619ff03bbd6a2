from dataclasses import dataclass
from functools import wraps

from flask import g, jsonify, request

from .jwt import decode_jwt


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: str
    username: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def current_identity() -> Identity:
    return g.identity


def _unauthorized(detail: str):
    return jsonify({"error": {"code": 401, "kind": "unauthorized", "message": detail}}), 401


def requires_auth(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return _unauthorized("Missing token.")
        token = auth.split(" ", 1)[1].strip()
        data = decode_jwt(token)
        if not data:
            return _unauthorized("Invalid or expired token.")
        try:
            user_id = int(data.get("sub"))
        except (TypeError, ValueError):
            return _unauthorized("Invalid or expired token.")
        # Guardar contexto mínimo
        g.identity = Identity(
            user_id=user_id,
            role=str(data.get("role") or "user").strip().lower(),
            username=data.get("username"),
        )
        return fn(*args, **kwargs)

    return wrapper


def requires_role(*roles: str):
    allowed = {r.strip().lower() for r in roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            identity = getattr(g, "identity", None)
            if identity is None:
                return _unauthorized("Not authenticated.")
            if identity.role not in allowed:
                return (
                    jsonify({"error": {"code": 403, "kind": "forbidden", "message": "Forbidden."}}),
                    403,
                )
            return fn(*args, **kwargs)

        return wrapper

    return decorator
