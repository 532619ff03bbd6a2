import time
from datetime import timedelta

import jwt
from flask import current_app

ALGO = "HS256"


def _secret() -> str:
    # Usa SECRET_KEY existente
    return current_app.config.get("SECRET_KEY", "dev-secret")


def _default_ttl() -> int:
    ttl = current_app.config.get("JWT_TTL", timedelta(hours=4))
    if isinstance(ttl, timedelta):
        return int(ttl.total_seconds())
    return int(ttl)


def encode_jwt(payload: dict, ttl_seconds: int | None = None) -> str:
    now = int(time.time())
    normalized = dict(payload)
    if "sub" in normalized and normalized["sub"] is not None:
        normalized["sub"] = str(normalized["sub"])
    to_encode = {
        "iat": now,
        "exp": now + (ttl_seconds if ttl_seconds is not None else _default_ttl()),
        **normalized,
    }
    return jwt.encode(to_encode, _secret(), algorithm=ALGO)


def decode_jwt(token: str) -> dict | None:
    try:
        return jwt.decode(token, _secret(), algorithms=[ALGO])
    except jwt.PyJWTError:
        return None
