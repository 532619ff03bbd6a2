"""Authentication related services."""

from __future__ import annotations

import logging
from datetime import timedelta

from flask import current_app
from sqlalchemy import or_

from gestion_eolica import metrics
from gestion_eolica.extensions import db
from gestion_eolica.models import BitacoraAcceso, User
from gestion_eolica.services.common import utcnow
from gestion_eolica.services.errors import AccountLockedError, AuthenticationError
from gestion_eolica.utils.strings import normalize_email

log = logging.getLogger(__name__)

_INVALID = "Invalid username or password."


def _find_user(login: str) -> User | None:
    email = normalize_email(login)
    return User.query.filter(or_(User.username == login.strip(), User.email == email)).first()


def _record_attempt(
    login: str,
    user: User | None,
    *,
    ok: bool,
    reason: str,
    ip: str | None,
    agent: str | None,
) -> None:
    db.session.add(
        BitacoraAcceso(
            cuenta_id=user.id if user else None,
            usuario_intento=login[:120],
            ip=(ip or "")[:45] or None,
            agente_usuario=(agent or "")[:255] or None,
            exito=ok,
            motivo=reason,
        )
    )


def authenticate(
    login: str,
    password: str,
    *,
    ip: str | None = None,
    agent: str | None = None,
) -> User:
    """Validate credentials applying the failed-attempts lockout.

    After ``LOGIN_MAX_ATTEMPTS`` consecutive failures the account is locked
    for ``LOGIN_LOCK_MINUTES`` and the counter starts again. Every attempt is
    written to the access log, including the rejected ones.
    """

    max_attempts = int(current_app.config.get("LOGIN_MAX_ATTEMPTS", 5))
    lock_minutes = int(current_app.config.get("LOGIN_LOCK_MINUTES", 15))
    now = utcnow()

    user = _find_user(login)
    if user is None or not user.is_active:
        _record_attempt(login, user, ok=False, reason="usuario_no_encontrado", ip=ip, agent=agent)
        db.session.commit()
        metrics.login_attempts_total.labels(result="unknown_user").inc()
        log.warning("login failed", extra={"event": "login_failed", "username": login, "status": 401})
        raise AuthenticationError(_INVALID)

    if user.is_locked(now):
        _record_attempt(login, user, ok=False, reason="bloqueado", ip=ip, agent=agent)
        db.session.commit()
        metrics.login_attempts_total.labels(result="locked").inc()
        log.warning("login locked", extra={"event": "login_locked", "user_id": user.id, "status": 423})
        raise AccountLockedError("Account temporarily locked. Try again later.")

    if not user.check_password(password):
        fails = (user.failed_logins or 0) + 1
        locked = fails >= max_attempts
        if locked:
            user.failed_logins = 0
            user.lock_until = now + timedelta(minutes=lock_minutes)
        else:
            user.failed_logins = fails
        _record_attempt(login, user, ok=False, reason="contrasena_incorrecta", ip=ip, agent=agent)
        db.session.commit()
        metrics.login_attempts_total.labels(result="bad_password").inc()
        log.warning(
            "login failed",
            extra={"event": "login_failed", "user_id": user.id, "status": 401},
        )
        if locked:
            raise AuthenticationError(
                f"Too many attempts. Account locked for {lock_minutes} minutes."
            )
        raise AuthenticationError(_INVALID)

    user.failed_logins = 0
    user.lock_until = None
    user.last_login_at = now
    _record_attempt(login, user, ok=True, reason="login_ok", ip=ip, agent=agent)
    db.session.commit()
    metrics.login_attempts_total.labels(result="ok").inc()
    log.info("login ok", extra={"event": "login_ok", "user_id": user.id, "status": 200})
    return user


def ensure_admin_user(email: str, password: str, username: str | None = None) -> tuple[User, bool]:
    """Create or update the administrator account; returns ``(user, created)``."""
    normalized_email = normalize_email(email)
    if not normalized_email:
        raise ValueError("Email is required")

    user = User.query.filter_by(email=normalized_email).first()
    created = user is None
    if user is None:
        base_username = (username or normalized_email.split("@", 1)[0] or "admin").strip() or "admin"
        candidate = base_username
        suffix = 1
        while User.query.filter_by(username=candidate).first():
            candidate = f"{base_username}{suffix}"
            suffix += 1

        user = User(username=candidate, email=normalized_email)
        db.session.add(user)

    user.set_password(password)
    user.role = "admin"
    user.is_active = True
    user.failed_logins = 0
    user.lock_until = None

    db.session.commit()
    return user, created
