from __future__ import annotations

import logging

import sqlalchemy as sa

from gestion_eolica.extensions import db
from gestion_eolica.models import Alquiler, BitacoraAcceso, Eolico, Lectura, User
from gestion_eolica.models.alquiler import ESTADO_ACTIVO
from gestion_eolica.models.user import ROLES
from gestion_eolica.security.audit import log_user_action
from gestion_eolica.services.common import transaction
from gestion_eolica.services.errors import (
    ConflictError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from gestion_eolica.utils.strings import normalize_email
from gestion_eolica.utils.validators import is_valid_email

log = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("email", "full_name", "phone", "role", "is_active")

_DUPLICATE = "Username or email already registered."


def list_users(
    search: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> tuple[list[User], dict[str, int]]:
    """Return users filtered by search with optional pagination."""

    query = User.query

    if search:
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            sa.or_(
                sa.func.lower(User.email).like(term),
                sa.func.lower(User.username).like(term),
                sa.func.lower(User.full_name).like(term),
            )
        )

    query = query.order_by(User.id.asc())

    if page is not None and per_page is not None:
        page = max(int(page or 1), 1)
        per_page = max(int(per_page or 1), 1)
        pagination = query.paginate(page=page, per_page=per_page, error_out=False)
        meta = {
            "page": pagination.page,
            "per_page": pagination.per_page,
            "pages": pagination.pages or 1,
            "total": pagination.total,
        }
        return list(pagination.items), meta

    items = query.all()
    total = len(items)
    meta = {"page": 1, "per_page": total, "pages": 1, "total": total}
    return list(items), meta


def active_codes_by_user(user_ids: list[int]) -> dict[int, str]:
    """Map each user id to the code of the unit it actively rents."""

    if not user_ids:
        return {}
    rows = db.session.execute(
        sa.select(Alquiler.usuario_id, Eolico.codigo)
        .join(Eolico, Eolico.id == Alquiler.eolico_id)
        .where(Alquiler.usuario_id.in_(user_ids), Alquiler.estado == ESTADO_ACTIVO)
    ).all()
    return {user_id: codigo for user_id, codigo in rows}


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found.")
    return user


def _lock(user_id: int) -> User:
    user = db.session.execute(
        sa.select(User).where(User.id == user_id).with_for_update()
    ).scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found.")
    return user


def _check_email(email: object) -> str:
    normalized = normalize_email(email if isinstance(email, str) else None)
    if not normalized or not is_valid_email(normalized):
        raise ValidationError("Invalid email format.")
    return normalized


def _check_role(role: object) -> None:
    if role not in ROLES:
        raise ValidationError(f"Field 'role' must be one of: {', '.join(ROLES)}.")


def create_user(
    *,
    username: str,
    email: str,
    password: str,
    role: str = "user",
    full_name: str | None = None,
    phone: str | None = None,
    actor_id: int | None = None,
) -> User:
    normalized_email = _check_email(email)
    if len(password or "") < 6:
        raise ValidationError("Password must be at least 6 characters.")
    _check_role(role)

    taken = User.query.filter(
        sa.or_(User.username == username, User.email == normalized_email)
    ).first()
    if taken is not None:
        raise ConflictError(_DUPLICATE)

    user = User(
        username=username,
        email=normalized_email,
        role=role,
        full_name=full_name,
        phone=phone,
    )
    user.set_password(password)
    with transaction(
        "could not create user",
        on_integrity=lambda _exc: ConflictError(_DUPLICATE),
    ):
        db.session.add(user)
        db.session.flush()
        log_user_action(
            "CREAR",
            actor_id=actor_id,
            objetivo_id=user.id,
            detalle={"username": username, "role": role},
        )

    log.info("user created", extra={"event": "user_created", "user_id": user.id})
    return user


def update_user(user_id: int, changes: dict[str, object], *, actor_id: int | None = None) -> User:
    """Apply profile/role ``changes`` (model attribute names) to a user.

    An administrator cannot remove their own admin role nor deactivate
    their own account.
    """

    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}.")

    with transaction(
        "could not update user",
        on_integrity=lambda _exc: ConflictError(_DUPLICATE),
    ):
        user = _lock(user_id)
        if "email" in changes:
            changes["email"] = _check_email(changes["email"])
            clash = User.query.filter(User.email == changes["email"], User.id != user.id).first()
            if clash is not None:
                raise ConflictError(_DUPLICATE)
        if "role" in changes:
            _check_role(changes["role"])
        if user.id == actor_id and (
            changes.get("role", user.role) != user.role or changes.get("is_active") is False
        ):
            raise PreconditionError("You cannot demote or deactivate your own account.")

        changed = sorted(k for k, v in changes.items() if getattr(user, k) != v)
        for key in changed:
            setattr(user, key, changes[key])
        detalle: dict[str, object] = {"fields": changed}
        if "role" in changed:
            detalle["role"] = user.role
        log_user_action("ACTUALIZAR", actor_id=actor_id, objetivo_id=user.id, detalle=detalle)

    log.info("user updated", extra={"event": "user_updated", "user_id": user_id})
    return user


def delete_user(user_id: int, *, actor_id: int | None = None) -> None:
    """Remove an account that never rented equipment.

    Its readings go with it and its access-log rows are kept anonymous.
    """

    if user_id == actor_id:
        raise PreconditionError("You cannot delete your own account.")

    with transaction("could not delete user"):
        user = _lock(user_id)
        rented = db.session.execute(
            sa.select(Alquiler.id).where(Alquiler.usuario_id == user.id).limit(1)
        ).first()
        holds = db.session.execute(
            sa.select(Eolico.id).where(Eolico.usuario_id == user.id).limit(1)
        ).first()
        if rented is not None or holds is not None:
            raise ConflictError("The user has rental history and cannot be deleted.")

        db.session.execute(
            sa.delete(Lectura)
            .where(Lectura.usuario_id == user.id)
            .execution_options(synchronize_session=False)
        )
        db.session.execute(
            sa.update(BitacoraAcceso)
            .where(BitacoraAcceso.cuenta_id == user.id)
            .values(cuenta_id=None)
            .execution_options(synchronize_session=False)
        )
        log_user_action(
            "ELIMINAR",
            actor_id=actor_id,
            objetivo_id=user.id,
            detalle={"username": user.username, "email": user.email},
        )
        db.session.delete(user)

    log.info("user deleted", extra={"event": "user_deleted", "user_id": user_id})
