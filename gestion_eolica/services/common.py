"""Query and transaction helpers shared by the equipment services."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from gestion_eolica.extensions import db
from gestion_eolica.models import Alquiler, Eolico, User
from gestion_eolica.models.alquiler import ESTADO_ACTIVO, ESTADO_FINALIZADO
from gestion_eolica.services.errors import (
    NotFoundError,
    ServiceError,
    TransactionError,
    ValidationError,
)

log = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.utcnow()


@contextmanager
def transaction(
    failure_message: str,
    *,
    on_integrity: Callable[[IntegrityError], ServiceError] | None = None,
) -> Iterator[None]:
    """Run the block as one unit of work on the shared session.

    Commits when the block finishes. Any error rolls everything back:
    service errors propagate unchanged, database errors become
    :class:`TransactionError` (or whatever ``on_integrity`` maps a
    constraint violation to).
    """

    try:
        yield
        db.session.commit()
    except ServiceError:
        db.session.rollback()
        raise
    except IntegrityError as exc:
        db.session.rollback()
        if on_integrity is not None:
            raise on_integrity(exc) from exc
        log.warning("%s: integrity violation", failure_message, exc_info=exc)
        raise TransactionError(failure_message) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        log.exception("%s", failure_message)
        raise TransactionError(failure_message) from exc


def lock_equipment(equipment_id: int) -> Eolico:
    """Fetch the equipment row with ``FOR UPDATE``; serialises writers per unit."""

    eolico = db.session.execute(
        select(Eolico).where(Eolico.id == equipment_id).with_for_update()
    ).scalar_one_or_none()
    if eolico is None:
        raise NotFoundError("Equipment not found.")
    return eolico


def lock_user(user_id: int) -> User:
    user = db.session.execute(
        select(User).where(User.id == user_id).with_for_update()
    ).scalar_one_or_none()
    if user is None:
        raise ValidationError("Field 'userId' does not reference an existing user.")
    return user


def get_equipment(equipment_id: int) -> Eolico:
    eolico = db.session.get(Eolico, equipment_id)
    if eolico is None:
        raise NotFoundError("Equipment not found.")
    return eolico


def active_rental_for(equipment_id: int, *, for_update: bool = False) -> Alquiler | None:
    stmt = select(Alquiler).where(
        Alquiler.eolico_id == equipment_id,
        Alquiler.estado == ESTADO_ACTIVO,
    )
    if for_update:
        stmt = stmt.with_for_update()
    return db.session.execute(stmt).scalars().first()


def close_active_rentals(condition, ended_at: datetime) -> int:
    """Mark every active rental matching ``condition`` as finished."""

    result = db.session.execute(
        update(Alquiler)
        .where(condition, Alquiler.estado == ESTADO_ACTIVO)
        .values(estado=ESTADO_FINALIZADO, fecha_fin=ended_at)
        .execution_options(synchronize_session="fetch")
    )
    return int(result.rowcount or 0)
