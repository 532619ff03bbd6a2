"""Sensor readings shown on the dashboards."""

from __future__ import annotations

from flask import current_app
from sqlalchemy import and_, or_

from gestion_eolica.models import Lectura

READINGS_LIMIT = 100
ALERTS_LIMIT = 10


def _scoped(query, *, viewer_id: int, is_admin: bool, user_id: int | None):
    # Un usuario normal sólo ve sus propias lecturas
    if not is_admin:
        return query.filter(Lectura.usuario_id == viewer_id)
    if user_id:
        return query.filter(Lectura.usuario_id == user_id)
    return query


def list_readings(*, viewer_id: int, is_admin: bool, user_id: int | None = None) -> list[Lectura]:
    query = _scoped(Lectura.query, viewer_id=viewer_id, is_admin=is_admin, user_id=user_id)
    return query.order_by(Lectura.fecha_lectura.desc()).limit(READINGS_LIMIT).all()


def list_alerts(*, viewer_id: int, is_admin: bool, user_id: int | None = None) -> list[Lectura]:
    battery_min = current_app.config.get("ALERT_BATTERY_MIN", 20)
    voltage_min = current_app.config.get("ALERT_VOLTAGE_MIN", 10)
    query = Lectura.query.filter(
        or_(
            and_(Lectura.bateria.isnot(None), Lectura.bateria < battery_min),
            and_(Lectura.voltaje.isnot(None), Lectura.voltaje < voltage_min),
        )
    )
    query = _scoped(query, viewer_id=viewer_id, is_admin=is_admin, user_id=user_id)
    return query.order_by(Lectura.fecha_lectura.desc()).limit(ALERTS_LIMIT).all()
