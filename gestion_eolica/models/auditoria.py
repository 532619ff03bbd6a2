from __future__ import annotations

from datetime import datetime

from gestion_eolica.extensions import db

ACCIONES = ("CREAR", "ACTUALIZAR", "ELIMINAR")


class AuditoriaUsuario(db.Model):
    """Cambios administrativos sobre cuentas de usuario.

    Sin claves foráneas: el registro sobrevive al borrado de la cuenta.
    """

    __tablename__ = "auditoria_usuarios"

    id = db.Column(db.Integer, primary_key=True)
    fecha = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    actor_id = db.Column(db.Integer, nullable=True)
    accion = db.Column(db.String(20), nullable=False)
    objetivo_id = db.Column(db.Integer, nullable=True, index=True)
    detalle = db.Column(db.JSON, nullable=False, default=dict)
    ip = db.Column(db.String(64))
    agente_usuario = db.Column(db.String(256))

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "at": self.fecha.isoformat() if self.fecha else None,
            "actorId": self.actor_id,
            "action": self.accion,
            "targetId": self.objetivo_id,
            "detail": self.detalle or {},
        }
