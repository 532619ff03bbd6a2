from __future__ import annotations

from datetime import datetime

from gestion_eolica.extensions import db


class Lectura(db.Model):
    """Lectura resumida de sensores enviada por el equipo del usuario."""

    __tablename__ = "lecturas_resumen"

    id = db.Column(db.Integer, primary_key=True)
    usuario_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    voltaje = db.Column(db.Float, nullable=True)
    bateria = db.Column(db.Float, nullable=True)
    consumo = db.Column(db.Float, nullable=True)
    fecha_lectura = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "userId": self.usuario_id,
            "voltage": self.voltaje,
            "battery": self.bateria,
            "consumption": self.consumo,
            "readAt": self.fecha_lectura.isoformat() if self.fecha_lectura else None,
        }
