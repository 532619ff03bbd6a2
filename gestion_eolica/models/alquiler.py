from __future__ import annotations

from datetime import datetime

from gestion_eolica.extensions import db
from gestion_eolica.utils.money import money_str

ESTADO_ACTIVO = "activo"
ESTADO_FINALIZADO = "finalizado"

_SOLO_ACTIVOS = db.text("estado = 'activo'")


class Alquiler(db.Model):
    """Periodo de asignación de un eólico a un usuario.

    Las filas nunca se borran: al reasignar o desasignar se cierran con
    ``estado='finalizado'`` y ``fecha_fin`` para conservar el historial.
    Los índices parciales garantizan un solo alquiler activo por eólico
    y por usuario.
    """

    __tablename__ = "alquileres"

    id = db.Column(db.Integer, primary_key=True)
    eolico_id = db.Column(db.Integer, db.ForeignKey("eolicos.id"), nullable=False, index=True)
    usuario_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    estado = db.Column(db.String(16), nullable=False, default=ESTADO_ACTIVO)
    fecha_inicio = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    fecha_fin = db.Column(db.DateTime, nullable=True)
    tarifa_mes = db.Column(db.Numeric(12, 2), nullable=True)
    costo_instalacion = db.Column(db.Numeric(12, 2), nullable=True)
    deposito = db.Column(db.Numeric(12, 2), nullable=True)

    eolico = db.relationship("Eolico", back_populates="alquileres")
    usuario = db.relationship("User")
    cuotas = db.relationship(
        "Cuota",
        back_populates="alquiler",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="Cuota.id",
    )

    __table_args__ = (
        db.Index(
            "uq_alquileres_eolico_activo",
            "eolico_id",
            unique=True,
            sqlite_where=_SOLO_ACTIVOS,
            postgresql_where=_SOLO_ACTIVOS,
        ),
        db.Index(
            "uq_alquileres_usuario_activo",
            "usuario_id",
            unique=True,
            sqlite_where=_SOLO_ACTIVOS,
            postgresql_where=_SOLO_ACTIVOS,
        ),
        db.CheckConstraint(
            "estado IN ('activo', 'finalizado')", name="ck_alquileres_estado"
        ),
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "equipmentId": self.eolico_id,
            "code": self.eolico.codigo if self.eolico else None,
            "userId": self.usuario_id,
            "username": self.usuario.username if self.usuario else None,
            "status": self.estado,
            "startedAt": self.fecha_inicio.isoformat() if self.fecha_inicio else None,
            "endedAt": self.fecha_fin.isoformat() if self.fecha_fin else None,
            "tariff": money_str(self.tarifa_mes),
            "installCost": money_str(self.costo_instalacion),
            "deposit": money_str(self.deposito),
        }
