from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from gestion_eolica.extensions import db
from gestion_eolica.utils.money import money_str

ZERO = Decimal("0.00")


class Eolico(db.Model):
    """Equipo eólico alquilable identificado por su código."""

    __tablename__ = "eolicos"

    id = db.Column(db.Integer, primary_key=True)
    codigo = db.Column(db.String(20), unique=True, nullable=False, index=True)
    tarifa_mes = db.Column(db.Numeric(12, 2), nullable=False, default=ZERO)
    costo_instalacion = db.Column(db.Numeric(12, 2), nullable=False, default=ZERO)
    deposito = db.Column(db.Numeric(12, 2), nullable=False, default=ZERO)
    costo_operativo_dia = db.Column(db.Numeric(12, 2), nullable=False, default=ZERO)
    activo = db.Column(db.Boolean, nullable=False, default=False)
    habilitado = db.Column(db.Boolean, nullable=False, default=False)
    usuario_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    fecha_creacion = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    usuario = db.relationship("User")
    alquileres = db.relationship(
        "Alquiler",
        back_populates="eolico",
        lazy="dynamic",
        order_by="Alquiler.id.desc()",
    )

    __table_args__ = (
        db.CheckConstraint(
            "(NOT activo AND NOT habilitado) OR usuario_id IS NOT NULL",
            name="ck_eolicos_asignado_si_activo",
        ),
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "code": self.codigo,
            "tariff": money_str(self.tarifa_mes),
            "installCost": money_str(self.costo_instalacion),
            "deposit": money_str(self.deposito),
            "dailyOpCost": money_str(self.costo_operativo_dia),
            "active": bool(self.activo),
            "enabled": bool(self.habilitado),
            "userId": self.usuario_id,
            "username": self.usuario.username if self.usuario else None,
            "createdAt": self.fecha_creacion.isoformat() if self.fecha_creacion else None,
        }
