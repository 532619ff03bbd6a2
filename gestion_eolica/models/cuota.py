from __future__ import annotations

from gestion_eolica.extensions import db
from gestion_eolica.utils.money import money_str

CONCEPTOS = ("tarifa", "instalacion", "deposito", "operativo", "otro")


class Cuota(db.Model):
    __tablename__ = "cuotas"

    id = db.Column(db.Integer, primary_key=True)
    alquiler_id = db.Column(
        db.Integer,
        db.ForeignKey("alquileres.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    concepto = db.Column(db.String(20), nullable=False)
    numero = db.Column(db.Integer, nullable=False)
    descripcion = db.Column(db.String(120), nullable=True)
    fecha_vencimiento = db.Column(db.Date, nullable=False)
    monto = db.Column(db.Numeric(12, 2), nullable=False)
    pagado = db.Column(db.Boolean, nullable=False, default=False)
    fecha_pago = db.Column(db.DateTime, nullable=True)
    metodo_pago = db.Column(db.String(40), nullable=True)
    observaciones = db.Column(db.String(255), nullable=True)

    alquiler = db.relationship("Alquiler", back_populates="cuotas")

    __table_args__ = (
        # Un plan por (alquiler, concepto): dos planes concurrentes chocan en la cuota 1
        db.UniqueConstraint(
            "alquiler_id", "concepto", "numero", name="uq_cuotas_alquiler_concepto_numero"
        ),
        db.CheckConstraint("monto >= 0", name="ck_cuotas_monto"),
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "rentalId": self.alquiler_id,
            "concept": self.concepto,
            "number": self.numero,
            "description": self.descripcion,
            "dueDate": self.fecha_vencimiento.isoformat(),
            "amount": money_str(self.monto),
            "paid": bool(self.pagado),
            "paidAt": self.fecha_pago.isoformat() if self.fecha_pago else None,
            "paymentMethod": self.metodo_pago,
            "notes": self.observaciones,
        }
