from datetime import datetime

from gestion_eolica.extensions import db


class BitacoraAcceso(db.Model):
    __tablename__ = "bitacora_accesos"

    id = db.Column(db.Integer, primary_key=True)
    fecha = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    cuenta_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    usuario_intento = db.Column(db.String(120), nullable=False)
    ip = db.Column(db.String(45))
    agente_usuario = db.Column(db.String(255))
    exito = db.Column(db.Boolean, nullable=False, default=False)
    motivo = db.Column(db.String(40), nullable=False)
