from __future__ import annotations

from gestion_eolica.models.user import User
from gestion_eolica.models.eolico import Eolico
from gestion_eolica.models.alquiler import Alquiler
from gestion_eolica.models.cuota import Cuota
from gestion_eolica.models.lectura import Lectura
from gestion_eolica.models.bitacora import BitacoraAcceso
from gestion_eolica.models.auditoria import AuditoriaUsuario


__all__ = [
    "User",
    "Eolico",
    "Alquiler",
    "Cuota",
    "Lectura",
    "BitacoraAcceso",
    "AuditoriaUsuario",
]
