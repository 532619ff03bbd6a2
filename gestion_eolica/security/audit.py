from flask import has_request_context, request

from gestion_eolica.extensions import db
from gestion_eolica.models import AuditoriaUsuario


def log_user_action(accion, actor_id=None, objetivo_id=None, detalle=None):
    """Queue an audit row on the current session.

    The caller commits, so the row lands in the same transaction as the
    change it describes.
    """
    ev = AuditoriaUsuario(
        accion=accion,
        actor_id=actor_id,
        objetivo_id=objetivo_id,
        detalle=detalle or {},
        ip=(request.remote_addr if has_request_context() else None),
        agente_usuario=(
            (request.headers.get("User-Agent") or "")[:256] or None
            if has_request_context()
            else None
        ),
    )
    db.session.add(ev)
    return ev
