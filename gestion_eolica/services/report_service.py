"""CSV and PDF exports of users and installment plans."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Iterator
from datetime import datetime

from reportlab.lib.pagesizes import LETTER
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from gestion_eolica.models import Alquiler, Cuota, User
from gestion_eolica.services.installment_service import installment_summary
from gestion_eolica.utils.money import money_str

INSTALLMENT_FIELDS = (
    "id",
    "concept",
    "number",
    "description",
    "due_date",
    "amount",
    "paid",
    "paid_at",
    "payment_method",
    "notes",
)
USER_FIELDS = ("id", "username", "email", "full_name", "phone", "role", "created_at")


def _csv_rows(header: Iterable[str], rows: Iterable[Iterable[object]]) -> Iterator[str]:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    for row in (header, *rows):
        writer.writerow(row)
        yield buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)


def installments_csv(cuotas: list[Cuota]) -> Iterator[str]:
    return _csv_rows(
        INSTALLMENT_FIELDS,
        (
            (
                c.id,
                c.concepto,
                c.numero,
                c.descripcion or "",
                c.fecha_vencimiento.isoformat(),
                money_str(c.monto),
                1 if c.pagado else 0,
                c.fecha_pago.isoformat() if c.fecha_pago else "",
                c.metodo_pago or "",
                c.observaciones or "",
            )
            for c in cuotas
        ),
    )


def users_csv(users: list[User]) -> Iterator[str]:
    return _csv_rows(
        USER_FIELDS,
        (
            (
                u.id,
                u.username,
                u.email,
                u.full_name or "",
                u.phone or "",
                u.role,
                u.created_at.isoformat() if u.created_at else "",
            )
            for u in users
        ),
    )


def _pdf_header_footer(c, title):
    w, h = LETTER
    c.setFont("Helvetica-Bold", 12)
    c.drawString(2 * cm, h - 2 * cm, title)
    c.setFont("Helvetica", 8)
    c.drawRightString(
        w - 2 * cm,
        1.5 * cm,
        datetime.utcnow().strftime("Generado %Y-%m-%d %H:%M UTC"),
    )
    c.line(2 * cm, h - 2.2 * cm, w - 2 * cm, h - 2.2 * cm)


def _signature(c):
    w, _h = LETTER
    c.setFont("Helvetica", 10)
    c.drawRightString(w - 2 * cm, 2.8 * cm, "_________________________")
    c.drawRightString(w - 2 * cm, 2.3 * cm, "Firma Responsable")
    c.showPage()


_COLUMNS = (
    ("#", 2.0),
    ("Concepto", 3.0),
    ("Descripción", 5.2),
    ("Vence", 9.8),
    ("Monto", 12.6),
    ("Estado", 15.0),
)


def installments_pdf(rental: Alquiler, cuotas: list[Cuota]) -> bytes:
    """Render the installment plan of ``rental`` as a one-or-more page PDF."""

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=LETTER)
    code = rental.eolico.codigo if rental.eolico else rental.eolico_id
    title = f"Plan de cuotas - {code}"
    _pdf_header_footer(c, title)

    w, h = LETTER
    x, y = 2 * cm, h - 3.2 * cm
    header = [
        ("Eólico", code),
        ("Usuario", rental.usuario.username if rental.usuario else rental.usuario_id),
        ("Inicio", rental.fecha_inicio.date().isoformat() if rental.fecha_inicio else "-"),
        ("Estado", rental.estado),
    ]
    for k, v in header:
        c.setFont("Helvetica-Bold", 10)
        c.drawString(x, y, k + ":")
        c.setFont("Helvetica", 10)
        c.drawString(x + 3 * cm, y, str(v))
        y -= 0.6 * cm

    def draw_table_header(ypos: float) -> float:
        c.setFont("Helvetica-Bold", 9)
        for label, col in _COLUMNS:
            c.drawString(col * cm, ypos, label)
        return ypos - 0.5 * cm

    y = draw_table_header(y - 0.4 * cm)
    c.setFont("Helvetica", 9)
    if not cuotas:
        c.drawString(x, y, "No hay cuotas generadas para este alquiler.")
        y -= 0.5 * cm

    for cuota in cuotas:
        if y < 3 * cm:
            c.showPage()
            _pdf_header_footer(c, title)
            y = draw_table_header(h - 3.2 * cm)
            c.setFont("Helvetica", 9)
        values = (
            str(cuota.numero),
            cuota.concepto,
            (cuota.descripcion or "")[:32],
            cuota.fecha_vencimiento.isoformat(),
            money_str(cuota.monto),
            "Pagada" if cuota.pagado else "Pendiente",
        )
        for (_label, col), value in zip(_COLUMNS, values):
            c.drawString(col * cm, y, value)
        y -= 0.45 * cm

    y -= 0.4 * cm
    c.setFont("Helvetica-Bold", 10)
    for concepto, item in installment_summary(cuotas).items():
        if y < 3 * cm:
            c.showPage()
            _pdf_header_footer(c, title)
            y = h - 3.2 * cm
            c.setFont("Helvetica-Bold", 10)
        c.drawString(
            x,
            y,
            f"{concepto}: total {item.total}  pagado {item.paid}  pendiente {item.pending}",
        )
        y -= 0.5 * cm

    _signature(c)
    c.save()
    return buf.getvalue()


_USER_COLUMNS = (
    ("Usuario", 2.0),
    ("Nombre", 5.0),
    ("Email", 9.0),
    ("Teléfono", 14.2),
    ("Rol", 17.4),
)


def users_pdf(users: list[User]) -> bytes:
    """Users report with one line per account and a signature block."""

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=LETTER)
    title = "Reporte de usuarios"
    _pdf_header_footer(c, title)
    _w, h = LETTER
    top = h - 3.2 * cm

    def draw_header(ypos: float) -> float:
        c.setFont("Helvetica-Bold", 9)
        for label, col in _USER_COLUMNS:
            c.drawString(col * cm, ypos, label)
        c.setFont("Helvetica", 9)
        return ypos - 0.5 * cm

    y = draw_header(top)
    if not users:
        c.drawString(2 * cm, y, "No hay usuarios registrados.")

    for user in users:
        # Reservar espacio para la firma al pie
        if y < 3.6 * cm:
            c.showPage()
            _pdf_header_footer(c, title)
            y = draw_header(top)
        values = (
            user.username[:16],
            (user.full_name or "")[:22],
            (user.email or "")[:28],
            (user.phone or "")[:16],
            user.role,
        )
        for (_label, col), value in zip(_USER_COLUMNS, values):
            c.drawString(col * cm, y, value)
        y -= 0.45 * cm

    _signature(c)
    c.save()
    return buf.getvalue()
