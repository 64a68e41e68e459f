from __future__ import annotations

import os
from datetime import datetime
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas
from sqlalchemy.orm import Session

from barulogix.db import utcnow
from barulogix.models.report import Report

_DEJAVU_TTF = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"

_STATUS_LABELS = {0: "No entregado", 1: "Entregado", 2: "Devuelto"}


def _pdf_font_name() -> str:
    if os.path.exists(_DEJAVU_TTF):
        if "DejaVu" not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont("DejaVu", _DEJAVU_TTF))
        return "DejaVu"
    return "Helvetica"


def _fmt_money(v: float) -> str:
    # formato simple sin locale: 1.234.567,89
    return f"$ {v:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


class _Writer:
    """Escribe líneas de arriba hacia abajo, con salto de página automático."""

    def __init__(self, c: canvas.Canvas, font: str):
        self.c = c
        self.font = font
        self.width, self.height = A4
        self.y = self.height - 20 * mm

    def line(self, text: str, size: int = 10, gap: float = 6 * mm) -> None:
        if self.y < 20 * mm:
            self.c.showPage()
            self.y = self.height - 20 * mm
        self.c.setFont(self.font, size)
        self.c.drawString(20 * mm, self.y, text[:120])
        self.y -= gap

    def space(self, h: float = 4 * mm) -> None:
        self.y -= h


def build_stats_pdf(
    *,
    title: str,
    tenant_name: str,
    period: dict,
    conductor: str | None,
    stats: dict,
    conductors: list[dict],
    platforms: list[dict],
) -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(title)
    w = _Writer(c, _pdf_font_name())

    w.line(title, size=16, gap=10 * mm)
    w.line(f"Cuenta: {tenant_name}")
    w.line(f"Periodo: {period.get('start')} a {period.get('end')}")
    if conductor:
        w.line(f"Conductor: {conductor}")
    w.line(f"Generado: {utcnow().isoformat(timespec='seconds')}Z")
    w.space()

    totals = stats["totals"]
    w.line("Resumen", size=13, gap=8 * mm)
    w.line(f"Total de paquetes: {totals['total']}")
    w.line(f"Entregados: {totals['delivered']}   Devueltos: {totals['returned']}   Pendientes: {totals['pending']}")
    w.line(f"Tasa de éxito: {totals['success_rate']:.1f}%")
    w.line(f"Valor total: {_fmt_money(totals['total_value'])}")
    w.space()

    w.line("Por estado", size=13, gap=8 * mm)
    for g in stats["groups"]:
        label = _STATUS_LABELS.get(g["status"], str(g["status"]))
        prefix = f"{g['type']} / " if g.get("type") else ""
        w.line(f"{prefix}{label}: {g['count']} ({_fmt_money(g['total_value'])})")
    w.space()

    if platforms:
        w.line("Por plataforma", size=13, gap=8 * mm)
        for p in platforms:
            w.line(f"{p['type']}: {p['count']} ({p['percentage']:.1f}%)")
        w.space()

    if conductors:
        w.line("Por conductor", size=13, gap=8 * mm)
        for r in conductors:
            w.line(
                f"{r['conductor']}: {r['total']} paquetes, {r['delivered']} entregados, "
                f"{r['returned']} devueltos, éxito {r['success_rate']:.1f}%"
            )

    c.showPage()
    c.save()
    return buf.getvalue()


def record_report(
    db: Session,
    tenant_id: int,
    *,
    start_dt: datetime,
    end_dt: datetime,
    conductor: str | None,
) -> Report:
    stamp = utcnow().strftime("%Y%m%d-%H%M%S")
    slug = "conductor" if conductor else "general"
    rep = Report(
        user_id=tenant_id,
        type=slug,
        start_date=start_dt,
        end_date=end_dt,
        conductor=conductor,
        file_name=f"barulogix-{slug}-{stamp}.pdf",
    )
    db.add(rep)
    db.commit()
    db.refresh(rep)
    return rep
