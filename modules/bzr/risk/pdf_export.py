"""PDF generation for the per-position risk assessment table."""

from __future__ import annotations

import os
from io import BytesIO
from typing import Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .models import HazardAssessment
from .service import band_counts, score

BAND_COLORS = {
    "acceptable": colors.HexColor("#DFF6DD"),
    "monitor": colors.HexColor("#FFF4CE"),
    "unacceptable": colors.HexColor("#FDE7E9"),
}


def _font_names() -> tuple[str, str]:
    """Use a TTF font with Cyrillic glyphs when one is configured."""
    path = os.environ.get("BZR_PDF_FONT")
    if path and os.path.exists(path):
        if "BzrSans" not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont("BzrSans", path))
        return "BzrSans", "BzrSans"
    return "Helvetica", "Helvetica-Bold"


def build_pdf(
    *,
    position_name: str,
    assessments: Sequence[HazardAssessment],
    company_name: str | None = None,
    document_version: str | None = None,
) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        title=f"Procena rizika - {position_name}",
        leftMargin=36,
        rightMargin=36,
        topMargin=54,
        bottomMargin=36,
    )
    regular, bold = _font_names()
    styles = getSampleStyleSheet()
    header_style = styles["Heading2"]
    header_style.fontName = bold
    body_style = styles["BodyText"]
    body_style.fontName = regular

    elements = []
    title = f"Procena rizika: {position_name}"
    if company_name:
        title = f"{company_name} - {title}"
    elements.append(Paragraph(title, header_style))
    elements.append(Spacer(1, 12))

    counts = band_counts(assessments)
    meta_lines = [
        f"Verzija dokumenta: {document_version or '-'}",
        f"Broj opasnosti: {len(assessments)}",
        "Rezidualni rizik: "
        + ", ".join(f"{code} {count}" for code, count in counts.items()),
    ]
    for line in meta_lines:
        elements.append(Paragraph(line, body_style))
    elements.append(Spacer(1, 18))

    table_data = [["#", "Opasnost", "E", "P", "F", "Ri", "Mere", "E", "P", "F", "R", "Nivo rizika"]]
    row_styles = []
    for idx, assessment in enumerate(assessments, start=1):
        initial = score(*assessment.initial)
        residual = score(*assessment.residual)
        table_data.append(
            [
                str(idx),
                Paragraph(
                    f"{assessment.hazard_code} {assessment.hazard_description or ''}".strip(),
                    body_style,
                ),
                str(assessment.initial_e),
                str(assessment.initial_p),
                str(assessment.initial_f),
                str(initial.value),
                Paragraph(assessment.corrective_measures or "", body_style),
                str(assessment.residual_e),
                str(assessment.residual_p),
                str(assessment.residual_f),
                str(residual.value),
                Paragraph(residual.band.label, body_style),
            ]
        )
        row_styles.append(("BACKGROUND", (10, idx), (11, idx), BAND_COLORS[residual.band.code]))

    table = Table(
        table_data,
        repeatRows=1,
        colWidths=[24, 150, 24, 24, 24, 32, 200, 24, 24, 24, 32, 120],
    )
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("FONTNAME", (0, 0), (-1, 0), bold),
                ("FONTNAME", (0, 1), (-1, -1), regular),
                ("ALIGN", (0, 0), (0, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                *row_styles,
            ]
        )
    )
    elements.append(table)
    doc.build(elements)
    return buffer.getvalue()
