"""
PDF export of tenant statements using ReportLab.
Produces a print-ready A4 document from an already built Statement.
"""
import io
import os
import tempfile
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from nebenkosten.core.statement import RowStyle, SectionKind, Statement, StatementSection
from nebenkosten.exceptions import StatementRenderError
from nebenkosten.utils.logging import get_logger

logger = get_logger(__name__)

LINE_COLOR = colors.HexColor("#999999")
LIGHT_GRAY = colors.HexColor("#f5f5f5")
DARK_GRAY = colors.HexColor("#333333")

ITEM_COL_WIDTHS = [1 * cm, 6 * cm, 3 * cm, 3.5 * cm, 3.5 * cm]


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name="StatementTitle",
        fontSize=18,
        leading=22,
        fontName="Helvetica-Bold",
        spaceBefore=12,
        spaceAfter=10,
    ))
    styles.add(ParagraphStyle(
        name="Body",
        fontSize=10,
        leading=13,
        fontName="Helvetica",
        textColor=DARK_GRAY,
    ))
    styles.add(ParagraphStyle(
        name="NoticeTitle",
        fontSize=10,
        fontName="Helvetica-Bold",
        spaceBefore=8,
        spaceAfter=2,
    ))
    styles.add(ParagraphStyle(
        name="Notice",
        fontSize=8,
        leading=10,
        fontName="Helvetica",
        textColor=DARK_GRAY,
    ))
    return styles


def _paragraphs(lines, style) -> list:
    return [Paragraph(escape(line), style) for line in lines]


def _header_table(section: StatementSection, styles) -> Table:
    """Landlord on the left, tenant on the right."""
    data = [[
        _paragraphs(section.lines, styles["Body"]),
        _paragraphs(section.aside, styles["Body"]),
    ]]
    t = Table(data, colWidths=[8.5 * cm, 8.5 * cm])
    t.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
    ]))
    return t


def _items_table(section: StatementSection) -> Table:
    rows = [row for row in section.rows if row.style != RowStyle.SEPARATOR]
    data = [list(row.cells) for row in rows]
    t = Table(data, colWidths=ITEM_COL_WIDTHS)
    commands = [
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (2, 0), (2, -1), "RIGHT"),
        ("ALIGN", (4, 0), (4, -1), "RIGHT"),
        ("TOPPADDING", (0, 0), (-1, -1), 2),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
        ("LEFTPADDING", (0, 0), (-1, -1), 3),
    ]
    for index, row in enumerate(rows):
        if row.style == RowStyle.HEAD:
            commands += [
                ("FONTNAME", (0, index), (-1, index), "Helvetica-Bold"),
                ("LINEBELOW", (0, index), (-1, index), 0.5, LINE_COLOR),
            ]
        elif row.style == RowStyle.TOTAL:
            commands += [
                ("FONTNAME", (0, index), (-1, index), "Helvetica-Bold"),
                ("BACKGROUND", (0, index), (-1, index), LIGHT_GRAY),
                ("LINEBELOW", (0, index), (-1, index), 0.5, colors.black),
            ]
    t.setStyle(TableStyle(commands))
    return t


def _amount_table(section: StatementSection) -> Table:
    """Label / amount rows aligned with the tenant share column of the items table."""
    rows = [row for row in section.rows if row.style != RowStyle.SEPARATOR]
    data = [[row.cells[0], row.cells[1]] for row in rows]
    t = Table(data, colWidths=[sum(ITEM_COL_WIDTHS[:4]), ITEM_COL_WIDTHS[4]])
    commands = [
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("LEFTPADDING", (0, 0), (-1, -1), 3),
    ]
    if any(row.style == RowStyle.SEPARATOR for row in section.rows):
        commands.append(("LINEBELOW", (0, -1), (-1, -1), 0.5, colors.black))
    for index, row in enumerate(rows):
        if row.style == RowStyle.TOTAL:
            commands.append(("FONTNAME", (0, index), (-1, index), "Helvetica-Bold"))
    t.setStyle(TableStyle(commands))
    return t


def _story(statement: Statement) -> list:
    styles = _styles()
    story: list = []
    for section in statement.sections:
        if section.kind == SectionKind.HEADER:
            story.append(_header_table(section, styles))
        elif section.kind == SectionKind.TITLE:
            story += _paragraphs(section.lines, styles["StatementTitle"])
        elif section.kind == SectionKind.ITEMS:
            story += [Spacer(1, 0.3 * cm), _items_table(section)]
        elif section.kind == SectionKind.PREPAYMENT:
            story.append(_amount_table(section))
        elif section.kind == SectionKind.BALANCE:
            story.append(_amount_table(section))
            story += _paragraphs(section.lines, styles["Body"])
        elif section.kind == SectionKind.DUE_DATE:
            story += [Spacer(1, 0.3 * cm)] + _paragraphs(section.lines, styles["Body"])
        elif section.kind == SectionKind.NOTICES:
            story.append(Spacer(1, 0.4 * cm))
            lines = list(section.lines)
            for title, text in zip(lines[0::2], lines[1::2]):
                story += [
                    Paragraph(escape(title), styles["NoticeTitle"]),
                    Paragraph(escape(text), styles["Notice"]),
                ]
        else:
            story += _paragraphs(section.lines, styles["Body"])
    return story


def generate_statement_pdf(statement: Statement) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, rightMargin=2 * cm, leftMargin=2 * cm,
                            topMargin=1.5 * cm, bottomMargin=1.5 * cm,
                            title=f"Nebenkostenabrechnung {statement.year}")
    try:
        doc.build(_story(statement))
    except Exception as e:
        logger.exception("Rendering statement %s failed", statement.file_name)
        raise StatementRenderError(f"PDF konnte nicht erstellt werden: {e}") from e
    return buf.getvalue()


def write_statement_pdf(statement: Statement, directory: str | os.PathLike | None = None) -> Path:
    """
    Write the statement PDF into directory (default: the system temp dir).
    The file appears atomically; on failure nothing is left behind and nothing is retried.
    """
    target_dir = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    target = target_dir / statement.file_name
    pdf_bytes = generate_statement_pdf(statement)

    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(dir=target_dir, prefix=".", suffix=".pdf.part")
        with os.fdopen(fd, "wb") as f:
            f.write(pdf_bytes)
        os.replace(tmp_path, target)
    except OSError as e:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        logger.error("Writing %s failed: %s", target, e)
        raise StatementRenderError(f"PDF konnte nicht gespeichert werden: {e}") from e

    logger.info("Statement written to %s", target)
    return target
