# Overview: Price-list exports; groups catalog rows by category and renders PDF and CSV documents.

"""
Export Service

Renders the shop price list from product-list rows (or any objects with
`name`, `mrp`, `category`, `sub_category`, `is_active`, `available` and
`created_at`). All functions are pure: they take rows and return bytes/str.

PDF layout (A4, ReportLab platypus):
- store name + subtitle on the first page
- one section per category, in first-seen order of the input
- serial numbers run across sections
- a section starts on a new page when its header and first rows would not fit
- centered page number in every footer
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from io import BytesIO
from typing import Iterable
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import CondPageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..time_utils import format_display_date, iso_date

CATALOG_SUBTITLE = "Complete Product Catalog & Price List"
PDF_CURRENCY_PREFIX = "Rs."
SUBCATEGORY_PLACEHOLDER = "\u2014"
CSV_SUBCATEGORY_PLACEHOLDER = "-"

CSV_HEADERS = ["#", "Product Name", "Category", "Sub-Category", "MRP", "Status", "Availability", "Added Date"]
PDF_COLUMNS = ["S.No.", "Product Name", "Sub-Category", "Price"]

# Rows that must fit below a section header before a page break is forced
MIN_ROWS_AFTER_HEADER = 3

PAGE_MARGIN = 15 * mm
SECTION_HEADER_HEIGHT = 10 * mm
TABLE_ROW_HEIGHT = 6.5 * mm

CSV_SCOPES = ("all", "active", "available", "unavailable")
PDF_SCOPES = ("all", "available", "category")


@dataclass
class ReportGroup:
    category: str
    items: list = field(default_factory=list)


def build_report(products: Iterable, group_by: str = "category") -> list[ReportGroup]:
    """
    Group rows by `group_by`, keeping first-occurrence order for groups and
    input order inside each group. Callers pre-sort (usually category, name).
    """
    groups: dict[str, ReportGroup] = {}
    for product in products:
        key = getattr(product, group_by) or ""
        group = groups.get(key)
        if group is None:
            group = groups[key] = ReportGroup(category=key)
        group.items.append(product)
    return list(groups.values())


def format_indian_number(amount) -> str:
    """
    Indian digit grouping: last three digits, then pairs (12,34,567).
    Whole amounts print without decimals, others with two.
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"))
    negative = value < 0
    value = abs(value)
    whole, _, fraction = f"{value:.2f}".partition(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        whole = ",".join(pairs + [tail])

    text = whole if fraction == "00" else f"{whole}.{fraction}"
    return f"-{text}" if negative else text


def format_price(amount, prefix: str = PDF_CURRENCY_PREFIX) -> str:
    return f"{prefix} {format_indian_number(amount)}"


def store_slug(store_name: str) -> str:
    """'Harshita General Store' -> 'Harshita-General-Store'."""
    slug = re.sub(r"[^A-Za-z0-9]+", "-", (store_name or "").strip()).strip("-")
    return slug or "Store"


def pdf_filename(store_name: str, when: datetime | None = None) -> str:
    return f"{store_slug(store_name)}-Catalog-{iso_date(when)}.pdf"


def csv_filename(scope: str, when: datetime | None = None) -> str:
    return f"product-list-{scope}-{iso_date(when)}.csv"


def select_for_pdf(products: list, scope: str = "all", category: str | None = None) -> list:
    """Export buttons of the product-list screen, applied to already-filtered rows."""
    if scope == "available":
        return [p for p in products if p.available]
    if scope == "category":
        if not category or category == "all":
            return []
        return [p for p in products if p.category == category]
    return list(products)


def select_for_csv(products: list, scope: str = "all") -> list:
    if scope == "active":
        return [p for p in products if p.is_active]
    if scope == "available":
        return [p for p in products if p.available]
    if scope == "unavailable":
        return [p for p in products if not p.available]
    return list(products)


def _styles() -> dict:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "CatalogTitle", parent=base["Title"], fontName="Helvetica-Bold",
            fontSize=18, leading=22, alignment=TA_CENTER, spaceAfter=2 * mm,
        ),
        "subtitle": ParagraphStyle(
            "CatalogSubtitle", parent=base["Normal"], fontName="Helvetica",
            fontSize=11, leading=14, alignment=TA_CENTER, spaceAfter=6 * mm,
        ),
        "section": ParagraphStyle(
            "CatalogSection", parent=base["Normal"], fontName="Helvetica-Bold",
            fontSize=12, leading=15, textColor=colors.Color(30 / 255, 64 / 255, 175 / 255),
        ),
        "cell": ParagraphStyle(
            "CatalogCell", parent=base["Normal"], fontName="Helvetica", fontSize=9, leading=11,
        ),
    }


def _section_header(category: str, width: float, styles: dict) -> Table:
    header = Table(
        [[Paragraph(escape((category or "Uncategorized").upper()), styles["section"])]],
        colWidths=[width],
        rowHeights=[SECTION_HEADER_HEIGHT],
    )
    header.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), colors.Color(240 / 255, 248 / 255, 1)),
        ("BOX", (0, 0), (-1, -1), 0.3, colors.Color(200 / 255, 220 / 255, 240 / 255)),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LEFTPADDING", (0, 0), (-1, -1), 3 * mm),
    ]))
    return header


def _section_table(rows: list[list], width: float) -> Table:
    col_widths = [18 * mm, None, 35 * mm, 32 * mm]
    col_widths[1] = width - sum(w for w in col_widths if w)
    table = Table([PDF_COLUMNS] + rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 10),
        ("BACKGROUND", (0, 0), (-1, 0), colors.Color(248 / 255, 250 / 255, 252 / 255)),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.Color(55 / 255, 65 / 255, 81 / 255)),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 1), (-1, -1), 9),
        ("TEXTCOLOR", (0, 1), (-1, -1), colors.Color(40 / 255, 40 / 255, 40 / 255)),
        ("FONTNAME", (3, 1), (3, -1), "Helvetica-Bold"),
        ("ALIGN", (0, 0), (0, -1), "CENTER"),
        ("ALIGN", (3, 0), (3, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -1), 0.2, colors.Color(220 / 255, 220 / 255, 220 / 255)),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    return table


def _draw_page_number(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 9)
    canvas.setFillColor(colors.Color(120 / 255, 120 / 255, 120 / 255))
    canvas.drawCentredString(doc.pagesize[0] / 2, 10 * mm, str(canvas.getPageNumber()))
    canvas.restoreState()


def render_pdf(groups: list[ReportGroup], store_name: str, *, compress: bool = True) -> bytes:
    """
    Render grouped rows as the catalog PDF and return the document bytes.

    compress=False leaves page content streams as plain text operators.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=20 * mm,
        title=f"{store_name} - Catalog",
        pageCompression=1 if compress else 0,
    )
    styles = _styles()
    width = doc.width

    story = [
        Paragraph(escape(store_name.upper()), styles["title"]),
        Paragraph(CATALOG_SUBTITLE, styles["subtitle"]),
    ]

    # Space a section needs before it is allowed to start on the current page
    needed = SECTION_HEADER_HEIGHT + 4 * mm + TABLE_ROW_HEIGHT * (1 + MIN_ROWS_AFTER_HEADER)

    serial = 1
    for group in groups:
        rows = []
        for product in group.items:
            rows.append([
                str(serial),
                Paragraph(escape(product.name or ""), styles["cell"]),
                product.sub_category or SUBCATEGORY_PLACEHOLDER,
                format_price(product.mrp),
            ])
            serial += 1

        story.append(CondPageBreak(needed))
        story.append(_section_header(group.category, width, styles))
        story.append(Spacer(1, 4 * mm))
        story.append(_section_table(rows, width))
        story.append(Spacer(1, 8 * mm))

    doc.build(story, onFirstPage=_draw_page_number, onLaterPages=_draw_page_number)
    return buffer.getvalue()


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _csv_number(value) -> str:
    number = Decimal(str(value))
    if number == number.to_integral_value():
        return str(int(number))
    return format(number.normalize(), "f")


def render_csv(products: Iterable) -> str:
    """
    Flat CSV, one row per product. Name, category and sub-category are always
    quoted; embedded quotes are doubled.
    """
    lines = [",".join(CSV_HEADERS)]
    for index, product in enumerate(products):
        row = [
            str(index + 1),
            _quote(product.name or ""),
            _quote(product.category or ""),
            _quote(product.sub_category or CSV_SUBCATEGORY_PLACEHOLDER),
            _csv_number(product.mrp),
            "Active" if product.is_active else "Inactive",
            "Available" if product.available else "Unavailable",
            format_display_date(product.created_at),
        ]
        lines.append(",".join(row))
    return "\n".join(lines)
