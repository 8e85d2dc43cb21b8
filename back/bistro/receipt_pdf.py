"""
Receipt PDF Generator

Printable customer receipts using ReportLab. Every figure comes from the
stored order (snapshot prices and charges fixed at creation); nothing is
recomputed here.
"""

from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from .models import Order, PaymentStatus
from .order_service import HydratedOrder
from .pricing import format_cents


# Color scheme (matching app design)
PRIMARY_COLOR = colors.HexColor("#c45d35")  # Warm terracotta
DARK_COLOR = colors.HexColor("#1f2937")  # Dark gray
MUTED_COLOR = colors.HexColor("#6b7280")  # Muted gray
BORDER_COLOR = colors.HexColor("#e5e7eb")  # Light border
SUCCESS_COLOR = colors.HexColor("#059669")  # Green for totals

_COLUMN_WIDTHS = [85*mm, 20*mm, 32*mm, 33*mm]


def _money(cents: int) -> str:
    return f"${format_cents(cents)}"


def payment_summary(record: Order) -> str:
    """Payment line: Paid by card, or Payment pending (cash) while still open."""
    method = record.payment_method.value.replace('_', ' ') if record.payment_method else None
    if record.payment_status == PaymentStatus.paid:
        return f"Paid by {method}" if method else "Paid"
    summary = f"Payment {record.payment_status.value}"
    return f"{summary} ({method})" if method else summary


def generate_receipt_pdf(order: HydratedOrder, restaurant_name: str = "Bistro") -> BytesIO:
    """
    Generate a receipt for an order.

    Args:
        order: hydrated order (items with their menu items, table, staff)
        restaurant_name: name printed in the header

    Returns:
        BytesIO buffer containing the PDF
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=20*mm,
        leftMargin=20*mm,
        topMargin=20*mm,
        bottomMargin=20*mm,
        title=f"Receipt #{order.order.order_number}",
    )

    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'ReceiptTitle',
        parent=styles['Heading1'],
        fontSize=22,
        textColor=PRIMARY_COLOR,
        alignment=TA_RIGHT,
    )

    subtitle_style = ParagraphStyle(
        'ReceiptSubtitle',
        parent=styles['Normal'],
        fontSize=11,
        textColor=MUTED_COLOR,
        alignment=TA_RIGHT,
    )

    restaurant_style = ParagraphStyle(
        'Restaurant',
        parent=styles['Normal'],
        fontSize=16,
        textColor=DARK_COLOR,
        fontName='Helvetica-Bold',
    )

    details_style = ParagraphStyle(
        'Details',
        parent=styles['Normal'],
        fontSize=10,
        textColor=MUTED_COLOR,
        leading=14,
    )

    normal_style = ParagraphStyle(
        'NormalText',
        parent=styles['Normal'],
        fontSize=10,
        textColor=DARK_COLOR,
        leading=14,
    )

    modifications_style = ParagraphStyle(
        'Modifications',
        parent=normal_style,
        fontSize=8,
        textColor=MUTED_COLOR,
    )

    totals_style = ParagraphStyle(
        'Totals',
        parent=styles['Normal'],
        fontSize=10,
        textColor=DARK_COLOR,
        alignment=TA_RIGHT,
    )

    total_bold_style = ParagraphStyle(
        'TotalBold',
        parent=styles['Normal'],
        fontSize=12,
        textColor=SUCCESS_COLOR,
        fontName='Helvetica-Bold',
        alignment=TA_RIGHT,
    )

    footer_style = ParagraphStyle(
        'Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=MUTED_COLOR,
        alignment=TA_CENTER,
    )

    record = order.order
    story = []

    # ===== HEADER =====
    created = record.created_at.strftime('%B %d, %Y %I:%M %p') if record.created_at else ''
    where = f"Table {order.table.number}" if order.table else "Take-away"

    header_table = Table(
        [
            [
                Paragraph(escape(restaurant_name), restaurant_style),
                Paragraph("RECEIPT", title_style),
            ],
            [
                Paragraph(where, details_style),
                Paragraph(f"<b>Order #</b> {record.order_number}", subtitle_style),
            ],
            [
                Paragraph(
                    f"Served by {escape(order.staff.name)}" if order.staff else "",
                    details_style,
                ),
                Paragraph(created, subtitle_style),
            ],
        ],
        colWidths=[90*mm, 80*mm],
    )
    header_table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
    ]))
    story.append(header_table)
    if record.customer_name:
        story.append(Paragraph(f"Customer: {escape(record.customer_name)}", details_style))
    story.append(Spacer(1, 6*mm))
    story.append(HRFlowable(width="100%", thickness=1, color=BORDER_COLOR))
    story.append(Spacer(1, 4*mm))

    # ===== ITEMS =====
    table_data = [[
        Paragraph("<b>Item</b>", normal_style),
        Paragraph("<b>Qty</b>", normal_style),
        Paragraph("<b>Price</b>", normal_style),
        Paragraph("<b>Total</b>", normal_style),
    ]]

    for line in order.items:
        name = escape(line.menu_item.name) if line.menu_item else "Item"
        if line.item.modifications:
            name += f"<br/><font size=8>{escape(line.item.modifications)}</font>"
        table_data.append([
            Paragraph(name, normal_style),
            Paragraph(str(line.item.quantity), normal_style),
            Paragraph(_money(line.item.price_cents), normal_style),
            Paragraph(_money(line.item.price_cents * line.item.quantity), normal_style),
        ])

    if not order.items:
        table_data.append([
            Paragraph("No items on this order", modifications_style), "", "", "",
        ])

    items_table = Table(table_data, colWidths=_COLUMN_WIDTHS, repeatRows=1)
    items_table.setStyle(TableStyle([
        # Header row
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor("#f9fafb")),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('TOPPADDING', (0, 0), (-1, 0), 8),

        # Data rows
        ('TOPPADDING', (0, 1), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 1), (-1, -1), 6),

        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),

        ('LINEBELOW', (0, 0), (-1, 0), 1, BORDER_COLOR),
        ('LINEBELOW', (0, 1), (-1, -2), 0.5, BORDER_COLOR),
        ('LINEBELOW', (0, -1), (-1, -1), 1, BORDER_COLOR),
    ]))
    story.append(items_table)

    # ===== TOTALS =====
    story.append(Spacer(1, 5*mm))

    totals_data = [
        ["", "", Paragraph("Subtotal:", totals_style), Paragraph(_money(record.subtotal_cents), totals_style)],
        ["", "", Paragraph("Tax:", totals_style), Paragraph(_money(record.tax_cents), totals_style)],
    ]
    if record.service_charge_cents:
        totals_data.append(
            ["", "", Paragraph("Service:", totals_style), Paragraph(_money(record.service_charge_cents), totals_style)]
        )
    totals_data.append(
        ["", "", Paragraph("<b>TOTAL:</b>", totals_style), Paragraph(_money(record.total_cents), total_bold_style)]
    )

    totals_table = Table(totals_data, colWidths=_COLUMN_WIDTHS)
    totals_table.setStyle(TableStyle([
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]))
    story.append(totals_table)

    # ===== PAYMENT =====
    story.append(Spacer(1, 6*mm))
    story.append(Paragraph(payment_summary(record), details_style))

    if record.notes:
        story.append(Spacer(1, 3*mm))
        story.append(Paragraph(escape(record.notes), modifications_style))

    # ===== FOOTER =====
    story.append(Spacer(1, 15*mm))
    story.append(HRFlowable(width="100%", thickness=0.5, color=BORDER_COLOR))
    story.append(Spacer(1, 3*mm))
    story.append(Paragraph("Thank you for dining with us", footer_style))
    printed_at = datetime.now().strftime('%B %d, %Y at %I:%M %p')
    story.append(Paragraph(f"Printed on {printed_at}", footer_style))

    doc.build(story)
    buffer.seek(0)
    return buffer
