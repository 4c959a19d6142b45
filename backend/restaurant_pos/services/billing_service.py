"""Bills: numbering, service-charge totals and the PDF rendition."""

import io
import logging
import random
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.orm import Session

from restaurant_pos.core.config import settings
from restaurant_pos.core.errors import BadRequestError
from restaurant_pos.models.order import Order
from restaurant_pos.models.settings import THEMES, RestaurantSettings
from restaurant_pos.schemas.settings import SettingsUpdate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def get_restaurant_settings(db: Session) -> RestaurantSettings:
    """The settings row, created with defaults on first access."""
    row = db.query(RestaurantSettings).order_by(RestaurantSettings.id).first()
    if row is None:
        row = RestaurantSettings(service_charge_rate=Decimal("0"), theme="blue")
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def update_restaurant_settings(db: Session, data: SettingsUpdate) -> RestaurantSettings:
    row = get_restaurant_settings(db)
    if data.service_charge_rate is not None:
        if not Decimal("0") <= data.service_charge_rate <= Decimal("100"):
            raise BadRequestError("Service charge rate must be between 0 and 100")
        row.service_charge_rate = data.service_charge_rate
    if data.theme is not None:
        theme = data.theme.strip().lower()
        if theme not in THEMES:
            raise BadRequestError("Invalid theme", extra={"allowed": list(THEMES)})
        row.theme = theme
    db.commit()
    db.refresh(row)
    logger.info(f"Settings updated: service charge {row.service_charge_rate}%, theme {row.theme}")
    return row


def generate_bill_number(db: Session, now: Optional[datetime] = None) -> str:
    """``BILL-YYYYMMDD-NNNN`` with a random 4-digit suffix not yet used."""
    now = now or datetime.now(timezone.utc)
    prefix = f"BILL-{now:%Y%m%d}-"
    for _ in range(20):
        candidate = f"{prefix}{random.randint(0, 9999):04d}"
        if not db.query(Order.id).filter(Order.bill_number == candidate).first():
            return candidate
    raise RuntimeError(f"Could not allocate a unique bill number for {now:%Y-%m-%d}")


def compute_totals(order: Order, service_charge_rate: Decimal) -> Dict[str, Decimal]:
    """Subtotal is the order total; the service charge is a percentage of it."""
    subtotal = Decimal(order.total_amount)
    rate = Decimal(service_charge_rate)
    service_charge = (subtotal * rate / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)
    return {
        "subtotal": subtotal,
        "service_charge_rate": rate,
        "service_charge": service_charge,
        "total": subtotal + service_charge,
    }


def _money(value) -> str:
    return f"{settings.currency_label} {Decimal(value):.2f}"


def _rate(value: Decimal) -> str:
    return f"{Decimal(value).normalize():f}"


def generate_bill_pdf(order: Order, service_charge_rate: Decimal) -> bytes:
    """Render an order's bill as an A4 PDF."""
    totals = compute_totals(order, service_charge_rate)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4, topMargin=2 * cm, bottomMargin=2 * cm,
        title=f"Bill #{order.id}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "BillTitle",
        parent=styles["Heading1"],
        fontSize=18,
        alignment=1,
        spaceAfter=6,
    )
    small_style = ParagraphStyle("Small", parent=styles["Normal"], fontSize=8, textColor=colors.grey)
    normal = styles["Normal"]

    elements = [
        Paragraph(settings.restaurant_name, title_style),
        Paragraph("Thank you for dining with us!", ParagraphStyle("Center", parent=normal, alignment=1)),
        Spacer(1, 0.6 * cm),
        Paragraph(f"<b>Bill #:</b> {order.id}", normal),
    ]
    if order.bill_number:
        elements.append(Paragraph(f"<b>Bill Number:</b> {order.bill_number}", normal))
    if order.table_number:
        elements.append(Paragraph(f"<b>Table:</b> {order.table_number}", normal))
    if order.created_at:
        elements.append(Paragraph(f"<b>Date:</b> {order.created_at:%B %d, %Y at %I:%M %p}", normal))
    if order.staff:
        elements.append(Paragraph(f"<b>Served by:</b> {order.staff.name}", normal))

    if order.customer_name or order.customer_email or order.customer_phone:
        elements.append(Spacer(1, 0.4 * cm))
        elements.append(Paragraph("<b>Customer</b>", styles["Heading4"]))
        if order.customer_name:
            elements.append(Paragraph(f"<b>Name:</b> {order.customer_name}", normal))
        if order.customer_email:
            elements.append(Paragraph(f"<b>Email:</b> {order.customer_email}", normal))
        if order.customer_phone:
            elements.append(Paragraph(f"<b>Phone:</b> {order.customer_phone}", normal))

    elements.append(Spacer(1, 0.6 * cm))

    # Items table
    table_data = [["Item", "Portion", "Qty", "Unit Price", "Total"]]
    for item in order.items:
        cell = [Paragraph(item.food_item.name, normal)]
        if item.special_requests:
            cell.append(Paragraph(f"Special: {item.special_requests}", small_style))
        table_data.append([
            cell,
            item.portion.name,
            str(item.quantity),
            _money(item.unit_price),
            _money(item.total_price),
        ])

    table_data.append(["", "", "", "Subtotal:", _money(totals["subtotal"])])
    if totals["service_charge_rate"] > 0:
        table_data.append([
            "", "", "", f"Service Charge ({_rate(totals['service_charge_rate'])}%):",
            _money(totals["service_charge"]),
        ])
    table_data.append(["", "", "", "Total:", _money(totals["total"])])

    summary_rows = len(table_data) - len(order.items) - 1
    table = Table(table_data, colWidths=[6.5 * cm, 3 * cm, 1.5 * cm, 3.5 * cm, 3 * cm])
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2563eb")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 0), (2, -1), "CENTER"),
        ("ALIGN", (3, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 10),
        ("GRID", (0, 0), (-1, -1 - summary_rows), 0.5, colors.grey),
        ("LINEABOVE", (3, -1), (-1, -1), 1, colors.black),
        ("FONTNAME", (3, -1), (-1, -1), "Helvetica-Bold"),
    ]))
    elements.append(table)

    if order.payments:
        elements.append(Spacer(1, 0.6 * cm))
        elements.append(Paragraph("<b>Payment Details</b>", styles["Heading4"]))
        for payment in order.payments:
            elements.append(Paragraph(f"<b>Payment Mode:</b> {payment.payment_mode.value}", normal))
            if payment.reference_number:
                elements.append(Paragraph(f"<b>Reference Number:</b> {payment.reference_number}", normal))
            elements.append(Paragraph(f"<b>Amount Paid:</b> {_money(payment.received_amount)}", normal))
            if payment.balance and payment.balance > 0:
                elements.append(Paragraph(f"<b>Balance:</b> {_money(payment.balance)}", normal))

    if order.notes:
        elements.append(Spacer(1, 0.6 * cm))
        elements.append(Paragraph(f"<b>Notes:</b> {order.notes}", normal))

    elements.append(Spacer(1, 1 * cm))
    elements.append(Paragraph("We appreciate your business and look forward to serving you again!", small_style))

    doc.build(elements)
    logger.debug(f"Rendered bill PDF for order {order.id}")
    return buffer.getvalue()
