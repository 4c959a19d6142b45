"""Bill notifications to customers over email and SMS.

Both channels are attempted independently; each returns a result dict
(``{"success": bool, "message"|"error": str}``) and neither raises, so a
delivery problem never undoes the order it reports on.
"""

import html
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from restaurant_pos.core.config import settings
from restaurant_pos.core.email import get_email_service
from restaurant_pos.models.order import Order
from restaurant_pos.services.sms_service import get_sms_service

logger = logging.getLogger(__name__)


def _amount(value) -> str:
    return f"{settings.currency_label} {Decimal(value):.2f}"


def bill_subject(order: Order) -> str:
    subject = f"Your Bill - Order #{order.id}"
    if order.bill_number:
        subject += f" (Bill #{order.bill_number})"
    return subject


def bill_email_html(order: Order, customer_name: Optional[str]) -> str:
    """HTML body for the bill email."""
    # Customer names are stored HTML-escaped
    name = customer_name or "Valued Customer"
    bill_url = html.escape(settings.bill_url(order.id), quote=True)
    bill_line = f"<p><strong>Bill #:</strong> {order.bill_number}</p>" if order.bill_number else ""
    staff_line = f"<p><strong>Served by:</strong> {order.staff.name}</p>" if order.staff else ""
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Your Bill - {html.escape(settings.restaurant_name)}</title>
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
  </head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; background-color: #f8f9fa;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px; background-color: white; border-radius: 8px;">
      <div style="text-align: center; background: #2563eb; color: white; padding: 20px; border-radius: 8px;">
        <h1 style="margin: 0; font-size: 24px;">Thank you for dining with us!</h1>
      </div>
      <p>Dear {name},</p>
      <p>Thank you for choosing our restaurant. Your bill is ready for review.</p>
      <div style="background: #f8f9fa; padding: 20px; border-radius: 8px; border-left: 4px solid #2563eb;">
        <h3 style="margin-top: 0; color: #2563eb;">Order Summary</h3>
        <p><strong>Order #:</strong> {order.id}</p>
        {bill_line}
        <p><strong>Order Type:</strong> {order.order_type.value}</p>
        <p><strong>Total Amount:</strong> {_amount(order.total_amount)}</p>
        {staff_line}
      </div>
      <div style="text-align: center; margin: 30px 0;">
        <a href="{bill_url}" style="display: inline-block; background: #2563eb; color: white; padding: 14px 28px; text-decoration: none; border-radius: 6px;">View &amp; Download Bill</a>
      </div>
      <p>You can view and download your detailed bill by clicking the button above.</p>
      <div style="text-align: center; margin-top: 30px; color: #666; font-size: 14px;">
        <p>We appreciate your business and look forward to serving you again!</p>
        <p>If you have any questions about your bill, please don't hesitate to contact us.</p>
      </div>
    </div>
  </body>
</html>
"""


def bill_email_text(order: Order, customer_name: Optional[str]) -> str:
    name = html.unescape(customer_name or "Valued Customer")
    lines = [
        f"Dear {name},",
        "",
        "Thank you for choosing our restaurant. Your bill is ready for review.",
        "",
        f"Order #: {order.id}",
    ]
    if order.bill_number:
        lines.append(f"Bill #: {order.bill_number}")
    lines += [
        f"Order Type: {order.order_type.value}",
        f"Total Amount: {_amount(order.total_amount)}",
        "",
        f"View your bill: {settings.bill_url(order.id)}",
    ]
    return "\n".join(lines)


def bill_sms_text(order: Order, customer_name: Optional[str]) -> str:
    name = html.unescape(customer_name or "Valued Customer")
    bill_ref = f" (Bill #{order.bill_number})" if order.bill_number else ""
    return (
        f"Dear {name},\n\n"
        f"Your bill for Order #{order.id}{bill_ref} is ready!\n\n"
        f"Total Amount: {_amount(order.total_amount)}\n"
        f"Order Type: {order.order_type.value}\n\n"
        f"View your bill: {settings.bill_url(order.id)}\n\n"
        f"Thank you for dining with us!\n\n"
        f"Best Regards,\n"
        f"{settings.sms_signature}"
    )


def send_bill_email(order: Order, email: str, customer_name: Optional[str] = None) -> Dict[str, Any]:
    result = get_email_service().send(
        to=email,
        subject=bill_subject(order),
        body=bill_email_text(order, customer_name),
        html_body=bill_email_html(order, customer_name),
    )
    if not result["success"]:
        logger.warning(f"Bill email for order {order.id} not delivered: {result.get('error')}")
    return result


def send_bill_sms(order: Order, phone: str, customer_name: Optional[str] = None) -> Dict[str, Any]:
    result = get_sms_service().send(phone, bill_sms_text(order, customer_name))
    if not result["success"]:
        logger.warning(f"Bill SMS for order {order.id} not delivered: {result.get('error')}")
    return result


def notify_bill(
    order: Order,
    email: Optional[str],
    phone: Optional[str],
    customer_name: Optional[str] = None,
) -> Dict[str, Optional[Dict[str, Any]]]:
    """Send the bill over every channel we have contact details for.

    A channel without contact details yields ``None``.
    """
    email_result = send_bill_email(order, email, customer_name) if email else None
    sms_result = send_bill_sms(order, phone, customer_name) if phone else None
    return {"email_result": email_result, "sms_result": sms_result}
