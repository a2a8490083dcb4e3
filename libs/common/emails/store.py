"""
Store-related email templates.
"""

from html import escape
from typing import Any, Optional

import httpx
from libs.common.emails.core import send_email


def render_order_confirmation(
    customer_name: str,
    order_id: str,
    order_date: str,
    order_total: str,
    items: list[dict[str, Any]],  # [{"product_name": str, "quantity": int, "subtotal": str}]
) -> tuple[str, str, str]:
    """Return (subject, text_body, html_body) for an order confirmation."""
    short_id = order_id[:8].upper()
    subject = f"Order Confirmed - #{short_id}"

    items_text = "\n".join(
        f"  - {item['product_name']} x{item['quantity']} - {item['subtotal']}"
        for item in items
    )
    items_html = "".join(
        f"<tr><td>{escape(str(item['product_name']))}</td>"
        f"<td style='text-align:center'>{item['quantity']}</td>"
        f"<td style='text-align:right'>{escape(str(item['subtotal']))}</td></tr>"
        for item in items
    )

    body = f"""Hi {customer_name},

Thank you for your order! We've received your payment and your order is now being processed.

Order #{short_id}
Date: {order_date}

Items:
{items_text}

Total: {order_total}

We'll let you know as soon as your order ships.

— The Joulaa Team
"""

    html_body = f"""
<!DOCTYPE html>
<html>
<head>
    <style>
        body {{ font-family: 'Helvetica Neue', Arial, sans-serif; line-height: 1.6; color: #333; background-color: #f9f9f9; }}
        .container {{ max-width: 600px; margin: 0 auto; background: #ffffff; border-radius: 8px; overflow: hidden; }}
        .header {{ background: linear-gradient(135deg, #ff7eb3 0%, #ff758c 100%); color: white; padding: 30px 20px; text-align: center; }}
        .content {{ padding: 30px 20px; }}
        table {{ width: 100%; border-collapse: collapse; }}
        th, td {{ padding: 10px; text-align: left; border-bottom: 1px solid #eaeaea; }}
        .total {{ font-weight: bold; font-size: 18px; margin-top: 15px; }}
        .footer {{ background-color: #f5f5f5; padding: 20px; text-align: center; font-size: 12px; color: #666; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header"><h1>Thank you for your order!</h1></div>
        <div class="content">
            <p>Hi {escape(customer_name)},</p>
            <p>We've received your payment and your order is now being processed.</p>
            <p><strong>Order #{short_id}</strong><br>Date: {escape(order_date)}</p>
            <table>
                <tr><th>Item</th><th style="text-align:center">Qty</th><th style="text-align:right">Subtotal</th></tr>
                {items_html}
            </table>
            <p class="total">Total: {escape(order_total)}</p>
        </div>
        <div class="footer">Joulaa &middot; Beauty, delivered</div>
    </div>
</body>
</html>
"""
    return subject, body, html_body


async def send_order_confirmation_email(
    to_email: str,
    customer_name: str,
    order_id: str,
    order_date: str,
    order_total: str,
    items: list[dict[str, Any]],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[str, Any]:
    """
    Send order confirmation email when payment is successful.
    """
    subject, body, html_body = render_order_confirmation(
        customer_name, order_id, order_date, order_total, items
    )
    return await send_email(
        to_email=to_email,
        subject=subject,
        html_body=html_body,
        text_body=body,
        transport=transport,
    )
