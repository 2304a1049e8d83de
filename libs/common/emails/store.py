"""
Store order email templates.

Items are passed as ``[{"title": str, "quantity": int, "unit_price": int}]``.
"""

from html import escape
from typing import Literal

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.emails.core import send_email

StatusKind = Literal["confirmed", "cancelled"]

_STYLE = """
        body { font-family: Arial, sans-serif; background: #f5f5f5; padding: 20px; }
        .container { max-width: 600px; margin: 0 auto; background: #fff; padding: 24px; border-radius: 8px; }
        .header { border-bottom: 2px solid #7dff31; padding-bottom: 16px; margin-bottom: 24px; }
        h1 { margin: 0; color: #000; font-size: 24px; }
        .warning { background: #fff3cd; border-left: 4px solid #ffc107; padding: 12px; margin: 16px 0; border-radius: 4px; }
        .status { background: #f0f0f0; padding: 12px; border-radius: 4px; margin: 16px 0; }
        table { width: 100%; margin: 16px 0; }
        td, th { padding: 8px; border-bottom: 1px solid #eee; }
        .total { font-size: 18px; font-weight: bold; text-align: right; padding-top: 16px; border-top: 2px solid #7dff31; }
        .footer { margin-top: 24px; padding-top: 16px; border-top: 1px solid #eee; font-size: 12px; color: #999; }
"""


def format_amount(amount: int) -> str:
    """Format whole currency units with dot thousands separators (es-CL)."""
    return "$" + f"{amount:,}".replace(",", ".")


def short_order_id(order_id: str) -> str:
    return str(order_id)[:8].upper()


def _items_text(items: list[dict]) -> str:
    return "\n".join(
        f"  - {item['title']} x{item['quantity']} - "
        f"{format_amount(item['unit_price'] * item['quantity'])}"
        for item in items
    )


def _items_html(items: list[dict]) -> str:
    return "".join(
        f"<tr><td>{escape(str(item['title']))}</td>"
        f"<td style='text-align:center'>x{item['quantity']}</td>"
        f"<td style='text-align:right'>{format_amount(item['unit_price'] * item['quantity'])}</td></tr>"
        for item in items
    )


def _wrap_html(title: str, inner: str) -> str:
    site_name = escape(get_settings().SITE_NAME)
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <style>{_STYLE}</style>
</head>
<body>
    <div class="container">
        <div class="header"><h1>{title}</h1></div>
        {inner}
        <div class="footer">
            <p>¿Preguntas? Contáctanos respondiendo este email.</p>
            <p>{site_name} | {utc_now().year}</p>
        </div>
    </div>
</body>
</html>
"""


def _items_table(items: list[dict], total: int) -> str:
    return f"""
        <table>
            <thead>
                <tr>
                    <th style="text-align:left">Producto</th>
                    <th style="text-align:center">Cantidad</th>
                    <th style="text-align:right">Subtotal</th>
                </tr>
            </thead>
            <tbody>{_items_html(items)}</tbody>
        </table>
        <div class="total">Total: {format_amount(total)}</div>
"""


async def send_order_summary_email(
    to_email: str,
    buyer_name: str,
    order_id: str,
    items: list[dict],
    total: int,
) -> bool:
    """
    Send the order summary right after checkout, while payment is still pending.
    """
    code = short_order_id(order_id)
    subject = f"Confirmación de compra - Orden {code}"

    body = f"""Hola {buyer_name},

Tu pedido ha sido registrado. Estado: PAGO PENDIENTE.

IMPORTANTE: este es tu comprobante de pedido. Debes completar el pago para
validar tu compra. El personal verificará tu pago antes de entregar los productos.

ID de pedido: {order_id}

{_items_text(items)}

Total: {format_amount(total)}

Próximos pasos:
1. Completa el pago por {format_amount(total)}
2. Presenta este ID en la entrada/barra: {code}
3. El personal verificará tu pago antes de entregar
"""

    inner = f"""
        <p><strong>Hola {escape(buyer_name or "")},</strong></p>
        <p>Tu pedido ha sido registrado. Aquí está el resumen:</p>
        <div class="status"><strong>Estado del pedido:</strong> ⏳ PAGO PENDIENTE</div>
        <div class="warning">
            <strong>⚠️ IMPORTANTE:</strong> Este es tu comprobante de pedido. Debes completar
            el pago para validar tu compra. El personal verificará tu pago antes de entregar los productos.
        </div>
        <p><strong>ID de pedido:</strong> {escape(str(order_id))}</p>
        {_items_table(items, total)}
        <p style="margin-top: 24px; color: #666;"><strong>Próximos pasos:</strong></p>
        <ol style="color: #666;">
            <li>Completa el pago por <strong>{format_amount(total)}</strong></li>
            <li>Presenta este ID en la entrada/barra: <strong>{code}</strong></li>
            <li>El personal verificará tu pago antes de entregar</li>
        </ol>
"""

    return await send_email(
        to_email=to_email,
        subject=subject,
        body=body,
        html_body=_wrap_html("Resumen de tu pedido", inner),
    )


async def send_order_status_email(
    to_email: str,
    buyer_name: str,
    order_id: str,
    status: StatusKind,
    items: list[dict],
    total: int,
) -> bool:
    """
    Notify the buyer that an admin confirmed the payment or cancelled the order.
    """
    code = short_order_id(order_id)
    if status == "confirmed":
        subject = f"Pago confirmado - Orden {code}"
        headline = "✅ PAGO CONFIRMADO"
        message = (
            "Recibimos tu pago. Presenta el código de tu pedido en la entrada/barra "
            "para retirar tus productos."
        )
    else:
        subject = f"Orden anulada - Orden {code}"
        headline = "❌ ORDEN ANULADA"
        message = (
            "Tu pedido fue anulado. Si crees que se trata de un error, "
            "responde este email."
        )

    body = f"""Hola {buyer_name},

Estado del pedido {code}: {headline}

{message}

{_items_text(items)}

Total: {format_amount(total)}
"""

    inner = f"""
        <p><strong>Hola {escape(buyer_name or "")},</strong></p>
        <div class="status"><strong>Estado del pedido:</strong> {headline}</div>
        <p>{message}</p>
        <p><strong>ID de pedido:</strong> {escape(str(order_id))}</p>
        {_items_table(items, total)}
"""

    return await send_email(
        to_email=to_email,
        subject=subject,
        body=body,
        html_body=_wrap_html("Actualización de tu pedido", inner),
    )
