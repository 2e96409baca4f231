"""
Generación de solicitudes de pago UPI (deep link + código QR).

No hay pasarela: el comprador escanea el QR con su app bancaria y después
envía el id de transacción para que un administrador lo verifique a mano.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from urllib.parse import quote
import base64
import io
import logging

import qrcode

from app.core.config import settings
from app.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

UPI_CURRENCY = "INR"


def format_amount(amount) -> str:
    """
    Formatea el monto como lo espera el parámetro `am` de UPI.

    Los montos enteros van sin decimales (`500`), el resto con dos (`499.50`).
    """
    value = Decimal(str(amount))
    if value == value.to_integral_value():
        return str(int(value))
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def build_upi_link(upi_id: str, payee_name: str, amount) -> str:
    return (
        f"upi://pay?pa={quote(upi_id, safe='')}"
        f"&pn={quote(payee_name, safe='')}"
        f"&am={quote(format_amount(amount), safe='')}"
        f"&cu={UPI_CURRENCY}"
    )


def render_qr_data_url(text: str) -> str:
    """Codifica `text` como QR y lo devuelve como data URL PNG."""
    image = qrcode.make(text)
    buffer = io.BytesIO()
    image.save(buffer)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def generate_payment_qr(
    amount,
    upi_id: Optional[str] = None,
    payee_name: Optional[str] = None,
) -> dict:
    """
    Genera el QR de pago para un monto.

    No está ligado a ninguna orden: es solo una cotización que el cliente
    muestra en el checkout.

    Args:
        `amount`: Monto a cobrar en INR
        `upi_id`: VPA del comercio (por defecto `settings.UPI_ID`)
        `payee_name`: Nombre del comercio (por defecto `settings.PAYEE_NAME`)

    Returns:
        `dict` con `qr_code`, `upi_link`, `upi_id`, `name` y `total_amount`

    Raises:
        `ConfigurationError`: si no hay UPI del comercio configurado
    """
    upi_id = upi_id or settings.UPI_ID
    payee_name = payee_name or settings.PAYEE_NAME
    if not upi_id:
        logger.error("UPI_ID no configurado; no se puede generar el QR de pago")
        raise ConfigurationError("El método de pago UPI no está configurado")

    upi_link = build_upi_link(upi_id, payee_name, amount)
    logger.info(f"QR UPI generado por {format_amount(amount)} {UPI_CURRENCY}")
    return {
        "qr_code": render_qr_data_url(upi_link),
        "upi_link": upi_link,
        "upi_id": upi_id,
        "name": payee_name,
        "total_amount": amount,
    }
