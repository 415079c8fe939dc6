"""
Contífico electronic invoicing client
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

import httpx

import app.core.config as config
from app.core.logging_config import get_logger

logger = get_logger("services.contifico")


class ContificoError(Exception):
    """A document was rejected or the API answered something unusable."""


def document_number(prefix: str, sequence: int) -> str:
    """``001-001-`` + 9-digit zero padded sequence."""
    return f"{prefix}{sequence:09d}"


def issue_date(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(ZoneInfo(config.STUDIO_TIMEZONE))
    return now.strftime("%d/%m/%Y")


def build_invoice_payload(
    invoice,
    *,
    document: str,
    product_id: str,
    fecha_emision: str,
) -> dict:
    """Contífico FAC document for one invoice row.

    Amounts on the invoice already include VAT; `subtotal` is the taxable base.
    """
    iva_percentage = Decimal(str(invoice.iva_percentage if invoice.iva_percentage is not None else "0.15"))
    porcentaje_iva = int((iva_percentage * 100).to_integral_value())
    subtotal = float(invoice.subtotal)
    quantity = int(invoice.quantity)
    unit_base_price = round(subtotal / quantity, 6)
    description = invoice.package_name or "SERVICIO"
    taxed = porcentaje_iva > 0

    return {
        "pos": config.CONTIFICO_POS_ID,
        "fecha_emision": fecha_emision,
        "tipo_documento": "FAC",
        "documento": document,
        "estado": "P",
        "autorizacion": "",
        "cliente": {
            "cedula": invoice.customer_cedula,
            "razon_social": invoice.customer_name,
            "direccion": invoice.customer_address or "",
            "tipo": "N",
            "email": invoice.customer_email or "",
        },
        "descripcion": description,
        "subtotal_0": 0 if taxed else subtotal,
        "subtotal_12": subtotal if taxed else 0,
        "iva": round(float(invoice.iva_amount), 2),
        "total": round(float(invoice.total), 2),
        "detalles": [
            {
                "producto_id": product_id,
                "cantidad": quantity,
                "precio": unit_base_price,
                "porcentaje_iva": porcentaje_iva,
                "porcentaje_descuento": 0,
                "base_cero": 0 if taxed else subtotal,
                "base_gravable": subtotal if taxed else 0,
                "base_no_gravable": 0,
                "descripcion_adicional": description,
            }
        ],
        "electronico": True,
    }


async def send_document(client: httpx.AsyncClient, payload: dict) -> str:
    """POST a document and return the id Contífico assigned to it."""
    response = await client.post(
        config.CONTIFICO_API_URL,
        json=payload,
        headers={"Authorization": config.CONTIFICO_API_KEY or "", "Content-Type": "application/json"},
    )
    if not response.is_success:
        raise ContificoError(f"Contifico HTTP {response.status_code}: {response.text}")

    try:
        data = response.json()
    except ValueError:
        data = None
    contifico_id = data.get("id") if isinstance(data, dict) else None
    if not contifico_id:
        raise ContificoError("Respuesta de Contífico sin id")

    logger.info(f"Contífico document {payload.get('documento')} accepted as {contifico_id}")
    return str(contifico_id)


def new_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=transport, timeout=30.0)
