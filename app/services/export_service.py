"""
CSV builders for the accounting exports (grouped purchases and invoices)
"""
import csv
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from io import StringIO
from typing import Iterable, List, Optional

from app.core.timeutils import utcnow

UTF8_BOM = "\ufeff"

PURCHASE_EXPORT_HEADERS = [
    "TIPO",
    "CANTIDAD",
    "VALOR X UNIDAD",
    "VALOR TOTAL",
    "MÉTODO DE PAGO",
    "NOMBRE",
    "APELLIDO",
    "CÉDULA",
    "DIRECCIÓN",
    "CORREO",
    "TELÉFONO",
    "TRANSACTION ID",
]

INVOICE_EXPORT_HEADERS = [
    "id", "customer_name", "customer_email", "customer_address", "customer_cedula",
    "package_name", "quantity", "subtotal", "iva_amount", "total", "status", "missing_fields",
]

EXPORT_VAT_RATE = Decimal("1.15")
CENT = Decimal("0.01")


@dataclass
class PurchaseGroup:
    """All purchases of one package by one member"""
    tipo: str
    unit_price: Decimal
    nombre: str
    apellido: str
    cedula: str
    direccion: str
    correo: str
    telefono: str
    cantidad: int = 0
    transaction_ids: List[str] = field(default_factory=list)
    authorization_codes: List[str] = field(default_factory=list)

    @property
    def unit_price_with_vat(self) -> Decimal:
        return (self.unit_price * EXPORT_VAT_RATE).quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def total(self) -> Decimal:
        return self.unit_price_with_vat * self.cantidad

    @property
    def payment_method(self) -> str:
        return "App" if (self.transaction_ids or self.authorization_codes) else "Otros"

    @property
    def reference_ids(self) -> str:
        ids = self.transaction_ids or self.authorization_codes
        return ", ".join(ids) if ids else "N/A"


def split_full_name(full_name: Optional[str]) -> tuple[str, str]:
    parts = (full_name or "N/A").split(" ")
    return parts[0] or "N/A", " ".join(parts[1:])


def _usable_reference(value: Optional[str]) -> bool:
    return bool(value) and value != "N/A"


def group_purchases(purchases: Iterable) -> List[PurchaseGroup]:
    """Group purchases by (member email, package name), keeping first-seen order."""
    groups: dict = {}
    for purchase in purchases:
        user = purchase.user
        package = purchase.package
        email = (user.email if user else None) or "N/A"
        package_name = (package.name if package else None) or "N/A"
        key = (email, package_name)

        group = groups.get(key)
        if group is None:
            nombre, apellido = split_full_name(user.name if user else None)
            group = PurchaseGroup(
                tipo=package_name,
                unit_price=Decimal(str(package.price)) if package and package.price is not None else Decimal("0"),
                nombre=nombre,
                apellido=apellido,
                cedula=(user.cedula if user else None) or "N/A",
                direccion=(user.address if user else None) or "N/A",
                correo=email,
                telefono=(user.phone if user else None) or "N/A",
            )
            groups[key] = group

        group.cantidad += 1
        if _usable_reference(purchase.transaction_id):
            group.transaction_ids.append(purchase.transaction_id)
        if _usable_reference(purchase.authorization_code):
            group.authorization_codes.append(purchase.authorization_code)

    return list(groups.values())


def build_purchases_csv(purchases: Iterable) -> str:
    """Grouped purchases CSV, every field quoted, prefixed with a UTF-8 BOM."""
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(PURCHASE_EXPORT_HEADERS)
    for group in group_purchases(purchases):
        writer.writerow([
            group.tipo,
            str(group.cantidad),
            f"${group.unit_price_with_vat:.2f}",
            f"${group.total:.2f}",
            group.payment_method,
            group.nombre,
            group.apellido,
            group.cedula,
            group.direccion,
            group.correo,
            group.telefono,
            group.reference_ids,
        ])
    return UTF8_BOM + output.getvalue().rstrip("\n")


def empty_purchases_csv() -> str:
    return UTF8_BOM + ",".join(PURCHASE_EXPORT_HEADERS)


def purchases_export_filename(
    user: Optional[str],
    status: Optional[str],
    date_from: Optional[str],
    date_to: Optional[str],
    now: Optional[datetime] = None,
) -> str:
    parts = ["paquetes_clases_agrupados"]
    if user:
        parts.append(f"usuario_{user}")
    if status and status != "todos":
        parts.append(status)
    if date_from or date_to:
        parts.append("filtrado_fecha")
    stamp = (now or utcnow()).strftime("%Y_%m_%d_%H-%M")
    return f"{'_'.join(parts)}_{stamp}.csv"


def _plain(value) -> str:
    # Commas would break the unquoted invoice CSV
    return ("" if value is None else str(value)).replace(",", " ")


def build_invoices_csv(invoices: Iterable) -> str:
    lines = [",".join(INVOICE_EXPORT_HEADERS)]
    for invoice in invoices:
        row = [
            invoice.id, invoice.customer_name, invoice.customer_email, invoice.customer_address,
            invoice.customer_cedula, invoice.package_name, invoice.quantity, invoice.subtotal,
            invoice.iva_amount, invoice.total, invoice.status,
            "|".join(invoice.missing_fields or []),
        ]
        lines.append(",".join(_plain(value) for value in row))
    return "\n".join(lines)
