"""
Electronic invoices: draft generation from purchases and approval through
Contífico.
"""
import re
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, List, Set

import httpx
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

import app.core.config as config
from app.core.conversions import coerce_uuid
from app.core.logging_config import get_logger
from app.core.timeutils import utcnow
from app.models import Invoice, Package, Purchase, User
from app.models.billingModel import (
    DRAFT_STATUSES, INVOICE_DRAFT, INVOICE_DRAFT_INCOMPLETE, INVOICE_ERROR, INVOICE_SENT,
)
from app.services import contifico_service
from app.services.contifico_service import ContificoError

logger = get_logger("crud.billing")

IVA_PERCENTAGE = Decimal("0.15")
CENT = Decimal("0.01")
SIMULATED_MARKERS = ("SIMULATED", "DEV")
TEST_PACKAGE_MARKER = "prueba"
SEQUENCE_PREFIX = re.compile(r"\d{3}-\d{3}-")
APPROVAL_BATCH_SIZE = 10


class BillingConfigError(Exception):
    """The service is missing configuration needed to talk to Contífico."""


@dataclass
class InvoiceResult:
    id: uuid.UUID
    ok: bool
    error: Optional[str] = None
    document: Optional[str] = None


@dataclass
class ApprovalResult:
    approved: int = 0
    errors: int = 0
    results: List[InvoiceResult] = field(default_factory=list)

    def merge(self, other: "ApprovalResult") -> None:
        self.approved += other.approved
        self.errors += other.errors
        self.results.extend(other.results)


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def split_gross_price(gross: Decimal, quantity: int = 1) -> tuple[Decimal, Decimal, Decimal]:
    """Return (subtotal, iva, total) for a VAT-inclusive price."""
    total = _money(gross * quantity)
    subtotal = _money(total / (1 + IVA_PERCENTAGE))
    iva_amount = _money(total - subtotal)
    return subtotal, iva_amount, total


def is_simulated(authorization_code: Optional[str]) -> bool:
    code = (authorization_code or "").upper()
    return any(marker in code for marker in SIMULATED_MARKERS)


def valid_sequence(prefix: Optional[str], start: object) -> bool:
    if not isinstance(prefix, str) or not SEQUENCE_PREFIX.fullmatch(prefix):
        return False
    if not isinstance(start, int) or isinstance(start, bool):
        return False
    return 0 < start and len(str(start)) <= 9


def _missing_customer_fields(user: Optional[User]) -> List[str]:
    # Address is optional; only the cédula is required
    return [] if user is not None and user.cedula else ["cedula"]


async def _invoices_with_status(db: AsyncSession, statuses) -> List[Invoice]:
    result = await db.execute(
        select(Invoice).where(Invoice.status.in_(statuses)).order_by(Invoice.created_at.desc())
    )
    return list(result.scalars().all())


async def list_drafts(db: AsyncSession) -> List[Invoice]:
    return await _invoices_with_status(db, DRAFT_STATUSES)


async def list_sent(db: AsyncSession) -> List[Invoice]:
    return await _invoices_with_status(db, [INVOICE_SENT])


async def list_for_export(db: AsyncSession, ids: Optional[List[str]] = None) -> List[Invoice]:
    stmt = select(Invoice).order_by(Invoice.created_at.desc())
    if ids:
        parsed = [value for value in (coerce_uuid(i) for i in ids) if value]
        stmt = stmt.where(Invoice.id.in_(parsed))
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_draft_invoices(db: AsyncSession) -> List[Invoice]:
    """Create one draft per real, not yet invoiced purchase and return all drafts."""
    invoiced = await db.execute(
        select(Invoice.purchase_id, Invoice.status).where(Invoice.purchase_id.is_not(None))
    )
    skip_purchase_ids: Set[uuid.UUID] = set()
    for purchase_id, status in invoiced.all():
        # Sent, Error and existing drafts all block a new draft
        if status in (INVOICE_SENT, INVOICE_ERROR) or status in DRAFT_STATUSES:
            skip_purchase_ids.add(purchase_id)

    result = await db.execute(
        select(Purchase)
        .options(selectinload(Purchase.user), selectinload(Purchase.package))
        .where(
            and_(
                Purchase.authorization_code.is_not(None),
                Purchase.authorization_code.not_ilike("%SIMULATED%"),
            )
        )
    )

    created = 0
    for purchase in result.scalars().all():
        if is_simulated(purchase.authorization_code) or purchase.id in skip_purchase_ids:
            continue
        package: Optional[Package] = purchase.package
        package_name = package.name if package else None
        if TEST_PACKAGE_MARKER in (package_name or "").lower():
            continue

        user: Optional[User] = purchase.user
        gross = Decimal(str(package.price)) if package and package.price is not None else Decimal("0")
        subtotal, iva_amount, total = split_gross_price(gross)
        missing = _missing_customer_fields(user)

        db.add(
            Invoice(
                purchase_id=purchase.id,
                user_id=purchase.user_id,
                package_id=purchase.package_id,
                package_name=package_name,
                package_price=gross,
                quantity=1,
                iva_percentage=IVA_PERCENTAGE,
                subtotal=subtotal,
                iva_amount=iva_amount,
                total=total,
                status=INVOICE_DRAFT_INCOMPLETE if missing else INVOICE_DRAFT,
                customer_name=user.name if user else None,
                customer_email=user.email if user else None,
                customer_address=user.address if user else None,
                customer_cedula=user.cedula if user else None,
                missing_fields=missing,
            )
        )
        created += 1

    if created:
        await db.commit()
        logger.info(f"Created {created} draft invoices")

    return await list_drafts(db)


async def sync_incomplete_drafts(db: AsyncSession) -> int:
    """Promote incomplete drafts whose member now has the missing data."""
    result = await db.execute(
        select(Invoice).where(Invoice.status == INVOICE_DRAFT_INCOMPLETE)
    )
    incomplete = list(result.scalars().all())

    updated = 0
    for invoice in incomplete:
        if not invoice.user_id:
            continue
        user = (await db.execute(select(User).where(User.id == invoice.user_id))).scalar_one_or_none()
        missing = _missing_customer_fields(user)
        if missing:
            invoice.missing_fields = missing
            continue

        invoice.status = INVOICE_DRAFT
        invoice.customer_address = user.address
        invoice.customer_cedula = user.cedula
        invoice.customer_name = user.name
        invoice.customer_email = user.email
        invoice.missing_fields = []
        updated += 1

    if incomplete:
        await db.commit()
    return updated


def _check_invoice(invoice: Invoice) -> None:
    if not invoice.customer_name or not invoice.customer_cedula:
        raise ContificoError("Datos del cliente incompletos")
    if not invoice.total or not invoice.subtotal or not invoice.quantity:
        raise ContificoError("Totales incompletos")


async def approve_invoices(
    db: AsyncSession,
    invoice_ids: List[str],
    prefix: str,
    start: int,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ApprovalResult:
    """Send the selected Draft invoices to Contífico.

    Each processed invoice consumes one document number, in selection order,
    whether or not Contífico accepts it. Failures are stored on the invoice and
    do not stop the batch. Each outcome is committed as soon as it is known.
    """
    if not invoice_ids:
        raise ValueError("IDs requeridos")
    if not valid_sequence(prefix, start):
        raise ValueError("Secuencia inválida")
    if not config.CONTIFICO_API_KEY:
        raise BillingConfigError("Falta CONTIFICO_API_KEY en variables de entorno")

    parsed_ids = [value for value in (coerce_uuid(i) for i in invoice_ids) if value]
    result = await db.execute(
        select(Invoice).where(and_(Invoice.id.in_(parsed_ids), Invoice.status == INVOICE_DRAFT))
    )
    position = {invoice_id: index for index, invoice_id in enumerate(parsed_ids)}
    invoices = sorted(result.scalars().all(), key=lambda inv: position.get(inv.id, 0))
    if not invoices:
        raise ValueError("No hay facturas en estado Draft")

    package_ids = {inv.package_id for inv in invoices if inv.package_id}
    product_ids = {}
    if package_ids:
        rows = await db.execute(
            select(Package.id, Package.contifico_product_id).where(Package.id.in_(package_ids))
        )
        product_ids = {package_id: product_id for package_id, product_id in rows.all()}

    fecha_emision = contifico_service.issue_date()
    outcome = ApprovalResult()
    sequence = start

    async with contifico_service.new_client(transport) as client:
        for invoice in invoices:
            document = contifico_service.document_number(prefix, sequence)
            sequence += 1
            try:
                _check_invoice(invoice)
                payload = contifico_service.build_invoice_payload(
                    invoice,
                    document=document,
                    product_id=product_ids.get(invoice.package_id) or config.CONTIFICO_PRODUCT_ID_DEFAULT,
                    fecha_emision=fecha_emision,
                )
                contifico_id = await contifico_service.send_document(client, payload)
            except Exception as e:
                logger.error(f"Invoice {invoice.id} ({document}) rejected: {e}")
                invoice.contifico_error = str(e) or type(e).__name__
                await db.commit()
                outcome.errors += 1
                outcome.results.append(InvoiceResult(id=invoice.id, ok=False, error=invoice.contifico_error))
                continue

            # Stored right away: Contífico has already issued this number
            invoice.status = INVOICE_SENT
            invoice.document_number = document
            invoice.contifico_id = contifico_id
            invoice.contifico_error = None
            invoice.sent_at = utcnow()
            await db.commit()
            outcome.approved += 1
            outcome.results.append(InvoiceResult(id=invoice.id, ok=True, document=document))

    logger.info(f"Invoice approval: {outcome.approved} sent, {outcome.errors} failed")
    return outcome


async def approve_in_batches(
    db: AsyncSession,
    invoice_ids: List[str],
    prefix: str,
    start: int,
    *,
    batch_size: int = APPROVAL_BATCH_SIZE,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ApprovalResult:
    """Approve a dashboard selection in batches, advancing the sequence by batch length."""
    if not valid_sequence(prefix, start):
        raise ValueError("Secuencia inválida")

    total = ApprovalResult()
    next_sequence = start
    for index in range(0, len(invoice_ids), batch_size):
        batch = invoice_ids[index:index + batch_size]
        try:
            total.merge(await approve_invoices(db, batch, prefix, next_sequence, transport=transport))
        except ValueError as e:
            # A batch with nothing left in Draft does not stop the others
            logger.warning(f"Approval batch {index // batch_size + 1} skipped: {e}")
        next_sequence += len(batch)
    return total
