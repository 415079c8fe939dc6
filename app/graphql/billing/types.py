import uuid
from datetime import datetime
from typing import List, Optional

import strawberry

from app.crud.billingCrud import ApprovalResult as ApprovalData, InvoiceResult as InvoiceResultData
from app.models import Invoice as InvoiceModel


@strawberry.type
class Invoice:
    id: uuid.UUID
    purchase_id: Optional[uuid.UUID]
    user_id: Optional[uuid.UUID]
    package_id: Optional[uuid.UUID]
    package_name: Optional[str]
    package_price: Optional[float]
    quantity: int
    iva_percentage: float
    subtotal: float
    iva_amount: float
    total: float
    status: str
    customer_name: Optional[str]
    customer_email: Optional[str]
    customer_address: Optional[str]
    customer_cedula: Optional[str]
    missing_fields: List[str]
    document_number: Optional[str]
    contifico_id: Optional[str]
    contifico_error: Optional[str]
    sent_at: Optional[datetime]
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, row: InvoiceModel) -> "Invoice":
        return cls(
            id=row.id,
            purchase_id=row.purchase_id,
            user_id=row.user_id,
            package_id=row.package_id,
            package_name=row.package_name,
            package_price=float(row.package_price) if row.package_price is not None else None,
            quantity=row.quantity,
            iva_percentage=float(row.iva_percentage),
            subtotal=float(row.subtotal),
            iva_amount=float(row.iva_amount),
            total=float(row.total),
            status=row.status,
            customer_name=row.customer_name,
            customer_email=row.customer_email,
            customer_address=row.customer_address,
            customer_cedula=row.customer_cedula,
            missing_fields=list(row.missing_fields or []),
            document_number=row.document_number,
            contifico_id=row.contifico_id,
            contifico_error=row.contifico_error,
            sent_at=row.sent_at,
            created_at=row.created_at,
        )


@strawberry.type
class InvoiceResult:
    id: uuid.UUID
    ok: bool
    error: Optional[str]
    document: Optional[str]

    @classmethod
    def from_data(cls, data: InvoiceResultData) -> "InvoiceResult":
        return cls(id=data.id, ok=data.ok, error=data.error, document=data.document)


@strawberry.type
class ApprovalResponse:
    success: bool
    approved: int = 0
    errors: int = 0
    results: Optional[List[InvoiceResult]] = None
    error: Optional[str] = None

    @classmethod
    def from_data(cls, data: ApprovalData) -> "ApprovalResponse":
        return cls(
            success=True,
            approved=data.approved,
            errors=data.errors,
            results=[InvoiceResult.from_data(r) for r in data.results],
        )


@strawberry.type
class DraftsResponse:
    success: bool
    drafts: Optional[List[Invoice]] = None
    error: Optional[str] = None


@strawberry.type
class SyncResponse:
    success: bool
    updated: int = 0
    error: Optional[str] = None
