"""
Electronic invoices generated from purchases and sent to Contífico
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from sqlalchemy import ForeignKey, Integer, Numeric, String, Text, JSON, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import TIMESTAMP

from app.core.timeutils import utcnow
from app.db.postgresql import Base

INVOICE_DRAFT = "Draft"
INVOICE_DRAFT_INCOMPLETE = "Draft-Incomplete"
INVOICE_SENT = "Sent"
INVOICE_ERROR = "Error"

DRAFT_STATUSES = (INVOICE_DRAFT, INVOICE_DRAFT_INCOMPLETE)


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    purchase_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("purchases.id"))
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("users.id"))
    package_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("packages.id"))
    package_name: Mapped[Optional[str]] = mapped_column(String(120))
    package_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    iva_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 4), nullable=False, default=Decimal("0.15"))
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    iva_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=INVOICE_DRAFT)

    # Customer snapshot taken when the draft is created
    customer_name: Mapped[Optional[str]] = mapped_column(String(200))
    customer_email: Mapped[Optional[str]] = mapped_column(String(200))
    customer_address: Mapped[Optional[str]] = mapped_column(String(255))
    customer_cedula: Mapped[Optional[str]] = mapped_column(String(20))
    missing_fields: Mapped[Optional[List[str]]] = mapped_column(JSON, default=list)

    document_number: Mapped[Optional[str]] = mapped_column(String(20))
    contifico_id: Mapped[Optional[str]] = mapped_column(String(100))
    contifico_error: Mapped[Optional[str]] = mapped_column(Text)
    sent_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)

    __table_args__ = (
        Index("ix_invoices_status", "status"),
        Index("ix_invoices_purchase", "purchase_id"),
    )
