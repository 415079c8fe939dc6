"""
Class packages sold by the studio and the purchases that hold member credits
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, TYPE_CHECKING
from sqlalchemy import ForeignKey, Integer, Numeric, String, Boolean, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import TIMESTAMP

from app.core.timeutils import utcnow
from app.db.postgresql import Base

if TYPE_CHECKING:
    from app.models.userModel import User


class Package(Base):
    """Package catalogue; soft-deleted through deleted_at"""

    __tablename__ = "packages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    class_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    expiration_days: Mapped[Optional[int]] = mapped_column(Integer)
    contifico_product_id: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))

    purchases: Mapped[List["Purchase"]] = relationship(back_populates="package")


class Purchase(Base):
    """A package bought by a member; credits_remaining is spent by reservations"""

    __tablename__ = "purchases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("users.id"))
    package_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("packages.id"))
    credits_remaining: Mapped[int] = mapped_column(Integer, nullable=False)
    expiration_date: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))
    purchase_date: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    authorization_code: Mapped[Optional[str]] = mapped_column(String(100))
    transaction_id: Mapped[Optional[str]] = mapped_column(String(100))
    # Only purchases flagged for accounting go into the purchases CSV export
    contabilidad: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)

    # Relationships
    user: Mapped[Optional["User"]] = relationship(back_populates="purchases")
    package: Mapped[Optional["Package"]] = relationship(back_populates="purchases")

    __table_args__ = (
        Index("ix_purchases_user_expiration", "user_id", "expiration_date"),
    )
