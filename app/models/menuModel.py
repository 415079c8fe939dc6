"""
Shakes menu and the orders members place from the app
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, TYPE_CHECKING
from sqlalchemy import ForeignKey, Numeric, String, Text, Boolean, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import TIMESTAMP

from app.core.timeutils import utcnow
from app.db.postgresql import Base

if TYPE_CHECKING:
    from app.models.userModel import User


class MenuItem(Base):
    __tablename__ = "menu"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    in_stock: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # File name inside the menu upload folder
    image: Mapped[Optional[str]] = mapped_column(String(255))


class MenuPurchase(Base):
    """An order; `items` is a list of {name, quantity, unit_price, menu_item_id, extras}"""

    __tablename__ = "menu_purchases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("users.id"))
    items: Mapped[Optional[List[dict]]] = mapped_column(JSON, default=list)
    total_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(100))
    authorization_code: Mapped[Optional[str]] = mapped_column(String(100))
    purchase_date: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)
    delivery_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)

    user: Mapped[Optional["User"]] = relationship()
