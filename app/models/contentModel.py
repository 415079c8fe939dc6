"""
Banners shown in the member app and the push notification log
"""
import uuid
from datetime import datetime, date
from typing import Optional, TYPE_CHECKING
from sqlalchemy import Date, ForeignKey, String, Text, Boolean, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import TIMESTAMP

from app.core.timeutils import utcnow
from app.db.postgresql import Base

if TYPE_CHECKING:
    from app.models.userModel import User

DEFAULT_BANNER_BACKGROUND = "#6366f1"
DEFAULT_BANNER_TEXT_COLOR = "#ffffff"


class Banner(Base):
    __tablename__ = "banners"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    background_color: Mapped[Optional[str]] = mapped_column(String(20), default=DEFAULT_BANNER_BACKGROUND)
    text_color: Mapped[Optional[str]] = mapped_column(String(20), default=DEFAULT_BANNER_TEXT_COLOR)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Notification(Base):
    """One row per push delivered (sent=True) or queued (sent=False)"""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("users.id"))
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    sent: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)

    user: Mapped[Optional["User"]] = relationship()
