import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import ForeignKey, String, Uuid, TIMESTAMP, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.postgresql import Base


class Session(Base):
    """Dashboard login sessions, one per refresh token"""

    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(primary_key=True)
    refresh_token: Mapped[str]
    session: Mapped[str] = mapped_column(String(64), unique=True)
    device_name: Mapped[Optional[str]] = mapped_column(nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    last_active_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(nullable=True)
    account_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("accounts.id"), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        server_default=func.now(),
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        onupdate=func.now(),
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
