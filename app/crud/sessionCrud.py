import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.sessionModel import Session


async def create_session(
    db: AsyncSession,
    *,
    account_id: uuid.UUID,
    session_id: str,
    refresh_token: str,
    device_name: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Session:
    """Creates a new session for the given admin account."""
    session_row = Session(
        account_id=account_id,
        session=session_id,
        refresh_token=refresh_token,
        device_name=device_name,
        ip_address=ip_address,
        user_agent=user_agent,
        last_active_at=datetime.now(timezone.utc),
    )

    db.add(session_row)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    await db.refresh(session_row)
    return session_row


async def verify_session(db: AsyncSession, session_id: str) -> Session | None:
    """Returns the session row for a session id, if any."""
    res = await db.execute(select(Session).where(Session.session == session_id))
    return res.scalar_one_or_none()


def is_session_usable(session_row: Session | None) -> bool:
    return bool(session_row) and session_row.deleted_at is None and session_row.revoked_at is None


async def update_last_active_at(db: AsyncSession, session_id: str) -> None:
    stmt = update(Session).where(Session.session == session_id).values(last_active_at=func.now())
    try:
        await db.execute(stmt)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise


async def revoke_session(db: AsyncSession, session_id: str) -> None:
    """Marks the session as revoked (logout)."""
    try:
        await db.execute(
            update(Session)
            .where(Session.session == session_id)
            .values(revoked_at=datetime.now(timezone.utc))
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
