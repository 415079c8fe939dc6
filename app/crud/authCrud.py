import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.hashing import hash_password
from app.models import Account


async def get_account(db: AsyncSession, email: str) -> Account | None:
    res = await db.execute(
        select(Account).where(func.lower(Account.email) == email.strip().lower())
    )
    return res.scalar_one_or_none()


async def get_account_by_id(db: AsyncSession, account_id: str | uuid.UUID) -> Account | None:
    if isinstance(account_id, str):
        try:
            account_id = uuid.UUID(account_id)
        except ValueError:
            return None
    res = await db.execute(select(Account).where(Account.id == account_id))
    return res.scalar_one_or_none()


async def create_account(db: AsyncSession, *, email: str, password: str) -> Account:
    """Create a dashboard login. Used by operators and tests."""
    account = Account(email=email.strip().lower(), password_hash=hash_password(password))
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account


async def mark_login(db: AsyncSession, account_id: uuid.UUID) -> None:
    await db.execute(
        update(Account).where(Account.id == account_id).values(last_login_at=func.now())
    )
    await db.commit()
