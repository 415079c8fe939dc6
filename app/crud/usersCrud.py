"""
CRUD operations for studio members.
"""
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, List, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.hashing import hash_password
from app.core.conversions import blank_to_none, coerce_date, coerce_uuid
from app.core.logging_config import get_logger
from app.crud.purchasesCrud import assign_package_to_user
from app.models import Purchase, User

logger = get_logger("crud.users")


@dataclass
class UserData:
    id: uuid.UUID
    email: str
    name: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    birthday: Optional[date]
    cedula: Optional[str]
    shoe_size: Optional[str]
    created_at: Optional[datetime]
    purchase_count: int = 0


@dataclass
class UserProfileInput:
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    birthday: Optional[str] = None
    cedula: Optional[str] = None
    shoe_size: Optional[str] = None


def generate_password(full_name: str) -> str:
    """Initial member password: ``<last name>-<first initial>25``."""
    parts = full_name.strip().split()
    first_name = parts[0] if parts else ""
    last_name = parts[-1] if len(parts) > 1 else first_name
    initial = first_name[:1].upper()
    return f"{last_name.lower()}-{initial}25"


def to_user_data(row: User, purchase_count: int = 0) -> UserData:
    return UserData(
        id=row.id,
        email=row.email,
        name=row.name,
        phone=row.phone,
        address=row.address,
        birthday=row.birthday,
        cedula=row.cedula,
        shoe_size=row.shoe_size,
        created_at=row.created_at,
        purchase_count=purchase_count,
    )


async def list_users(db: AsyncSession) -> List[UserData]:
    """All members with how many purchases they made, newest first."""
    purchase_counts = (
        select(Purchase.user_id, func.count(Purchase.id).label("purchase_count"))
        .group_by(Purchase.user_id)
        .subquery()
    )
    result = await db.execute(
        select(User, func.coalesce(purchase_counts.c.purchase_count, 0))
        .outerjoin(purchase_counts, purchase_counts.c.user_id == User.id)
        .order_by(User.created_at.desc())
    )
    return [to_user_data(user, count) for user, count in result.all()]


async def get_user_by_id(db: AsyncSession, user_id: object) -> User | None:
    parsed_id = coerce_uuid(user_id)
    if not parsed_id:
        return None
    result = await db.execute(select(User).where(User.id == parsed_id))
    return result.scalar_one_or_none()


async def _new_user(db: AsyncSession, data: UserProfileInput) -> Tuple[User, str]:
    email = (data.email or "").strip()
    name = (data.name or "").strip()
    if not email or not name:
        raise ValueError("Email y nombre son obligatorios")

    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.first():
        raise ValueError("Ya existe un usuario con este email")

    password = generate_password(name)
    user = User(
        email=email,
        name=name,
        phone=blank_to_none(data.phone),
        address=blank_to_none(data.address),
        birthday=coerce_date(data.birthday),
        cedula=blank_to_none(data.cedula),
        shoe_size=blank_to_none(data.shoe_size),
        password_hash=hash_password(password),
    )
    db.add(user)
    await db.flush()
    return user, password


async def create_user(db: AsyncSession, data: UserProfileInput) -> Tuple[User, str]:
    """Create a member and return it with the generated password."""
    user, password = await _new_user(db, data)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Member created: {user.email}")
    return user, password


async def create_user_with_package(
    db: AsyncSession,
    data: UserProfileInput,
    *,
    package_id: object,
    transaction_id: Optional[str] = None,
    authorization_code: Optional[str] = None,
) -> Tuple[User, str]:
    """Create a member and their first purchase in one transaction."""
    try:
        user, password = await _new_user(db, data)
        await assign_package_to_user(
            db,
            user_id=user.id,
            package_id=package_id,
            transaction_id=transaction_id,
            authorization_code=authorization_code,
            commit=False,
        )
        await db.commit()
    except Exception:
        # Nothing of the half-created member may survive
        await db.rollback()
        raise

    await db.refresh(user)
    logger.info(f"Member created with package: {user.email}")
    return user, password


async def update_user(db: AsyncSession, user_id: object, data: UserProfileInput) -> UserData:
    user = await get_user_by_id(db, user_id)
    if not user:
        raise ValueError("Usuario no encontrado")

    # An empty name keeps the current one; other empty fields are cleared
    user.name = blank_to_none(data.name) or user.name
    user.phone = blank_to_none(data.phone)
    user.address = blank_to_none(data.address)
    user.birthday = coerce_date(data.birthday)
    user.cedula = blank_to_none(data.cedula)
    user.shoe_size = blank_to_none(data.shoe_size)
    await db.commit()

    count = await db.execute(select(func.count(Purchase.id)).where(Purchase.user_id == user.id))
    return to_user_data(user, count.scalar() or 0)
