"""
CRUD operations for purchases (packages bought by members and their credits).
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, time, timezone
from typing import Optional, List

from sqlalchemy import select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.conversions import blank_to_none, coerce_date, coerce_int, coerce_uuid
from app.core.logging_config import get_logger
from app.core.timeutils import utcnow
from app.models import Package, Purchase, User

logger = get_logger("crud.purchases")

EXPORT_STATUSES = ("todos", "agotado", "vencido", "por-vencer", "activo")


@dataclass
class PurchaseData:
    id: uuid.UUID
    user_id: Optional[uuid.UUID]
    user_name: Optional[str]
    user_email: Optional[str]
    package_id: Optional[uuid.UUID]
    package_name: Optional[str]
    class_credits: Optional[int]
    credits_remaining: int
    expiration_date: Optional[datetime]
    purchase_date: Optional[datetime]
    authorization_code: Optional[str]
    transaction_id: Optional[str]


@dataclass
class ActivePurchaseData:
    id: uuid.UUID
    credits_remaining: int
    expiration_date: Optional[datetime]
    package_name: str


@dataclass
class UserCreditsData:
    id: uuid.UUID
    name: Optional[str]
    email: str
    phone: Optional[str]
    active_credits: int
    active_purchases: List[ActivePurchaseData] = field(default_factory=list)


@dataclass
class PurchaseExportFilters:
    user: Optional[str] = None
    status: str = "todos"
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    q: Optional[str] = None
    order: str = "desc"


def _to_purchase_data(row: Purchase) -> PurchaseData:
    return PurchaseData(
        id=row.id,
        user_id=row.user_id,
        user_name=row.user.name if row.user else None,
        user_email=row.user.email if row.user else None,
        package_id=row.package_id,
        package_name=row.package.name if row.package else None,
        class_credits=row.package.class_credits if row.package else None,
        credits_remaining=row.credits_remaining,
        expiration_date=row.expiration_date,
        purchase_date=row.purchase_date,
        authorization_code=row.authorization_code,
        transaction_id=row.transaction_id,
    )


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip()))
    return result.scalar_one_or_none()


async def list_purchases(db: AsyncSession, user_email: Optional[str] = None) -> List[PurchaseData]:
    """Purchases newest first, optionally only those of one member."""
    stmt = (
        select(Purchase)
        .options(selectinload(Purchase.user), selectinload(Purchase.package))
        .order_by(Purchase.purchase_date.desc())
    )

    if user_email:
        user = await get_user_by_email(db, user_email)
        if not user:
            return []
        stmt = stmt.where(Purchase.user_id == user.id)

    result = await db.execute(stmt)
    return [_to_purchase_data(row) for row in result.scalars().all()]


async def update_purchase_credits(db: AsyncSession, purchase_id: str, credits: object) -> Purchase:
    new_credits = coerce_int(credits)
    if isinstance(credits, float) and credits.is_integer():
        new_credits = int(credits)
    if new_credits is None or new_credits < 0:
        raise ValueError("Los créditos deben ser un número válido mayor o igual a 0")

    parsed_id = coerce_uuid(purchase_id)
    purchase = None
    if parsed_id:
        result = await db.execute(select(Purchase).where(Purchase.id == parsed_id))
        purchase = result.scalar_one_or_none()
    if not purchase:
        raise ValueError("Compra no encontrada")

    purchase.credits_remaining = new_credits
    await db.commit()
    logger.info(f"Purchase {parsed_id} credits set to {new_credits}")
    return purchase


async def assign_package_to_user(
    db: AsyncSession,
    *,
    user_id: object,
    package_id: object,
    transaction_id: Optional[str] = None,
    authorization_code: Optional[str] = None,
    commit: bool = True,
) -> Purchase:
    """Create a purchase holding the package's credits.

    With ``commit=False`` the purchase is only flushed so the caller can bundle
    it with other writes in one transaction.
    """
    parsed_user = coerce_uuid(user_id)
    parsed_package = coerce_uuid(package_id)

    package = None
    if parsed_package:
        result = await db.execute(select(Package).where(Package.id == parsed_package))
        package = result.scalar_one_or_none()
    if not package:
        raise ValueError("Paquete no encontrado")
    if not parsed_user:
        raise ValueError("Usuario no encontrado")

    now = utcnow()
    expiration_date = None
    if package.expiration_days:
        expiration_date = now + timedelta(days=package.expiration_days)

    purchase = Purchase(
        user_id=parsed_user,
        package_id=package.id,
        credits_remaining=package.class_credits,
        expiration_date=expiration_date,
        purchase_date=now,
        transaction_id=blank_to_none(transaction_id),
        authorization_code=blank_to_none(authorization_code),
    )
    db.add(purchase)

    if commit:
        await db.commit()
        await db.refresh(purchase)
    else:
        await db.flush()

    return purchase


async def get_users_with_credits(db: AsyncSession) -> List[UserCreditsData]:
    """Members with unexpired purchases that still hold credits."""
    now = utcnow()
    result = await db.execute(
        select(Purchase)
        .options(selectinload(Purchase.user), selectinload(Purchase.package))
        .where(
            and_(
                Purchase.credits_remaining > 0,
                or_(Purchase.expiration_date.is_(None), Purchase.expiration_date >= now),
            )
        )
        .order_by(Purchase.expiration_date.asc())
    )
    purchases = result.scalars().all()

    by_user: dict = {}
    for purchase in purchases:
        if not purchase.user:
            continue
        entry = by_user.get(purchase.user_id)
        if entry is None:
            entry = UserCreditsData(
                id=purchase.user.id,
                name=purchase.user.name,
                email=purchase.user.email,
                phone=purchase.user.phone,
                active_credits=0,
            )
            by_user[purchase.user_id] = entry
        entry.active_credits += purchase.credits_remaining
        entry.active_purchases.append(
            ActivePurchaseData(
                id=purchase.id,
                credits_remaining=purchase.credits_remaining,
                expiration_date=purchase.expiration_date,
                package_name=purchase.package.name if purchase.package else "Paquete sin nombre",
            )
        )

    # Soonest expiry first; purchases without expiration go last
    for entry in by_user.values():
        entry.active_purchases.sort(
            key=lambda p: (p.expiration_date is None, p.expiration_date or datetime.min)
        )

    users = [entry for entry in by_user.values() if entry.active_credits > 0]
    users.sort(key=lambda u: (u.name or "").lower())
    return users


async def find_purchases_for_export(
    db: AsyncSession, filters: PurchaseExportFilters
) -> Optional[List[Purchase]]:
    """Accounting purchases matching the export filters.

    Returns None when a member email was given but does not exist.
    """
    stmt = (
        select(Purchase)
        .join(User, Purchase.user_id == User.id, isouter=True)
        .join(Package, Purchase.package_id == Package.id, isouter=True)
        .options(selectinload(Purchase.user), selectinload(Purchase.package))
        .where(Purchase.contabilidad == True)
    )

    if filters.user:
        user = await get_user_by_email(db, filters.user)
        if not user:
            return None
        stmt = stmt.where(Purchase.user_id == user.id)

    now = utcnow()
    in_7_days = now + timedelta(days=7)
    status = filters.status or "todos"
    if status == "agotado":
        stmt = stmt.where(Purchase.credits_remaining <= 0)
    elif status == "vencido":
        stmt = stmt.where(and_(Purchase.expiration_date < now, Purchase.credits_remaining > 0))
    elif status == "por-vencer":
        stmt = stmt.where(
            and_(
                Purchase.expiration_date >= now,
                Purchase.expiration_date <= in_7_days,
                Purchase.credits_remaining > 0,
            )
        )
    elif status == "activo":
        stmt = stmt.where(
            and_(
                Purchase.credits_remaining > 0,
                or_(Purchase.expiration_date.is_(None), Purchase.expiration_date >= in_7_days),
            )
        )

    date_from = coerce_date(filters.date_from)
    if date_from:
        stmt = stmt.where(Purchase.purchase_date >= datetime.combine(date_from, time.min, tzinfo=timezone.utc))
    date_to = coerce_date(filters.date_to)
    if date_to:
        stmt = stmt.where(Purchase.purchase_date <= datetime.combine(date_to, time.max, tzinfo=timezone.utc))

    if filters.q:
        like = f"%{filters.q}%"
        stmt = stmt.where(
            or_(User.name.ilike(like), User.email.ilike(like), Package.name.ilike(like))
        )

    if filters.order == "asc":
        stmt = stmt.order_by(Purchase.purchase_date.asc())
    else:
        stmt = stmt.order_by(Purchase.purchase_date.desc())

    result = await db.execute(stmt)
    return list(result.scalars().all())
