"""
CRUD operations for the package catalogue.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.conversions import blank_to_none, coerce_float, coerce_int, coerce_uuid
from app.core.timeutils import utcnow
from app.core.validation import validate_form
from app.models import Package


@dataclass
class PackageData:
    id: uuid.UUID
    name: str
    class_credits: int
    price: float
    expiration_days: Optional[int]
    contifico_product_id: Optional[str]
    created_at: Optional[datetime]


class PackageForm(BaseModel):
    name: str = Field(min_length=1)
    class_credits: int = Field(ge=1)
    price: float = Field(ge=0.01)
    expiration_days: Optional[int] = None
    contifico_product_id: Optional[str] = None


def to_package_data(row: Package) -> PackageData:
    return PackageData(
        id=row.id,
        name=row.name,
        class_credits=row.class_credits,
        price=float(row.price),
        expiration_days=row.expiration_days,
        contifico_product_id=row.contifico_product_id,
        created_at=row.created_at,
    )


async def list_packages(db: AsyncSession) -> List[PackageData]:
    """Non-deleted packages, newest first."""
    result = await db.execute(
        select(Package).where(Package.deleted_at.is_(None)).order_by(Package.created_at.desc())
    )
    return [to_package_data(row) for row in result.scalars().all()]


async def get_package(db: AsyncSession, package_id: uuid.UUID) -> Package | None:
    result = await db.execute(select(Package).where(Package.id == package_id))
    return result.scalar_one_or_none()


def _validated(name, class_credits, price, expiration_days, contifico_product_id) -> PackageForm:
    return validate_form(
        PackageForm,
        {
            "name": name,
            "class_credits": coerce_int(class_credits),
            "price": coerce_float(price),
            "expiration_days": coerce_int(expiration_days),
            "contifico_product_id": blank_to_none(contifico_product_id),
        },
    )


async def add_package(
    db: AsyncSession,
    *,
    name: Optional[str],
    class_credits: object,
    price: object,
    expiration_days: object = None,
    contifico_product_id: Optional[str] = None,
) -> Package:
    form = _validated(name, class_credits, price, expiration_days, contifico_product_id)
    package = Package(
        name=form.name,
        class_credits=form.class_credits,
        price=Decimal(str(form.price)),
        expiration_days=form.expiration_days,
        contifico_product_id=form.contifico_product_id,
    )
    db.add(package)
    await db.commit()
    await db.refresh(package)
    return package


async def update_package(
    db: AsyncSession,
    package_id: str,
    *,
    name: Optional[str],
    class_credits: object,
    price: object,
    expiration_days: object = None,
    contifico_product_id: Optional[str] = None,
) -> Package:
    parsed_id = coerce_uuid(package_id)
    if not parsed_id:
        raise ValueError("Invalid ID.")

    form = _validated(name, class_credits, price, expiration_days, contifico_product_id)
    package = await get_package(db, parsed_id)
    if not package:
        raise ValueError("Invalid ID.")

    package.name = form.name
    package.class_credits = form.class_credits
    package.price = Decimal(str(form.price))
    package.expiration_days = form.expiration_days
    package.contifico_product_id = form.contifico_product_id
    await db.commit()
    return package


async def delete_package(db: AsyncSession, package_id: str) -> None:
    parsed_id = coerce_uuid(package_id)
    if not parsed_id:
        raise ValueError("Invalid ID.")

    package = await get_package(db, parsed_id)
    if not package:
        raise ValueError("Invalid ID.")

    package.deleted_at = utcnow()
    await db.commit()
