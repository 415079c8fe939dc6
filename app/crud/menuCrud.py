"""
CRUD operations for the shakes menu and the orders placed from the app.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.conversions import blank_to_none, coerce_float, coerce_uuid
from app.core.logging_config import get_logger
from app.models import MenuItem, MenuPurchase

logger = get_logger("crud.menu")

DELIVERY_STATUSES = ("pending", "ready")
UNKNOWN_USER = "Usuario desconocido"

_UNSET: Any = object()


@dataclass
class MenuItemData:
    id: uuid.UUID
    name: str
    description: Optional[str]
    in_stock: bool
    price: float
    image: Optional[str]


@dataclass
class MenuOrderData:
    id: uuid.UUID
    user_id: Optional[uuid.UUID]
    user_name: str
    items: List[dict] = field(default_factory=list)
    total_paid: float = 0.0
    transaction_id: Optional[str] = None
    authorization_code: Optional[str] = None
    purchase_date: Optional[datetime] = None
    delivery_status: str = "pending"
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


def to_menu_item_data(row: MenuItem) -> MenuItemData:
    return MenuItemData(
        id=row.id,
        name=row.name,
        description=row.description,
        in_stock=bool(row.in_stock),
        price=float(row.price),
        image=row.image,
    )


def _to_order_data(row: MenuPurchase) -> MenuOrderData:
    return MenuOrderData(
        id=row.id,
        user_id=row.user_id,
        user_name=(row.user.name if row.user else None) or UNKNOWN_USER,
        items=list(row.items or []),
        total_paid=float(row.total_paid),
        transaction_id=row.transaction_id,
        authorization_code=row.authorization_code,
        purchase_date=row.purchase_date,
        delivery_status=row.delivery_status,
        notes=row.notes,
        created_at=row.created_at,
    )


async def list_menu_items(db: AsyncSession) -> List[MenuItemData]:
    result = await db.execute(select(MenuItem).order_by(MenuItem.name.asc()))
    return [to_menu_item_data(row) for row in result.scalars().all()]


async def get_menu_item(db: AsyncSession, item_id: object) -> MenuItem | None:
    parsed_id = coerce_uuid(item_id)
    if not parsed_id:
        return None
    result = await db.execute(select(MenuItem).where(MenuItem.id == parsed_id))
    return result.scalar_one_or_none()


async def create_menu_item(
    db: AsyncSession,
    *,
    name: Optional[str],
    price: object,
    description: Optional[str] = None,
    in_stock: bool = True,
) -> MenuItemData:
    parsed_price = coerce_float(price)
    name = (name or "").strip()
    if not name or parsed_price is None:
        raise ValueError("Nombre y precio son obligatorios.")

    item = MenuItem(
        name=name,
        description=blank_to_none(description),
        in_stock=bool(in_stock),
        price=parsed_price,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return to_menu_item_data(item)


async def update_menu_item(
    db: AsyncSession,
    item_id: str,
    *,
    name: Optional[str] = _UNSET,
    description: Optional[str] = _UNSET,
    in_stock: Optional[bool] = _UNSET,
    price: object = _UNSET,
) -> MenuItemData:
    """Partial update: only the arguments actually given are written."""
    item = await get_menu_item(db, item_id)
    if not item:
        raise ValueError("ID inválido.")

    if name is not _UNSET and name is not None:
        item.name = name.strip()
    if description is not _UNSET:
        item.description = blank_to_none(description)
    if in_stock is not _UNSET and in_stock is not None:
        item.in_stock = bool(in_stock)
    if price is not _UNSET and price is not None:
        parsed_price = coerce_float(price)
        if parsed_price is None:
            raise ValueError("Error al actualizar el ítem.")
        item.price = parsed_price

    await db.commit()
    await db.refresh(item)
    return to_menu_item_data(item)


async def delete_menu_item(db: AsyncSession, item_id: str) -> None:
    item = await get_menu_item(db, item_id)
    if not item:
        raise ValueError("ID inválido.")
    await db.delete(item)
    await db.commit()


async def set_menu_item_image(db: AsyncSession, item: MenuItem, file_name: str) -> MenuItemData:
    item.image = file_name
    await db.commit()
    await db.refresh(item)
    return to_menu_item_data(item)


async def list_menu_orders(db: AsyncSession) -> List[MenuOrderData]:
    result = await db.execute(
        select(MenuPurchase)
        .options(selectinload(MenuPurchase.user))
        .order_by(MenuPurchase.purchase_date.desc())
    )
    return [_to_order_data(row) for row in result.scalars().all()]


async def _get_order(db: AsyncSession, order_id: object) -> MenuPurchase | None:
    parsed_id = coerce_uuid(order_id)
    if not parsed_id:
        return None
    result = await db.execute(
        select(MenuPurchase)
        .options(selectinload(MenuPurchase.user))
        .where(MenuPurchase.id == parsed_id)
    )
    return result.scalar_one_or_none()


async def update_order_status(db: AsyncSession, order_id: str, status: str) -> MenuOrderData:
    if status not in DELIVERY_STATUSES:
        raise ValueError("Error al actualizar el estado de la orden")

    order = await _get_order(db, order_id)
    if not order:
        raise ValueError("Error al actualizar el estado de la orden")

    order.delivery_status = status
    await db.commit()
    logger.info(f"Menu order {order.id} marked {status}")
    return _to_order_data(order)


async def add_order_note(db: AsyncSession, order_id: str, note: Optional[str]) -> MenuOrderData:
    order = await _get_order(db, order_id)
    if not order:
        raise ValueError("Error al actualizar la nota de la orden")

    order.notes = note
    await db.commit()
    return _to_order_data(order)
