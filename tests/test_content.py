from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.core.validation import FieldValidationError
from app.crud.bannersCrud import (
    add_banner,
    delete_banner,
    list_active_banners,
    list_banners,
    toggle_banner_status,
    update_banner,
)
from app.crud.menuCrud import (
    add_order_note,
    create_menu_item,
    delete_menu_item,
    list_menu_items,
    list_menu_orders,
    update_menu_item,
    update_order_status,
)
from app.models import MenuPurchase, User


async def test_add_banner_defaults_colors(db):
    banner = await add_banner(db, title="  Promo  ", description="", background_color=" ")

    assert banner.title == "Promo"
    assert banner.description is None
    assert banner.is_active is True
    assert banner.background_color == "#6366f1"
    assert banner.text_color == "#ffffff"


async def test_add_banner_requires_title(db):
    with pytest.raises(FieldValidationError) as exc:
        await add_banner(db, title=" ")

    assert str(exc.value) == "Error de validación - revisa los campos requeridos"
    assert "title" in exc.value.field_errors


async def test_active_banners_respect_date_window(db):
    today = date(2025, 6, 15)
    await add_banner(db, title="Open")
    await add_banner(db, title="Current", start_date="2025-06-01", end_date="2025-06-30")
    await add_banner(db, title="Future", start_date="2025-07-01")
    await add_banner(db, title="Past", end_date="2025-06-14")
    await add_banner(db, title="Off", is_active=False)

    active = await list_active_banners(db, today=today)

    assert sorted(b.title for b in active) == ["Current", "Open"]
    assert len(await list_banners(db)) == 5


async def test_banner_update_toggle_delete(db):
    banner = await add_banner(db, title="Promo")

    updated = await update_banner(db, str(banner.id), title="Promo 2x1", is_active=None, end_date="2025-12-31")
    assert updated.title == "Promo 2x1"
    assert updated.end_date == date(2025, 12, 31)

    assert await toggle_banner_status(db, str(banner.id), False) == "Banner desactivado exitosamente."
    assert (await list_banners(db))[0].is_active is False

    await delete_banner(db, str(banner.id))
    assert await list_banners(db) == []

    with pytest.raises(ValueError, match="ID de banner inválido."):
        await update_banner(db, "nope", title="x")
    with pytest.raises(ValueError, match="ID inválido."):
        await toggle_banner_status(db, str(banner.id), True)


async def test_menu_items(db):
    with pytest.raises(ValueError, match="Nombre y precio son obligatorios."):
        await create_menu_item(db, name="Batido", price="gratis")

    banana = await create_menu_item(db, name="Banana Shake", price="4.50", description="")
    await create_menu_item(db, name="Acai Bowl", price=6)

    assert [i.name for i in await list_menu_items(db)] == ["Acai Bowl", "Banana Shake"]
    assert banana.description is None

    updated = await update_menu_item(db, str(banana.id), in_stock=False)
    assert updated.in_stock is False
    assert updated.name == "Banana Shake"
    assert updated.price == 4.5

    updated = await update_menu_item(db, str(banana.id), description="Con avena", price=5)
    assert (updated.description, updated.price, updated.in_stock) == ("Con avena", 5.0, False)

    await delete_menu_item(db, str(banana.id))
    assert [i.name for i in await list_menu_items(db)] == ["Acai Bowl"]


async def test_menu_orders(db):
    member = User(email="maria@example.com", name="María")
    db.add(member)
    await db.flush()
    now = datetime.now(timezone.utc)
    db.add_all([
        MenuPurchase(
            user_id=member.id,
            items=[{"name": "Banana Shake", "quantity": 2, "unit_price": 4.5}],
            total_paid=Decimal("9.00"),
            purchase_date=now,
        ),
        MenuPurchase(total_paid=Decimal("3.00"), purchase_date=now - timedelta(hours=1)),
    ])
    await db.commit()

    orders = await list_menu_orders(db)
    assert [o.user_name for o in orders] == ["María", "Usuario desconocido"]
    assert orders[0].items[0]["quantity"] == 2
    assert orders[0].delivery_status == "pending"

    ready = await update_order_status(db, str(orders[0].id), "ready")
    assert ready.delivery_status == "ready"

    with pytest.raises(ValueError, match="Error al actualizar el estado de la orden"):
        await update_order_status(db, str(orders[0].id), "delivered")

    noted = await add_order_note(db, str(orders[1].id), "Sin azúcar")
    assert noted.notes == "Sin azúcar"
