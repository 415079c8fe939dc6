from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from app.crud.purchasesCrud import (
    assign_package_to_user,
    get_users_with_credits,
    list_purchases,
    update_purchase_credits,
)
from app.crud.usersCrud import (
    UserProfileInput,
    create_user,
    create_user_with_package,
    generate_password,
    list_users,
    update_user,
)
from app.models import Purchase, User


def test_generate_password():
    assert generate_password("María José López") == "lópez-M25"
    assert generate_password("Pedro") == "pedro-P25"


async def test_create_user_rejects_duplicates(db):
    user, password = await create_user(db, UserProfileInput(email="a@b.ec", name="Ana Ruiz"))
    assert password == "ruiz-A25"
    assert user.password_hash and user.password_hash != password

    with pytest.raises(ValueError, match="Ya existe un usuario con este email"):
        await create_user(db, UserProfileInput(email="a@b.ec", name="Otra Ana"))


async def test_failed_package_leaves_no_user(db):
    with pytest.raises(ValueError, match="Paquete no encontrado"):
        await create_user_with_package(
            db,
            UserProfileInput(email="new@b.ec", name="Nuevo Socio"),
            package_id="6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11",
        )

    count = await db.execute(select(func.count(User.id)).where(User.email == "new@b.ec"))
    assert count.scalar() == 0


async def test_create_user_with_package(db, studio):
    user, _ = await create_user_with_package(
        db,
        UserProfileInput(email="new@b.ec", name="Nuevo Socio"),
        package_id=str(studio["package"].id),
        authorization_code="AUTH-1",
    )

    purchases = await list_purchases(db, "new@b.ec")
    assert len(purchases) == 1
    assert purchases[0].credits_remaining == 10
    assert purchases[0].authorization_code == "AUTH-1"
    assert purchases[0].user_id == user.id


async def test_update_user_keeps_name_and_clears_blanks(db, studio):
    member = studio["member"]

    data = await update_user(db, member.id, UserProfileInput(name="", phone=" ", cedula="0999", birthday="1990-04-01"))

    assert data.name == "María López"
    assert data.phone is None
    assert data.cedula == "0999"
    assert data.purchase_count == 1

    with pytest.raises(ValueError, match="Usuario no encontrado"):
        await update_user(db, "6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11", UserProfileInput(name="x"))


async def test_list_users_counts_purchases(db, studio):
    users = await list_users(db)
    assert [(u.email, u.purchase_count) for u in users] == [("maria@example.com", 1)]


async def test_purchases_for_unknown_email_is_empty(db, studio):
    assert await list_purchases(db, "ghost@example.com") == []
    assert len(await list_purchases(db)) == 1


async def test_update_purchase_credits(db, studio):
    purchase = studio["purchase"]

    await update_purchase_credits(db, str(purchase.id), 3.0)
    await db.refresh(purchase)
    assert purchase.credits_remaining == 3

    with pytest.raises(ValueError, match="mayor o igual a 0"):
        await update_purchase_credits(db, str(purchase.id), -1)
    with pytest.raises(ValueError, match="Compra no encontrada"):
        await update_purchase_credits(db, "6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11", 2)


async def test_assign_package_sets_expiration(db, studio):
    purchase = await assign_package_to_user(
        db, user_id=studio["member"].id, package_id=studio["package"].id, transaction_id=" "
    )

    assert purchase.credits_remaining == 10
    assert purchase.transaction_id is None
    assert purchase.expiration_date is not None


async def test_users_with_credits(db, studio):
    db.add(Purchase(user_id=studio["member"].id, package_id=studio["package"].id, credits_remaining=0))
    db.add(
        Purchase(
            user_id=studio["member"].id,
            package_id=studio["package"].id,
            credits_remaining=2,
            expiration_date=datetime(2100, 1, 1, tzinfo=timezone.utc),
        )
    )
    await db.commit()

    users = await get_users_with_credits(db)

    assert len(users) == 1
    assert users[0].active_credits == 10
    # The dated purchase sorts before the one without expiration
    assert [p.credits_remaining for p in users[0].active_purchases] == [2, 8]
