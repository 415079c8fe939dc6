from datetime import datetime, timedelta, timezone

import pytest

from app.core.validation import FieldValidationError
from app.crud.instructorsCrud import (
    add_instructor,
    clean_specialties,
    delete_instructor,
    list_instructors,
    update_instructor,
)
from app.crud.packagesCrud import add_package, delete_package, list_packages, update_package
from app.models import Package


def test_clean_specialties():
    assert clean_specialties(["cycle", "yoga", "pilates"]) == ["cycle", "pilates"]
    assert clean_specialties(["yoga"]) is None
    assert clean_specialties([]) is None


async def test_add_instructor_validates_fields(db):
    with pytest.raises(FieldValidationError) as exc:
        await add_instructor(db, name="", profile_picture_url="not a url")

    assert str(exc.value) == "Invalid fields: name, profile_picture_url"


async def test_instructor_lifecycle(db):
    created = await add_instructor(
        db, name="Carla", bio="", profile_picture_url="", specialties=["cycle", "boxing"]
    )
    assert created.bio is None
    assert created.specialties == ["cycle"]

    await update_instructor(
        db, str(created.id), name="Carla R.", profile_picture_url="https://cdn.giro.ec/carla.png"
    )
    await add_instructor(db, name="Bruno")

    listed = await list_instructors(db)
    assert [i.name for i in listed] == ["Bruno", "Carla R."]

    await delete_instructor(db, str(created.id))
    assert [i.name for i in await list_instructors(db)] == ["Bruno"]

    with pytest.raises(ValueError, match="Invalid ID."):
        await update_instructor(db, "bad-id", name="X")


async def test_package_validation(db):
    with pytest.raises(FieldValidationError) as exc:
        await add_package(db, name="Pack", class_credits="0", price="0")

    assert set(exc.value.field_errors) == {"class_credits", "price"}


async def test_packages_listing_skips_deleted_and_orders_newest_first(db):
    now = datetime.now(timezone.utc)
    old = Package(name="Old", class_credits=5, price=20, created_at=now - timedelta(days=2))
    db.add(old)
    await db.commit()
    new = await add_package(db, name="New", class_credits="10", price="45.5", expiration_days="30")

    assert [p.name for p in await list_packages(db)] == ["New", "Old"]
    assert new.expiration_days == 30

    await update_package(db, str(new.id), name="Newer", class_credits=12, price=50)
    await delete_package(db, str(old.id))

    packages = await list_packages(db)
    assert [(p.name, p.class_credits, p.price) for p in packages] == [("Newer", 12, 50.0)]
