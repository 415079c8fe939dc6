from datetime import date, time, timedelta

import pytest

import app.crud.classesCrud as classes_crud
from app.crud.classesCrud import (
    count_todays_reservations,
    create_class,
    delete_class,
    get_upcoming_classes,
    update_class_name,
)
from app.db.rpc import RpcError
from app.models import Instructor, Reservation, StudioClass


async def test_upcoming_classes_skip_past_and_cancelled(db):
    coach = Instructor(name="Luis")
    db.add(coach)
    await db.flush()
    today = date(2025, 5, 10)
    db.add_all([
        StudioClass(date=today - timedelta(days=1), start_time=time(9), end_time=time(10), instructor_id=coach.id),
        StudioClass(date=today, start_time=time(18), end_time=time(19), instructor_id=coach.id, name="Late"),
        StudioClass(date=today, start_time=time(7), end_time=time(8), instructor_id=coach.id, name="Early"),
        StudioClass(date=today, start_time=time(12), end_time=time(13), instructor_id=coach.id, is_cancelled=True),
    ])
    await db.commit()

    classes = await get_upcoming_classes(db, today=today)

    assert [c.name for c in classes] == ["Early", "Late"]
    assert classes[0].instructor_name == "Luis"


async def test_create_class_rejects_overlap(db, studio):
    instructor_id = str(studio["instructor"].id)
    day = studio["class"].date.isoformat()

    with pytest.raises(ValueError, match="ya tiene una clase en ese horario"):
        await create_class(
            db, class_date=day, start_time="07:30", end_time="08:30", instructor_id=instructor_id
        )

    # Back-to-back classes do not overlap
    created = await create_class(
        db, class_date=day, start_time="08:00", end_time="09:00", instructor_id=instructor_id, name=" "
    )
    assert created.name is None
    assert created.is_cancelled is False


async def test_create_class_validates_input(db):
    with pytest.raises(ValueError, match="Missing required fields."):
        await create_class(db, class_date="", start_time="07:00", end_time="08:00", instructor_id=None)

    with pytest.raises(ValueError, match="posterior"):
        await create_class(
            db,
            class_date="2025-05-10",
            start_time="09:00",
            end_time="08:00",
            instructor_id="6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11",
        )


async def test_update_class_name(db, studio):
    await update_class_name(db, str(studio["class"].id), "  ")
    await db.refresh(studio["class"])
    assert studio["class"].name is None

    with pytest.raises(ValueError, match="Invalid Class ID."):
        await update_class_name(db, "not-a-uuid", "Rise")


async def test_delete_class_uses_procedure(db, monkeypatch):
    calls = []

    async def fake_rpc(session, name, **params):
        calls.append((name, params))
        return {"success": False, "message": "La clase tiene reservas"}

    monkeypatch.setattr(classes_crud, "call_rpc", fake_rpc)
    class_id = "6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11"

    with pytest.raises(ValueError, match="La clase tiene reservas"):
        await delete_class(db, class_id)
    assert calls == [("delete_class_with_bikes", {"p_class_id": class_id})]


async def test_delete_class_database_error(db, monkeypatch):
    async def failing_rpc(session, name, **params):
        raise RpcError(name, "foreign key violation")

    monkeypatch.setattr(classes_crud, "call_rpc", failing_rpc)

    with pytest.raises(ValueError, match="Database Error: foreign key violation"):
        await delete_class(db, "6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11")


async def test_count_todays_reservations(db, studio, reserve):
    await reserve(studio, [1])
    await reserve(studio, [2], status="cancelled")

    assert await count_todays_reservations(db, today=studio["class"].date) == 1
    assert await count_todays_reservations(db, today=studio["class"].date + timedelta(days=1)) == 0
