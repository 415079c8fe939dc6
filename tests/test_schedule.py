from datetime import date, time

import pytest

import app.crud.scheduleCrud as schedule_crud
from app.crud.scheduleCrud import (
    ScheduleEntryInput,
    add_schedule_entry,
    delete_schedule_entry,
    generate_weekly_classes,
    list_schedule_entries,
    update_schedule_entry,
)


def entry(instructor_id, weekday="lunes", start="07:00", end="08:00", **extra):
    return ScheduleEntryInput(
        weekday=weekday, start_time=start, end_time=end, instructor_id=str(instructor_id), **extra
    )


async def test_entries_are_ordered_by_weekday_then_time(db, studio):
    coach = studio["instructor"].id
    await add_schedule_entry(db, entry(coach, weekday="miércoles"))
    await add_schedule_entry(db, entry(coach, weekday="lunes", start="18:00", end="19:00"))
    await add_schedule_entry(db, entry(coach, weekday="lunes", class_name="Rise"))

    entries = await list_schedule_entries(db)

    assert [(e.weekday, e.start_time) for e in entries] == [
        ("lunes", time(7)),
        ("lunes", time(18)),
        ("miércoles", time(7)),
    ]
    assert entries[0].class_name == "Rise"
    assert entries[0].instructor_name == "Ana Torres"


async def test_required_fields(db):
    with pytest.raises(ValueError, match="Missing required fields."):
        await add_schedule_entry(db, ScheduleEntryInput(weekday="lunes"))


async def test_update_clears_optional_fields(db, studio):
    created = await add_schedule_entry(db, entry(studio["instructor"].id, class_name="Rise"))

    updated = await update_schedule_entry(db, str(created.id), entry(studio["instructor"].id, weekday="martes"))

    assert updated.weekday == "martes"
    assert updated.class_name is None

    with pytest.raises(ValueError, match="Todos los campos son obligatorios."):
        await update_schedule_entry(db, str(created.id), ScheduleEntryInput())


async def test_delete_entry(db, studio):
    created = await add_schedule_entry(db, entry(studio["instructor"].id))
    await delete_schedule_entry(db, str(created.id))
    assert await list_schedule_entries(db) == []


async def test_generate_weekly_classes_defaults_to_next_monday(db, monkeypatch):
    calls = []

    async def fake_rpc(session, name, **params):
        calls.append((name, params))
        return None

    monkeypatch.setattr(schedule_crud, "call_rpc", fake_rpc)
    monkeypatch.setattr(schedule_crud, "next_monday", lambda: date(2025, 3, 10))

    message = await generate_weekly_classes(db)

    assert calls == [("generate_weekly_classes", {"start_date_input": "2025-03-10"})]
    assert "2025-03-10" in message


async def test_generate_weekly_classes_rejects_bad_date(db):
    with pytest.raises(ValueError, match="Fecha de inicio inválida."):
        await generate_weekly_classes(db, "")
