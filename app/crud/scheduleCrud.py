"""
Default weekly schedule and weekly class generation.
"""
import uuid
from dataclasses import dataclass
from datetime import date, time
from typing import Optional, List

from sqlalchemy import select, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.conversions import blank_to_none, coerce_date, coerce_time, coerce_uuid
from app.core.logging_config import get_logger
from app.core.timeutils import next_monday
from app.db.rpc import RpcError, call_rpc
from app.models import ClassSchedule

logger = get_logger("crud.schedule")

WEEKDAY_ORDER = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]


@dataclass
class ScheduleEntryData:
    id: uuid.UUID
    weekday: Optional[str]
    start_time: time
    end_time: time
    instructor_id: Optional[uuid.UUID]
    instructor_name: Optional[str]
    location_id: Optional[uuid.UUID]
    location_name: Optional[str]
    class_name: Optional[str]


@dataclass
class ScheduleEntryInput:
    """Raw form values; everything arrives as text from the dashboard"""
    weekday: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    instructor_id: Optional[str] = None
    location_id: Optional[str] = None
    class_name: Optional[str] = None


def _weekday_sort_key():
    # Weekdays are stored as names (or numbers as text); unknown values go last
    whens = {name: index for index, name in enumerate(WEEKDAY_ORDER)}
    whens.update({str(index + 1): index for index in range(7)})
    return case(whens, value=ClassSchedule.weekday, else_=len(WEEKDAY_ORDER))


async def generate_weekly_classes(db: AsyncSession, start_date: object = None) -> str:
    """Ask the database to materialize the default schedule for one week."""
    if start_date is None:
        start_date = next_monday()
    parsed = coerce_date(start_date)
    if not parsed:
        raise ValueError("Fecha de inicio inválida.")

    start_iso = parsed.isoformat()
    try:
        await call_rpc(db, "generate_weekly_classes", start_date_input=start_iso)
    except RpcError as e:
        raise ValueError(f"Error de base de datos: {e.message}") from e

    logger.info(f"Weekly classes generated for week starting {start_iso}")
    return f"Clases generadas o ya existentes para la semana que inicia en {start_iso}."


async def list_schedule_entries(db: AsyncSession) -> List[ScheduleEntryData]:
    result = await db.execute(
        select(ClassSchedule)
        .options(selectinload(ClassSchedule.instructor), selectinload(ClassSchedule.location))
        .order_by(_weekday_sort_key(), ClassSchedule.start_time)
    )
    return [
        ScheduleEntryData(
            id=row.id,
            weekday=row.weekday,
            start_time=row.start_time,
            end_time=row.end_time,
            instructor_id=row.instructor_id,
            instructor_name=row.instructor.name if row.instructor else None,
            location_id=row.location_id,
            location_name=row.location.name if row.location else None,
            class_name=row.class_name,
        )
        for row in result.scalars().all()
    ]


def _parse_required(data: ScheduleEntryInput, message: str):
    weekday = blank_to_none(data.weekday)
    start = coerce_time(data.start_time)
    end = coerce_time(data.end_time)
    instructor_id = coerce_uuid(data.instructor_id)
    if not (weekday and start and end and instructor_id):
        raise ValueError(message)
    return weekday, start, end, instructor_id


async def add_schedule_entry(db: AsyncSession, data: ScheduleEntryInput) -> ClassSchedule:
    weekday, start, end, instructor_id = _parse_required(data, "Missing required fields.")

    entry = ClassSchedule(
        weekday=weekday,
        start_time=start,
        end_time=end,
        instructor_id=instructor_id,
        location_id=coerce_uuid(data.location_id),
        class_name=blank_to_none(data.class_name),
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


async def update_schedule_entry(db: AsyncSession, entry_id: str, data: ScheduleEntryInput) -> ClassSchedule:
    parsed_id = coerce_uuid(entry_id)
    if not parsed_id:
        raise ValueError("ID inválido.")

    weekday, start, end, instructor_id = _parse_required(data, "Todos los campos son obligatorios.")

    result = await db.execute(select(ClassSchedule).where(ClassSchedule.id == parsed_id))
    entry = result.scalar_one_or_none()
    if not entry:
        raise ValueError("ID inválido.")

    entry.weekday = weekday
    entry.start_time = start
    entry.end_time = end
    entry.instructor_id = instructor_id
    # Optional fields are cleared when the form leaves them empty
    entry.location_id = coerce_uuid(data.location_id)
    entry.class_name = blank_to_none(data.class_name)
    await db.commit()
    return entry


async def delete_schedule_entry(db: AsyncSession, entry_id: str) -> None:
    parsed_id = coerce_uuid(entry_id)
    if not parsed_id:
        raise ValueError("Invalid ID.")

    result = await db.execute(select(ClassSchedule).where(ClassSchedule.id == parsed_id))
    entry = result.scalar_one_or_none()
    if not entry:
        raise ValueError("Invalid ID.")

    await db.delete(entry)
    await db.commit()
