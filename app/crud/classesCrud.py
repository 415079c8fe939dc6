"""
CRUD operations for dated classes and locations.
"""
import uuid
from dataclasses import dataclass
from datetime import date, time
from typing import Optional, List

from sqlalchemy import select, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.conversions import blank_to_none, coerce_date, coerce_time, coerce_uuid
from app.core.logging_config import get_logger
from app.core.timeutils import studio_today
from app.db.rpc import RpcError, call_rpc, rpc_failure_message
from app.models import StudioClass, Location, Reservation

logger = get_logger("crud.classes")


@dataclass
class ClassData:
    """Class row with instructor and location names resolved"""
    id: uuid.UUID
    date: date
    start_time: time
    end_time: time
    name: Optional[str]
    instructor_id: Optional[uuid.UUID]
    instructor_name: Optional[str] = None
    location_id: Optional[uuid.UUID] = None
    location_name: Optional[str] = None
    is_cancelled: bool = False
    waitlist_enabled: bool = True


@dataclass
class LocationData:
    id: uuid.UUID
    name: str
    address: Optional[str]


def _to_class_data(row: StudioClass) -> ClassData:
    return ClassData(
        id=row.id,
        date=row.date,
        start_time=row.start_time,
        end_time=row.end_time,
        name=row.name,
        instructor_id=row.instructor_id,
        instructor_name=row.instructor.name if row.instructor else None,
        location_id=row.location_id,
        location_name=row.location.name if row.location else None,
        is_cancelled=bool(row.is_cancelled),
        waitlist_enabled=bool(row.waitlist_enabled),
    )


async def get_upcoming_classes(db: AsyncSession, today: date | None = None) -> List[ClassData]:
    """Non-cancelled classes from today on, ordered by date then start time."""
    today = today or studio_today()
    result = await db.execute(
        select(StudioClass)
        .options(selectinload(StudioClass.instructor), selectinload(StudioClass.location))
        .where(
            and_(
                StudioClass.date >= today,
                or_(StudioClass.is_cancelled == False, StudioClass.is_cancelled.is_(None)),
            )
        )
        .order_by(StudioClass.date.asc(), StudioClass.start_time.asc())
    )
    return [_to_class_data(row) for row in result.scalars().all()]


async def update_class_name(db: AsyncSession, class_id: str, name: Optional[str]) -> None:
    parsed_id = coerce_uuid(class_id)
    if not parsed_id:
        raise ValueError("Invalid Class ID.")

    result = await db.execute(select(StudioClass).where(StudioClass.id == parsed_id))
    studio_class = result.scalar_one_or_none()
    if not studio_class:
        raise ValueError("Invalid Class ID.")

    # Blank names are stored as null
    studio_class.name = blank_to_none(name)
    await db.commit()


async def find_overlapping_class(
    db: AsyncSession,
    *,
    instructor_id: uuid.UUID,
    class_date: date,
    start_time: time,
    end_time: time,
) -> Optional[StudioClass]:
    """Non-cancelled class of the same instructor whose range overlaps [start, end)."""
    result = await db.execute(
        select(StudioClass)
        .where(
            and_(
                StudioClass.instructor_id == instructor_id,
                StudioClass.date == class_date,
                or_(StudioClass.is_cancelled == False, StudioClass.is_cancelled.is_(None)),
                StudioClass.start_time < end_time,
                StudioClass.end_time > start_time,
            )
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_class(
    db: AsyncSession,
    *,
    class_date: object,
    start_time: object,
    end_time: object,
    instructor_id: object,
    name: Optional[str] = None,
    location_id: object = None,
    waitlist_enabled: bool = True,
) -> StudioClass:
    parsed_date = coerce_date(class_date)
    parsed_start = coerce_time(start_time)
    parsed_end = coerce_time(end_time)
    parsed_instructor = coerce_uuid(instructor_id)

    if not (parsed_date and parsed_start and parsed_end and parsed_instructor):
        raise ValueError("Missing required fields.")
    if parsed_end <= parsed_start:
        raise ValueError("La hora de fin debe ser posterior a la hora de inicio.")

    overlap = await find_overlapping_class(
        db,
        instructor_id=parsed_instructor,
        class_date=parsed_date,
        start_time=parsed_start,
        end_time=parsed_end,
    )
    if overlap:
        raise ValueError(
            "El instructor ya tiene una clase en ese horario "
            f"({overlap.start_time.strftime('%H:%M')} - {overlap.end_time.strftime('%H:%M')})."
        )

    studio_class = StudioClass(
        date=parsed_date,
        start_time=parsed_start,
        end_time=parsed_end,
        instructor_id=parsed_instructor,
        name=blank_to_none(name),
        location_id=coerce_uuid(location_id),
        is_cancelled=False,
        waitlist_enabled=waitlist_enabled,
    )
    db.add(studio_class)
    await db.commit()
    await db.refresh(studio_class)
    return studio_class


async def delete_class(db: AsyncSession, class_id: str) -> str:
    """Delete a class together with its bikes through the database procedure."""
    parsed_id = coerce_uuid(class_id)
    if not parsed_id:
        raise ValueError("Invalid Class ID.")

    try:
        result = await call_rpc(db, "delete_class_with_bikes", p_class_id=str(parsed_id))
    except RpcError as e:
        raise ValueError(f"Database Error: {e.message}") from e

    failure = rpc_failure_message(result)
    if failure is not None:
        raise ValueError(failure or "No se pudo eliminar la clase.")

    logger.info(f"Class {parsed_id} deleted with its bikes")
    if isinstance(result, dict) and result.get("message"):
        return result["message"]
    return "Clase eliminada correctamente."


async def list_locations(db: AsyncSession) -> List[LocationData]:
    result = await db.execute(select(Location).order_by(Location.name))
    return [
        LocationData(id=row.id, name=row.name, address=row.address)
        for row in result.scalars().all()
    ]


async def count_todays_reservations(db: AsyncSession, today: date | None = None) -> int:
    """Confirmed reservations in today's non-cancelled classes."""
    today = today or studio_today()
    result = await db.execute(
        select(func.count(Reservation.id))
        .join(StudioClass, Reservation.class_id == StudioClass.id)
        .where(
            and_(
                StudioClass.date == today,
                or_(StudioClass.is_cancelled == False, StudioClass.is_cancelled.is_(None)),
                Reservation.status == "confirmed",
            )
        )
    )
    return result.scalar() or 0
