"""
CRUD operations for reservations.

Credit accounting, double-booking and waitlist promotion are owned by the
database procedures (make_reservation, cancel_reservation, modify_reservation,
join_waitlist, leave_waitlist); this module maps bike numbers to class bikes,
calls them and translates their errors. Changing the bikes of an existing
reservation is done here directly.
"""
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional, List, Dict, Iterable

from sqlalchemy import select, and_, or_, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.conversions import coerce_uuid
from app.core.logging_config import get_logger
from app.core.timeutils import next_monday, studio_now
from app.db.rpc import RpcError, call_rpc, friendly_rpc_error, rpc_failure_message
from app.models import (
    Bike, Purchase, Reservation, ReservationBike, ReservationCredit, StaticBike, StudioClass,
)

logger = get_logger("crud.reservations")

CONFIRMED = "confirmed"
WAITLIST = "waitlist"
CANCELLED = "cancelled"

CANCEL_ERRORS = [
    (("not found",), "No se encontró la reservación especificada."),
    (("already cancelled",), "Esta reservación ya ha sido cancelada."),
    (("too late",), "Ya es muy tarde para cancelar esta reservación."),
    (("permission",), "No tienes permisos para cancelar esta reservación."),
]

MAKE_ERRORS = [
    (("insufficient credits",), "El usuario no tiene suficientes créditos para esta reservación."),
    (("already reserved", "double booking"), "Uno o más spots ya están reservados para esta clase."),
    (("expired",), "Los créditos del usuario han expirado."),
    (("class not found",), "La clase especificada no existe."),
    (("user not found",), "El usuario especificado no existe."),
]

MODIFY_ERRORS = [
    (("not found",), "No se encontró la reservación o la clase especificada."),
    (("insufficient credits",), "El usuario no tiene suficientes créditos para este cambio."),
    (("already reserved", "double booking"), "Uno o más spots ya están reservados para esta clase."),
    (("too late",), "Ya es muy tarde para modificar esta reservación."),
]

JOIN_WAITLIST_ERRORS = [
    (("already",), "El usuario ya está en la lista de espera o tiene una reservación."),
    (("not enabled", "disabled"), "La lista de espera no está habilitada para esta clase."),
    (("insufficient credits",), "El usuario no tiene suficientes créditos."),
]

LEAVE_WAITLIST_ERRORS = [
    (("No estás en la lista de espera",), "No estás en la lista de espera para esta clase."),
]


@dataclass
class ReservationListData:
    """Reservation row for the dashboard table"""
    id: uuid.UUID
    status: Optional[str]
    created_at: Optional[datetime]
    user_id: Optional[uuid.UUID]
    user_name: Optional[str]
    user_email: Optional[str]
    user_shoe_size: Optional[str]
    class_id: Optional[uuid.UUID]
    class_date: Optional[date]
    class_start_time: Optional[time]
    instructor_name: Optional[str]
    bike_numbers: List[int] = field(default_factory=list)


@dataclass
class BikeData:
    id: uuid.UUID
    static_bike_id: Optional[int]
    number: int


@dataclass
class AvailableBikesData:
    available_bikes: List[BikeData]
    current_bikes: List[BikeData]


@dataclass
class AvailableClassData:
    id: uuid.UUID
    date: date
    start_time: time
    end_time: time
    name: Optional[str]
    instructor_name: Optional[str]
    available_spots: int
    location_id: Optional[uuid.UUID]
    location_name: Optional[str]


def _bike_number(bike: Optional[Bike]) -> Optional[int]:
    if bike is None or bike.static_bike is None:
        return None
    return bike.static_bike.number


def _to_list_data(row: Reservation) -> ReservationListData:
    studio_class = row.studio_class
    numbers = [
        number
        for number in (_bike_number(rb.bike) for rb in row.reservation_bikes)
        if number is not None
    ]
    return ReservationListData(
        id=row.id,
        status=row.status,
        created_at=row.created_at,
        user_id=row.user_id,
        user_name=row.user.name if row.user else None,
        user_email=row.user.email if row.user else None,
        user_shoe_size=row.user.shoe_size if row.user else None,
        class_id=row.class_id,
        class_date=studio_class.date if studio_class else None,
        class_start_time=studio_class.start_time if studio_class else None,
        instructor_name=(
            studio_class.instructor.name if studio_class and studio_class.instructor else None
        ),
        bike_numbers=sorted(numbers),
    )


async def get_upcoming_reservations(
    db: AsyncSession, from_date: date | None = None
) -> List[ReservationListData]:
    """Confirmed and waitlisted reservations for classes from next Monday on.

    Waitlisted entries sort before confirmed ones within a class, then by
    arrival order.
    """
    from_date = from_date or next_monday()
    result = await db.execute(
        select(Reservation)
        .join(StudioClass, Reservation.class_id == StudioClass.id)
        .options(
            selectinload(Reservation.user),
            selectinload(Reservation.studio_class).selectinload(StudioClass.instructor),
            selectinload(Reservation.reservation_bikes)
            .selectinload(ReservationBike.bike)
            .selectinload(Bike.static_bike),
        )
        .where(
            and_(
                Reservation.status.in_([CONFIRMED, WAITLIST]),
                StudioClass.date >= from_date,
            )
        )
        .order_by(
            StudioClass.date.asc(),
            StudioClass.start_time.asc(),
            Reservation.status.desc(),
            Reservation.created_at.asc(),
        )
    )
    return [_to_list_data(row) for row in result.scalars().all()]


async def get_reservation(db: AsyncSession, reservation_id: uuid.UUID) -> Reservation | None:
    result = await db.execute(select(Reservation).where(Reservation.id == reservation_id))
    return result.scalar_one_or_none()


async def map_bike_numbers(
    db: AsyncSession, class_id: uuid.UUID, numbers: Iterable[int]
) -> Dict[int, uuid.UUID]:
    """Physical bike number -> bike id for the bikes of one class."""
    numbers = list(numbers)
    if not numbers:
        return {}
    result = await db.execute(
        select(StaticBike.number, Bike.id)
        .join(StaticBike, Bike.static_bike_id == StaticBike.id)
        .where(and_(Bike.class_id == class_id, StaticBike.number.in_(numbers)))
    )
    return {number: bike_id for number, bike_id in result.all()}


def _missing(numbers: Iterable[int], found: Dict[int, uuid.UUID]) -> List[int]:
    return [number for number in numbers if number not in found]


def _valid_bike_numbers(numbers: object) -> bool:
    if not isinstance(numbers, (list, tuple)):
        return False
    return all(
        isinstance(number, int) and not isinstance(number, bool) and number > 0
        for number in numbers
    )


def _raise_on_failure(result: object, default: str) -> None:
    failure = rpc_failure_message(result)
    if failure is not None:
        raise ValueError(failure or default)


async def cancel_reservation(db: AsyncSession, reservation_id: str) -> str:
    """Cancel a reservation; the procedure refunds credits and frees the bikes."""
    parsed_id = coerce_uuid(reservation_id)
    if not parsed_id:
        raise ValueError("ID de reservación inválido.")

    try:
        result = await call_rpc(db, "cancel_reservation", p_reservation_id=str(parsed_id))
    except RpcError as e:
        raise ValueError(
            friendly_rpc_error(e.message, CANCEL_ERRORS, "Error al cancelar la reservación.")
        ) from e

    _raise_on_failure(result, "Error desconocido al cancelar la reservación.")
    logger.info(f"Reservation {parsed_id} cancelled")
    return "Reservación cancelada exitosamente. Los créditos han sido devueltos al usuario."


async def create_reservation(
    db: AsyncSession, *, user_id: object, class_id: object, bike_numbers: Optional[List[int]]
) -> str:
    parsed_user = coerce_uuid(user_id)
    parsed_class = coerce_uuid(class_id)
    if not parsed_user or not parsed_class or not bike_numbers:
        raise ValueError("Faltan datos requeridos")
    if not _valid_bike_numbers(bike_numbers):
        raise ValueError("Los números de spot deben ser números enteros positivos.")

    found = await map_bike_numbers(db, parsed_class, bike_numbers)
    missing = _missing(bike_numbers, found)
    if missing:
        raise ValueError(f"Spots no encontrados en esta clase: {', '.join(map(str, missing))}")

    try:
        result = await call_rpc(
            db,
            "make_reservation",
            p_user_id=str(parsed_user),
            p_class_id=str(parsed_class),
            p_bike_ids=[str(found[number]) for number in bike_numbers],
        )
    except RpcError as e:
        raise ValueError(
            friendly_rpc_error(e.message, MAKE_ERRORS, "Error al crear la reservación.")
        ) from e

    _raise_on_failure(result, "Error desconocido al crear la reservación.")
    logger.info(f"Reservation created for user {parsed_user} in class {parsed_class}")
    return "Reservación creada exitosamente"


async def modify_reservation(
    db: AsyncSession,
    reservation_id: str,
    *,
    new_class_id: object,
    bike_numbers: Optional[List[int]],
) -> str:
    """Move a reservation to another class and bikes through the procedure."""
    parsed_id = coerce_uuid(reservation_id)
    if not parsed_id:
        raise ValueError("ID de reservación inválido.")
    parsed_class = coerce_uuid(new_class_id)
    if not parsed_class or not bike_numbers:
        raise ValueError("Faltan datos requeridos")
    if not _valid_bike_numbers(bike_numbers):
        raise ValueError("Los números de spot deben ser números enteros positivos.")

    found = await map_bike_numbers(db, parsed_class, bike_numbers)
    missing = _missing(bike_numbers, found)
    if missing:
        raise ValueError(f"Spots no encontrados en esta clase: {', '.join(map(str, missing))}")

    try:
        result = await call_rpc(
            db,
            "modify_reservation",
            p_reservation_id=str(parsed_id),
            p_new_class_id=str(parsed_class),
            p_new_bike_ids=[str(found[number]) for number in bike_numbers],
        )
    except RpcError as e:
        raise ValueError(
            friendly_rpc_error(e.message, MODIFY_ERRORS, "Error al modificar la reservación.")
        ) from e

    _raise_on_failure(result, "Error desconocido al modificar la reservación.")
    return "Reservación modificada exitosamente"


async def join_waitlist(db: AsyncSession, *, user_id: object, class_id: object) -> str:
    parsed_user = coerce_uuid(user_id)
    parsed_class = coerce_uuid(class_id)
    if not parsed_user or not parsed_class:
        raise ValueError("Faltan datos requeridos: usuario y clase.")

    try:
        result = await call_rpc(
            db, "join_waitlist", p_user_id=str(parsed_user), p_class_id=str(parsed_class)
        )
    except RpcError as e:
        raise ValueError(
            friendly_rpc_error(e.message, JOIN_WAITLIST_ERRORS, "Error al unirse a la lista de espera.")
        ) from e

    _raise_on_failure(result, "Error desconocido al unirse a la lista de espera.")
    if isinstance(result, dict) and result.get("message"):
        return result["message"]
    return "Usuario agregado a la lista de espera exitosamente."


async def leave_waitlist(db: AsyncSession, *, user_id: object, class_id: object) -> str:
    parsed_user = coerce_uuid(user_id)
    parsed_class = coerce_uuid(class_id)
    if not parsed_user or not parsed_class:
        raise ValueError("Faltan datos requeridos: usuario y clase.")

    try:
        result = await call_rpc(
            db, "leave_waitlist", p_user_id=str(parsed_user), p_class_id=str(parsed_class)
        )
    except RpcError as e:
        raise ValueError(
            friendly_rpc_error(e.message, LEAVE_WAITLIST_ERRORS, "Error al salir de la lista de espera.")
        ) from e

    if isinstance(result, dict) and result.get("message"):
        return result["message"]
    return "Usuario removido de la lista de espera exitosamente."


async def _bikes_held_by_others(
    db: AsyncSession, bike_ids: List[uuid.UUID], reservation_id: uuid.UUID
) -> bool:
    result = await db.execute(
        select(func.count(ReservationBike.id))
        .join(Reservation, ReservationBike.reservation_id == Reservation.id)
        .where(
            and_(
                ReservationBike.bike_id.in_(bike_ids),
                ReservationBike.reservation_id != reservation_id,
                Reservation.status == CONFIRMED,
            )
        )
    )
    return (result.scalar() or 0) > 0


async def _refund_credits(db: AsyncSession, reservation_id: uuid.UUID, amount: int) -> None:
    """Give ``amount`` credits back to the purchases the reservation consumed."""
    result = await db.execute(
        select(ReservationCredit)
        .options(selectinload(ReservationCredit.purchase))
        .where(ReservationCredit.reservation_id == reservation_id)
    )
    remaining = amount
    for credit in result.scalars().all():
        if remaining <= 0:
            break
        refund = min(remaining, credit.credits_used or 0)
        purchase: Optional[Purchase] = credit.purchase
        if refund <= 0 or purchase is None:
            continue
        purchase.credits_remaining += refund
        credit.credits_used = (credit.credits_used or 0) - refund
        remaining -= refund


async def update_reservation_bikes(
    db: AsyncSession, reservation_id: str, bike_numbers: Optional[List[int]]
) -> str:
    """Replace the bikes of a reservation, refunding credits when it shrinks."""
    parsed_id = coerce_uuid(reservation_id)
    if not parsed_id:
        raise ValueError("ID de reservación inválido.")
    if not _valid_bike_numbers(bike_numbers):
        raise ValueError("Los números de spot deben ser números enteros positivos.")

    reservation = await get_reservation(db, parsed_id)
    if not reservation:
        raise ValueError("No se pudo obtener la información de la reservación.")
    if not reservation.class_id:
        raise ValueError("La reservación no tiene una clase asociada.")
    if not bike_numbers:
        raise ValueError("Debes seleccionar al menos un spot.")

    found = await map_bike_numbers(db, reservation.class_id, bike_numbers)
    missing = _missing(bike_numbers, found)
    if missing:
        raise ValueError(
            "Los siguientes spots no están disponibles en esta clase: "
            f"{', '.join(map(str, missing))}"
        )

    new_bike_ids = list(dict.fromkeys(found[number] for number in bike_numbers))
    if await _bikes_held_by_others(db, new_bike_ids, parsed_id):
        raise ValueError("Uno o más spots ya están reservados por otro usuario.")

    current = await db.execute(
        select(func.count(ReservationBike.id)).where(ReservationBike.reservation_id == parsed_id)
    )
    difference = len(new_bike_ids) - (current.scalar() or 0)

    try:
        await db.execute(delete(ReservationBike).where(ReservationBike.reservation_id == parsed_id))
        db.add_all(ReservationBike(reservation_id=parsed_id, bike_id=bike_id) for bike_id in new_bike_ids)
        if difference < 0:
            await _refund_credits(db, parsed_id, -difference)
        elif difference > 0:
            # TODO: charge extra credits once make_reservation exposes a top-up procedure
            logger.info(f"Reservation {parsed_id} needs {difference} more credits")
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    return f"Spots actualizados exitosamente. Nuevos spots: {', '.join(map(str, bike_numbers))}"


async def get_available_bikes(
    db: AsyncSession, class_id: str, exclude_reservation_id: Optional[str] = None
) -> AvailableBikesData:
    """Free bikes of a class plus those held by the reservation being edited."""
    parsed_class = coerce_uuid(class_id)
    if not parsed_class:
        raise ValueError("ID de clase inválido.")
    excluded = coerce_uuid(exclude_reservation_id)

    bikes_result = await db.execute(
        select(Bike).options(selectinload(Bike.static_bike)).where(Bike.class_id == parsed_class)
    )
    bikes = bikes_result.scalars().all()

    reserved_stmt = (
        select(ReservationBike.bike_id)
        .join(Reservation, ReservationBike.reservation_id == Reservation.id)
        .where(and_(Reservation.class_id == parsed_class, Reservation.status == CONFIRMED))
    )
    if excluded:
        reserved_stmt = reserved_stmt.where(ReservationBike.reservation_id != excluded)
    reserved_ids = set((await db.execute(reserved_stmt)).scalars().all())

    def to_bike(bike: Bike) -> BikeData:
        return BikeData(id=bike.id, static_bike_id=bike.static_bike_id, number=_bike_number(bike) or 0)

    available = sorted(
        (to_bike(bike) for bike in bikes if bike.id not in reserved_ids),
        key=lambda b: b.number,
    )

    current: List[BikeData] = []
    if excluded:
        current_result = await db.execute(
            select(Bike)
            .join(ReservationBike, ReservationBike.bike_id == Bike.id)
            .options(selectinload(Bike.static_bike))
            .where(ReservationBike.reservation_id == excluded)
        )
        current = sorted((to_bike(bike) for bike in current_result.scalars().all()), key=lambda b: b.number)

    return AvailableBikesData(available_bikes=available, current_bikes=current)


async def get_available_classes(db: AsyncSession, now: datetime | None = None) -> List[AvailableClassData]:
    """Upcoming non-cancelled classes that still have free bikes.

    Today's classes are only listed while they have not started.
    """
    now = now or studio_now()
    today = now.date()
    current_time = now.time().replace(microsecond=0, tzinfo=None)

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
    classes = [
        row for row in result.scalars().all()
        if not (row.date == today and row.start_time <= current_time)
    ]
    if not classes:
        return []

    class_ids = [row.id for row in classes]
    totals_result = await db.execute(
        select(Bike.class_id, func.count(Bike.id))
        .where(Bike.class_id.in_(class_ids))
        .group_by(Bike.class_id)
    )
    totals = dict(totals_result.all())

    reserved_result = await db.execute(
        select(Bike.class_id, func.count(func.distinct(ReservationBike.bike_id)))
        .join(ReservationBike, ReservationBike.bike_id == Bike.id)
        .join(Reservation, ReservationBike.reservation_id == Reservation.id)
        .where(and_(Bike.class_id.in_(class_ids), Reservation.status == CONFIRMED))
        .group_by(Bike.class_id)
    )
    reserved = dict(reserved_result.all())

    available: List[AvailableClassData] = []
    for row in classes:
        free = totals.get(row.id, 0) - reserved.get(row.id, 0)
        if free <= 0:
            continue
        available.append(
            AvailableClassData(
                id=row.id,
                date=row.date,
                start_time=row.start_time,
                end_time=row.end_time,
                name=row.name,
                instructor_name=row.instructor.name if row.instructor else None,
                available_spots=free,
                location_id=row.location_id,
                location_name=row.location.name if row.location else None,
            )
        )
    return available
