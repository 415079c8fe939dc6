import uuid
from datetime import date, datetime, time
from typing import List, Optional

import strawberry

from app.crud.reservationsCrud import (
    AvailableBikesData,
    AvailableClassData,
    BikeData,
    ReservationListData,
)


@strawberry.type
class Reservation:
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
    bike_numbers: List[int]

    @classmethod
    def from_data(cls, data: ReservationListData) -> "Reservation":
        return cls(
            id=data.id,
            status=data.status,
            created_at=data.created_at,
            user_id=data.user_id,
            user_name=data.user_name,
            user_email=data.user_email,
            user_shoe_size=data.user_shoe_size,
            class_id=data.class_id,
            class_date=data.class_date,
            class_start_time=data.class_start_time,
            instructor_name=data.instructor_name,
            bike_numbers=list(data.bike_numbers),
        )


@strawberry.type
class Bike:
    id: uuid.UUID
    static_bike_id: Optional[int]
    number: int

    @classmethod
    def from_data(cls, data: BikeData) -> "Bike":
        return cls(id=data.id, static_bike_id=data.static_bike_id, number=data.number)


@strawberry.type
class AvailableBikes:
    success: bool
    available_bikes: List[Bike]
    current_bikes: List[Bike]
    error: Optional[str] = None

    @classmethod
    def from_data(cls, data: AvailableBikesData) -> "AvailableBikes":
        return cls(
            success=True,
            available_bikes=[Bike.from_data(b) for b in data.available_bikes],
            current_bikes=[Bike.from_data(b) for b in data.current_bikes],
        )


@strawberry.type
class AvailableClass:
    id: uuid.UUID
    date: date
    start_time: time
    end_time: time
    name: Optional[str]
    instructor_name: Optional[str]
    available_spots: int
    location_id: Optional[uuid.UUID]
    location_name: Optional[str]

    @classmethod
    def from_data(cls, data: AvailableClassData) -> "AvailableClass":
        return cls(
            id=data.id,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            name=data.name,
            instructor_name=data.instructor_name,
            available_spots=data.available_spots,
            location_id=data.location_id,
            location_name=data.location_name,
        )


@strawberry.input
class CreateReservationInput:
    user_id: str
    class_id: str
    bike_numbers: List[int]


@strawberry.input
class ModifyReservationInput:
    reservation_id: str
    new_class_id: str
    bike_numbers: List[int]


@strawberry.input
class WaitlistInput:
    user_id: str
    class_id: str
