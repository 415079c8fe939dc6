"""
GraphQL types for dated classes and locations.
"""
import uuid
from datetime import date, time
from typing import Optional

import strawberry

from app.crud.classesCrud import ClassData, LocationData


@strawberry.type
class StudioClass:
    id: uuid.UUID
    date: date
    start_time: time
    end_time: time
    name: Optional[str]
    instructor_id: Optional[uuid.UUID]
    instructor_name: Optional[str]
    location_id: Optional[uuid.UUID]
    location_name: Optional[str]
    is_cancelled: bool
    waitlist_enabled: bool

    @classmethod
    def from_data(cls, data: ClassData) -> "StudioClass":
        return cls(
            id=data.id,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            name=data.name,
            instructor_id=data.instructor_id,
            instructor_name=data.instructor_name,
            location_id=data.location_id,
            location_name=data.location_name,
            is_cancelled=data.is_cancelled,
            waitlist_enabled=data.waitlist_enabled,
        )


@strawberry.type
class Location:
    id: uuid.UUID
    name: str
    address: Optional[str]

    @classmethod
    def from_data(cls, data: LocationData) -> "Location":
        return cls(id=data.id, name=data.name, address=data.address)


@strawberry.input
class CreateClassInput:
    """Dates as YYYY-MM-DD, times as HH:MM"""
    date: str
    start_time: str
    end_time: str
    instructor_id: str
    name: Optional[str] = None
    location_id: Optional[str] = None
    waitlist_enabled: bool = True
