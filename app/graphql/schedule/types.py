import uuid
from datetime import time
from typing import Optional

import strawberry

from app.crud.scheduleCrud import ScheduleEntryData, ScheduleEntryInput as ScheduleEntryForm


@strawberry.type
class ScheduleEntry:
    id: uuid.UUID
    weekday: Optional[str]
    start_time: time
    end_time: time
    instructor_id: Optional[uuid.UUID]
    instructor_name: Optional[str]
    location_id: Optional[uuid.UUID]
    location_name: Optional[str]
    class_name: Optional[str]

    @classmethod
    def from_data(cls, data: ScheduleEntryData) -> "ScheduleEntry":
        return cls(
            id=data.id,
            weekday=data.weekday,
            start_time=data.start_time,
            end_time=data.end_time,
            instructor_id=data.instructor_id,
            instructor_name=data.instructor_name,
            location_id=data.location_id,
            location_name=data.location_name,
            class_name=data.class_name,
        )


@strawberry.input
class ScheduleEntryInput:
    weekday: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    instructor_id: Optional[str] = None
    location_id: Optional[str] = None
    class_name: Optional[str] = None

    def to_form(self) -> ScheduleEntryForm:
        return ScheduleEntryForm(
            weekday=self.weekday,
            start_time=self.start_time,
            end_time=self.end_time,
            instructor_id=self.instructor_id,
            location_id=self.location_id,
            class_name=self.class_name,
        )
