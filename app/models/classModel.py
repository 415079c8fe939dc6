"""
Classes, the default weekly schedule, bikes and reservations
"""
import datetime as dt
import uuid
from datetime import datetime, time
from typing import Optional, List, TYPE_CHECKING
from sqlalchemy import (
    Date, Time, ForeignKey, Integer, String, Text, Boolean, JSON, Uuid, Index
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import TIMESTAMP

from app.core.timeutils import utcnow
from app.db.postgresql import Base

if TYPE_CHECKING:
    from app.models.userModel import User
    from app.models.packageModel import Purchase


class Instructor(Base):
    """Instructors; soft-deleted through deleted_at"""

    __tablename__ = "instructors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text)
    profile_picture_url: Mapped[Optional[str]] = mapped_column(String(500))
    specialties: Mapped[Optional[List[str]]] = mapped_column(JSON)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True))

    classes: Mapped[List["StudioClass"]] = relationship(back_populates="instructor")


class Location(Base):
    """Studio rooms / branches"""

    __tablename__ = "locations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(255))


class ClassSchedule(Base):
    """Default weekly schedule used by generate_weekly_classes"""

    __tablename__ = "class_schedules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    weekday: Mapped[Optional[str]] = mapped_column(String(20))
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    instructor_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("instructors.id"))
    location_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("locations.id"))
    class_name: Mapped[Optional[str]] = mapped_column(String(120))
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)

    instructor: Mapped[Optional["Instructor"]] = relationship()
    location: Mapped[Optional["Location"]] = relationship()


class StudioClass(Base):
    """A dated class instance"""

    __tablename__ = "classes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(120))
    instructor_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("instructors.id"))
    location_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("locations.id"))
    is_cancelled: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    waitlist_enabled: Mapped[Optional[bool]] = mapped_column(Boolean, default=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)

    # Relationships
    instructor: Mapped[Optional["Instructor"]] = relationship(back_populates="classes")
    location: Mapped[Optional["Location"]] = relationship()
    bikes: Mapped[List["Bike"]] = relationship(back_populates="studio_class")
    reservations: Mapped[List["Reservation"]] = relationship(back_populates="studio_class")

    __table_args__ = (
        Index("ix_classes_instructor_date", "instructor_id", "date"),
    )


class StaticBike(Base):
    """Physical bikes; `number` is what the member sees"""

    __tablename__ = "static_bikes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False)


class Bike(Base):
    """A physical bike made available in one class"""

    __tablename__ = "bikes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    class_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("classes.id"))
    static_bike_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("static_bikes.id"))

    studio_class: Mapped[Optional["StudioClass"]] = relationship(back_populates="bikes")
    static_bike: Mapped[Optional["StaticBike"]] = relationship()


class Reservation(Base):
    """Reservation of a member in a class (confirmed, waitlist or cancelled)"""

    __tablename__ = "reservations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("users.id"))
    class_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("classes.id"))
    status: Mapped[Optional[str]] = mapped_column(String(20))
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), default=utcnow)

    # Relationships
    user: Mapped[Optional["User"]] = relationship(back_populates="reservations")
    studio_class: Mapped[Optional["StudioClass"]] = relationship(back_populates="reservations")
    reservation_bikes: Mapped[List["ReservationBike"]] = relationship(back_populates="reservation")
    credits: Mapped[List["ReservationCredit"]] = relationship(back_populates="reservation")


class ReservationBike(Base):
    __tablename__ = "reservation_bikes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reservation_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("reservations.id"))
    bike_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("bikes.id"))

    reservation: Mapped[Optional["Reservation"]] = relationship(back_populates="reservation_bikes")
    bike: Mapped[Optional["Bike"]] = relationship()


class ReservationCredit(Base):
    """Credits a reservation consumed from each purchase"""

    __tablename__ = "reservation_credits"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reservation_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("reservations.id"))
    purchase_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("purchases.id"))
    credits_used: Mapped[Optional[int]] = mapped_column(Integer)

    reservation: Mapped[Optional["Reservation"]] = relationship(back_populates="credits")
    purchase: Mapped[Optional["Purchase"]] = relationship()
