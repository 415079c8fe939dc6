import os
import tempfile
from datetime import date, time, timedelta
from decimal import Decimal
from pathlib import Path

# Settings must be in place before any app module reads them
_TMP = Path(tempfile.mkdtemp(prefix="giro-tests-"))
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DB_SCHEMA"] = ""
os.environ["AUTHORIZED_EMAILS"] = "admin@giro.ec, boss@giro.ec"
os.environ["LOG_FILE_PATH"] = str(_TMP / "logs" / "app.log")
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["BASE_URL"] = "http://testserver"
os.environ["PUSH_BATCH_DELAY_SECONDS"] = "0"

import pytest
from fastapi import Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.crud.authCrud import create_account
from app.db.postgresql import Base
from app.graphql.context import Context
from app.graphql.schema import schema
from app.models import (
    Bike, Instructor, Package, Purchase, Reservation, ReservationBike, ReservationCredit,
    StaticBike, StudioClass, User,
)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def admin(db):
    return await create_account(db, email="admin@giro.ec", password="s3cret-pass")


@pytest.fixture
async def outsider(db):
    return await create_account(db, email="intruso@giro.ec", password="s3cret-pass")


@pytest.fixture
def gql(db, admin):
    """Run a GraphQL operation as the allow-listed admin."""

    async def run(query, variables=None, *, account=admin, authorized=True):
        context = Context(
            db=db,
            request=None,
            response=Response(),
            account=account,
            user=account if authorized else None,
            session_id="session-idtest",
        )
        return await schema.execute(query, variable_values=variables, context_value=context)

    return run


@pytest.fixture
async def studio(db):
    """A future class with four bikes, an instructor and a member with credits."""
    instructor = Instructor(name="Ana Torres")
    member = User(email="maria@example.com", name="María López", shoe_size="38", cedula="0102030405")
    package = Package(name="Pack 10", class_credits=10, price=Decimal("50.00"), expiration_days=30)
    db.add_all([instructor, member, package])
    await db.flush()

    studio_class = StudioClass(
        date=date.today() + timedelta(days=3),
        start_time=time(7, 0),
        end_time=time(8, 0),
        instructor_id=instructor.id,
        name="Rise",
    )
    db.add(studio_class)
    await db.flush()

    bikes = {}
    for number in range(1, 5):
        static = StaticBike(id=number, number=number)
        db.add(static)
        await db.flush()
        bike = Bike(class_id=studio_class.id, static_bike_id=static.id)
        db.add(bike)
        bikes[number] = bike
    await db.flush()

    purchase = Purchase(user_id=member.id, package_id=package.id, credits_remaining=8)
    db.add(purchase)
    await db.commit()

    return {
        "instructor": instructor,
        "member": member,
        "package": package,
        "class": studio_class,
        "bikes": bikes,
        "purchase": purchase,
    }


@pytest.fixture
def reserve(db):
    """Create a confirmed reservation holding the given bikes."""

    async def make(studio, numbers, *, status="confirmed", user=None, credits_used=None):
        reservation = Reservation(
            user_id=(user or studio["member"]).id,
            class_id=studio["class"].id,
            status=status,
        )
        db.add(reservation)
        await db.flush()
        for number in numbers:
            db.add(ReservationBike(reservation_id=reservation.id, bike_id=studio["bikes"][number].id))
        if credits_used:
            db.add(
                ReservationCredit(
                    reservation_id=reservation.id,
                    purchase_id=studio["purchase"].id,
                    credits_used=credits_used,
                )
            )
        await db.commit()
        return reservation

    return make
