"""
CRUD operations for instructors.
"""
import uuid
from dataclasses import dataclass
from typing import Optional, List

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.conversions import coerce_uuid
from app.core.logging_config import get_logger
from app.core.timeutils import utcnow
from app.core.validation import validate_form
from app.models import Instructor

logger = get_logger("crud.instructors")

SPECIALTIES = ("pilates", "cycle", "resilience")

_url_adapter = TypeAdapter(AnyUrl)


@dataclass
class InstructorData:
    id: uuid.UUID
    name: str
    bio: Optional[str]
    profile_picture_url: Optional[str]
    specialties: Optional[List[str]]


class InstructorForm(BaseModel):
    name: str = Field(min_length=1)
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    specialties: Optional[List[str]] = None

    @field_validator("profile_picture_url")
    @classmethod
    def _valid_url_or_empty(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        try:
            _url_adapter.validate_python(value)
        except ValueError:
            raise ValueError("Invalid url")
        return value


def clean_specialties(values: Optional[List[str]]) -> Optional[List[str]]:
    """Keep known specialties only; an empty selection becomes None."""
    cleaned = [value for value in (values or []) if value in SPECIALTIES]
    return cleaned or None


def _to_data(row: Instructor) -> InstructorData:
    return InstructorData(
        id=row.id,
        name=row.name,
        bio=row.bio,
        profile_picture_url=row.profile_picture_url,
        specialties=row.specialties,
    )


async def list_instructors(db: AsyncSession) -> List[InstructorData]:
    result = await db.execute(
        select(Instructor).where(Instructor.deleted_at.is_(None)).order_by(Instructor.name)
    )
    return [_to_data(row) for row in result.scalars().all()]


async def get_instructor(db: AsyncSession, instructor_id: uuid.UUID) -> Instructor | None:
    result = await db.execute(select(Instructor).where(Instructor.id == instructor_id))
    return result.scalar_one_or_none()


def _validated(name, bio, profile_picture_url, specialties) -> InstructorForm:
    return validate_form(
        InstructorForm,
        {
            "name": name,
            "bio": bio or None,
            "profile_picture_url": profile_picture_url or None,
            "specialties": clean_specialties(specialties),
        },
    )


async def add_instructor(
    db: AsyncSession,
    *,
    name: Optional[str],
    bio: Optional[str] = None,
    profile_picture_url: Optional[str] = None,
    specialties: Optional[List[str]] = None,
) -> Instructor:
    form = _validated(name, bio, profile_picture_url, specialties)
    instructor = Instructor(
        name=form.name,
        bio=form.bio,
        profile_picture_url=form.profile_picture_url,
        specialties=form.specialties,
    )
    db.add(instructor)
    await db.commit()
    await db.refresh(instructor)
    return instructor


async def update_instructor(
    db: AsyncSession,
    instructor_id: str,
    *,
    name: Optional[str],
    bio: Optional[str] = None,
    profile_picture_url: Optional[str] = None,
    specialties: Optional[List[str]] = None,
) -> Instructor:
    parsed_id = coerce_uuid(instructor_id)
    if not parsed_id:
        raise ValueError("Invalid ID.")

    form = _validated(name, bio, profile_picture_url, specialties)
    instructor = await get_instructor(db, parsed_id)
    if not instructor:
        raise ValueError("Invalid ID.")

    instructor.name = form.name
    instructor.bio = form.bio
    instructor.profile_picture_url = form.profile_picture_url
    instructor.specialties = form.specialties
    await db.commit()
    return instructor


async def delete_instructor(db: AsyncSession, instructor_id: str) -> None:
    """Soft delete: the row stays for past classes."""
    parsed_id = coerce_uuid(instructor_id)
    if not parsed_id:
        raise ValueError("Invalid ID.")

    instructor = await get_instructor(db, parsed_id)
    if not instructor:
        raise ValueError("Invalid ID.")

    instructor.deleted_at = utcnow()
    await db.commit()
    logger.info(f"Instructor {parsed_id} soft-deleted")


async def set_profile_picture(db: AsyncSession, instructor_id: uuid.UUID, url: str) -> Instructor:
    instructor = await get_instructor(db, instructor_id)
    if not instructor or instructor.deleted_at is not None:
        raise LookupError("Instructor no encontrado")
    instructor.profile_picture_url = url
    await db.commit()
    return instructor
