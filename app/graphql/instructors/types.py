import uuid
from typing import List, Optional

import strawberry

from app.crud.instructorsCrud import InstructorData


@strawberry.type
class Instructor:
    id: uuid.UUID
    name: str
    bio: Optional[str]
    profile_picture_url: Optional[str]
    specialties: Optional[List[str]]

    @classmethod
    def from_data(cls, data: InstructorData) -> "Instructor":
        return cls(
            id=data.id,
            name=data.name,
            bio=data.bio,
            profile_picture_url=data.profile_picture_url,
            specialties=data.specialties,
        )


@strawberry.input
class InstructorInput:
    name: Optional[str] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    specialties: Optional[List[str]] = None
