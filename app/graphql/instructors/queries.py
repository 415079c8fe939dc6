from typing import List

import strawberry

from app.crud.instructorsCrud import list_instructors
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.instructors.types import Instructor


@strawberry.type
class InstructorQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def instructors(self, info: strawberry.Info) -> List[Instructor]:
        """Instructors that are not soft-deleted, by name."""
        return [Instructor.from_data(row) for row in await list_instructors(info.context.db)]
