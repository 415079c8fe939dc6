from typing import List

import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.classesCrud import get_upcoming_classes, list_locations
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.classes.types import Location, StudioClass


@strawberry.type
class ClassQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def upcoming_classes(self, info: strawberry.Info) -> List[StudioClass]:
        """Non-cancelled classes from today (studio time) on."""
        db: AsyncSession = info.context.db
        return [StudioClass.from_data(row) for row in await get_upcoming_classes(db)]

    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def locations(self, info: strawberry.Info) -> List[Location]:
        db: AsyncSession = info.context.db
        return [Location.from_data(row) for row in await list_locations(db)]
