from typing import List

import strawberry

from app.crud.scheduleCrud import list_schedule_entries
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.schedule.types import ScheduleEntry


@strawberry.type
class ScheduleQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def schedule_entries(self, info: strawberry.Info) -> List[ScheduleEntry]:
        return [ScheduleEntry.from_data(row) for row in await list_schedule_entries(info.context.db)]
