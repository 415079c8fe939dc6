from typing import List

import strawberry

from app.crud.notificationsCrud import (
    get_notification_stats,
    list_recent_notifications,
    list_users_with_tokens,
)
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.notifications.types import Notification, NotificationStats, UserWithToken


@strawberry.type
class NotificationQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def notification_stats(self, info: strawberry.Info) -> NotificationStats:
        return NotificationStats.from_data(await get_notification_stats(info.context.db))

    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def recent_notifications(self, info: strawberry.Info) -> List[Notification]:
        return [Notification.from_data(row) for row in await list_recent_notifications(info.context.db)]

    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def users_with_tokens(self, info: strawberry.Info) -> List[UserWithToken]:
        return [UserWithToken.from_data(row) for row in await list_users_with_tokens(info.context.db)]
