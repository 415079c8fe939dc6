import uuid
from datetime import datetime
from typing import List, Optional

import strawberry

from app.crud.notificationsCrud import NotificationData, NotificationStats as StatsData, UserTokenData
from app.graphql.common import FieldError


@strawberry.type
class NotificationStats:
    active_users: int
    sent_today: int
    pending: int

    @classmethod
    def from_data(cls, data: StatsData) -> "NotificationStats":
        return cls(active_users=data.active_users, sent_today=data.sent_today, pending=data.pending)


@strawberry.type
class Notification:
    id: uuid.UUID
    title: str
    body: str
    sent: bool
    created_at: Optional[datetime]
    user_id: Optional[uuid.UUID]
    user_name: Optional[str]
    user_email: Optional[str]

    @classmethod
    def from_data(cls, data: NotificationData) -> "Notification":
        return cls(
            id=data.id,
            title=data.title,
            body=data.body,
            sent=data.sent,
            created_at=data.created_at,
            user_id=data.user_id,
            user_name=data.user_name,
            user_email=data.user_email,
        )


@strawberry.type
class UserWithToken:
    user_id: uuid.UUID
    expo_push_token: str
    platform: Optional[str]
    device_name: Optional[str]
    last_used_at: Optional[datetime]
    is_active: bool
    user_name: Optional[str]
    user_email: Optional[str]

    @classmethod
    def from_data(cls, data: UserTokenData) -> "UserWithToken":
        return cls(
            user_id=data.user_id,
            expo_push_token=data.expo_push_token,
            platform=data.platform,
            device_name=data.device_name,
            last_used_at=data.last_used_at,
            is_active=data.is_active,
            user_name=data.user_name,
            user_email=data.user_email,
        )


@strawberry.input
class ImmediateNotificationInput:
    title: Optional[str] = None
    body: Optional[str] = None
    send_to: str = "selected"
    user_ids: Optional[List[str]] = None


@strawberry.type
class NotificationSendResponse:
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    success_count: int = 0
    error_count: int = 0
    total: int = 0
    field_errors: Optional[List[FieldError]] = None
