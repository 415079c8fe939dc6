"""
Push notification fan-out, log and statistics.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional, List

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.conversions import coerce_uuid
from app.core.logging_config import get_logger
from app.core.timeutils import studio_now
from app.core.validation import FieldValidationError, collect_field_errors
from app.models import Notification, UserPushToken
from app.services import push_service

logger = get_logger("crud.notifications")

SEND_TO_ALL = "all"
SEND_TO_SELECTED = "selected"
RECENT_LIMIT = 50


class ImmediateNotificationForm(BaseModel):
    title: str = Field(min_length=1)
    body: str = Field(min_length=1)
    user_ids: List[str] = Field(min_length=1)


VALIDATION_MESSAGES = {
    "title": "El título es requerido",
    "body": "El mensaje es requerido",
    "user_ids": "Selecciona al menos un usuario",
}


@dataclass
class NotificationStats:
    active_users: int
    sent_today: int
    pending: int


@dataclass
class NotificationData:
    id: uuid.UUID
    title: str
    body: str
    sent: bool
    created_at: Optional[datetime]
    user_id: Optional[uuid.UUID]
    user_name: Optional[str] = None
    user_email: Optional[str] = None


@dataclass
class UserTokenData:
    user_id: uuid.UUID
    expo_push_token: str
    platform: Optional[str]
    device_name: Optional[str]
    last_used_at: Optional[datetime]
    is_active: bool
    user_name: Optional[str] = None
    user_email: Optional[str] = None


@dataclass
class FanOutResult:
    success_count: int
    error_count: int
    total: int
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.success_count == self.total:
            return f"Notificaciones enviadas exitosamente a {self.success_count} usuarios"
        message = (
            f"Notificaciones enviadas parcialmente: {self.success_count} exitosas, "
            f"{self.error_count} fallidas de {self.total} total"
        )
        if self.errors:
            message += f". Errores: {', '.join(self.errors[:3])}"
            if len(self.errors) > 3:
                message += "..."
        return message


def validate_notification(title: Optional[str], body: Optional[str], user_ids: List[str]) -> ImmediateNotificationForm:
    try:
        return ImmediateNotificationForm.model_validate(
            {"title": title or "", "body": body or "", "user_ids": user_ids}
        )
    except ValidationError as e:
        field_errors = collect_field_errors(e)
        messages = {name: [VALIDATION_MESSAGES.get(name, msgs[0])] for name, msgs in field_errors.items()}
        flat = [text for texts in messages.values() for text in texts]
        raise FieldValidationError(f"Errores de validación: {', '.join(flat)}", messages) from e


async def active_token_user_ids(db: AsyncSession) -> List[str]:
    result = await db.execute(
        select(UserPushToken.user_id).where(UserPushToken.is_active == True).distinct()
    )
    return [str(user_id) for user_id in result.scalars().all()]


async def active_tokens_for(db: AsyncSession, user_ids: List[str]) -> List[UserPushToken]:
    parsed = [uid for uid in (coerce_uuid(value) for value in user_ids) if uid]
    if not parsed:
        return []
    result = await db.execute(
        select(UserPushToken).where(
            and_(UserPushToken.user_id.in_(parsed), UserPushToken.is_active == True)
        )
    )
    return list(result.scalars().all())


async def send_immediate_notification(
    db: AsyncSession,
    *,
    title: Optional[str],
    body: Optional[str],
    send_to: str = SEND_TO_SELECTED,
    user_ids: Optional[List[str]] = None,
    transport=None,
) -> FanOutResult:
    """Push one message to every active token of the chosen users.

    Delivery is per token and not transactional; only successful deliveries
    are recorded as sent notifications.
    """
    user_ids = [uid.strip() for uid in (user_ids or []) if uid and uid.strip()]

    if send_to == SEND_TO_ALL:
        user_ids = await active_token_user_ids(db)
        if not user_ids:
            raise ValueError("No hay usuarios con tokens push activos")

    form = validate_notification(title, body, user_ids)

    tokens = await active_tokens_for(db, form.user_ids)
    if not tokens:
        raise ValueError("No se encontraron tokens push activos para los usuarios seleccionados")

    messages = [push_service.build_message(token.expo_push_token, form.title, form.body) for token in tokens]
    tickets = await push_service.send_push_messages(messages, transport=transport)

    success_count = 0
    errors: List[str] = []
    delivered: List[Notification] = []
    for index, (token, ticket) in enumerate(zip(tokens, tickets)):
        if ticket.ok:
            success_count += 1
            delivered.append(
                Notification(user_id=token.user_id, title=form.title, body=form.body, sent=True)
            )
        else:
            errors.append(f"Token {index + 1}: {ticket.message or 'Error desconocido'}")

    if success_count == 0:
        raise ValueError(f"Todas las notificaciones fallaron: {', '.join(errors)}")

    db.add_all(delivered)
    await db.commit()

    result = FanOutResult(
        success_count=success_count,
        error_count=len(errors),
        total=len(tokens),
        errors=errors,
    )
    logger.info(
        f"Notification summary: {result.success_count} successful, "
        f"{result.error_count} failed, total {result.total}"
    )
    return result


async def get_notification_stats(db: AsyncSession, now: datetime | None = None) -> NotificationStats:
    now = now or studio_now()
    start_of_day = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)

    active = await db.execute(
        select(func.count(func.distinct(UserPushToken.user_id))).where(UserPushToken.is_active == True)
    )
    sent_today = await db.execute(
        select(func.count(Notification.id)).where(
            and_(Notification.sent == True, Notification.created_at >= start_of_day)
        )
    )
    pending = await db.execute(select(func.count(Notification.id)).where(Notification.sent == False))

    return NotificationStats(
        active_users=active.scalar() or 0,
        sent_today=sent_today.scalar() or 0,
        pending=pending.scalar() or 0,
    )


async def list_recent_notifications(db: AsyncSession, limit: int = RECENT_LIMIT) -> List[NotificationData]:
    result = await db.execute(
        select(Notification)
        .options(selectinload(Notification.user))
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    return [
        NotificationData(
            id=row.id,
            title=row.title,
            body=row.body,
            sent=bool(row.sent),
            created_at=row.created_at,
            user_id=row.user_id,
            user_name=row.user.name if row.user else None,
            user_email=row.user.email if row.user else None,
        )
        for row in result.scalars().all()
    ]


async def list_users_with_tokens(db: AsyncSession) -> List[UserTokenData]:
    result = await db.execute(
        select(UserPushToken)
        .options(selectinload(UserPushToken.user))
        .where(UserPushToken.is_active == True)
        .order_by(UserPushToken.last_used_at.desc())
    )
    return [
        UserTokenData(
            user_id=row.user_id,
            expo_push_token=row.expo_push_token,
            platform=row.platform,
            device_name=row.device_name,
            last_used_at=row.last_used_at,
            is_active=bool(row.is_active),
            user_name=row.user.name if row.user else None,
            user_email=row.user.email if row.user else None,
        )
        for row in result.scalars().all()
    ]
