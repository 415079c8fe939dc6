import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.notificationsCrud import send_immediate_notification
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.common import field_errors_of
from app.graphql.notifications.types import ImmediateNotificationInput, NotificationSendResponse

logger = get_logger("graphql.notifications")


@strawberry.type
class NotificationMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def send_immediate_notification(
        self, info: strawberry.Info, input: ImmediateNotificationInput
    ) -> NotificationSendResponse:
        db: AsyncSession = info.context.db
        try:
            result = await send_immediate_notification(
                db,
                title=input.title,
                body=input.body,
                send_to=input.send_to,
                user_ids=input.user_ids,
            )
            return NotificationSendResponse(
                success=True,
                message=result.message,
                success_count=result.success_count,
                error_count=result.error_count,
                total=result.total,
            )
        except ValueError as e:
            return NotificationSendResponse(success=False, error=str(e), field_errors=field_errors_of(e))
        except Exception as e:
            logger.exception("Error sending immediate notification")
            await db.rollback()
            return NotificationSendResponse(success=False, error=f"Error inesperado: {str(e)}")
