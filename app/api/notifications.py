from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_admin
from app.core.logging_config import get_logger
from app.crud.notificationsCrud import SEND_TO_SELECTED, send_immediate_notification
from app.db.postgresql import get_db

logger = get_logger("api.notifications")

router = APIRouter(prefix="/api/notifications", tags=["Notifications"], dependencies=[Depends(require_admin)])


class SendNotificationRequest(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None
    send_to: str = Field(SEND_TO_SELECTED, alias="sendTo")
    user_ids: List[str] = Field(default_factory=list, alias="userIds")

    model_config = {"populate_by_name": True}


@router.post("/send")
async def send_notification(body: SendNotificationRequest, db: AsyncSession = Depends(get_db)):
    try:
        result = await send_immediate_notification(
            db, title=body.title, body=body.body, send_to=body.send_to, user_ids=body.user_ids
        )
    except ValueError as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=400)
    except Exception:
        logger.exception("Error sending notifications")
        await db.rollback()
        return JSONResponse({"success": False, "error": "Error interno del servidor"}, status_code=500)

    return {
        "success": True,
        "message": result.message,
        "successCount": result.success_count,
        "errorCount": result.error_count,
        "total": result.total,
    }
