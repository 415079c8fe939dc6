from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.config import is_authorized_email
from app.core.logging_config import get_logger

logger = get_logger("api.auth")

router = APIRouter(prefix="/api/auth", tags=["Auth"])


class CheckAuthorizedRequest(BaseModel):
    email: str | None = None


@router.post("/check-authorized")
async def check_authorized(body: CheckAuthorizedRequest):
    """Tell the login page whether an email may open the dashboard."""
    if not body.email:
        return JSONResponse({"error": "Email requerido"}, status_code=400)
    return {"isAuthorized": is_authorized_email(body.email), "email": body.email}
