from dataclasses import asdict

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.bannersCrud import list_active_banners
from app.db.postgresql import get_db

logger = get_logger("api.banners")

router = APIRouter(prefix="/api/banners", tags=["Banners"])


@router.get("")
async def active_banners(db: AsyncSession = Depends(get_db)):
    """Banners the member app shows today. Public."""
    try:
        banners = await list_active_banners(db)
    except Exception:
        logger.exception("Error fetching active banners")
        return JSONResponse({"error": "Error al obtener banners"}, status_code=500)
    data = [asdict(banner) for banner in banners]
    return {"data": jsonable_encoder(data), "count": len(data)}
