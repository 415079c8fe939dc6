"""
CRUD operations for the banners shown in the member app.
"""
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, Field
from sqlalchemy import select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.conversions import blank_to_none, coerce_date, coerce_uuid
from app.core.logging_config import get_logger
from app.core.timeutils import studio_today
from app.core.validation import validate_form
from app.models import Banner
from app.models.contentModel import DEFAULT_BANNER_BACKGROUND, DEFAULT_BANNER_TEXT_COLOR

logger = get_logger("crud.banners")

BANNER_VALIDATION_MESSAGE = "Error de validación - revisa los campos requeridos"


@dataclass
class BannerData:
    id: uuid.UUID
    title: str
    description: Optional[str]
    is_active: bool
    start_date: Optional[date]
    end_date: Optional[date]
    background_color: str
    text_color: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class BannerForm(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    is_active: bool = True
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    background_color: str = DEFAULT_BANNER_BACKGROUND
    text_color: str = DEFAULT_BANNER_TEXT_COLOR


def to_banner_data(row: Banner) -> BannerData:
    return BannerData(
        id=row.id,
        title=row.title,
        description=row.description,
        is_active=bool(row.is_active),
        start_date=row.start_date,
        end_date=row.end_date,
        background_color=row.background_color or DEFAULT_BANNER_BACKGROUND,
        text_color=row.text_color or DEFAULT_BANNER_TEXT_COLOR,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _validated(
    title: Optional[str],
    description: Optional[str],
    is_active: Optional[bool],
    start_date: object,
    end_date: object,
    background_color: Optional[str],
    text_color: Optional[str],
) -> BannerForm:
    return validate_form(
        BannerForm,
        {
            "title": (title or "").strip(),
            "description": blank_to_none(description),
            "is_active": True if is_active is None else bool(is_active),
            "start_date": coerce_date(start_date),
            "end_date": coerce_date(end_date),
            "background_color": blank_to_none(background_color) or DEFAULT_BANNER_BACKGROUND,
            "text_color": blank_to_none(text_color) or DEFAULT_BANNER_TEXT_COLOR,
        },
        BANNER_VALIDATION_MESSAGE,
    )


async def list_banners(db: AsyncSession) -> List[BannerData]:
    result = await db.execute(select(Banner).order_by(Banner.created_at.desc()))
    return [to_banner_data(row) for row in result.scalars().all()]


async def list_active_banners(db: AsyncSession, today: date | None = None) -> List[BannerData]:
    """Active banners whose date window contains today; null bounds are open."""
    today = today or studio_today()
    result = await db.execute(
        select(Banner)
        .where(
            and_(
                Banner.is_active == True,
                or_(Banner.start_date.is_(None), Banner.start_date <= today),
                or_(Banner.end_date.is_(None), Banner.end_date >= today),
            )
        )
        .order_by(Banner.created_at.desc())
    )
    return [to_banner_data(row) for row in result.scalars().all()]


async def _get_banner(db: AsyncSession, banner_id: object) -> Banner | None:
    parsed_id = coerce_uuid(banner_id)
    if not parsed_id:
        return None
    result = await db.execute(select(Banner).where(Banner.id == parsed_id))
    return result.scalar_one_or_none()


async def add_banner(
    db: AsyncSession,
    *,
    title: Optional[str],
    description: Optional[str] = None,
    is_active: Optional[bool] = True,
    start_date: object = None,
    end_date: object = None,
    background_color: Optional[str] = None,
    text_color: Optional[str] = None,
) -> Banner:
    form = _validated(title, description, is_active, start_date, end_date, background_color, text_color)
    banner = Banner(**form.model_dump())
    db.add(banner)
    await db.commit()
    await db.refresh(banner)
    logger.info(f"Banner created: {banner.title}")
    return banner


async def update_banner(
    db: AsyncSession,
    banner_id: str,
    *,
    title: Optional[str],
    description: Optional[str] = None,
    is_active: Optional[bool] = True,
    start_date: object = None,
    end_date: object = None,
    background_color: Optional[str] = None,
    text_color: Optional[str] = None,
) -> Banner:
    if not coerce_uuid(banner_id):
        raise ValueError("ID de banner inválido.")

    form = _validated(title, description, is_active, start_date, end_date, background_color, text_color)
    banner = await _get_banner(db, banner_id)
    if not banner:
        raise ValueError("ID de banner inválido.")

    for key, value in form.model_dump().items():
        setattr(banner, key, value)
    await db.commit()
    await db.refresh(banner)
    return banner


async def delete_banner(db: AsyncSession, banner_id: str) -> None:
    banner = await _get_banner(db, banner_id)
    if not banner:
        raise ValueError("ID inválido.")
    await db.delete(banner)
    await db.commit()


async def toggle_banner_status(db: AsyncSession, banner_id: str, is_active: bool) -> str:
    banner = await _get_banner(db, banner_id)
    if not banner:
        raise ValueError("ID inválido.")
    banner.is_active = bool(is_active)
    await db.commit()
    return f"Banner {'activado' if is_active else 'desactivado'} exitosamente."
