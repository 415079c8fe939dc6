"""
Landing endpoints behind the dashboard gate redirects.
"""
from dataclasses import asdict

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.bannersCrud import list_active_banners
from app.crud.classesCrud import count_todays_reservations, get_upcoming_classes
from app.db.postgresql import get_db

router = APIRouter(tags=["Pages"])


@router.get("/dashboard")
async def dashboard(db: AsyncSession = Depends(get_db)):
    classes = await get_upcoming_classes(db)
    banners = await list_active_banners(db)
    return {
        "upcomingClasses": len(classes),
        "todayReservations": await count_todays_reservations(db),
        "activeBanners": jsonable_encoder([asdict(banner) for banner in banners]),
    }


@router.get("/login")
async def login_page():
    return {"page": "login", "graphql": "/graphql", "mutation": "login"}


@router.get("/unauthorized")
async def unauthorized_page():
    return {
        "page": "unauthorized",
        "message": "Tu cuenta no tiene permisos para acceder al dashboard.",
    }
