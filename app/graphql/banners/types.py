import uuid
from datetime import date, datetime
from typing import Optional

import strawberry

from app.crud.bannersCrud import BannerData


@strawberry.type
class Banner:
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

    @classmethod
    def from_data(cls, data: BannerData) -> "Banner":
        return cls(
            id=data.id,
            title=data.title,
            description=data.description,
            is_active=data.is_active,
            start_date=data.start_date,
            end_date=data.end_date,
            background_color=data.background_color,
            text_color=data.text_color,
            created_at=data.created_at,
            updated_at=data.updated_at,
        )


@strawberry.input
class BannerInput:
    title: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = True
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None

    def as_kwargs(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "is_active": self.is_active,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "background_color": self.background_color,
            "text_color": self.text_color,
        }
