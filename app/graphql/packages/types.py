import uuid
from datetime import datetime
from typing import Optional

import strawberry

from app.crud.packagesCrud import PackageData


@strawberry.type
class Package:
    id: uuid.UUID
    name: str
    class_credits: int
    price: float
    expiration_days: Optional[int]
    contifico_product_id: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_data(cls, data: PackageData) -> "Package":
        return cls(
            id=data.id,
            name=data.name,
            class_credits=data.class_credits,
            price=data.price,
            expiration_days=data.expiration_days,
            contifico_product_id=data.contifico_product_id,
            created_at=data.created_at,
        )


@strawberry.input
class PackageInput:
    """Numbers arrive as typed in the form and are validated server side"""
    name: Optional[str] = None
    class_credits: Optional[str] = None
    price: Optional[str] = None
    expiration_days: Optional[str] = None
    contifico_product_id: Optional[str] = None
