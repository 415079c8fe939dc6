import uuid
from datetime import datetime
from typing import List, Optional

import strawberry
from strawberry.scalars import JSON

from app.crud.menuCrud import MenuItemData, MenuOrderData
from app.services.image_service import ImageService


@strawberry.type
class MenuItem:
    id: uuid.UUID
    name: str
    description: Optional[str]
    in_stock: bool
    price: float
    image: Optional[str]
    image_url: Optional[str]

    @classmethod
    def from_data(cls, data: MenuItemData) -> "MenuItem":
        return cls(
            id=data.id,
            name=data.name,
            description=data.description,
            in_stock=data.in_stock,
            price=data.price,
            image=data.image,
            image_url=ImageService.public_url(ImageService.MENU_FOLDER, data.image),
        )


@strawberry.type
class MenuOrder:
    id: uuid.UUID
    user_id: Optional[uuid.UUID]
    user_name: str
    items: List[JSON]
    total_paid: float
    transaction_id: Optional[str]
    authorization_code: Optional[str]
    purchase_date: Optional[datetime]
    delivery_status: str
    notes: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_data(cls, data: MenuOrderData) -> "MenuOrder":
        return cls(
            id=data.id,
            user_id=data.user_id,
            user_name=data.user_name,
            items=list(data.items),
            total_paid=data.total_paid,
            transaction_id=data.transaction_id,
            authorization_code=data.authorization_code,
            purchase_date=data.purchase_date,
            delivery_status=data.delivery_status,
            notes=data.notes,
            created_at=data.created_at,
        )


@strawberry.input
class CreateMenuItemInput:
    name: Optional[str] = None
    price: Optional[str] = None
    description: Optional[str] = None
    in_stock: bool = True


@strawberry.input
class UpdateMenuItemInput:
    """Only the fields sent are changed"""
    name: Optional[str] = strawberry.UNSET
    description: Optional[str] = strawberry.UNSET
    in_stock: Optional[bool] = strawberry.UNSET
    price: Optional[str] = strawberry.UNSET

    def changes(self) -> dict:
        values = {
            "name": self.name,
            "description": self.description,
            "in_stock": self.in_stock,
            "price": self.price,
        }
        return {key: value for key, value in values.items() if value is not strawberry.UNSET}
