import uuid
from datetime import date, datetime
from typing import Optional

import strawberry

from app.crud.usersCrud import UserData, UserProfileInput


@strawberry.type
class User:
    id: uuid.UUID
    email: str
    name: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    birthday: Optional[date]
    cedula: Optional[str]
    shoe_size: Optional[str]
    created_at: Optional[datetime]
    purchase_count: int

    @classmethod
    def from_data(cls, data: UserData) -> "User":
        return cls(
            id=data.id,
            email=data.email,
            name=data.name,
            phone=data.phone,
            address=data.address,
            birthday=data.birthday,
            cedula=data.cedula,
            shoe_size=data.shoe_size,
            created_at=data.created_at,
            purchase_count=data.purchase_count,
        )


@strawberry.input
class UserInput:
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    birthday: Optional[str] = None
    cedula: Optional[str] = None
    shoe_size: Optional[str] = None

    def to_profile(self) -> UserProfileInput:
        return UserProfileInput(
            email=self.email,
            name=self.name,
            phone=self.phone,
            address=self.address,
            birthday=self.birthday,
            cedula=self.cedula,
            shoe_size=self.shoe_size,
        )


@strawberry.input
class UserPackageInput:
    package_id: str
    transaction_id: Optional[str] = None
    authorization_code: Optional[str] = None


@strawberry.type
class CreateUserResponse:
    """The generated password is only returned once, at creation time"""
    success: bool
    user: Optional[User] = None
    password: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


@strawberry.type
class UpdateUserResponse:
    success: bool
    user: Optional[User] = None
    error: Optional[str] = None
