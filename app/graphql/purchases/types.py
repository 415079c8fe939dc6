import uuid
from datetime import datetime
from typing import List, Optional

import strawberry

from app.crud.purchasesCrud import ActivePurchaseData, PurchaseData, UserCreditsData


@strawberry.type
class Purchase:
    id: uuid.UUID
    user_id: Optional[uuid.UUID]
    user_name: Optional[str]
    user_email: Optional[str]
    package_id: Optional[uuid.UUID]
    package_name: Optional[str]
    class_credits: Optional[int]
    credits_remaining: int
    expiration_date: Optional[datetime]
    purchase_date: Optional[datetime]
    authorization_code: Optional[str]
    transaction_id: Optional[str]

    @classmethod
    def from_data(cls, data: PurchaseData) -> "Purchase":
        return cls(
            id=data.id,
            user_id=data.user_id,
            user_name=data.user_name,
            user_email=data.user_email,
            package_id=data.package_id,
            package_name=data.package_name,
            class_credits=data.class_credits,
            credits_remaining=data.credits_remaining,
            expiration_date=data.expiration_date,
            purchase_date=data.purchase_date,
            authorization_code=data.authorization_code,
            transaction_id=data.transaction_id,
        )


@strawberry.type
class ActivePurchase:
    id: uuid.UUID
    credits_remaining: int
    expiration_date: Optional[datetime]
    package_name: str

    @classmethod
    def from_data(cls, data: ActivePurchaseData) -> "ActivePurchase":
        return cls(
            id=data.id,
            credits_remaining=data.credits_remaining,
            expiration_date=data.expiration_date,
            package_name=data.package_name,
        )


@strawberry.type
class UserCredits:
    id: uuid.UUID
    name: Optional[str]
    email: str
    phone: Optional[str]
    active_credits: int
    active_purchases: List[ActivePurchase]

    @classmethod
    def from_data(cls, data: UserCreditsData) -> "UserCredits":
        return cls(
            id=data.id,
            name=data.name,
            email=data.email,
            phone=data.phone,
            active_credits=data.active_credits,
            active_purchases=[ActivePurchase.from_data(p) for p in data.active_purchases],
        )


@strawberry.input
class AssignPackageInput:
    user_id: str
    package_id: str
    transaction_id: Optional[str] = None
    authorization_code: Optional[str] = None
