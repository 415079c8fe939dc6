from datetime import datetime
from typing import Optional

import strawberry

from app.models import Account


@strawberry.input
class LoginInput:
    email: str
    password: str


@strawberry.type
class TokenResponse:
    access_token: str


@strawberry.type
class AdminUser:
    id: str
    email: str
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_account(cls, account: Account) -> "AdminUser":
        return cls(id=str(account.id), email=account.email, last_login_at=account.last_login_at)
