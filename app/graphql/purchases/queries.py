from typing import List, Optional

import strawberry

from app.crud.purchasesCrud import get_users_with_credits, list_purchases
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.purchases.types import Purchase, UserCredits


@strawberry.type
class PurchaseQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def purchases(self, info: strawberry.Info, user_email: Optional[str] = None) -> List[Purchase]:
        """Newest first; an unknown email yields an empty list."""
        rows = await list_purchases(info.context.db, user_email)
        return [Purchase.from_data(row) for row in rows]

    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def users_with_credits(self, info: strawberry.Info) -> List[UserCredits]:
        rows = await get_users_with_credits(info.context.db)
        return [UserCredits.from_data(row) for row in rows]
