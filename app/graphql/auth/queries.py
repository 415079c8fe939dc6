from typing import Optional

import strawberry

from app.graphql.auth.types import AdminUser


@strawberry.type
class AuthQuery:
    @strawberry.field
    async def current_admin(self, info: strawberry.Info) -> Optional[AdminUser]:
        """The logged-in, allow-listed admin or null."""
        user = info.context.user
        if not user:
            return None
        return AdminUser.from_account(user)
