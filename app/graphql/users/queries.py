from typing import List

import strawberry

from app.crud.packagesCrud import list_packages
from app.crud.usersCrud import list_users
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.packages.types import Package
from app.graphql.users.types import User


@strawberry.type
class UserQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def users(self, info: strawberry.Info) -> List[User]:
        return [User.from_data(row) for row in await list_users(info.context.db)]

    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def available_packages(self, info: strawberry.Info) -> List[Package]:
        """Packages offered in the new-member form."""
        return [Package.from_data(row) for row in await list_packages(info.context.db)]
