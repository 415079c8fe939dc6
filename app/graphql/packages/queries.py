from typing import List

import strawberry

from app.crud.packagesCrud import list_packages
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.packages.types import Package


@strawberry.type
class PackageQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def packages(self, info: strawberry.Info) -> List[Package]:
        return [Package.from_data(row) for row in await list_packages(info.context.db)]
