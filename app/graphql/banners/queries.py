from typing import List

import strawberry

from app.crud.bannersCrud import list_banners
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.banners.types import Banner


@strawberry.type
class BannerQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def banners(self, info: strawberry.Info) -> List[Banner]:
        return [Banner.from_data(row) for row in await list_banners(info.context.db)]
