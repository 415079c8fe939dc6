from typing import List

import strawberry

from app.crud.menuCrud import list_menu_items, list_menu_orders
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.menu.types import MenuItem, MenuOrder


@strawberry.type
class MenuQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def menu_items(self, info: strawberry.Info) -> List[MenuItem]:
        return [MenuItem.from_data(row) for row in await list_menu_items(info.context.db)]

    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def menu_orders(self, info: strawberry.Info) -> List[MenuOrder]:
        """Newest purchase first."""
        return [MenuOrder.from_data(row) for row in await list_menu_orders(info.context.db)]
