from typing import List

import strawberry

from app.crud.billingCrud import list_drafts, list_sent
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.billing.types import Invoice


@strawberry.type
class BillingQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def draft_invoices(self, info: strawberry.Info) -> List[Invoice]:
        return [Invoice.from_model(row) for row in await list_drafts(info.context.db)]

    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def sent_invoices(self, info: strawberry.Info) -> List[Invoice]:
        return [Invoice.from_model(row) for row in await list_sent(info.context.db)]
