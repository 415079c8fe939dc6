"""
GraphQL mutations for electronic invoices.
"""
from typing import List

import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.billingCrud import (
    BillingConfigError,
    approve_in_batches,
    create_draft_invoices,
    sync_incomplete_drafts,
)
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.billing.types import ApprovalResponse, DraftsResponse, Invoice, SyncResponse

logger = get_logger("graphql.billing")


@strawberry.type
class BillingMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def create_draft_invoices(self, info: strawberry.Info) -> DraftsResponse:
        db: AsyncSession = info.context.db
        try:
            drafts = await create_draft_invoices(db)
            return DraftsResponse(success=True, drafts=[Invoice.from_model(row) for row in drafts])
        except Exception as e:
            logger.exception("Error creating draft invoices")
            await db.rollback()
            return DraftsResponse(success=False, error=str(e))

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def sync_incomplete_drafts(self, info: strawberry.Info) -> SyncResponse:
        db: AsyncSession = info.context.db
        try:
            return SyncResponse(success=True, updated=await sync_incomplete_drafts(db))
        except Exception as e:
            logger.exception("Error syncing incomplete drafts")
            await db.rollback()
            return SyncResponse(success=False, error=str(e))

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def approve_invoices(
        self, info: strawberry.Info, ids: List[str], prefix: str, start: int
    ) -> ApprovalResponse:
        """Approve the selection ten invoices at a time, advancing the sequence."""
        db: AsyncSession = info.context.db
        if not ids:
            return ApprovalResponse(success=False, error="IDs requeridos")
        try:
            return ApprovalResponse.from_data(await approve_in_batches(db, ids, prefix, start))
        except (ValueError, BillingConfigError) as e:
            return ApprovalResponse(success=False, error=str(e))
        except Exception as e:
            logger.exception("Error approving invoices")
            await db.rollback()
            return ApprovalResponse(success=False, error=str(e))
