"""
Billing endpoints used by the invoices page.
"""
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_admin
from app.core.logging_config import get_logger
from app.crud.billingCrud import (
    BillingConfigError,
    approve_invoices,
    list_drafts,
    list_for_export,
    list_sent,
)
from app.db.postgresql import get_db
from app.graphql.billing.types import Invoice
from app.services.export_service import build_invoices_csv

logger = get_logger("api.billing")

router = APIRouter(prefix="/api/billing", tags=["Billing"], dependencies=[Depends(require_admin)])


class ApproveRequest(BaseModel):
    ids: List[str] = Field(default_factory=list, alias="invoiceIds")
    prefix: Optional[str] = None
    start: Optional[int] = None

    model_config = {"populate_by_name": True}


def _invoice_json(row) -> dict:
    return jsonable_encoder(asdict(Invoice.from_model(row)))


@router.post("/approve")
async def approve(body: ApproveRequest, db: AsyncSession = Depends(get_db)):
    try:
        outcome = await approve_invoices(db, body.ids, body.prefix, body.start)
    except ValueError as e:
        return JSONResponse({"success": False, "message": str(e)}, status_code=400)
    except BillingConfigError as e:
        return JSONResponse({"success": False, "message": str(e)}, status_code=500)
    except Exception as e:
        logger.exception("Error approving invoices")
        await db.rollback()
        return JSONResponse({"success": False, "message": str(e) or "Error"}, status_code=500)

    return {
        "success": True,
        "approved": outcome.approved,
        "errors": outcome.errors,
        "results": jsonable_encoder([asdict(result) for result in outcome.results]),
    }


@router.get("/export")
async def export(ids: Optional[str] = Query(None), db: AsyncSession = Depends(get_db)):
    """Plain CSV of the chosen invoices (all of them without ``ids``)."""
    selected = [value for value in (ids or "").split(",") if value]
    try:
        invoices = await list_for_export(db, selected)
    except Exception:
        logger.exception("Error exporting invoices")
        return JSONResponse({"error": "Error exportando"}, status_code=500)
    return Response(build_invoices_csv(invoices), media_type="text/csv; charset=utf-8")


@router.get("/list")
async def list_invoices(db: AsyncSession = Depends(get_db)):
    try:
        drafts = await list_drafts(db)
        sent = await list_sent(db)
    except Exception as e:
        logger.exception("Error listing invoices")
        return JSONResponse({"error": str(e) or "Error"}, status_code=500)
    return {"drafts": [_invoice_json(row) for row in drafts], "sent": [_invoice_json(row) for row in sent]}
