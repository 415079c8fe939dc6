from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_admin
from app.core.logging_config import get_logger
from app.crud.purchasesCrud import PurchaseExportFilters, find_purchases_for_export
from app.db.postgresql import get_db
from app.services.export_service import (
    build_purchases_csv,
    empty_purchases_csv,
    purchases_export_filename,
)

logger = get_logger("api.purchases")

router = APIRouter(prefix="/api/purchases", tags=["Purchases"], dependencies=[Depends(require_admin)])

EMPTY_EXPORT_FILENAME = "paquetes_clases_agrupados_vacio.csv"


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export")
async def export_purchases(
    user: Optional[str] = None,
    status: str = "todos",
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    q: Optional[str] = None,
    order: str = "desc",
    db: AsyncSession = Depends(get_db),
):
    """Accounting CSV grouped by member and package."""
    filters = PurchaseExportFilters(
        user=user, status=status, date_from=date_from, date_to=date_to, q=q, order=order
    )
    try:
        purchases = await find_purchases_for_export(db, filters)
    except Exception:
        logger.exception("Error exporting purchases")
        return PlainTextResponse("Error al exportar", status_code=500)

    if purchases is None:
        return _csv_response(empty_purchases_csv(), EMPTY_EXPORT_FILENAME)

    filename = purchases_export_filename(user, status, date_from, date_to)
    return _csv_response(build_purchases_csv(purchases), filename)
