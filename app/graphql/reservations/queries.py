from typing import List, Optional

import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.reservationsCrud import (
    get_available_bikes,
    get_available_classes,
    get_upcoming_reservations,
)
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.reservations.types import AvailableBikes, AvailableClass, Reservation

logger = get_logger("graphql.reservations")


@strawberry.type
class ReservationQuery:
    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def upcoming_reservations(self, info: strawberry.Info) -> List[Reservation]:
        """Confirmed and waitlisted reservations from next Monday on."""
        rows = await get_upcoming_reservations(info.context.db)
        return [Reservation.from_data(row) for row in rows]

    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def available_bikes(
        self,
        info: strawberry.Info,
        class_id: str,
        exclude_reservation_id: Optional[str] = None,
    ) -> AvailableBikes:
        db: AsyncSession = info.context.db
        try:
            data = await get_available_bikes(db, class_id, exclude_reservation_id)
            return AvailableBikes.from_data(data)
        except ValueError as e:
            return AvailableBikes(success=False, available_bikes=[], current_bikes=[], error=str(e))
        except Exception:
            logger.exception("Error loading available bikes")
            return AvailableBikes(
                success=False,
                available_bikes=[],
                current_bikes=[],
                error="Error al obtener spots disponibles.",
            )

    @strawberry.field(permission_classes=ADMIN_PERMISSIONS)
    async def available_classes(self, info: strawberry.Info) -> List[AvailableClass]:
        rows = await get_available_classes(info.context.db)
        return [AvailableClass.from_data(row) for row in rows]
