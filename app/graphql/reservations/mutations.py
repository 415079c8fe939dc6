"""
GraphQL mutations for reservations and the waitlist.

Credit and bike bookkeeping happens in the database procedures; the crud layer
translates their errors into messages for the dashboard.
"""
from typing import List

import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.reservationsCrud import (
    cancel_reservation,
    create_reservation,
    join_waitlist,
    leave_waitlist,
    modify_reservation,
    update_reservation_bikes,
)
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.common import ActionResponse, failed, ok
from app.graphql.reservations.types import (
    CreateReservationInput,
    ModifyReservationInput,
    WaitlistInput,
)

logger = get_logger("graphql.reservations")


async def _run(db: AsyncSession, action: str, operation) -> ActionResponse:
    try:
        return ok(await operation)
    except ValueError as e:
        logger.warning(f"{action} rejected: {e}")
        return failed(str(e))
    except Exception as e:
        logger.exception(f"Unexpected error in {action}")
        await db.rollback()
        return failed(f"Error inesperado: {str(e)}")


@strawberry.type
class ReservationMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def cancel_reservation(self, info: strawberry.Info, id: str) -> ActionResponse:
        db: AsyncSession = info.context.db
        return await _run(db, "cancel_reservation", cancel_reservation(db, id))

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def create_reservation(
        self, info: strawberry.Info, input: CreateReservationInput
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        return await _run(
            db,
            "create_reservation",
            create_reservation(
                db, user_id=input.user_id, class_id=input.class_id, bike_numbers=input.bike_numbers
            ),
        )

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def modify_reservation(
        self, info: strawberry.Info, input: ModifyReservationInput
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        return await _run(
            db,
            "modify_reservation",
            modify_reservation(
                db,
                input.reservation_id,
                new_class_id=input.new_class_id,
                bike_numbers=input.bike_numbers,
            ),
        )

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_reservation_bikes(
        self, info: strawberry.Info, id: str, bike_numbers: List[int]
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        return await _run(db, "update_reservation_bikes", update_reservation_bikes(db, id, bike_numbers))

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def join_waitlist(self, info: strawberry.Info, input: WaitlistInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        return await _run(
            db, "join_waitlist", join_waitlist(db, user_id=input.user_id, class_id=input.class_id)
        )

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def leave_waitlist(self, info: strawberry.Info, input: WaitlistInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        return await _run(
            db, "leave_waitlist", leave_waitlist(db, user_id=input.user_id, class_id=input.class_id)
        )
