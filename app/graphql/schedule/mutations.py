"""
GraphQL mutations for the default weekly schedule.
"""
from typing import Optional

import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.scheduleCrud import (
    add_schedule_entry,
    delete_schedule_entry,
    generate_weekly_classes,
    update_schedule_entry,
)
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.common import ActionResponse, failed, ok
from app.graphql.schedule.types import ScheduleEntryInput

logger = get_logger("graphql.schedule")


@strawberry.type
class ScheduleMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def generate_weekly_classes(
        self, info: strawberry.Info, start_date: Optional[str] = None
    ) -> ActionResponse:
        """Materialize the default schedule for the week starting at start_date (next Monday when omitted)."""
        db: AsyncSession = info.context.db
        try:
            return ok(await generate_weekly_classes(db, start_date))
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error generating weekly classes")
            await db.rollback()
            return failed(f"Error inesperado: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def add_schedule_entry(self, info: strawberry.Info, input: ScheduleEntryInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await add_schedule_entry(db, input.to_form())
            return ok("Entry added successfully.")
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error adding schedule entry")
            await db.rollback()
            return failed(f"Database Error: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_schedule_entry(
        self, info: strawberry.Info, id: str, input: ScheduleEntryInput
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await update_schedule_entry(db, id, input.to_form())
            return ok("Horario actualizado correctamente.")
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error updating schedule entry")
            await db.rollback()
            return failed(f"Error de base de datos: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def delete_schedule_entry(self, info: strawberry.Info, id: str) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await delete_schedule_entry(db, id)
            return ok("Horario eliminado correctamente.")
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error deleting schedule entry")
            await db.rollback()
            return failed(f"Error de base de datos: {str(e)}")
