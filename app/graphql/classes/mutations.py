"""
GraphQL mutations for dated classes.
"""
from typing import Optional

import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.classesCrud import create_class, delete_class, update_class_name
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.classes.types import CreateClassInput
from app.graphql.common import ActionResponse, failed, ok

logger = get_logger("graphql.classes")


@strawberry.type
class ClassMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_class_name(
        self, info: strawberry.Info, id: str, name: Optional[str] = None
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await update_class_name(db, id, name)
            return ok("Class name updated.")
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error updating class name")
            await db.rollback()
            return failed(f"Database Error: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def create_class(self, info: strawberry.Info, input: CreateClassInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await create_class(
                db,
                class_date=input.date,
                start_time=input.start_time,
                end_time=input.end_time,
                instructor_id=input.instructor_id,
                name=input.name,
                location_id=input.location_id,
                waitlist_enabled=input.waitlist_enabled,
            )
            return ok("Clase creada exitosamente.")
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error creating class")
            await db.rollback()
            return failed(f"Error inesperado: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def delete_class(self, info: strawberry.Info, id: str) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            return ok(await delete_class(db, id))
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error deleting class")
            await db.rollback()
            return failed(f"Error inesperado: {str(e)}")
