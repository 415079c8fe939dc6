import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.instructorsCrud import add_instructor, delete_instructor, update_instructor
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.common import ActionResponse, failed, field_errors_of, ok
from app.graphql.instructors.types import InstructorInput

logger = get_logger("graphql.instructors")


@strawberry.type
class InstructorMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def add_instructor(self, info: strawberry.Info, input: InstructorInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await add_instructor(
                db,
                name=input.name,
                bio=input.bio,
                profile_picture_url=input.profile_picture_url,
                specialties=input.specialties,
            )
            return ok("Instructor created successfully")
        except ValueError as e:
            return failed(str(e), field_errors_of(e))
        except Exception as e:
            logger.exception("Error creating instructor")
            await db.rollback()
            return failed(f"Database Error: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_instructor(
        self, info: strawberry.Info, id: str, input: InstructorInput
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await update_instructor(
                db,
                id,
                name=input.name,
                bio=input.bio,
                profile_picture_url=input.profile_picture_url,
                specialties=input.specialties,
            )
            return ok("Instructor updated successfully")
        except ValueError as e:
            return failed(str(e), field_errors_of(e))
        except Exception as e:
            logger.exception("Error updating instructor")
            await db.rollback()
            return failed(f"Database Error: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def delete_instructor(self, info: strawberry.Info, id: str) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await delete_instructor(db, id)
            return ok("Instructor deleted successfully.")
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error deleting instructor")
            await db.rollback()
            return failed(f"Database Error: {str(e)}")
