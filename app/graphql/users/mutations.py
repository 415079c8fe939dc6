"""
GraphQL mutations for studio members.
"""
import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.usersCrud import create_user, create_user_with_package, to_user_data, update_user
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.users.types import (
    CreateUserResponse,
    UpdateUserResponse,
    User,
    UserInput,
    UserPackageInput,
)

logger = get_logger("graphql.users")


@strawberry.type
class UserMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def create_user(self, info: strawberry.Info, input: UserInput) -> CreateUserResponse:
        db: AsyncSession = info.context.db
        try:
            user, password = await create_user(db, input.to_profile())
            return CreateUserResponse(
                success=True,
                user=User.from_data(to_user_data(user)),
                password=password,
                message="Usuario creado exitosamente",
            )
        except ValueError as e:
            return CreateUserResponse(success=False, error=str(e))
        except Exception:
            logger.exception("Error creating user")
            await db.rollback()
            return CreateUserResponse(success=False, error="Error al crear el usuario")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def create_user_with_package(
        self, info: strawberry.Info, input: UserInput, package: UserPackageInput
    ) -> CreateUserResponse:
        """User and purchase are written together; a failed package leaves no user."""
        db: AsyncSession = info.context.db
        try:
            user, password = await create_user_with_package(
                db,
                input.to_profile(),
                package_id=package.package_id,
                transaction_id=package.transaction_id,
                authorization_code=package.authorization_code,
            )
            return CreateUserResponse(
                success=True,
                user=User.from_data(to_user_data(user, purchase_count=1)),
                password=password,
                message="Usuario creado y paquete asignado exitosamente",
            )
        except ValueError as e:
            return CreateUserResponse(success=False, error=str(e))
        except Exception:
            logger.exception("Error creating user with package")
            await db.rollback()
            return CreateUserResponse(success=False, error="Error al crear el usuario con paquete")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_user(self, info: strawberry.Info, id: str, input: UserInput) -> UpdateUserResponse:
        db: AsyncSession = info.context.db
        try:
            data = await update_user(db, id, input.to_profile())
            return UpdateUserResponse(success=True, user=User.from_data(data))
        except ValueError as e:
            return UpdateUserResponse(success=False, error=str(e))
        except Exception:
            logger.exception("Error updating user")
            await db.rollback()
            return UpdateUserResponse(success=False, error="Error al actualizar el usuario")
