import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.packagesCrud import add_package, delete_package, update_package
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.common import ActionResponse, failed, field_errors_of, ok
from app.graphql.packages.types import PackageInput

logger = get_logger("graphql.packages")


@strawberry.type
class PackageMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def add_package(self, info: strawberry.Info, input: PackageInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await add_package(
                db,
                name=input.name,
                class_credits=input.class_credits,
                price=input.price,
                expiration_days=input.expiration_days,
                contifico_product_id=input.contifico_product_id,
            )
            return ok("Package created successfully")
        except ValueError as e:
            return failed(str(e), field_errors_of(e))
        except Exception as e:
            logger.exception("Error creating package")
            await db.rollback()
            return failed(f"Database Error: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_package(self, info: strawberry.Info, id: str, input: PackageInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await update_package(
                db,
                id,
                name=input.name,
                class_credits=input.class_credits,
                price=input.price,
                expiration_days=input.expiration_days,
                contifico_product_id=input.contifico_product_id,
            )
            return ok("Package updated successfully")
        except ValueError as e:
            return failed(str(e), field_errors_of(e))
        except Exception as e:
            logger.exception("Error updating package")
            await db.rollback()
            return failed(f"Database Error: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def delete_package(self, info: strawberry.Info, id: str) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await delete_package(db, id)
            return ok("Package deleted successfully.")
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error deleting package")
            await db.rollback()
            return failed(f"Database Error: {str(e)}")
