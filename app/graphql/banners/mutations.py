import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.bannersCrud import add_banner, delete_banner, toggle_banner_status, update_banner
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.banners.types import BannerInput
from app.graphql.common import ActionResponse, failed, field_errors_of, ok

logger = get_logger("graphql.banners")


@strawberry.type
class BannerMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def add_banner(self, info: strawberry.Info, input: BannerInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await add_banner(db, **input.as_kwargs())
            return ok("Banner creado exitosamente.")
        except ValueError as e:
            return failed(str(e), field_errors_of(e))
        except Exception as e:
            logger.exception("Error creating banner")
            await db.rollback()
            return failed(f"Error de base de datos: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_banner(self, info: strawberry.Info, id: str, input: BannerInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await update_banner(db, id, **input.as_kwargs())
            return ok("Banner actualizado exitosamente.")
        except ValueError as e:
            return failed(str(e), field_errors_of(e))
        except Exception as e:
            logger.exception("Error updating banner")
            await db.rollback()
            return failed(f"Error de base de datos: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def delete_banner(self, info: strawberry.Info, id: str) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await delete_banner(db, id)
            return ok("Banner eliminado exitosamente.")
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error deleting banner")
            await db.rollback()
            return failed(f"Error de base de datos: {str(e)}")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def toggle_banner_status(
        self, info: strawberry.Info, id: str, is_active: bool
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            return ok(await toggle_banner_status(db, id, is_active))
        except ValueError as e:
            return failed(str(e))
        except Exception as e:
            logger.exception("Error toggling banner")
            await db.rollback()
            return failed(f"Error de base de datos: {str(e)}")
