import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.purchasesCrud import assign_package_to_user, update_purchase_credits
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.common import ActionResponse, failed, ok
from app.graphql.purchases.types import AssignPackageInput

logger = get_logger("graphql.purchases")


@strawberry.type
class PurchaseMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_purchase_credits(
        self, info: strawberry.Info, id: str, credits: float
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await update_purchase_credits(db, id, credits)
            return ok("Créditos actualizados correctamente")
        except ValueError as e:
            return failed(str(e))
        except Exception:
            logger.exception("Error updating purchase credits")
            await db.rollback()
            return failed("Error al actualizar créditos")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def assign_package_to_user(
        self, info: strawberry.Info, input: AssignPackageInput
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await assign_package_to_user(
                db,
                user_id=input.user_id,
                package_id=input.package_id,
                transaction_id=input.transaction_id,
                authorization_code=input.authorization_code,
            )
            return ok("Paquete asignado correctamente")
        except ValueError as e:
            return failed(str(e))
        except Exception:
            logger.exception("Error assigning package")
            await db.rollback()
            return failed("Error al asignar el paquete")
