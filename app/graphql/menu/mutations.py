"""
GraphQL mutations for menu items and the orders placed from the app.
"""
from typing import Optional

import strawberry
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.crud.menuCrud import (
    add_order_note,
    create_menu_item,
    delete_menu_item,
    update_menu_item,
    update_order_status,
)
from app.graphql.auth.permissions import ADMIN_PERMISSIONS
from app.graphql.common import ActionResponse, failed, ok
from app.graphql.menu.types import CreateMenuItemInput, UpdateMenuItemInput

logger = get_logger("graphql.menu")


@strawberry.type
class MenuMutation:
    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def create_menu_item(self, info: strawberry.Info, input: CreateMenuItemInput) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await create_menu_item(
                db,
                name=input.name,
                price=input.price,
                description=input.description,
                in_stock=input.in_stock,
            )
            return ok("Ítem creado exitosamente.")
        except ValueError as e:
            return failed(str(e))
        except Exception:
            logger.exception("Error creating menu item")
            await db.rollback()
            return failed("Error al crear el ítem.")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_menu_item(
        self, info: strawberry.Info, id: str, input: UpdateMenuItemInput
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await update_menu_item(db, id, **input.changes())
            return ok("Ítem actualizado exitosamente.")
        except ValueError as e:
            return failed(str(e))
        except Exception:
            logger.exception("Error updating menu item")
            await db.rollback()
            return failed("Error al actualizar el ítem.")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def delete_menu_item(self, info: strawberry.Info, id: str) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await delete_menu_item(db, id)
            return ok("Ítem eliminado exitosamente.")
        except ValueError as e:
            return failed(str(e))
        except Exception:
            logger.exception("Error deleting menu item")
            await db.rollback()
            return failed("Error al eliminar el ítem.")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def update_order_status(self, info: strawberry.Info, id: str, status: str) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await update_order_status(db, id, status)
            return ok("Estado de la orden actualizado")
        except ValueError as e:
            return failed(str(e))
        except Exception:
            logger.exception("Error updating order status")
            await db.rollback()
            return failed("Error al actualizar el estado de la orden")

    @strawberry.mutation(permission_classes=ADMIN_PERMISSIONS)
    async def add_order_note(
        self, info: strawberry.Info, id: str, note: Optional[str] = None
    ) -> ActionResponse:
        db: AsyncSession = info.context.db
        try:
            await add_order_note(db, id, note)
            return ok("Nota de la orden actualizada")
        except ValueError as e:
            return failed(str(e))
        except Exception:
            logger.exception("Error updating order note")
            await db.rollback()
            return failed("Error al actualizar la nota de la orden")
