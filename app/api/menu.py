from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_admin
from app.core.logging_config import get_logger
from app.crud.menuCrud import get_menu_item, set_menu_item_image
from app.db.postgresql import get_db
from app.services.image_service import ImageService, ImageUploadError

logger = get_logger("api.menu")

router = APIRouter(prefix="/api/menu", tags=["Menu"], dependencies=[Depends(require_admin)])


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


@router.post("/upload")
async def upload_menu_image(
    file: Optional[UploadFile] = File(None),
    id: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Attach a picture to a menu item, replacing the previous one."""
    if file is None or not id:
        return _error("Archivo y ID del ítem son requeridos", 400)

    data = await file.read()
    image_service = ImageService()
    try:
        image_service.validate_menu_image(file.content_type, len(data))
    except ImageUploadError as e:
        return _error(e.message, e.status_code)

    item = await get_menu_item(db, id)
    if not item:
        return _error("Ítem del menú no encontrado", 404)

    try:
        file_name = image_service.save_menu_image(str(item.id), data, file.filename, previous=item.image)
    except OSError as e:
        logger.error(f"Error storing menu image for {item.id}: {e}")
        return _error(f"Error al subir la imagen: {e}", 500)

    try:
        updated = await set_menu_item_image(db, item, file_name)
    except Exception:
        logger.exception("Error updating menu item image")
        await db.rollback()
        return _error("Error al actualizar el ítem del menú", 500)

    return {
        "success": True,
        "item": jsonable_encoder(asdict(updated)),
        "message": "Imagen subida correctamente",
    }
