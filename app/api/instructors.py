from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import require_admin
from app.core.conversions import coerce_uuid
from app.core.logging_config import get_logger
from app.crud.instructorsCrud import get_instructor, set_profile_picture
from app.db.postgresql import get_db
from app.services.image_service import ImageService, ImageUploadError

logger = get_logger("api.instructors")

router = APIRouter(prefix="/api/instructors", tags=["Instructors"], dependencies=[Depends(require_admin)])


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


@router.post("/upload")
async def upload_profile_picture(
    file: Optional[UploadFile] = File(None),
    id: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Store a square profile picture and return its public URL.

    With an instructor ``id`` the URL is saved on the instructor too; without
    one the form keeps it until the instructor is created.
    """
    if file is None:
        return _error("Archivo requerido", 400)

    data = await file.read()
    image_service = ImageService()
    try:
        image_service.validate_instructor_image(file.content_type, len(data), data)
    except ImageUploadError as e:
        return _error(e.message, e.status_code)

    instructor = None
    if id:
        parsed_id = coerce_uuid(id)
        instructor = await get_instructor(db, parsed_id) if parsed_id else None
        if instructor is None or instructor.deleted_at is not None:
            return _error("Instructor no encontrado", 404)

    try:
        file_name = image_service.save_instructor_image(
            name or (instructor.name if instructor else ""), data, file.filename
        )
    except OSError as e:
        logger.error(f"Error storing instructor picture: {e}")
        return _error(f"Error al subir la imagen: {e}", 500)

    url = image_service.public_url(ImageService.INSTRUCTORS_FOLDER, file_name)
    if instructor is not None:
        try:
            await set_profile_picture(db, instructor.id, url)
        except Exception:
            logger.exception("Error saving instructor picture URL")
            await db.rollback()
            return _error("Error al actualizar el instructor", 500)

    return {"success": True, "url": url}
