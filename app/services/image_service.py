"""
Image service for menu item pictures and instructor profile pictures
"""
import io
import secrets
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

import app.core.config as config
from app.core.logging_config import get_logger

logger = get_logger("services.image")


class ImageUploadError(Exception):
    """Upload rejected; carries the HTTP status the route should answer with."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ImageService:
    """Stores uploaded pictures under UPLOAD_DIR and builds their public URLs"""

    MENU_FOLDER = "menu"
    INSTRUCTORS_FOLDER = "instructors"
    MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
    INSTRUCTOR_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
    TARGET_SIZE = (500, 500)  # Maximum dimensions for profile pictures
    ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir or config.UPLOAD_DIR)
        for folder in (self.MENU_FOLDER, self.INSTRUCTORS_FOLDER):
            (self.base_dir / folder).mkdir(parents=True, exist_ok=True)

    @classmethod
    def extension(cls, filename: Optional[str], default: str = "jpg") -> str:
        """Lowercased extension of the client filename, or ``default`` when it is not an image one."""
        if filename and "." in filename:
            ext = filename.rsplit(".", 1)[1].lower()
            if ext in cls.ALLOWED_EXTENSIONS:
                return ext
        return default

    @staticmethod
    def public_url(folder: str, filename: Optional[str]) -> Optional[str]:
        if not filename:
            return None
        base = config.BASE_URL.rstrip("/")
        return f"{base}/uploads/{folder}/{filename}"

    def validate_menu_image(self, content_type: Optional[str], size: int) -> None:
        if not (content_type or "").startswith("image/"):
            raise ImageUploadError("Solo se permiten archivos de imagen")
        if size > self.MAX_FILE_SIZE:
            raise ImageUploadError("El archivo es demasiado grande (máximo 5MB)")

    def save_menu_image(
        self,
        item_id: str,
        file_data: bytes,
        original_filename: Optional[str],
        previous: Optional[str] = None,
    ) -> str:
        """Store the picture as ``<item id>.<ext>``, replacing the previous one.

        Returns the file name kept on the menu row.
        """
        if previous:
            self.delete_file(self.MENU_FOLDER, previous)

        filename = f"{item_id}.{self.extension(original_filename)}"
        (self.base_dir / self.MENU_FOLDER / filename).write_bytes(file_data)
        logger.info(f"Menu image stored: {filename}")
        return filename

    def validate_instructor_image(self, content_type: Optional[str], size: int, file_data: bytes) -> None:
        if content_type not in self.INSTRUCTOR_TYPES:
            raise ImageUploadError("Solo se permiten archivos JPG, PNG y WebP")
        if size > self.MAX_FILE_SIZE:
            raise ImageUploadError("El archivo debe ser menor a 5MB")

        # Validate it's a real image
        try:
            img = Image.open(io.BytesIO(file_data))
            img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ImageUploadError(f"Imagen inválida: {e}") from e

    def save_instructor_image(self, instructor_name: str, file_data: bytes, original_filename: Optional[str]) -> str:
        """Crop to a centered square, shrink to TARGET_SIZE and save.

        Returns the stored file name.
        """
        img = Image.open(io.BytesIO(file_data))
        ext = self.extension(original_filename)

        if ext in ("jpg", "jpeg") and img.mode in ("RGBA", "LA", "P"):
            # JPEG has no alpha channel; flatten on white
            background = Image.new("RGB", img.size, (255, 255, 255))
            if img.mode == "P":
                img = img.convert("RGBA")
            background.paste(img, mask=img.split()[-1] if img.mode == "RGBA" else None)
            img = background

        width, height = img.size
        if width != height:
            size = min(width, height)
            left = (width - size) // 2
            top = (height - size) // 2
            img = img.crop((left, top, left + size, top + size))

        if img.size[0] > self.TARGET_SIZE[0]:
            img.thumbnail(self.TARGET_SIZE, Image.Resampling.LANCZOS)

        safe_name = re.sub(r"[^a-z0-9]", "-", (instructor_name or "instructor").lower())
        stamp = datetime.now().strftime("%Y%m%d%H%M%S")
        filename = f"{safe_name}-{stamp}-{secrets.token_hex(4)}.{ext}"
        filepath = self.base_dir / self.INSTRUCTORS_FOLDER / filename

        image_format = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG", "webp": "WEBP", "gif": "GIF"}.get(ext, "PNG")
        if image_format == "JPEG":
            img.save(filepath, image_format, quality=85, optimize=True)
        else:
            img.save(filepath, image_format)

        logger.info(f"Instructor picture stored: {filename}")
        return filename

    def delete_file(self, folder: str, filename: Optional[str]) -> None:
        if not filename:
            return
        path = self.base_dir / folder / Path(filename).name
        if path.exists():
            path.unlink()
