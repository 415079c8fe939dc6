import io

import pytest
from PIL import Image

from app.services.image_service import ImageService, ImageUploadError


def image_bytes(size=(800, 600), mode="RGB", fmt="PNG"):
    buffer = io.BytesIO()
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    Image.new(mode, size, color).save(buffer, fmt)
    return buffer.getvalue()


@pytest.fixture
def images(tmp_path):
    return ImageService(base_dir=tmp_path)


def test_instructor_picture_is_cropped_square_and_resized(images, tmp_path):
    file_name = images.save_instructor_image("Ana Torres", image_bytes(), "ana.png")

    assert file_name.startswith("ana-torres-")
    assert file_name.endswith(".png")
    with Image.open(tmp_path / "instructors" / file_name) as stored:
        assert stored.size == (500, 500)


def test_transparent_picture_saved_as_jpeg(images, tmp_path):
    file_name = images.save_instructor_image("Luis", image_bytes((300, 300), "RGBA"), "luis.JPG")

    with Image.open(tmp_path / "instructors" / file_name) as stored:
        assert stored.format == "JPEG"
        assert stored.mode == "RGB"
        assert stored.size == (300, 300)


def test_instructor_image_validation(images):
    with pytest.raises(ImageUploadError, match="Solo se permiten archivos JPG, PNG y WebP"):
        images.validate_instructor_image("image/gif", 10, b"GIF89a")

    with pytest.raises(ImageUploadError, match="menor a 5MB"):
        images.validate_instructor_image("image/png", ImageService.MAX_FILE_SIZE + 1, b"")

    with pytest.raises(ImageUploadError, match="Imagen inválida"):
        images.validate_instructor_image("image/png", 12, b"not an image")

    images.validate_instructor_image("image/png", 100, image_bytes())


def test_menu_image_replaces_previous(images, tmp_path):
    images.validate_menu_image("image/webp", 100)
    with pytest.raises(ImageUploadError, match="Solo se permiten archivos de imagen"):
        images.validate_menu_image("application/pdf", 100)

    first = images.save_menu_image("item-1", b"one", "shake.JPEG")
    second = images.save_menu_image("item-1", b"two", "shake.png", previous=first)

    assert (first, second) == ("item-1.jpeg", "item-1.png")
    assert not (tmp_path / "menu" / first).exists()
    assert (tmp_path / "menu" / second).read_bytes() == b"two"


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("shake.GIF", "gif"),
        ("shake.webp", "webp"),
        ("shake.php", "jpg"),
        ("shake.png/../../x", "jpg"),
        ("shake.", "jpg"),
        (None, "jpg"),
    ],
)
def test_extension_only_keeps_image_types(filename, expected):
    assert ImageService.extension(filename) == expected


def test_menu_image_with_unexpected_extension(images, tmp_path):
    stored = images.save_menu_image("item-2", b"data", "evil.html")

    assert stored == "item-2.jpg"
    assert (tmp_path / "menu" / "item-2.jpg").read_bytes() == b"data"


def test_public_url():
    assert ImageService.public_url("menu", "a.png") == "http://testserver/uploads/menu/a.png"
    assert ImageService.public_url("menu", None) is None
