"""
Tests for image storage and resizing.
"""
import io

import pytest
from fastapi import UploadFile
from PIL import Image
from starlette.datastructures import Headers

from blog_backend.managers.upload_manager import UploadManager, resize_image_file
from blog_backend.services.post_exceptions import InvalidUploadError


def _png_bytes(size=(1200, 600)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color="blue").save(buffer, format="PNG")
    return buffer.getvalue()


def _upload(data, filename="picture.png", content_type="image/png"):
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def test_generate_filename_keeps_extension():
    filename = UploadManager.generate_filename("holiday.JPG")

    stem, extension = filename.split(".")
    assert stem.isdigit()
    assert extension == "JPG"


def test_resize_image_file_keeps_aspect_ratio(tmp_path):
    path = tmp_path / "wide.png"
    path.write_bytes(_png_bytes((1000, 250)))

    resize_image_file(path, 600)

    with Image.open(path) as image:
        assert image.size == (600, 150)
        assert image.format == "PNG"
    assert list(tmp_path.iterdir()) == [path]


@pytest.mark.asyncio
async def test_save_image_resizes_synchronously(tmp_path):
    manager = UploadManager(str(tmp_path), resize_width=600, resize_in_background=False)

    filename = await manager.save_image(_upload(_png_bytes()))

    with Image.open(tmp_path / filename) as image:
        assert image.size == (600, 300)
    assert manager.pending == 0


@pytest.mark.asyncio
async def test_save_image_resizes_in_background(tmp_path):
    manager = UploadManager(str(tmp_path / "nested"), resize_width=300, resize_in_background=True)

    filename = await manager.save_image(_upload(_png_bytes()))
    await manager.drain()

    with Image.open(tmp_path / "nested" / filename) as image:
        assert image.size == (300, 150)
    assert manager.pending == 0


@pytest.mark.asyncio
async def test_save_image_rejects_non_images(tmp_path):
    manager = UploadManager(str(tmp_path), resize_in_background=False)

    with pytest.raises(InvalidUploadError):
        await manager.save_image(_upload(b"hello", filename="notes.txt", content_type="text/plain"))

    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_undecodable_image_fails_synchronous_upload(tmp_path):
    manager = UploadManager(str(tmp_path), resize_in_background=False)

    with pytest.raises(InvalidUploadError):
        await manager.save_image(_upload(b"not really a png"))


@pytest.mark.asyncio
async def test_undecodable_image_keeps_original_in_background(tmp_path):
    """A failed background resize is logged and leaves the stored bytes alone."""
    manager = UploadManager(str(tmp_path), resize_in_background=True)

    filename = await manager.save_image(_upload(b"not really a png"))
    await manager.drain()

    assert (tmp_path / filename).read_bytes() == b"not really a png"
