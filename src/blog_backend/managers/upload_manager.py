"""
# Upload Manager

Stores images uploaded for posts and resizes them to the configured width.

## Flow

1. The upload is written to `UPLOAD_DIR` as `<epoch millis><original extension>`.
2. The stored file is resized to `UPLOAD_RESIZE_WIDTH` pixels wide (height kept
   proportional) with Pillow. EXIF, ICC profile and DPI metadata are carried over.
3. The resized image replaces the stored file through a temporary file and
   `os.replace`, so a failed resize leaves the original bytes untouched.

With `UPLOAD_RESIZE_IN_BACKGROUND` (the default) step 2 runs as a detached
task and the filename is returned as soon as step 1 is done. Background tasks
are tracked so failures get logged and `drain()` can wait for them at
shutdown. With the flag off, the request waits for the resize.
"""

import asyncio
import os
import time
from pathlib import Path
from typing import Optional, Set

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from blog_backend.managers.logging_manager import get_logger
from blog_backend.services.post_exceptions import InvalidUploadError

logger = get_logger("uploads", prefix="[Uploads]")

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff"}
PRESERVED_METADATA = ("exif", "icc_profile", "dpi")


def resize_image_file(path: Path, width: int) -> None:
    """
    Resize the image at `path` to `width` pixels wide, in place.

    Raises:
        UnidentifiedImageError: If the file is not a readable image.
        OSError: If reading or writing fails.
    """
    with Image.open(path) as image:
        image_format = image.format
        height = max(1, round(image.height * width / image.width))
        resized = image.resize((width, height), Image.Resampling.LANCZOS)
        save_kwargs = {key: image.info[key] for key in PRESERVED_METADATA if key in image.info}

    tmp_path = path.with_name(f".{path.name}.resizing")
    try:
        resized.save(tmp_path, format=image_format, **save_kwargs)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


class UploadManager:
    """
    Saves uploaded images and schedules their resize.

    Args:
        upload_dir: Directory the files are written to.
        resize_width: Target width in pixels.
        resize_in_background: Whether the response may be sent before the resize finishes.
    """

    def __init__(self, upload_dir: str, resize_width: int = 600, resize_in_background: bool = True):
        self.upload_dir = Path(upload_dir)
        self.resize_width = resize_width
        self.resize_in_background = resize_in_background
        self._tasks: Set[asyncio.Task] = set()

    def ensure_directory(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_filename(original_filename: Optional[str]) -> str:
        """Current time in milliseconds plus the original extension."""
        extension = Path(original_filename or "").suffix
        return f"{int(time.time() * 1000)}{extension}"

    @staticmethod
    def _check_image(upload: UploadFile) -> None:
        extension = Path(upload.filename or "").suffix.lower()
        content_type = upload.content_type or ""
        if extension not in IMAGE_EXTENSIONS and not content_type.startswith("image/"):
            raise InvalidUploadError(f"Not an image upload: {upload.filename}")

    async def save_image(self, upload: UploadFile) -> str:
        """
        Store an uploaded image and resize it.

        Returns:
            str: The generated filename (relative to `upload_dir`).

        Raises:
            InvalidUploadError: If the file is not an image, or (synchronous
                mode only) cannot be decoded.
        """
        self._check_image(upload)

        filename = self.generate_filename(upload.filename)
        path = self.upload_dir / filename
        data = await upload.read()
        self.ensure_directory()
        await asyncio.to_thread(path.write_bytes, data)
        logger.info("Stored upload %s (%d bytes)", filename, len(data))

        if self.resize_in_background:
            task = asyncio.create_task(self._resize_in_background(path))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            try:
                await self.resize_image(path)
            except UnidentifiedImageError as e:
                raise InvalidUploadError(f"Cannot decode image {upload.filename}") from e

        return filename

    async def resize_image(self, path: Path) -> None:
        start_time = time.time()
        await asyncio.to_thread(resize_image_file, path, self.resize_width)
        logger.info("Resized %s to width %d in %.3fs", path.name, self.resize_width, time.time() - start_time)

    async def _resize_in_background(self, path: Path) -> None:
        try:
            await self.resize_image(path)
        except Exception as e:
            logger.error("Background resize of %s failed, original kept: %s", path.name, e, exc_info=True)

    @property
    def pending(self) -> int:
        """Number of resize tasks still running."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all background resizes to finish."""
        if self._tasks:
            logger.info("Waiting for %d background resize task(s)", len(self._tasks))
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
