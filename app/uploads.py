import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from fastapi import UploadFile
from loguru import logger

from app.config import settings
from app.errors import InvalidArgument, Internal


PUBLIC_PREFIX = "/uploads"


@dataclass
class StoredImage:
    filename: str
    path: str          # location on disk
    size: int

    @property
    def public_path(self) -> str:
        return f"{PUBLIC_PREFIX}/{self.filename}"


def validate_image(upload: UploadFile) -> bytes:
    """Check type and size of an uploaded image and return its bytes."""
    if upload.content_type not in settings.ALLOWED_IMAGE_TYPES:
        raise InvalidArgument("Seules les images (JPEG, PNG) sont autorisées")

    # Read one byte past the limit so oversize files are detected without loading them whole
    data = upload.file.read(settings.MAX_IMAGE_SIZE + 1)
    if len(data) > settings.MAX_IMAGE_SIZE:
        raise InvalidArgument("Le fichier est trop volumineux (5 Mo maximum)")
    return data


def _unique_filename(directory: str, extension: str) -> str:
    stamp = int(time.time() * 1000)
    filename = f"{stamp}{extension}"
    while os.path.exists(os.path.join(directory, filename)):
        stamp += 1
        filename = f"{stamp}{extension}"
    return filename


def save_image(upload: UploadFile) -> StoredImage:
    data = validate_image(upload)

    directory = settings.UPLOAD_DIR
    extension = os.path.splitext(upload.filename or "")[1]

    try:
        os.makedirs(directory, exist_ok=True)
        filename = _unique_filename(directory, extension)
        path = os.path.join(directory, filename)
        with open(path, "wb") as out:
            out.write(data)
    except OSError as e:
        logger.exception("Failed to write uploaded image")
        raise Internal(error=type(e).__name__) from e

    logger.debug(f"Stored upload {upload.filename!r} as {filename} ({len(data)} bytes)")
    return StoredImage(filename=filename, path=path, size=len(data))


def discard_image(image: StoredImage) -> None:
    try:
        os.remove(image.path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.exception(f"Could not remove orphaned upload {image.path}")
    else:
        logger.debug(f"Removed orphaned upload {image.filename}")


@contextmanager
def stored_image(upload: Optional[UploadFile]) -> Iterator[Optional[StoredImage]]:
    """
    Validate and persist an optional image for the duration of a block.

    Yields ``None`` when no file was sent. If the block raises, the stored
    file is deleted again so failed creates leave nothing behind.
    """
    if upload is None or not upload.filename:
        yield None
        return

    image = save_image(upload)
    try:
        yield image
    except BaseException:
        discard_image(image)
        raise
