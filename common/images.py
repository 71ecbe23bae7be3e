"""
Image storage shared by marketplace listings and properties.

Uploaded files are checked with Pillow, stored through Django's default
storage under a per-item folder and addressed by their public URL. An item
holds at most ``MAX_IMAGES_PER_ITEM`` images.
"""
import logging
import re
import time

from django.conf import settings
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE_BYTES = 5 * 1024 * 1024  # 5 MB
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def max_images_per_item() -> int:
    return int(getattr(settings, "MAX_IMAGES_PER_ITEM", 10))


def check_image_count(count, existing=0):
    cap = max_images_per_item()
    if existing + count > cap:
        raise ValidationError(f"A maximum of {cap} images is allowed ({existing} already uploaded)")


def validate_image(image, index=0):
    """Reject anything that is not a readable image of at most 5 MB."""
    if not hasattr(image, "read"):
        raise ValidationError(f"Invalid image file at index {index}")
    if getattr(image, "size", 0) > MAX_IMAGE_SIZE_BYTES:
        raise ValidationError(f"Image file too large at index {index} (max 5 MB)")
    try:
        with Image.open(image) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValidationError(f"Invalid image file at index {index}")
    finally:
        image.seek(0)


def upload_images(folder, images, existing=0):
    """Store every image under ``folder``; returns their URLs in upload order.

    ``existing`` is the number of images the item already has. Nothing is
    stored when the batch would take the item over the cap or any file fails
    validation.
    """
    images = list(images or [])
    check_image_count(len(images), existing)
    for index, image in enumerate(images):
        validate_image(image, index)
    urls = []
    stamp = int(time.time() * 1000)
    for index, image in enumerate(images):
        name = _UNSAFE_CHARS.sub("_", getattr(image, "name", "") or f"image_{index}.jpg")
        stored = default_storage.save(f"{folder}/{stamp}_{index}_{name}", image)
        urls.append(default_storage.url(stored))
    logger.info("%s: stored %s image(s)", folder, len(urls))
    return urls


def delete_images(folder) -> int:
    """Delete every stored image under ``folder``. Individual failures are logged and skipped."""
    try:
        _, files = default_storage.listdir(folder)
    except FileNotFoundError:
        return 0
    deleted = 0
    for name in files:
        try:
            default_storage.delete(f"{folder}/{name}")
            deleted += 1
        except OSError as exc:
            logger.warning("%s: could not delete image %s: %s", folder, name, exc)
    return deleted
