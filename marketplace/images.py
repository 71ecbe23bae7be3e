"""
Listing image folders: ``<MARKETPLACE_IMAGE_ROOT>/<listing id>/``.
"""
from django.conf import settings

from common import images as store


def listing_folder(listing_id) -> str:
    root = getattr(settings, "MARKETPLACE_IMAGE_ROOT", "marketplace")
    return f"{root}/{listing_id}"


def upload_images(listing_id, images, existing=0):
    return store.upload_images(listing_folder(listing_id), images, existing=existing)


def delete_images(listing_id) -> int:
    return store.delete_images(listing_folder(listing_id))
