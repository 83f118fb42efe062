# cityscope/services/storage_service.py
import uuid
import logging
from typing import Optional
from urllib.parse import urlparse, unquote

from flask import Flask
from firebase_admin import storage

from cityscope.core.errors import MediaUploadError

ALLOWED_IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'webp'}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


class StorageService:
    """
    Hosts post images in Firebase Storage.

    The API layer hands over the raw upload; this service stores it under
    ``posts/<user_id>/`` and returns the public URL that goes into the post.
    """

    def __init__(self):
        """The bucket is attached later by init_app."""
        self.bucket = None

    def init_app(self, app: Flask):
        """
        Called once from create_app to bind the configured bucket.

        :param app: Flask application object
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET must be set in .env or the config class.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage initialized.")

    @staticmethod
    def _extension(filename: str) -> str:
        return filename.rsplit('.', 1)[-1].lower() if filename and '.' in filename else ''

    def upload_image(self, data: bytes, filename: str, content_type: str, user_id: str) -> str:
        """
        Uploads an image and makes it publicly readable.

        :param data: raw file bytes
        :param filename: client-side file name, used for the extension
        :param content_type: MIME type reported by the client
        :param user_id: uploader, used as the folder name
        :return: public URL of the stored image
        :raises MediaUploadError: when the file is rejected or the upload fails
        """
        if not self.bucket:
            raise RuntimeError("StorageService is not initialized; call init_app first.")

        if not content_type or not content_type.startswith('image/'):
            raise MediaUploadError("Only image files are allowed")
        if not data:
            raise MediaUploadError("Uploaded image is empty")
        if len(data) > MAX_IMAGE_BYTES:
            raise MediaUploadError("Image exceeds the 5MB limit")

        extension = self._extension(filename)
        if extension not in ALLOWED_IMAGE_EXTENSIONS:
            raise MediaUploadError(f"Unsupported image type: '{extension or filename}'")

        destination_blob_name = f"posts/{user_id}/{uuid.uuid4()}.{extension}"
        blob = self.bucket.blob(destination_blob_name)

        try:
            blob.upload_from_string(data, content_type=content_type)
            blob.make_public()
        except Exception as e:
            logging.error(f"Image upload failed ({destination_blob_name}): {e}", exc_info=True)
            raise MediaUploadError("Failed to upload image")

        return blob.public_url

    def delete_image(self, url: Optional[str]) -> bool:
        """Deletes a hosted image given its public URL. Returns False if nothing was removed."""
        if not self.bucket or not url:
            return False

        # https://storage.googleapis.com/<bucket>/<path>
        path = unquote(urlparse(url).path).lstrip('/')
        prefix = f"{self.bucket.name}/"
        if path.startswith(prefix):
            path = path[len(prefix):]

        blob = self.bucket.blob(path)
        if not blob.exists():
            return False
        blob.delete()
        return True
