# app/services/storage_service.py
import logging
import uuid
from datetime import timedelta
from typing import Optional
from urllib.parse import unquote, urlparse

from flask import Flask
from firebase_admin import storage
from werkzeug.utils import secure_filename

from app.utils.datetime_utils import DateTimeUtils


class StorageService:
    """
    Cloud Storage access for post images.
    Images live under posts/<uid>/ and are served through their public URL.
    """

    def __init__(self):
        """The bucket is attached in init_app."""
        self.bucket = None

    def init_app(self, app: Flask):
        """
        Called once from create_app.

        :param app: Flask application
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET must be set in .env or the config class.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage bucket attached.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService is not initialised. Call init_app first.")

    @staticmethod
    def user_folder(user_id: str) -> str:
        return f"posts/{user_id}"

    def upload_post_image(self, user_id: str, filename: str, data: bytes, content_type: str) -> str:
        """
        Store an uploaded image and return its public URL.

        :param user_id: uid of the uploader
        :param filename: original client filename
        :param data: file contents
        :param content_type: MIME type, e.g. "image/jpeg"
        :return: public URL of the stored object
        """
        self._require_bucket()
        safe_name = secure_filename(filename) or "image"
        destination_blob_name = f"{self.user_folder(user_id)}/{DateTimeUtils.now_ms()}_{safe_name}"

        blob = self.bucket.blob(destination_blob_name)
        blob.upload_from_string(data, content_type=content_type)
        blob.make_public()
        logging.info(f"Image uploaded (path: {destination_blob_name})")
        return blob.public_url

    def generate_upload_url(self, user_id: str, filename: str, content_type: str) -> dict:
        """
        Signed URL the client can PUT an image to without going through this server.

        :return: dict with "upload_url" and the "file_path" to finalize later
        """
        self._require_bucket()

        extension = filename.rsplit('.', 1)[-1] if '.' in filename else ''
        unique_filename = f"{uuid.uuid4()}.{extension}" if extension else str(uuid.uuid4())
        destination_blob_name = f"{self.user_folder(user_id)}/{unique_filename}"

        blob = self.bucket.blob(destination_blob_name)

        # Upload-only URL valid for 15 minutes
        upload_url = blob.generate_signed_url(
            version="v4",
            expiration=timedelta(minutes=15),
            method="PUT",
            content_type=content_type
        )

        return {
            "upload_url": upload_url,
            "file_path": destination_blob_name
        }

    def make_public_and_get_url(self, file_path: str) -> str:
        """
        Make an uploaded object public and return its URL.

        :param file_path: object path inside the bucket
        """
        self._require_bucket()

        blob = self.bucket.blob(file_path)
        if not blob.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            blob.make_public()
            return blob.public_url
        except Exception as e:
            logging.error(f"Failed to make file public: {e}", exc_info=True)
            raise

    def path_from_url(self, url: str) -> Optional[str]:
        """Object path for a public URL of this bucket, None for foreign URLs."""
        self._require_bucket()
        parsed = urlparse(url)
        prefix = f"/{self.bucket.name}/"
        if parsed.netloc != "storage.googleapis.com" or not parsed.path.startswith(prefix):
            return None
        return unquote(parsed.path[len(prefix):])

    def delete_by_url(self, url: str) -> bool:
        """Best-effort removal of a post image. Returns True when an object was deleted."""
        try:
            file_path = self.path_from_url(url)
            if not file_path:
                return False
            blob = self.bucket.blob(file_path)
            if blob.exists():
                blob.delete()
                return True
        except Exception as e:
            logging.error(f"Storage image deletion failed (url: {url}): {e}")
        return False
