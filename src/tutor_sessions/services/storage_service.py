'''
Receipt image storage on Google Cloud Storage.
'''
import asyncio
import uuid
from typing import Callable, Optional

from fastapi import UploadFile
from google.api_core import exceptions as gcs_exceptions
from google.cloud import storage

from ..common.config import settings
from ..common.exceptions import ReceiptValidationError, StorageUploadError
from ..common.logger import log

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


def validate_receipt(content: bytes, content_type: Optional[str]) -> str:
    """
    Checks an upload before anything is sent over the network.
    Returns the normalized content type.
    """
    base_type = (content_type or "").split(";")[0].strip().lower()
    if base_type not in settings.RECEIPT_ALLOWED_TYPES:
        raise ReceiptValidationError(
            f"File type not allowed: {content_type or 'unknown'}. "
            f"Allowed types: {', '.join(settings.RECEIPT_ALLOWED_TYPES)}"
        )
    if not content:
        raise ReceiptValidationError("The uploaded file is empty.")
    if len(content) > settings.RECEIPT_MAX_BYTES:
        raise ReceiptValidationError(_too_large_message())
    return base_type


def _too_large_message() -> str:
    return f"File too large. Maximum size is {settings.RECEIPT_MAX_BYTES // (1024 * 1024)}MB"


async def read_receipt_upload(file: UploadFile) -> bytes:
    """
    Reads an uploaded receipt without holding more than one byte past the
    size limit. A declared size over the limit is refused before reading.
    """
    if file.size is not None and file.size > settings.RECEIPT_MAX_BYTES:
        raise ReceiptValidationError(_too_large_message())
    return await file.read(settings.RECEIPT_MAX_BYTES + 1)


class ReceiptStorage:
    """
    Uploads receipt images to the public receipts bucket and returns their URLs.
    """
    def __init__(
        self,
        bucket_name: Optional[str] = None,
        client_factory: Callable[[], storage.Client] = storage.Client
    ):
        self.bucket_name = bucket_name or settings.STORAGE_BUCKET
        self._client_factory = client_factory

    def public_url(self, blob_name: str) -> str:
        return f"https://storage.googleapis.com/{self.bucket_name}/{blob_name}"

    def _upload_sync(self, blob_name: str, content: bytes, content_type: str) -> None:
        client = self._client_factory()
        bucket = client.bucket(self.bucket_name)
        blob = bucket.blob(blob_name)
        blob.upload_from_string(content, content_type=content_type)

    async def upload_receipt(self, entry_id: uuid.UUID, content: bytes, content_type: Optional[str]) -> str:
        content_type = validate_receipt(content, content_type)
        blob_name = f"receipts/{entry_id}/{uuid.uuid4()}.{EXTENSIONS[content_type]}"

        log.info(f"Uploading receipt for ledger entry {entry_id} to {self.bucket_name}/{blob_name}")
        try:
            await asyncio.to_thread(self._upload_sync, blob_name, content, content_type)
        except gcs_exceptions.GoogleAPIError as e:
            log.error(f"Receipt upload for entry {entry_id} failed: {e}", exc_info=True)
            raise StorageUploadError(f"Could not upload receipt: {e}")

        return self.public_url(blob_name)

    def ensure_bucket(self) -> tuple[storage.Bucket, bool]:
        """
        Creates the receipts bucket if missing and makes its objects publicly
        readable. Returns (bucket, created). Safe to run repeatedly.
        """
        client = self._client_factory()
        bucket = client.lookup_bucket(self.bucket_name)
        created = False
        if bucket is None:
            log.info(f"Bucket '{self.bucket_name}' not found, creating it.")
            bucket = client.create_bucket(self.bucket_name)
            created = True

        policy = bucket.get_iam_policy(requested_policy_version=3)
        public_binding = {"role": "roles/storage.objectViewer", "members": {"allUsers"}}
        if not any(b.get("role") == public_binding["role"] and "allUsers" in b.get("members", ())
                   for b in policy.bindings):
            policy.bindings.append(public_binding)
            bucket.set_iam_policy(policy)
            log.info(f"Granted public read on bucket '{self.bucket_name}'.")
        return bucket, created


def get_receipt_storage() -> ReceiptStorage:
    """FastAPI dependency; overridden in tests."""
    return ReceiptStorage()
