"""
Creates the public receipts bucket on Google Cloud Storage.

Authenticates with Application Default Credentials (set
GOOGLE_APPLICATION_CREDENTIALS to a service-account key, or run
`gcloud auth application-default login`). Running it again only verifies the
bucket and its public-read grant.

Receipts uploaded by the API are limited to JPEG, PNG, GIF and WebP images of
at most 5MB; the API checks this before uploading.
"""

import os
import sys

from google.api_core import exceptions as gcs_exceptions

# --- Path Setup ---
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

from tutor_sessions.common.config import settings
from tutor_sessions.services.storage_service import ReceiptStorage


def setup_storage() -> bool:
    print(f"Setting up storage bucket '{settings.STORAGE_BUCKET}'...")
    storage = ReceiptStorage()
    try:
        bucket, created = storage.ensure_bucket()
    except gcs_exceptions.GoogleAPIError as e:
        print(f"Error: could not set up bucket: {e}")
        return False

    print(f"  - Bucket {'created' if created else 'already exists'}: {bucket.name}")
    print(f"  - Public URL prefix: {storage.public_url('')}")
    print(f"  - Allowed types: {', '.join(settings.RECEIPT_ALLOWED_TYPES)}")
    print(f"  - Max size: {settings.RECEIPT_MAX_BYTES // (1024 * 1024)}MB")
    print("Storage setup finished successfully.")
    return True


if __name__ == "__main__":
    sys.exit(0 if setup_storage() else 1)
