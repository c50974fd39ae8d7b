import logging
import time
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple
from uuid import UUID

from b2sdk.v2 import B2Api, InMemoryAccountInfo

from app.core.config import settings

logger = logging.getLogger(__name__)

# B2 upload authorizations are valid for 24h
UPLOAD_TOKEN_TTL_SECONDS = 86400

MOCK_UPLOAD_DIR = Path("static/uploads")

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "application/pdf": "pdf",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/quicktime": "mov",
}

def file_extension(mime_type: str) -> str:
    return EXTENSIONS.get(mime_type, "bin")

def build_upload_key(user_id: UUID, mime_type: str, doc_type: str) -> str:
    """
    kyc/{user_id}/{doc_type}/{millis}.{ext} for KYC documents,
    profiles/{user_id}/{millis}.{ext} for profile images.
    """
    millis = int(time.time() * 1000)
    ext = file_extension(mime_type)
    if doc_type == "profile":
        return f"profiles/{user_id}/{millis}.{ext}"
    return f"kyc/{user_id}/{doc_type}/{millis}.{ext}"

def build_post_media_key(user_id: UUID, mime_type: str, media_type: str) -> str:
    return f"posts/{user_id}/{media_type}/{int(time.time() * 1000)}.{file_extension(mime_type)}"

class B2Storage:

    def __init__(self):
        self.info = InMemoryAccountInfo()
        self.b2_api = B2Api(self.info)
        self.bucket_name = settings.B2_BUCKET_NAME
        self.bucket = None
        self.is_mock = False

        if settings.B2_APPLICATION_KEY_ID and settings.B2_APPLICATION_KEY:
            try:
                self.b2_api.authorize_account("production", settings.B2_APPLICATION_KEY_ID, settings.B2_APPLICATION_KEY)
                self.bucket = self.b2_api.get_bucket_by_name(self.bucket_name)
            except Exception as e:
                if settings.is_production:
                    raise
                logger.warning(f"B2 init failed, falling back to mock storage: {e}")
                self.is_mock = True
        elif settings.is_production:
            raise RuntimeError("B2_APPLICATION_KEY_ID and B2_APPLICATION_KEY are required in production")
        else:
            logger.info("B2 credentials missing, using mock storage.")
            self.is_mock = True

    def get_upload_url(self) -> Tuple[str, str]:
        """
        Returns (upload_url, auth_token) for a direct client upload to the bucket.
        """
        if self.is_mock:
            return f"{settings.MOCK_UPLOAD_BASE_URL}{settings.API_V1_STR}/uploads/mock", "mock-token"

        if not self.bucket:
            raise ValueError("B2 bucket not initialized")

        response = self.b2_api.session.get_upload_url(bucket_id=self.bucket.id_)
        return response["uploadUrl"], response["authorizationToken"]

    def get_download_url(self, file_key: str) -> Optional[str]:
        """
        Signed download URL for a stored key, valid for DOWNLOAD_URL_EXPIRES_SECONDS.
        """
        if self.is_mock:
            return f"{settings.MOCK_UPLOAD_BASE_URL}/static/uploads/{file_key}"

        if not self.bucket:
            return None

        try:
            auth_token = self.bucket.get_download_authorization(
                file_name_prefix=file_key,
                valid_duration_in_seconds=settings.DOWNLOAD_URL_EXPIRES_SECONDS
            )
            download_url = self.b2_api.account_info.get_download_url()
            return f"{download_url}/file/{self.bucket_name}/{file_key}?Authorization={auth_token}"
        except Exception as e:
            logger.error(f"Error generating B2 download URL for {file_key}: {e}")
            return None

    def get_public_url(self, file_key: str) -> str:
        """
        Unsigned URL for keys that are served publicly (profile images).
        """
        if self.is_mock:
            return f"{settings.MOCK_UPLOAD_BASE_URL}/static/uploads/{file_key}"
        download_url = self.b2_api.account_info.get_download_url()
        return f"{download_url}/file/{self.bucket_name}/{file_key}"

@lru_cache()
def get_storage() -> B2Storage:
    return B2Storage()
