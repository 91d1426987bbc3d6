"""Storage service with provider interface (GCS/S3)."""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

from passport.core.config import StorageProvider, get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class StorageProviderInterface(ABC):
    """Abstract interface for storage providers.

    Buckets are addressed by name on every call: documents and photos live in
    separate buckets.
    """

    @abstractmethod
    async def upload_object(
        self,
        bucket: str,
        object_path: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Store an object. Must not overwrite an existing one."""
        pass

    @abstractmethod
    async def generate_signed_url(
        self,
        bucket: str,
        object_path: str,
        ttl_seconds: int,
    ) -> str:
        """Generate a time-limited GET URL."""
        pass

    @abstractmethod
    async def delete_object(self, bucket: str, object_path: str) -> bool:
        """Delete an object from storage."""
        pass


class GCSStorageProvider(StorageProviderInterface):
    """Google Cloud Storage provider."""

    def __init__(self, project_id: Optional[str] = None):
        self.project_id = project_id
        self._client = None

    @property
    def client(self):
        if self._client is None:
            from google.cloud import storage
            self._client = storage.Client(project=self.project_id)
        return self._client

    def _blob(self, bucket: str, object_path: str):
        return self.client.bucket(bucket).blob(object_path)

    async def upload_object(
        self,
        bucket: str,
        object_path: str,
        data: bytes,
        content_type: str,
    ) -> None:
        blob = self._blob(bucket, object_path)
        # if_generation_match=0: fail rather than overwrite
        blob.upload_from_string(data, content_type=content_type, if_generation_match=0)

    async def generate_signed_url(
        self,
        bucket: str,
        object_path: str,
        ttl_seconds: int,
    ) -> str:
        blob = self._blob(bucket, object_path)
        return blob.generate_signed_url(
            version="v4",
            expiration=timedelta(seconds=ttl_seconds),
            method="GET",
        )

    async def delete_object(self, bucket: str, object_path: str) -> bool:
        blob = self._blob(bucket, object_path)
        if blob.exists():
            blob.delete()
            return True
        return False


class S3StorageProvider(StorageProviderInterface):
    """AWS S3 storage provider."""

    def __init__(
        self,
        region: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ):
        self.region = region
        self._client = None
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key

    @property
    def client(self):
        if self._client is None:
            import boto3
            self._client = boto3.client(
                "s3",
                region_name=self.region,
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
            )
        return self._client

    async def upload_object(
        self,
        bucket: str,
        object_path: str,
        data: bytes,
        content_type: str,
    ) -> None:
        self.client.put_object(
            Bucket=bucket,
            Key=object_path,
            Body=data,
            ContentType=content_type,
            IfNoneMatch="*",
        )

    async def generate_signed_url(
        self,
        bucket: str,
        object_path: str,
        ttl_seconds: int,
    ) -> str:
        return self.client.generate_presigned_url(
            "get_object",
            Params={
                "Bucket": bucket,
                "Key": object_path,
            },
            ExpiresIn=ttl_seconds,
        )

    async def delete_object(self, bucket: str, object_path: str) -> bool:
        self.client.delete_object(Bucket=bucket, Key=object_path)
        return True


@dataclass(frozen=True)
class UploadPolicy:
    """Size and type limits for one kind of upload."""

    label: str
    max_size_mb: int
    allowed_mime_types: frozenset[str]

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024


DOCUMENT_UPLOADS = UploadPolicy(
    label="document",
    max_size_mb=20,
    allowed_mime_types=frozenset({
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "image/png",
        "image/jpeg",
        "image/jpg",
        "image/tiff",
    }),
)

MEDIA_UPLOADS = UploadPolicy(
    label="photo",
    max_size_mb=10,
    allowed_mime_types=frozenset({
        "image/png",
        "image/jpeg",
        "image/jpg",
        "image/webp",
        "image/gif",
        "application/pdf",  # floorplans
    }),
)


class StorageService:
    """High-level storage service wrapping provider interface."""

    def __init__(self, provider: StorageProviderInterface):
        self.provider = provider

    @staticmethod
    def validate_upload(
        policy: UploadPolicy,
        file_name: Optional[str],
        mime_type: Optional[str],
        size_bytes: int,
    ) -> None:
        """Check an incoming file against a policy. Raises ValueError."""
        if not file_name or size_bytes == 0:
            raise ValueError("No file selected")

        if size_bytes > policy.max_size_bytes:
            current_mb = round(size_bytes / 1024 / 1024)
            raise ValueError(
                f"File size must not exceed {policy.max_size_mb}MB (current: {current_mb}MB)"
            )

        if mime_type not in policy.allowed_mime_types:
            raise ValueError(f"File type not allowed: {mime_type}")

    @staticmethod
    def generate_object_path(property_id: UUID, file_name: str) -> str:
        """Unique object path: {property_id}/{uuid}/{file_name}."""
        return f"{property_id}/{uuid.uuid4()}/{file_name}"

    async def upload(self, bucket: str, object_path: str, data: bytes, content_type: str) -> None:
        await self.provider.upload_object(bucket, object_path, data, content_type)

    async def remove(self, bucket: str, object_path: str) -> bool:
        """Delete an object; failures are logged, never raised."""
        try:
            return await self.provider.delete_object(bucket, object_path)
        except Exception as e:
            logger.warning(f"[STORAGE] Failed to delete {bucket}/{object_path}: {e}")
            return False

    async def get_download_url(self, bucket: str, object_path: str, ttl_seconds: int = 3600) -> str:
        """Get a signed download URL."""
        return await self.provider.generate_signed_url(bucket, object_path, ttl_seconds)


def get_storage_service() -> StorageService:
    """Factory function to get storage service based on config."""
    if settings.storage_provider == StorageProvider.GCS:
        provider = GCSStorageProvider(project_id=settings.gcs_project_id)
    else:
        provider = S3StorageProvider(
            region=settings.aws_region or "eu-west-2",
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )

    return StorageService(provider)
