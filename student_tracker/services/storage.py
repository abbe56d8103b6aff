"""File storage for uploaded notes, assignments, papers and profile images.

Files are addressed by URL. Every URL handed out has the form
`{upload_url_prefix}/{key}` and is served back through GET /files/{key},
whichever backend holds the bytes.
"""

import logging
import mimetypes
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

from student_tracker.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class StorageError(Exception):
    """A storage backend failed to read, write or delete a file."""


class LocalBackend:
    """Keeps files under a directory on local disk."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise StorageError(f"Invalid file key: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    def get(self, key: str) -> bytes:
        try:
            return self._path(key).read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e


class S3Backend:
    """Keeps files in an S3 (or MinIO / LocalStack) bucket."""

    def __init__(self):
        """Initialize S3 client with credentials from settings."""
        client_kwargs = {
            "aws_access_key_id": settings.aws_access_key_id,
            "aws_secret_access_key": settings.aws_secret_access_key,
            "region_name": settings.aws_s3_region,
        }
        # Support MinIO / LocalStack by pointing to a custom endpoint
        if settings.aws_s3_endpoint_url:
            client_kwargs["endpoint_url"] = settings.aws_s3_endpoint_url

        self.s3_client = boto3.client("s3", **client_kwargs)
        self.bucket = settings.aws_s3_bucket

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except ClientError as e:
            raise StorageError(f"Failed to upload {key} to S3: {str(e)}") from e

    def get(self, key: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            raise StorageError(f"Failed to download {key} from S3: {str(e)}") from e

    def delete(self, key: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            raise StorageError(f"Failed to delete {key} from S3: {str(e)}") from e


class StorageService:
    """Store, retrieve and delete files by the URL they were stored under."""

    def __init__(self, backend: LocalBackend | S3Backend, url_prefix: str):
        self.backend = backend
        self.url_prefix = url_prefix.rstrip("/")

    def url_for(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"

    def key_from_url(self, url: str) -> str | None:
        """Storage key for a URL this service issued, or None for foreign URLs."""
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):]

    async def store(self, key: str, data: bytes, content_type: str | None = None) -> str:
        """
        Save a file and return its URL.

        Args:
            key: Storage key (path) for the file
            data: Raw file bytes
            content_type: MIME type; guessed from the key when omitted

        Raises:
            StorageError: If the backend write fails
        """
        content_type = content_type or mimetypes.guess_type(key)[0] or "application/octet-stream"
        self.backend.put(key, data, content_type)
        logger.info("Stored %s (%d bytes)", key, len(data))
        return self.url_for(key)

    async def retrieve(self, url: str) -> bytes:
        """Read back a file by URL. Raises StorageError for unknown URLs."""
        key = self.key_from_url(url)
        if key is None:
            raise StorageError(f"Not a stored file URL: {url}")
        return self.backend.get(key)

    async def delete(self, url: str) -> None:
        """Remove a stored file. URLs this service did not issue are left alone."""
        key = self.key_from_url(url)
        if key is None:
            logger.warning("Skipping delete of external file URL %s", url)
            return
        self.backend.delete(key)
        logger.info("Deleted stored file %s", key)


def create_storage_service() -> StorageService:
    """Build the storage service for the configured backend."""
    if settings.storage_backend == "s3":
        backend: LocalBackend | S3Backend = S3Backend()
    else:
        backend = LocalBackend(settings.upload_dir)
    return StorageService(backend, settings.upload_url_prefix)


# Singleton instance
storage_service = create_storage_service()
