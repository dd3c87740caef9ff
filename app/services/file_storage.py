import logging
import mimetypes
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import boto3
from botocore.exceptions import ClientError

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    url: str
    content_type: str
    size_bytes: int


class FileStorageService(ABC):
    @abstractmethod
    def store(self, content: bytes, filename: Optional[str], content_type: Optional[str], subdirectory: str) -> StoredFile:
        ...

    @staticmethod
    def _unique_name(filename: Optional[str]) -> str:
        extension = Path(filename).suffix if filename else ""
        return f"{uuid.uuid4().hex}{extension}"

    @staticmethod
    def _resolve_content_type(filename: Optional[str], content_type: Optional[str]) -> str:
        if content_type:
            return content_type
        guessed = mimetypes.guess_type(filename)[0] if filename else None
        return guessed or filename or "application/octet-stream"


class LocalFileStorage(FileStorageService):
    def __init__(self, upload_dir: str, base_url: str):
        self.upload_dir = Path(upload_dir)
        self.base_url = base_url.rstrip("/")

    def store(self, content: bytes, filename: Optional[str], content_type: Optional[str], subdirectory: str) -> StoredFile:
        target_dir = self.upload_dir / subdirectory
        target_dir.mkdir(parents=True, exist_ok=True)
        unique_name = self._unique_name(filename)
        (target_dir / unique_name).write_bytes(content)
        logger.info(f"Stored file {filename} as {subdirectory}/{unique_name}")
        return StoredFile(
            url=f"{self.base_url}/{subdirectory}/{unique_name}",
            content_type=self._resolve_content_type(filename, content_type),
            size_bytes=len(content),
        )


class S3FileStorage(FileStorageService):
    def __init__(self, bucket_name: str, region: str):
        self.s3_client = boto3.client("s3", region_name=region)
        self.bucket_name = bucket_name
        self.region = region

    def store(self, content: bytes, filename: Optional[str], content_type: Optional[str], subdirectory: str) -> StoredFile:
        key = f"{subdirectory}/{self._unique_name(filename)}"
        resolved_type = self._resolve_content_type(filename, content_type)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=resolved_type,
                ACL="public-read",
            )
        except ClientError as e:
            logger.error(f"Failed to upload {filename} to S3: {e}")
            raise Exception(f"Failed to upload file: {str(e)}")
        return StoredFile(
            url=f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}",
            content_type=resolved_type,
            size_bytes=len(content),
        )


def get_file_storage() -> FileStorageService:
    if settings.STORAGE_BACKEND == "s3":
        return S3FileStorage(bucket_name=settings.S3_BUCKET_NAME, region=settings.AWS_REGION)
    return LocalFileStorage(upload_dir=settings.UPLOAD_DIR, base_url=settings.FILE_BASE_URL)


@dataclass
class FileUpload:
    content: bytes
    filename: Optional[str]
    content_type: Optional[str]
