"""Object storage for uploaded images and documents.

Files live in Supabase Storage buckets unless AWS S3 credentials are
configured, in which case every logical bucket becomes a key prefix in the
single S3 bucket.
"""
import logging

import boto3
from botocore.exceptions import ClientError
from supabase import Client

from app.config import settings

logger = logging.getLogger(__name__)


class SupabaseStorage:
    def __init__(self, supabase: Client, bucket_name: str):
        self.supabase = supabase
        self.bucket_name = bucket_name

    def upload_file(self, file_content: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Upload file to the bucket and return its storage path"""
        self.supabase.storage.from_(self.bucket_name).upload(
            key,
            file_content,
            {"content-type": content_type, "cache-control": "3600", "upsert": "false"}
        )
        return key

    def get_public_url(self, key: str) -> str:
        return self.supabase.storage.from_(self.bucket_name).get_public_url(key)

    def delete_file(self, key: str) -> bool:
        """Delete file from the bucket"""
        try:
            self.supabase.storage.from_(self.bucket_name).remove([key])
            return True
        except Exception as e:
            logger.error(f"Failed to delete {key} from bucket {self.bucket_name}: {e}")
            return False


class S3Storage:
    def __init__(self, prefix: str):
        if not settings.s3_enabled:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name
        self.prefix = prefix.strip("/")

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}"

    def upload_file(self, file_content: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Upload file to S3 and return the storage path"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=self._key(key),
                Body=file_content,
                ContentType=content_type
            )
            return key
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise

    def get_public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com/{self._key(key)}"

    def delete_file(self, key: str) -> bool:
        """Delete file from S3"""
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._key(key))
            return True
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {str(e)}")
            return False


def get_storage(supabase: Client, bucket_name: str):
    """Return the storage backend for a logical bucket."""
    if settings.s3_enabled:
        try:
            return S3Storage(bucket_name)
        except Exception as e:
            logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
    return SupabaseStorage(supabase, bucket_name)
