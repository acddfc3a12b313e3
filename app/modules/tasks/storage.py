import boto3
from botocore.exceptions import ClientError
from fastapi import HTTPException
from app.config import settings
import logging

logger = logging.getLogger(__name__)

DOWNLOAD_URL_EXPIRES_SEC = 3600


def attachment_key(task_id: str, object_id: str, file_name: str) -> str:
    return f"tasks/{task_id}/{object_id}-{file_name}"


class S3Storage:
    """Task attachment bucket"""

    def __init__(self):
        if not all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name]):
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    def url_for(self, key: str) -> str:
        return f"s3://{self.bucket_name}/{key}"

    def key_from_url(self, url: str) -> str:
        prefix = f"s3://{self.bucket_name}/"
        if url.startswith(prefix):
            return url[len(prefix):]
        return url

    def upload_file(self, file_content: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Upload file to S3 and return the S3 URL"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=file_content,
                ContentType=content_type
            )
            return self.url_for(key)
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise

    def delete_file(self, key: str) -> bool:
        """Delete file from S3"""
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {str(e)}")
            return False

    def get_download_url(self, key: str, expires_in: int = DOWNLOAD_URL_EXPIRES_SEC) -> str:
        return self.s3_client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": key},
            ExpiresIn=expires_in,
        )


def get_storage() -> S3Storage:
    try:
        return S3Storage()
    except ValueError as e:
        logger.error(f"Attachment storage unavailable: {str(e)}")
        raise HTTPException(status_code=500, detail="File storage not configured")
