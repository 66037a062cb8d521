from functools import lru_cache

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Depends
from loguru import logger

from photoqr.config import Settings, get_settings
from photoqr.services.errors import SigningError, StorageError, StorageWriteError


def build_s3_client(settings: Settings):
    try:
        return boto3.client(
            "s3",
            endpoint_url=settings.storage_endpoint,
            aws_access_key_id=settings.r2_access_key_id,
            aws_secret_access_key=settings.r2_secret_access_key,
            region_name=settings.r2_region,
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
    except (ValueError, BotoCoreError) as exc:
        logger.error("Object store client setup failed endpoint={} error={}", settings.storage_endpoint, str(exc))
        raise StorageError(f"Object store is misconfigured: {exc}") from exc


class ObjectStore:
    """Private bucket that hands out time-limited GET links."""

    def __init__(self, client, bucket: str | None) -> None:
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStore":
        return cls(build_s3_client(settings), settings.r2_bucket)

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Object write failed bucket={} key={} error={}", self.bucket, key, str(exc))
            raise StorageWriteError(f"Object store write failed: {exc}") from exc
        logger.debug("Object stored bucket={} key={} size_bytes={}", self.bucket, key, len(data))

    def presign_get(self, key: str, expires_in: int) -> str:
        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("URL signing failed bucket={} key={} error={}", self.bucket, key, str(exc))
            raise SigningError(f"Could not sign object URL: {exc}") from exc
        logger.debug("Object URL signed bucket={} key={} expires_in={}", self.bucket, key, expires_in)
        return url


@lru_cache
def _store_for(settings: Settings) -> ObjectStore:
    return ObjectStore.from_settings(settings)


def get_object_store(settings: Settings = Depends(get_settings)) -> ObjectStore:
    return _store_for(settings)
