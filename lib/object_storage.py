# =============================================================================
# lib/object_storage.py - Cloudflare R2 Object Storage
# =============================================================================
# User uploads (avatars, gallery images, message media, pinned audio) live in
# an R2 bucket. R2 speaks the S3 API, so this module talks to it through
# boto3 with SigV4 signing.
#
# Usage:
#   from lib.object_storage import ObjectStorage
#   key = ObjectStorage.key_from_public_url(profile["avatar_url"])
#   if key:
#       ObjectStorage.delete_object(key)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most this many keys per call
DELETE_BATCH_LIMIT = 1000


class ObjectStorageError(Exception):
    """Raised when an R2 request fails."""


class ObjectStorage:
    """
    Thin wrapper around an S3 client pointed at the R2 user bucket.

    The client is created lazily so importing this module never needs
    credentials.
    """

    _client: Any = None

    @classmethod
    def is_configured(cls) -> bool:
        return settings.r2_configured

    @classmethod
    def get_client(cls) -> Any:
        if cls._client is None:
            cls._client = boto3.client(
                "s3",
                aws_access_key_id=settings.R2_ACCESS_KEY_ID,
                aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
                region_name="auto",
                endpoint_url=settings.r2_endpoint_url,
                config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
            )
        return cls._client

    @classmethod
    def reset(cls) -> None:
        cls._client = None

    @staticmethod
    def key_from_public_url(url: str | None, public_base: str | None = None) -> str | None:
        """
        Turn a public media URL back into an object key.

        Returns None for URLs that don't point into the user bucket
        (external images, Supabase storage, empty values).

        Example:
            key_from_public_url("https://media.example.com/u1/avatar.png",
                                "https://media.example.com")  # "u1/avatar.png"
        """
        base = (public_base if public_base is not None else settings.R2_USER_PUBLIC_URL).rstrip("/")
        if not url or not base:
            return None
        prefix = base + "/"
        if not url.startswith(prefix):
            return None
        key = url[len(prefix):].split("?", 1)[0]
        return key or None

    @classmethod
    def delete_object(cls, key: str, bucket: str | None = None) -> bool:
        """
        Delete one object.

        A missing object counts as deleted. Returns False on any other
        failure so callers cleaning up many files can carry on.
        """
        bucket = bucket or settings.R2_USER_BUCKET
        try:
            cls.get_client().delete_object(Bucket=bucket, Key=key)
            return True
        except ClientError as e:
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            if status == 404:
                return True
            logger.warning(f"Failed to delete {key} from {bucket}: {e}")
            return False
        except BotoCoreError as e:
            logger.warning(f"Failed to delete {key} from {bucket}: {e}")
            return False

    @classmethod
    def delete_prefix(cls, prefix: str, bucket: str | None = None) -> int:
        """
        Delete every object whose key starts with `prefix`.

        Pages through ListObjectsV2 with continuation tokens.

        Returns:
            Number of objects deleted

        Raises:
            ObjectStorageError: If listing fails
        """
        bucket = bucket or settings.R2_USER_BUCKET
        client = cls.get_client()
        deleted = 0
        token: str | None = None

        while True:
            params: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix, "MaxKeys": DELETE_BATCH_LIMIT}
            if token:
                params["ContinuationToken"] = token

            try:
                page = client.list_objects_v2(**params)
            except (ClientError, BotoCoreError) as e:
                raise ObjectStorageError(f"Failed to list {prefix} in {bucket}: {e}") from e

            keys = [obj["Key"] for obj in page.get("Contents", [])]
            if keys:
                try:
                    result = client.delete_objects(
                        Bucket=bucket,
                        Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
                    )
                except (ClientError, BotoCoreError) as e:
                    raise ObjectStorageError(f"Failed to delete objects under {prefix}: {e}") from e
                errors = result.get("Errors", [])
                for error in errors:
                    logger.warning(f"Could not delete {error.get('Key')}: {error.get('Message')}")
                deleted += len(keys) - len(errors)

            if not page.get("IsTruncated"):
                break
            token = page.get("NextContinuationToken")
            if not token:
                break

        logger.info(f"Deleted {deleted} objects under {prefix}")
        return deleted
