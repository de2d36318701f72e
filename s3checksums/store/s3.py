"""boto3-backed Object Store for AWS S3 and S3-compatible endpoints (R2, MinIO).

botocore's own retries are disabled; every call site wraps requests in
``s3checksums.core.retry.retry`` instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import boto3
import botocore.config
from botocore.exceptions import BotoCoreError, ClientError

from s3checksums.config import StoreSettings
from s3checksums.models.inventory import ListPage, ObjectInfo
from s3checksums.store.base import (
    ObjectNotFoundError,
    ObjectStoreError,
    normalize_etag,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def _is_not_found(exc: ClientError) -> bool:
    return str(exc.response.get("Error", {}).get("Code", "")) in _NOT_FOUND_CODES


def create_s3_client(settings: StoreSettings) -> Any:
    """Build an S3 client from ``S3_*`` settings.

    Falls back to the default boto3 credential chain when no static key pair
    is configured.
    """
    s3_options: dict[str, Any] = {}
    if settings.use_path_style_endpoint:
        s3_options["addressing_style"] = "path"

    config = botocore.config.Config(
        connect_timeout=5,
        read_timeout=60,
        retries={"max_attempts": 1, "mode": "standard"},
        s3=s3_options or None,
    )
    kwargs: dict[str, Any] = {"config": config}
    if settings.region:
        kwargs["region_name"] = settings.region
    if settings.endpoint:
        kwargs["endpoint_url"] = settings.endpoint
    if settings.has_static_credentials:
        kwargs["aws_access_key_id"] = settings.access_key_id
        kwargs["aws_secret_access_key"] = settings.secret_access_key
    else:
        logger.info("No static S3 credentials set; relying on boto3 credential chain")
    return boto3.client("s3", **kwargs)


class S3ObjectStore:
    """Object Store over a boto3 S3 client.

    Parameters
    ----------
    client:
        A boto3 S3 client (real, or mocked by moto in tests).
    bucket:
        Bucket name.
    page_size:
        ``MaxKeys`` for each ``list_objects_v2`` call.
    """

    def __init__(self, client: Any, bucket: str, *, page_size: int = 1000) -> None:
        self._client = client
        self._bucket = bucket
        self._page_size = page_size

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> S3ObjectStore:
        return cls(create_s3_client(settings), settings.bucket)

    @property
    def bucket(self) -> str:
        return self._bucket

    def list_page(self, prefix: str, token: str | None = None) -> ListPage:
        params: dict[str, Any] = {
            "Bucket": self._bucket,
            "Prefix": prefix,
            "MaxKeys": self._page_size,
        }
        if token:
            params["ContinuationToken"] = token
        try:
            resp = self._client.list_objects_v2(**params)
        except (ClientError, BotoCoreError) as exc:
            raise ObjectStoreError(f"list {prefix!r} failed: {exc}") from exc

        objects = tuple(
            ObjectInfo(
                key=obj["Key"],
                size=obj.get("Size", 0),
                last_modified=obj["LastModified"],
                etag=normalize_etag(obj.get("ETag")),
            )
            for obj in resp.get("Contents", []) or []
        )
        next_token = resp.get("NextContinuationToken") if resp.get("IsTruncated") else None
        return ListPage(objects=objects, next_token=next_token)

    def get(self, key: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=key)
            return resp["Body"].read()
        except ClientError as exc:
            if _is_not_found(exc):
                raise ObjectNotFoundError(key) from exc
            raise ObjectStoreError(f"get {key!r} failed: {exc}") from exc
        except BotoCoreError as exc:
            raise ObjectStoreError(f"get {key!r} failed: {exc}") from exc

    def download(self, key: str, dest: Path) -> None:
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._client.download_file(self._bucket, key, str(dest))
        except ClientError as exc:
            if _is_not_found(exc):
                raise ObjectNotFoundError(key) from exc
            raise ObjectStoreError(f"download {key!r} failed: {exc}") from exc
        except BotoCoreError as exc:
            raise ObjectStoreError(f"download {key!r} failed: {exc}") from exc

    def put(self, key: str, data: bytes, content_type: str = "text/plain") -> None:
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=key, Body=data, ContentType=content_type
            )
        except (ClientError, BotoCoreError) as exc:
            raise ObjectStoreError(f"put {key!r} failed: {exc}") from exc

    def head(self, key: str) -> ObjectInfo | None:
        try:
            resp = self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as exc:
            if _is_not_found(exc):
                return None
            raise ObjectStoreError(f"head {key!r} failed: {exc}") from exc
        except BotoCoreError as exc:
            raise ObjectStoreError(f"head {key!r} failed: {exc}") from exc
        return ObjectInfo(
            key=key,
            size=resp.get("ContentLength", 0),
            last_modified=resp["LastModified"],
            etag=normalize_etag(resp.get("ETag")),
        )
