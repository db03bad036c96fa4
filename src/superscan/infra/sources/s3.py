from __future__ import annotations

"""
AWS S3 Backend.

Lists a bucket prefix with the list_objects_v2 paginator and downloads
single objects with get_object. Object keys have no real directories, so
the tree builder synthesizes them from the flat key listing.
"""

import logging
import posixpath
from typing import Any, Iterator, List, Optional, Tuple

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from superscan.domain.errors import BackendUnavailable, LocalIOError, NotFound
from superscan.domain.tree_models import ListingEntry
from superscan.infra.network.common import CHUNK_SIZE, DEFAULT_TIMEOUT
from superscan.infra.sources.base import Source

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}
_MAX_ATTEMPTS = 3


class S3Source(Source):
    """Source backed by one S3 bucket."""

    name = "s3"
    description = "AWS S3 Storage"
    flat_listing = True

    def __init__(self, bucket: str, region: Optional[str] = None, client: Any = None) -> None:
        """
        Args:
            bucket: Bucket to scan.
            region: AWS region; the SDK default chain applies when empty.
            client: Pre-built S3 client (tests inject a stub here).
        """
        if not bucket:
            raise BackendUnavailable("An S3 bucket is required (set AWS_S3_BUCKET or s3.bucket)")
        self.bucket = bucket
        self.region = region
        self._client = client
        logger.info(f"Initializing S3 source for bucket: {bucket}")

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                self._client = boto3.client(
                    "s3",
                    region_name=self.region or None,
                    config=BotoConfig(
                        connect_timeout=DEFAULT_TIMEOUT,
                        read_timeout=DEFAULT_TIMEOUT,
                        retries={"max_attempts": _MAX_ATTEMPTS, "mode": "standard"},
                    ),
                )
            except BotoCoreError as e:
                raise BackendUnavailable(f"Failed to load AWS config: {e}") from e
        return self._client

    # -------------------------------------------------------------------------
    # Path handling
    # -------------------------------------------------------------------------

    def source_base(self, path: str) -> str:
        return normalize_key(path)

    def resolve_root(self, path: str) -> Tuple[str, str]:
        key = normalize_key(path)
        prefix = f"{key}/" if key else ""
        return prefix, posixpath.basename(key) or self.bucket

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def iter_objects(self, prefix: str) -> Iterator[Tuple[str, int]]:
        """Yield (key relative to prefix, size) for every object under prefix."""
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    if key == prefix:
                        continue
                    yield key[len(prefix):], int(obj.get("Size", 0))
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, f"Failed to list objects under '{prefix}'") from e

    def list_entries(self, identifier: str) -> List[ListingEntry]:
        """List one 'directory' using the '/' delimiter."""
        entries: List[ListingEntry] = []
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=identifier, Delimiter="/"):
                for common in page.get("CommonPrefixes", []):
                    child = common["Prefix"]
                    entries.append(ListingEntry(
                        name=child[len(identifier):].rstrip("/"),
                        is_dir=True,
                        size=0,
                        identifier=child,
                    ))
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    if key == identifier:
                        continue
                    entries.append(ListingEntry(
                        name=key[len(identifier):],
                        is_dir=False,
                        size=int(obj.get("Size", 0)),
                        identifier=key,
                    ))
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, f"Failed to list objects under '{identifier}'") from e
        return entries

    # -------------------------------------------------------------------------
    # Download
    # -------------------------------------------------------------------------

    def download_file(self, source_path: str, destination_path: str) -> None:
        key = normalize_key(source_path)
        if not key:
            raise NotFound("Empty object key")

        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, f"Failed to get object '{key}'") from e

        body = response["Body"]
        try:
            with open(destination_path, "wb") as f:
                for chunk in body.iter_chunks(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
        except OSError as e:
            raise LocalIOError(f"Failed to write {destination_path}: {e}") from e
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, f"Failed to read object '{key}'") from e
        finally:
            body.close()

        logger.debug(f"Successfully downloaded s3://{self.bucket}/{key}")


def normalize_key(path: Optional[str]) -> str:
    """Strip leading/trailing slashes and collapse '.' segments of an object key."""
    key = (path or "").replace("\\", "/").strip("/")
    if not key:
        return ""
    key = posixpath.normpath(key)
    return "" if key == "." else key


def _translate(error: Exception, message: str) -> BackendUnavailable:
    if isinstance(error, ClientError):
        code = str(error.response.get("Error", {}).get("Code", ""))
        if code in _NOT_FOUND_CODES:
            return NotFound(f"{message}: {code}")
    return BackendUnavailable(f"{message}: {error}")
