from __future__ import annotations

"""
Backend Registry.

Maps the source identifiers accepted on the command line to backend
instances configured from the persisted settings.
"""

import logging
from typing import Any, Dict, Optional

from superscan.infra.sources.base import Source
from superscan.infra.sources.filesystem import FileSystemSource

logger = logging.getLogger(__name__)

FILESYSTEM = "filesystem"
S3 = "s3"
GOOGLE_DRIVE = "google-drive"

SOURCE_TYPES = (FILESYSTEM, S3, GOOGLE_DRIVE)


def create_source(source_type: str, config: Optional[Dict[str, Any]] = None) -> Source:
    """
    Instantiate the backend registered under source_type.

    Cloud SDK imports are deferred so the filesystem backend works without
    them being importable.

    Args:
        source_type: One of SOURCE_TYPES.
        config: Effective configuration (see domain.config).

    Returns:
        Source: Ready-to-use backend.

    Raises:
        ValueError: Unknown source type.
        BackendUnavailable: Required settings are missing.
    """
    config = config or {}
    logger.info(f"Creating new source of type: {source_type}")

    if source_type == FILESYSTEM:
        return FileSystemSource()

    if source_type == S3:
        from superscan.infra.sources.s3 import S3Source

        s3_conf = config.get("s3", {})
        return S3Source(bucket=s3_conf.get("bucket", ""), region=s3_conf.get("region"))

    if source_type == GOOGLE_DRIVE:
        from superscan.infra.sources.gdrive import GoogleDriveSource

        drive_conf = config.get("google_drive", {})
        return GoogleDriveSource(
            credentials_file=drive_conf.get("credentials_file", ""),
            token_file=drive_conf.get("token_file", ""),
        )

    raise ValueError(f"Unknown source type: {source_type}")


def default_start_path(source_type: str, config: Optional[Dict[str, Any]] = None) -> str:
    """Configured start path for a backend, used when no path is given."""
    config = config or {}
    if source_type == S3:
        return config.get("s3", {}).get("start_path", "")
    if source_type == GOOGLE_DRIVE:
        return config.get("google_drive", {}).get("start_path", "")
    return ""
