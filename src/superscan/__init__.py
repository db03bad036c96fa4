from __future__ import annotations

"""
SuperScan.

Enumerates the file tree exposed by a storage backend (local filesystem,
S3 bucket, Google Drive) and mirrors it, fully or as a random sample,
onto local disk.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
