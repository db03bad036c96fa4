from __future__ import annotations

from superscan import __version__

USER_AGENT = f"SuperScan-Client/{__version__}"
DEFAULT_TIMEOUT = 30
CHUNK_SIZE = 8192
