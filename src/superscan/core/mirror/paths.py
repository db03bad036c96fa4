from __future__ import annotations

"""
Path helpers shared by the mirror engine and the sampler.

Backend paths are always joined with forward slashes so they remain valid
object-storage keys; local paths use the host separator.
"""

import os


def join_source(base: str, name: str) -> str:
    """
    Append a segment to a backend path using '/' on every platform.

    Only the separator is added; backslashes already in base or name are
    part of entry names and stay untouched. User input is normalized once,
    by Source.source_base.
    """
    if not base:
        return name
    if base.endswith("/"):
        return f"{base}{name}"
    return f"{base}/{name}"


def join_destination(base: str, name: str) -> str:
    return os.path.join(base, name)
