from __future__ import annotations

"""
Error Taxonomy.

Exceptions raised by storage backends and surfaced by the traversal core.
Backends translate their library-specific failures into these types so the
core and the CLI never inspect transport-level error messages.
"""


class SuperscanError(Exception):
    """Base class for every failure raised by this package."""


class BackendUnavailable(SuperscanError):
    """A listing or single-file call against a backend failed."""


class NotFound(BackendUnavailable):
    """
    The requested path, key or folder does not exist on the backend.

    Subclasses BackendUnavailable so callers handling the broad failure
    still catch it, while the CLI can special-case it for guidance.
    """


class LocalIOError(SuperscanError):
    """Creating a local directory or writing a local file failed."""
