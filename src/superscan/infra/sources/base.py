from __future__ import annotations

"""
Base Definitions for Storage Backends.

Declares the narrow capability set the traversal core consumes: resolve a
starting point, list one directory, and download one file. Each backend
implements it once; the core never imports a concrete backend.
"""

from abc import ABC, abstractmethod
from typing import Iterator, List, Tuple

from superscan.domain.tree_models import ListingEntry


class Source(ABC):
    """
    Abstract storage backend.

    Attributes:
        name: Short identifier used on the command line.
        description: Human readable label.
        skip_hidden: Whether dot-prefixed entries are hidden by convention.
        flat_listing: Whether the backend lists every key under a prefix in
            one paginated call (object storage) instead of per directory.
    """

    name: str = ""
    description: str = ""
    skip_hidden: bool = False
    flat_listing: bool = False

    @abstractmethod
    def resolve_root(self, path: str) -> Tuple[str, str]:
        """
        Translate a user supplied path into a listable starting point.

        Args:
            path: Path, prefix or folder path as given by the user.

        Returns:
            Tuple[str, str]: (backend identifier, root node name).

        Raises:
            NotFound: The path does not exist.
            BackendUnavailable: The backend could not be reached.
        """

    @abstractmethod
    def list_entries(self, identifier: str) -> List[ListingEntry]:
        """
        List the immediate children of one directory.

        Raises:
            NotFound: The directory does not exist.
            BackendUnavailable: The listing call failed.
        """

    @abstractmethod
    def download_file(self, source_path: str, destination_path: str) -> None:
        """
        Copy one file to a local path whose parent directory already exists.

        Args:
            source_path: Forward-slash path of the file on the backend.
            destination_path: Local target path, overwritten if present.

        Raises:
            NotFound: The source file does not exist.
            LocalIOError: Writing the local file failed.
            BackendUnavailable: Any other backend failure.
        """

    def source_base(self, path: str) -> str:
        """
        Backend path the root of a tree built from path corresponds to.

        File paths handed to download_file are this base joined with the
        tree's names. Defaults to the path with surrounding slashes removed.
        """
        return (path or "").replace("\\", "/").strip("/")

    def iter_objects(self, prefix: str) -> Iterator[Tuple[str, int]]:
        """
        Yield (key, size) for every object under a prefix.

        Only meaningful for backends with flat_listing set.
        """
        raise NotImplementedError(f"{type(self).__name__} does not support flat listing")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
