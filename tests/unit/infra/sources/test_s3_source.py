from __future__ import annotations

"""
Unit tests for the S3 backend.

A stub client replaces boto3 so listing, key normalization, download
streaming and error translation are verified without network access.
"""

import io
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from superscan.core.analysis.tree_builder import build_tree
from superscan.domain.errors import BackendUnavailable, LocalIOError, NotFound
from superscan.infra.sources.s3 import S3Source, normalize_key


class _Paginator:
    def __init__(self, client: "_StubClient") -> None:
        self.client = client

    def paginate(self, **kwargs: Any):
        self.client.paginate_calls.append(kwargs)
        if self.client.list_error:
            raise self.client.list_error
        prefix = kwargs.get("Prefix", "")
        keys = [k for k in sorted(self.client.objects) if k.startswith(prefix)]

        if kwargs.get("Delimiter") == "/":
            prefixes: List[str] = []
            contents: List[Dict[str, Any]] = []
            for key in keys:
                rest = key[len(prefix):]
                if "/" in rest:
                    child = prefix + rest.split("/", 1)[0] + "/"
                    if child not in prefixes:
                        prefixes.append(child)
                else:
                    contents.append({"Key": key, "Size": len(self.client.objects[key])})
            yield {"CommonPrefixes": [{"Prefix": p} for p in prefixes], "Contents": contents}
            return

        # Two pages, to exercise pagination.
        half = len(keys) // 2
        for chunk in (keys[:half], keys[half:]):
            yield {"Contents": [{"Key": k, "Size": len(self.client.objects[k])} for k in chunk]}


class _Body:
    def __init__(self, data: bytes) -> None:
        self._stream = io.BytesIO(data)
        self.closed = False

    def iter_chunks(self, chunk_size: int = 1024):
        while True:
            chunk = self._stream.read(chunk_size)
            if not chunk:
                break
            yield chunk

    def close(self) -> None:
        self.closed = True


class _StubClient:
    def __init__(self, objects: Dict[str, bytes], list_error: Optional[Exception] = None) -> None:
        self.objects = objects
        self.list_error = list_error
        self.paginate_calls: List[Dict[str, Any]] = []
        self.bodies: List[_Body] = []

    def get_paginator(self, name: str) -> _Paginator:
        assert name == "list_objects_v2"
        return _Paginator(self)

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        body = _Body(self.objects[Key])
        self.bodies.append(body)
        return {"Body": body}


@pytest.fixture
def objects() -> Dict[str, bytes]:
    return {
        "photos/2020/a.jpg": b"aaaa",
        "photos/2020/trip/b.jpg": b"bb",
        "photos/2020/trip/c.jpg": b"c",
        "photos/2020/empty/": b"",
        "docs/readme.md": b"# hi",
    }


def test_normalize_key() -> None:
    assert normalize_key(None) == ""
    assert normalize_key("/") == ""
    assert normalize_key(".") == ""
    assert normalize_key("/photos//2020/") == "photos/2020"
    assert normalize_key("a\\b") == "a/b"


def test_missing_bucket_rejected() -> None:
    with pytest.raises(BackendUnavailable):
        S3Source("")


def test_resolve_root_names() -> None:
    source = S3Source("bucket", client=_StubClient({}))
    assert source.resolve_root("") == ("", "bucket")
    assert source.resolve_root("/photos/2020/") == ("photos/2020/", "2020")
    assert source.source_base("/photos/2020/") == "photos/2020"


def test_iter_objects_is_relative_and_paginated(objects) -> None:
    client = _StubClient(objects)
    source = S3Source("bucket", client=client)

    listed = list(source.iter_objects("photos/2020/"))

    assert ("a.jpg", 4) in listed
    assert ("trip/b.jpg", 2) in listed
    assert ("empty/", 0) in listed
    assert all(not key.startswith("photos/") for key, _ in listed)
    assert client.paginate_calls == [{"Bucket": "bucket", "Prefix": "photos/2020/"}]


def test_build_tree_synthesizes_directories(objects, silent_logger) -> None:
    source = S3Source("bucket", client=_StubClient(objects))

    tree = build_tree(source, "photos/2020", silent_logger)

    assert tree.name == "2020"
    names = sorted(c.name for c in tree.children)
    assert names == ["a.jpg", "empty", "trip"]
    trip = next(c for c in tree.children if c.name == "trip")
    assert sorted(c.name for c in trip.children) == ["b.jpg", "c.jpg"]


def test_list_entries_with_delimiter(objects) -> None:
    source = S3Source("bucket", client=_StubClient(objects))

    entries = source.list_entries("photos/2020/")

    dirs = {e.name: e.identifier for e in entries if e.is_dir}
    files = {e.name: e.size for e in entries if not e.is_dir}
    assert dirs == {"empty": "photos/2020/empty/", "trip": "photos/2020/trip/"}
    assert files == {"a.jpg": 4}


def test_download_streams_body_and_closes_it(objects, tmp_path: Path) -> None:
    client = _StubClient(objects)
    source = S3Source("bucket", client=client)
    target = tmp_path / "b.jpg"

    source.download_file("photos/2020/trip/b.jpg", str(target))

    assert target.read_bytes() == b"bb"
    assert client.bodies[0].closed


def test_download_missing_key_is_not_found(objects, tmp_path: Path) -> None:
    source = S3Source("bucket", client=_StubClient(objects))
    with pytest.raises(NotFound):
        source.download_file("nope.txt", str(tmp_path / "nope.txt"))


def test_download_write_failure_is_local_io_error(objects, tmp_path: Path) -> None:
    client = _StubClient(objects)
    source = S3Source("bucket", client=client)

    with pytest.raises(LocalIOError):
        source.download_file("docs/readme.md", str(tmp_path / "missing-dir" / "readme.md"))
    assert client.bodies[0].closed


def test_listing_errors_are_translated() -> None:
    denied = ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "ListObjectsV2")
    source = S3Source("bucket", client=_StubClient({}, list_error=denied))
    with pytest.raises(BackendUnavailable) as excinfo:
        list(source.iter_objects(""))
    assert not isinstance(excinfo.value, NotFound)

    missing = ClientError({"Error": {"Code": "NoSuchBucket", "Message": "no"}}, "ListObjectsV2")
    source = S3Source("bucket", client=_StubClient({}, list_error=missing))
    with pytest.raises(NotFound):
        source.list_entries("")


def test_client_is_built_lazily_with_retries() -> None:
    with patch("superscan.infra.sources.s3.boto3.client") as mock_client:
        source = S3Source("bucket", region="eu-west-1")
        mock_client.assert_not_called()

        _ = source.client
        _ = source.client

    mock_client.assert_called_once()
    args, kwargs = mock_client.call_args
    assert args == ("s3",)
    assert kwargs["region_name"] == "eu-west-1"
    assert kwargs["config"].retries == {"max_attempts": 3, "mode": "standard"}
