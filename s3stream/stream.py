# -*- coding: utf-8 -*-
# s3stream - filesystem-style client for Amazon S3 compatible object storage
# (C) 2008-2026 s3stream contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
s3stream.stream
~~~~~~~~~~~~~~~

Filesystem emulation on top of the flat key space of a bucket. Paths look
like ``s3://bucket/dir/file``; directories are key prefixes ending with '/',
and an empty directory is kept alive by a zero-byte ``<dir>_$folder$``
object.

Operations mirror os and os.path functions. Failures are logged as warnings
and reported as False or None instead of exceptions.

"""

from __future__ import absolute_import, annotations

import dataclasses
import functools
import io
import logging
import os
import re
import stat
import tempfile
from dataclasses import dataclass, field
from typing import (TYPE_CHECKING, Callable, Iterator, Mapping, Optional,
                    Union)

from .acl import AccessControlList
from .error import S3Exception
from .listing import ObjectIterator
from .resource import LOAD_DATA, LOAD_METADATA_ONLY, Bucket, Object
from .time import to_timestamp

if TYPE_CHECKING:
    from .api import S3

logger = logging.getLogger(__name__)

FOLDER_SUFFIX = "_$folder$"
MODE_DIRECTORY = 0o40777
MODE_FILE = 0o100777
DELIMITER = "/"

_PATH_REGEX = re.compile(r"^([^:]+)://([^/]*)(/(.*))?$", re.DOTALL)


@dataclass(frozen=True)
class StreamOptions:
    """
    Options of filesystem operations.

    Args:
        strict (bool, default=False):
            Verify parent directories and emptiness before modifying. Costs
            extra requests.

        dns_strict (bool, default=True):
            Apply strict DNS rules to virtual host style bucket names.

        acl (Union[str, AccessControlList, None], default=None):
            Canned ACL or ACL object of created files, directories and
            buckets.

        content_type (Optional[str], default=None):
            Content type of written files.

        user_metadata (Mapping[str, str]):
            User metadata of written files.

        http_headers (Mapping[str, str]):
            Allow-listed HTTP headers of written files.
    """
    strict: bool = False
    dns_strict: bool = True
    acl: Union[str, AccessControlList, None] = None
    content_type: Optional[str] = None
    user_metadata: Mapping[str, str] = field(default_factory=dict)
    http_headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PathSegments:
    """Parts of a filesystem path."""
    scheme: str
    bucket_name: str
    key: Optional[str] = None

    @property
    def is_service_root(self) -> bool:
        """Check whether the path names the list of buckets."""
        return not self.bucket_name

    @property
    def is_bucket_root(self) -> bool:
        """Check whether the path names a bucket."""
        return bool(self.bucket_name) and self.key is None

    @property
    def is_directory_path(self) -> bool:
        """Check whether the path is marked as directory by trailing '/'."""
        return self.key is None or self.key.endswith(DELIMITER)

    @property
    def name(self) -> str:
        """Key without trailing '/'."""
        return (self.key or "").rstrip(DELIMITER)

    @property
    def prefix(self) -> Optional[str]:
        """Listing prefix of entries in the directory."""
        return self.name + DELIMITER if self.name else None

    @property
    def marker_key(self) -> str:
        """Key of the placeholder object of the directory."""
        return self.name + FOLDER_SUFFIX

    @property
    def parent_name(self) -> str:
        """Key of the parent directory; empty for bucket root."""
        name = self.name
        return name.rsplit(DELIMITER, 1)[0] if DELIMITER in name else ""


def parse_path(path: str) -> PathSegments:
    """
    Split ``scheme://bucket/key`` into its parts. Empty key means bucket root,
    empty bucket means the list of buckets.
    """
    match = _PATH_REGEX.match(path)
    if not match:
        raise ValueError(f"invalid path {path}")
    scheme, bucket_name, _, key = match.groups()
    return PathSegments(scheme, bucket_name, key or None)


def normalize_entry(name: str, prefix: Optional[str] = None) -> str:
    """
    Name of a listing entry relative to the directory. A placeholder object
    and a prefix group of the same directory normalize to the same name.
    """
    if prefix and name.startswith(prefix):
        name = name[len(prefix):]
    name = name.rstrip(DELIMITER)
    if name.endswith(FOLDER_SUFFIX):
        name = name[:-len(FOLDER_SUFFIX)]
    return name


def _make_stat(mode: int, size: int = 0, mtime: int = 0) -> os.stat_result:
    """Make stat record; uid, gid, inode and device are not available."""
    return os.stat_result((mode, 0, 0, 1, 0, 0, size, mtime, mtime, mtime))


def _parse_mode(mode: str) -> str:
    """Get one of 'r', 'w' or 'a' from open mode."""
    if "+" in mode:
        raise ValueError(f"mode {mode!r} is not supported")
    flags = mode.replace("b", "").replace("t", "")
    if flags not in ("r", "w", "a"):
        raise ValueError(f"mode {mode!r} is not supported")
    return flags


def _warn_on_error(default):
    """
    Decorator to catch service errors and invalid arguments of a filesystem
    operation, log them and return default.

    Other exceptions are not caught.
    """
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(self, path, *args, **kwargs):
            try:
                return fn(self, path, *args, **kwargs)
            except (S3Exception, ValueError) as exc:
                logger.warning("%s %r: %s", fn.__name__, path, exc)
                return default
        return wrapper
    return decorator


class S3File:
    """
    File alike object of an object. Data is staged in a temporary file; on
    close() written data is uploaded.
    """

    def __init__(
            self,
            path: str,
            obj: Object,
            mode: str,
            options: StreamOptions,
    ):
        self.name = path
        self.mode = mode
        self._object = obj
        self._options = options
        self._file = tempfile.TemporaryFile()
        self._closed = False
        if obj.data:
            self._file.write(obj.data)
            if mode == "r":
                self._file.seek(0)
        logger.debug("S3File %r (mode: %r)", path, mode)

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, mode={self.mode!r})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, value, traceback):
        self.close()

    @property
    def closed(self) -> bool:
        """Check whether this file is closed."""
        return self._closed

    def _check_open(self):
        if self._closed:
            raise ValueError("I/O operation on closed file")

    def readable(self) -> bool:
        """Check whether this file is opened for reading."""
        return self.mode == "r"

    def writable(self) -> bool:
        """Check whether this file is opened for writing."""
        return self.mode in ("w", "a")

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes; all remaining data by default."""
        self._check_open()
        if not self.readable():
            raise io.UnsupportedOperation("file not open for reading")
        return self._file.read(size)

    def write(self, data: Union[bytes, str]) -> int:
        """Write data; append mode always writes at the end."""
        self._check_open()
        if not self.writable():
            raise io.UnsupportedOperation("file not open for writing")
        if isinstance(data, str):
            data = data.encode()
        if self.mode == "a":
            self._file.seek(0, io.SEEK_END)
        return self._file.write(data)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Change stream position."""
        self._check_open()
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        """Get stream position."""
        self._check_open()
        return self._file.tell()

    def eof(self) -> bool:
        """Check whether stream position is at the end of data."""
        position = self.tell()
        self._file.flush()
        return position >= os.fstat(self._file.fileno()).st_size

    def flush(self):
        """Flush staged data to the temporary file."""
        self._check_open()
        self._file.flush()

    def stat(self) -> os.stat_result:
        """Get stat record of staged data."""
        self._check_open()
        self._file.flush()
        return _make_stat(
            MODE_FILE,
            os.fstat(self._file.fileno()).st_size,
            to_timestamp(self._object.last_modified),
        )

    def close(self) -> bool:
        """
        Upload written data and release the temporary file. Returns False
        if uploading failed.
        """
        if self._closed:
            return True
        self._closed = True
        try:
            if not self.writable():
                return True
            self._file.seek(0)
            obj = self._object
            obj.data = self._file.read()
            if self._options.acl is not None:
                obj.acl = self._options.acl
            if self._options.content_type is not None:
                obj.content_type = self._options.content_type
            if self._options.user_metadata:
                obj.user_metadata = dict(self._options.user_metadata)
            if self._options.http_headers:
                obj.http_headers = dict(self._options.http_headers)
            try:
                obj.save()
            except (S3Exception, ValueError) as exc:
                logger.warning("close %r: %s", self.name, exc)
                return False
            return True
        finally:
            self._file.close()


class DirectoryHandle:
    """
    Open directory. Entries are '.', '..' and the names of the directory,
    each name reported once.
    """

    def __init__(self, path: str, entries: Callable[[], Iterator[str]]):
        self.path = path
        self._entries = entries
        self._iterator: Optional[Iterator[str]] = None
        self._seen: set[str] = set()
        self._closed = False
        self.rewinddir()

    def __repr__(self):
        return f"{type(self).__name__}(path={self.path!r})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, value, traceback):
        self.closedir()

    def __iter__(self) -> Iterator[str]:
        while True:
            name = self.readdir()
            if name is None:
                return
            yield name

    def readdir(self) -> Optional[str]:
        """Get next entry name, or None at the end of the directory."""
        if self._closed or self._iterator is None:
            return None
        try:
            for name in self._iterator:
                if not name or name in self._seen:
                    continue
                self._seen.add(name)
                return name
        except S3Exception as exc:
            logger.warning("readdir %r: %s", self.path, exc)
        self._iterator = None
        return None

    def rewinddir(self):
        """Restart reading from the first entry."""
        self._seen = set()
        self._iterator = self._entries()

    def closedir(self):
        """Close the directory."""
        self._closed = True
        self._iterator = None


class S3FileSystem:
    """
    Filesystem emulation of an S3 account.

    All the methods on this class emulate os.* or os.path.* functions
    of the same name; paths are ``<scheme>://<bucket>/<key>``.
    """

    def __init__(
            self,
            client: S3,
            scheme: str = "s3",
            options: Optional[StreamOptions] = None,
    ):
        self.client = client
        self.scheme = scheme
        self.options = options or StreamOptions()

    def _parse(self, path: str) -> PathSegments:
        segments = parse_path(path)
        if segments.scheme != self.scheme:
            raise ValueError(f"unsupported scheme {segments.scheme}")
        return segments

    def _bucket(
            self,
            segments: PathSegments,
            options: Optional[StreamOptions] = None,
    ) -> Bucket:
        options = options or self.options
        bucket = self.client.bucket(segments.bucket_name)
        return bucket.set_dns_strict(options.dns_strict)

    @staticmethod
    def _has_entries(bucket: Bucket, prefix: Optional[str]) -> bool:
        """Check whether any key exists under the prefix."""
        iterator = ObjectIterator(bucket, prefix, DELIMITER, max_keys=1)
        iterator.rewind()
        return iterator.valid()

    def _is_directory(self, bucket: Bucket, name: str) -> bool:
        """Check whether the key names a directory."""
        if not name:
            return bucket.load()
        if self._has_entries(bucket, name + DELIMITER):
            return True
        if name.endswith(FOLDER_SUFFIX):
            return False
        return bucket.object(name + FOLDER_SUFFIX).load(LOAD_METADATA_ONLY)

    def _stat(self, segments: PathSegments) -> Optional[os.stat_result]:
        if segments.is_service_root:
            return _make_stat(MODE_DIRECTORY)

        bucket = self._bucket(segments)
        if segments.is_bucket_root:
            return _make_stat(MODE_DIRECTORY) if bucket.load() else None

        obj = bucket.object(segments.key)
        if obj.load(LOAD_METADATA_ONLY):
            if segments.is_directory_path:
                return _make_stat(MODE_DIRECTORY)
            return _make_stat(
                MODE_FILE, obj.size or 0, to_timestamp(obj.last_modified),
            )
        if self._is_directory(bucket, segments.name):
            return _make_stat(MODE_DIRECTORY)
        return None

    def url_stat(
            self,
            path: str,
            quiet: bool = False,
    ) -> Optional[os.stat_result]:
        """
        Get stat record of the path, or None if it does not exist. With
        quiet set, no warning is logged.
        """
        logger.debug("stat %r", path)
        try:
            result = self._stat(self._parse(path))
        except (S3Exception, ValueError) as exc:
            if not quiet:
                logger.warning("url_stat %r: %s", path, exc)
            return None
        if result is None and not quiet:
            logger.warning("url_stat %r: no such file or directory", path)
        return result

    def stat(self, path: str) -> Optional[os.stat_result]:
        """Get stat record of the path."""
        return self.url_stat(path)

    def exists(self, path: str) -> bool:
        """Test whether a path exists."""
        return self.url_stat(path, quiet=True) is not None

    def is_dir(self, path: str) -> bool:
        """Return true if the pathname refers to an existing directory."""
        result = self.url_stat(path, quiet=True)
        return result is not None and stat.S_ISDIR(result.st_mode)

    def is_file(self, path: str) -> bool:
        """Return true if the pathname refers to an existing regular file."""
        result = self.url_stat(path, quiet=True)
        return result is not None and stat.S_ISREG(result.st_mode)

    @_warn_on_error(None)
    def open(self, path: str, mode: str = "r", **overrides) -> Optional[S3File]:
        """
        Open a file. Modes are 'r', 'w' and 'a'; keyword arguments override
        StreamOptions of this call.
        """
        logger.debug("open %r mode %r", path, mode)
        options = dataclasses.replace(self.options, **overrides)
        flags = _parse_mode(mode)
        segments = self._parse(path)
        if segments.is_directory_path:
            raise ValueError("cannot open a bucket or a directory as file")

        bucket = self._bucket(segments, options)
        obj = bucket.object(segments.key)
        if flags == "r":
            if not obj.load(LOAD_DATA):
                logger.warning("open %r: no such file", path)
                return None
        else:
            if options.strict and not self._is_directory(
                    bucket, segments.parent_name,
            ):
                logger.warning("open %r: parent directory not found", path)
                return None
            if flags == "a":
                obj.load(LOAD_DATA)
        return S3File(path, obj, flags, options)

    @_warn_on_error(None)
    def opendir(self, path: str) -> Optional[DirectoryHandle]:
        """Open a directory."""
        logger.debug("opendir %r", path)
        segments = self._parse(path)

        if segments.is_service_root:
            service = self.client.service

            def buckets() -> Iterator[str]:
                yield "."
                yield ".."
                for bucket in service.list_buckets():
                    yield bucket.name
            return DirectoryHandle(path, buckets)

        bucket = self._bucket(segments)
        prefix = segments.prefix
        # First page is fetched now, so a missing bucket fails here.
        iterator = bucket.list_objects(prefix, DELIMITER)
        iterator.rewind()
        if self.options.strict and not iterator.valid() and not (
                self._is_directory(bucket, segments.name)
        ):
            logger.warning("opendir %r: no such directory", path)
            return None

        def entries() -> Iterator[str]:
            yield "."
            yield ".."
            for entry in iterator:
                name = entry.key if isinstance(entry, Object) else entry.prefix
                yield normalize_entry(name, prefix)
        return DirectoryHandle(path, entries)

    def listdir(self, path: str) -> Optional[list[str]]:
        """List names of a directory without '.' and '..'."""
        handle = self.opendir(path)
        if handle is None:
            return None
        with handle:
            return [name for name in handle if name not in (".", "..")]

    @_warn_on_error(False)
    def mkdir(self, path: str, recursive: bool = False) -> bool:
        """
        Create a bucket, or a directory placeholder. Parents are not created
        by recursive mkdir; their existence is not checked either. In strict
        mode an existing path fails.
        """
        logger.debug("mkdir %r", path)
        segments = self._parse(path)
        if segments.is_service_root:
            raise ValueError("cannot create the list of buckets")

        if self.options.strict and self.url_stat(path, quiet=True) is not None:
            logger.warning("mkdir %r: already exists", path)
            return False

        bucket = self._bucket(segments)
        if segments.is_bucket_root:
            bucket.acl = self.options.acl
            bucket.save()
            return True

        if self.options.strict and not recursive and not self._is_directory(
                bucket, segments.parent_name,
        ):
            logger.warning("mkdir %r: parent directory not found", path)
            return False
        marker = bucket.object(segments.marker_key)
        marker.data = b""
        marker.acl = self.options.acl
        marker.save()
        return True

    @_warn_on_error(False)
    def rmdir(self, path: str) -> bool:
        """Delete a bucket, or a directory placeholder."""
        logger.debug("rmdir %r", path)
        segments = self._parse(path)
        if segments.is_service_root:
            raise ValueError("cannot remove the list of buckets")

        bucket = self._bucket(segments)
        if segments.is_bucket_root:
            bucket.delete()
            return True

        if self.options.strict and self._has_entries(bucket, segments.prefix):
            logger.warning("rmdir %r: directory not empty", path)
            return False
        bucket.object(segments.marker_key).delete()
        return True

    @_warn_on_error(False)
    def unlink(self, path: str) -> bool:
        """Delete a file."""
        logger.debug("unlink %r", path)
        segments = self._parse(path)
        if segments.is_directory_path:
            raise ValueError("cannot unlink a bucket or a directory")

        obj = self._bucket(segments).object(segments.key)
        if self.options.strict and not obj.load(LOAD_METADATA_ONLY):
            logger.warning("unlink %r: no such file", path)
            return False
        obj.delete()
        return True

    @_warn_on_error(False)
    def rename(self, path: str, new_path: str) -> bool:
        """
        Rename a file by copying data, metadata and ACL to the new path and
        deleting the old one. Directories cannot be renamed.
        """
        logger.debug("rename %r to %r", path, new_path)
        source_segments = self._parse(path)
        target_segments = self._parse(new_path)
        if (
                source_segments.is_directory_path or
                target_segments.is_directory_path
        ):
            raise ValueError("cannot rename a bucket or a directory")
        if (source_segments.bucket_name, source_segments.key) == (
                target_segments.bucket_name, target_segments.key,
        ):
            return True

        source_bucket = self._bucket(source_segments)
        source = source_bucket.object(source_segments.key)
        if not source.load(LOAD_DATA):
            if self._is_directory(source_bucket, source_segments.name):
                logger.warning("rename %r: cannot rename a directory", path)
            else:
                logger.warning("rename %r: no such file", path)
            return False
        acl = source.load_acl()

        target = self._bucket(target_segments).object(target_segments.key)
        target.data = source.data
        target.content_type = source.content_type
        target.user_metadata = dict(source.user_metadata)
        target.http_headers = dict(source.http_headers)
        target.acl = acl.copy_to(target)
        target.save()

        source.delete()
        return True
