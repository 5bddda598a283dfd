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
s3stream.listing
~~~~~~~~~~~~~~~~

Page by page listing of bucket objects. With a delimiter, keys sharing a
prefix up to the delimiter are grouped into a single Prefix entry whose
children can be listed with another iterator.

"""

from __future__ import absolute_import, annotations

from typing import Iterator, Optional, Union

from .datatypes import ListBucketResult, ObjectInfo
from .error import ServerError, parse_result
from .resource import Bucket, Object


class Prefix:
    """Common prefix of keys, i.e. a pseudo-directory of a listing."""

    def __init__(
            self,
            bucket: Bucket,
            prefix: str,
            delimiter: Optional[str] = None,
    ):
        self.bucket = bucket
        self.prefix = prefix
        self.delimiter = delimiter

    def __repr__(self):
        return (
            f"{type(self).__name__}(bucket={self.bucket.name!r}, "
            f"prefix={self.prefix!r})"
        )

    def __eq__(self, other):
        return (
            isinstance(other, Prefix) and
            other.bucket.name == self.bucket.name and
            other.prefix == self.prefix
        )

    def __hash__(self):
        return hash((self.bucket.name, self.prefix))

    def list_objects(self) -> ObjectIterator:
        """Get iterator of entries under this prefix."""
        return ObjectIterator(self.bucket, self.prefix, self.delimiter)


Entry = Union[Object, Prefix]


class ObjectIterator:
    """
    Lazy iterator of objects and prefixes of a bucket.

    Pages are fetched on demand. The cursor protocol is rewind(), valid(),
    current(), key() and advance(); Python iteration restarts from the
    first entry every time.

    Args:
        bucket (Bucket):
            Bucket to list.

        prefix (Optional[str], default=None):
            Only list keys starting with this prefix.

        delimiter (Optional[str], default=None):
            Group keys sharing the text up to this delimiter.

        max_keys (Optional[int], default=None):
            Page size hint; defaults to Config.max_keys of the client.
    """

    def __init__(
            self,
            bucket: Bucket,
            prefix: Optional[str] = None,
            delimiter: Optional[str] = None,
            max_keys: Optional[int] = None,
    ):
        self.bucket = bucket
        self.prefix = prefix
        self.delimiter = delimiter
        self.max_keys = (
            max_keys if max_keys is not None
            else bucket.client.config.max_keys
        )
        self._entries: Optional[list[Entry]] = None
        self._index = 0
        self._current: Optional[Entry] = None
        self._is_truncated = False
        self._next_marker: Optional[str] = None
        self._is_first_page = False

    def __repr__(self):
        return (
            f"{type(self).__name__}(bucket={self.bucket.name!r}, "
            f"prefix={self.prefix!r}, delimiter={self.delimiter!r})"
        )

    def _entry(self, info: Union[ObjectInfo, str]) -> Entry:
        """Convert a listing entry to object or prefix."""
        if isinstance(info, ObjectInfo):
            return Object.from_info(self.bucket, info)
        return Prefix(self.bucket, info, self.delimiter)

    def _fetch(self):
        """Fetch next page."""
        query: dict[str, object] = {}
        if self.max_keys:
            query["max-keys"] = self.max_keys
        if self._is_truncated and self._next_marker:
            query["marker"] = self._next_marker
        if self.delimiter:
            query["delimiter"] = self.delimiter
        if self.prefix:
            query["prefix"] = self.prefix

        response = self.bucket.client.send_request(self.bucket, query=query)
        result = parse_result(ListBucketResult, response)

        marker = (
            (result.next_marker if self.delimiter else None) or
            result.last_key
        )
        if result.is_truncated and (
                not marker or marker == self._next_marker
        ):
            raise ServerError(
                "Truncated listing without continuation marker",
                response.status, response=response,
            )

        self._is_first_page = not self._is_truncated
        self._entries = [self._entry(info) for info in result.entries]
        self._index = 0
        self._is_truncated = result.is_truncated
        self._next_marker = marker if result.is_truncated else None

    def rewind(self):
        """Move the cursor to the first entry."""
        if self._entries is not None and self._is_first_page:
            self._index = -1
        else:
            self._entries = None
            self._is_truncated = False
            self._next_marker = None
        self.advance()

    def advance(self):
        """Move the cursor to the next entry, fetching pages as needed."""
        if self._entries is None:
            self._fetch()
        else:
            self._index += 1
        while (
                self._entries is not None and
                self._index >= len(self._entries) and
                self._is_truncated
        ):
            self._fetch()
        self._current = (
            self._entries[self._index] if self.valid() else None
        )

    def valid(self) -> bool:
        """Check whether the cursor points to an entry."""
        return (
            self._entries is not None and
            0 <= self._index < len(self._entries)
        )

    def current(self) -> Optional[Entry]:
        """Get entry under the cursor."""
        return self._current

    def key(self) -> Optional[str]:
        """Get key or prefix of the entry under the cursor."""
        if isinstance(self._current, Object):
            return self._current.key
        if isinstance(self._current, Prefix):
            return self._current.prefix
        return None

    def has_children(self) -> bool:
        """Check whether the entry under the cursor is a prefix."""
        return isinstance(self._current, Prefix)

    def get_children(self) -> Optional[ObjectIterator]:
        """Get iterator of entries under the prefix under the cursor."""
        if isinstance(self._current, Prefix):
            return self._current.list_objects()
        return None

    def __iter__(self) -> Iterator[Entry]:
        self.rewind()
        while self.valid():
            yield self._current  # type: ignore[misc]
            self.advance()

    def walk(self) -> Iterator[Entry]:
        """Iterate entries depth first, each prefix before its children."""
        for entry in self:
            yield entry
            if isinstance(entry, Prefix):
                yield from entry.list_objects().walk()
