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
Response of ListBuckets, ListObjects and GetBucketLocation API.
"""

from __future__ import absolute_import, annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Type, TypeVar, Union, cast
from xml.etree import ElementTree as ET

from .time import from_iso8601utc
from .xml import find, findall, findtext, localname


@dataclass(frozen=True)
class BucketInfo:
    """Bucket information."""
    name: str
    creation_date: Optional[datetime]


A = TypeVar("A", bound="ListAllMyBucketsResult")


@dataclass(frozen=True)
class ListAllMyBucketsResult:
    """ListBuckets API result."""
    owner_id: Optional[str]
    owner_name: Optional[str]
    buckets: list[BucketInfo]

    @classmethod
    def fromxml(cls: Type[A], element: ET.Element) -> A:
        """Create new object with values from XML element."""
        owner = find(element, "Owner")
        owner_id, owner_name = (
            (None, None) if owner is None
            else (findtext(owner, "ID"), findtext(owner, "DisplayName"))
        )
        buckets = []
        elements = find(element, "Buckets")
        for bucket in [] if elements is None else findall(elements, "Bucket"):
            name = cast(str, findtext(bucket, "Name", True))
            creation_date = findtext(bucket, "CreationDate")
            buckets.append(BucketInfo(
                name,
                from_iso8601utc(creation_date) if creation_date else None,
            ))
        return cls(owner_id, owner_name, buckets)


B = TypeVar("B", bound="ObjectInfo")


@dataclass(frozen=True)
class ObjectInfo:
    """Object information of a listing entry."""
    key: str
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    size: Optional[int] = None
    storage_class: Optional[str] = None

    @classmethod
    def fromxml(cls: Type[B], element: ET.Element) -> B:
        """Create new object with values from XML element."""
        tag = findtext(element, "LastModified")
        last_modified = from_iso8601utc(tag) if tag else None

        tag = findtext(element, "Size")
        size = None if tag is None else int(tag)

        return cls(
            key=cast(str, findtext(element, "Key", True)),
            last_modified=last_modified,
            etag=findtext(element, "ETag"),
            size=size,
            storage_class=findtext(element, "StorageClass"),
        )


C = TypeVar("C", bound="ListBucketResult")

# Common prefixes are plain strings, objects are ObjectInfo.
ListEntry = Union[ObjectInfo, str]


@dataclass(frozen=True)
class ListBucketResult:
    """
    One page of ListObjects API result. Entries keep the document order of
    <Contents> and <CommonPrefixes> elements.
    """
    name: Optional[str]
    prefix: Optional[str]
    marker: Optional[str]
    next_marker: Optional[str]
    is_truncated: bool
    entries: list[ListEntry]

    @classmethod
    def fromxml(cls: Type[C], element: ET.Element) -> C:
        """Create new object with values from XML element."""
        entries: list[ListEntry] = []
        for child in element:
            name = localname(child)
            if name == "Contents":
                entries.append(ObjectInfo.fromxml(child))
            elif name == "CommonPrefixes":
                entries += [tag.text or "" for tag in findall(child, "Prefix")]

        return cls(
            name=findtext(element, "Name"),
            prefix=findtext(element, "Prefix"),
            marker=findtext(element, "Marker"),
            next_marker=findtext(element, "NextMarker") or None,
            is_truncated=(
                (findtext(element, "IsTruncated") or "").lower() == "true"
            ),
            entries=entries,
        )

    @property
    def last_key(self) -> Optional[str]:
        """Key or common prefix of the last entry."""
        if not self.entries:
            return None
        entry = self.entries[-1]
        return entry.key if isinstance(entry, ObjectInfo) else entry


def parse_location_constraint(element: ET.Element) -> Optional[str]:
    """Parse GetBucketLocation API result; empty means US standard."""
    return element.text or None
