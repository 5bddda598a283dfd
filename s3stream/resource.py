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
s3stream.resource
~~~~~~~~~~~~~~~~~

References to the service root, buckets and objects. Every reference
provides `url` and `canonical_path`; the dispatcher and the signer only rely
on these two properties.

"""

from __future__ import absolute_import, annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional, Union

from . import time
from .acl import AccessControlList
from .datatypes import (ListAllMyBucketsResult, ObjectInfo,
                        parse_location_constraint)
from .error import (NotFoundError, ServiceError, parse_document,
                    parse_result)
from .helpers import (ALLOWED_HEADERS, REQUEST_STYLE_CNAME,
                      REQUEST_STYLE_PATH, REQUEST_STYLE_VIRTUAL_HOST,
                      check_object_key, metadata_to_headers, rawurlencode,
                      split_response_headers)
from .signer import get_canonical_resource, presign
from .xml import Element, SubElement, getbytes

if TYPE_CHECKING:
    from .api import S3
    from .listing import ObjectIterator

LOAD_METADATA_ONLY = 0
LOAD_DATA = 1

DEFAULT_CONTENT_TYPE = "binary/octet-stream"


def _signed_url(
        resource: Resource,
        ttl: Union[int, timedelta],
        sub_resource: Optional[str] = None,
) -> str:
    """Get query string authenticated URL valid for ttl."""
    if isinstance(ttl, timedelta):
        ttl = int(ttl.total_seconds())
    if ttl <= 0:
        raise ValueError("ttl must be positive")
    expires = time.to_timestamp(time.utcnow()) + ttl
    return presign(resource.client.credentials, resource, expires, sub_resource)


def _delete(resource: Union[Bucket, Object]):
    """Delete the bucket or object; the service answers 204."""
    response = resource.client.send_request(resource, method="DELETE")
    if response.status != 204:
        raise ServiceError(
            f"Unexpected response status {response.status} on delete",
            response.status, response=response,
        )
    resource.exists = False


def _load_acl(resource: Union[Bucket, Object]) -> AccessControlList:
    """Load access control list of the bucket or object."""
    acl = AccessControlList(resource)
    acl.load()
    resource.acl = acl
    return acl


def _save_acl(resource: Union[Bucket, Object]):
    """Save access control list object of the bucket or object if any."""
    if isinstance(resource.acl, AccessControlList):
        if resource.acl.resource is not resource:
            resource.acl = resource.acl.copy_to(resource)
        resource.acl.save()


class Service:
    """Root of the S3 service, i.e. the list of buckets of the account."""

    def __init__(self, client: S3):
        self.client = client
        self.owner_id: Optional[str] = None
        self.owner_name: Optional[str] = None
        self.buckets: list[Bucket] = []

    def __repr__(self):
        return f"{type(self).__name__}(url={self.url!r})"

    @property
    def url(self) -> str:
        """Get URL of the service root."""
        config = self.client.config
        return f"{config.scheme}://{config.endpoint}/"

    @property
    def canonical_path(self) -> str:
        """Get canonical resource path."""
        return get_canonical_resource()

    def load(self) -> bool:
        """Load owner and buckets of the account."""
        response = self.client.send_request(self)
        result = parse_result(ListAllMyBucketsResult, response)
        self.owner_id = result.owner_id
        self.owner_name = result.owner_name
        self.buckets = []
        for info in result.buckets:
            bucket = Bucket(self.client, info.name)
            bucket.creation_date = info.creation_date
            bucket.exists = True
            self.buckets.append(bucket)
        return True

    def list_buckets(self) -> list[Bucket]:
        """List buckets of the account."""
        self.load()
        return self.buckets

    def get_signed_url(
            self,
            ttl: Union[int, timedelta],
            sub_resource: Optional[str] = None,
    ) -> str:
        """Get query string authenticated URL."""
        return _signed_url(self, ttl, sub_resource)


class Bucket:
    """Reference to a bucket."""

    def __init__(self, client: S3, name: str):
        self.client = client
        self.name = name
        self.request_style = client.config.request_style
        self.endpoint = client.config.endpoint
        self.location_constraint: Optional[str] = None
        self.creation_date: Optional[datetime] = None
        self.acl: Union[str, AccessControlList, None] = None
        self.exists = False
        self._dns_strict = True

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"

    @property
    def dns_strict(self) -> bool:
        """Check whether strict DNS rules apply to virtual host names."""
        return self._dns_strict

    def set_dns_strict(self, strict: bool) -> Bucket:
        """
        Toggle strict DNS rules of virtual host style bucket names. Lax rules
        allow underscores, which some resolvers reject.
        """
        self._dns_strict = bool(strict)
        return self

    @property
    def url(self) -> str:
        """Get URL of the bucket according to the request style."""
        self.client.config.bucket_name_checker(
            self.name, self.request_style, self._dns_strict,
        )
        scheme = self.client.config.scheme
        if self.request_style == REQUEST_STYLE_VIRTUAL_HOST:
            return f"{scheme}://{self.name}.{self.endpoint}/"
        if self.request_style == REQUEST_STYLE_PATH:
            return f"{scheme}://{self.endpoint}/{rawurlencode(self.name)}/"
        if self.request_style == REQUEST_STYLE_CNAME:
            return f"{scheme}://{self.name}/"
        raise ValueError(f"invalid request style {self.request_style}")

    @property
    def canonical_path(self) -> str:
        """Get canonical resource path."""
        return get_canonical_resource(self.name)

    def object(self, key: str) -> Object:
        """Get reference to an object of this bucket."""
        return Object(self, key)

    def list_objects(
            self,
            prefix: Optional[str] = None,
            delimiter: Optional[str] = None,
            max_keys: Optional[int] = None,
    ) -> ObjectIterator:
        """Get lazy iterator of objects of this bucket."""
        from .listing import ObjectIterator
        return ObjectIterator(self, prefix, delimiter, max_keys)

    def load(self) -> bool:
        """Check whether the bucket exists and is accessible."""
        try:
            self.client.send_request(self, method="HEAD")
        except NotFoundError:
            self.exists = False
            return False
        self.exists = True
        return True

    def save(self):
        """Create the bucket, or update its access control list."""
        headers = {}
        body = b""
        if isinstance(self.acl, str):
            headers["x-amz-acl"] = self.acl
        if self.location_constraint:
            config = Element("CreateBucketConfiguration")
            SubElement(config, "LocationConstraint", self.location_constraint)
            body = getbytes(config)
            headers["content-type"] = "application/xml"
        self.client.send_request(
            self, method="PUT", headers=headers, body=body,
        )
        self.exists = True
        _save_acl(self)

    def delete(self):
        """Delete the bucket; it must be empty."""
        _delete(self)

    def load_acl(self) -> AccessControlList:
        """Load access control list of the bucket."""
        return _load_acl(self)

    def load_location_constraint(self) -> Optional[str]:
        """Load location constraint; None means the default region."""
        response = self.client.send_request(self, sub_resource="?location")
        self.location_constraint = parse_location_constraint(
            parse_document(response),
        )
        return self.location_constraint

    def get_signed_url(
            self,
            ttl: Union[int, timedelta],
            sub_resource: Optional[str] = None,
    ) -> str:
        """Get query string authenticated URL."""
        return _signed_url(self, ttl, sub_resource)


class Object:
    """Reference to an object of a bucket."""

    def __init__(self, bucket: Bucket, key: str):
        check_object_key(key)
        self.bucket = bucket
        self.key = key
        self.data: Optional[bytes] = None
        self.content_type: Optional[str] = None
        self.size: Optional[int] = None
        self.last_modified: Optional[datetime] = None
        self.etag: Optional[str] = None
        self.user_metadata: dict[str, str] = {}
        self.http_headers: dict[str, str] = {}
        self.acl: Union[str, AccessControlList, None] = None
        self.exists = False

    def __repr__(self):
        return (
            f"{type(self).__name__}(bucket={self.bucket.name!r}, "
            f"key={self.key!r})"
        )

    @classmethod
    def from_info(cls, bucket: Bucket, info: ObjectInfo) -> Object:
        """Create object reference from a listing entry."""
        obj = cls(bucket, info.key)
        obj.size = info.size
        obj.etag = info.etag
        obj.last_modified = info.last_modified
        obj.exists = True
        return obj

    @property
    def client(self) -> S3:
        """Get account client of the bucket."""
        return self.bucket.client

    @property
    def url(self) -> str:
        """Get URL of the object."""
        return self.bucket.url + rawurlencode(self.key)

    @property
    def canonical_path(self) -> str:
        """Get canonical resource path."""
        return get_canonical_resource(self.bucket.name, self.key)

    @property
    def torrent_url(self) -> str:
        """Get URL of BitTorrent file of the object."""
        return self.url + "?torrent"

    def load(self, what: int = LOAD_DATA) -> bool:
        """
        Load metadata, and data unless LOAD_METADATA_ONLY is given. Returns
        False if the object does not exist.
        """
        method = "GET" if what == LOAD_DATA else "HEAD"
        try:
            response = self.client.send_request(self, method=method)
        except NotFoundError:
            self.exists = False
            return False

        headers = response.headers
        self.content_type = headers.get("content-type")
        length = headers.get("content-length")
        self.size = None if length is None else int(length)
        self.etag = headers.get("etag")
        value = headers.get("last-modified")
        self.last_modified = time.from_http_header(value) if value else None
        self.user_metadata, self.http_headers = split_response_headers(
            headers,
        )
        if what == LOAD_DATA:
            self.data = response.data
            self.size = len(self.data)
        self.exists = True
        return True

    def save(self):
        """
        Upload data and metadata of the object. Existing access control list
        is kept on overwrite unless another one is set.
        """
        if self.data is None:
            raise ValueError("object data is not set")
        data = (
            self.data.encode() if isinstance(self.data, str) else self.data
        )
        if self.exists and self.acl is None:
            self.load_acl()

        headers = {"content-type": self.content_type or DEFAULT_CONTENT_TYPE}
        headers.update(metadata_to_headers(self.user_metadata))
        for name, value in self.http_headers.items():
            if name.lower() in ALLOWED_HEADERS:
                headers[name.lower()] = value
        if isinstance(self.acl, str):
            headers["x-amz-acl"] = self.acl

        response = self.client.send_request(
            self, method="PUT", headers=headers, body=data,
        )
        self.etag = response.headers.get("etag")
        self.size = len(data)
        self.exists = True
        _save_acl(self)

    def delete(self):
        """Delete the object."""
        _delete(self)

    def load_acl(self) -> AccessControlList:
        """Load access control list of the object."""
        return _load_acl(self)

    def get_signed_url(
            self,
            ttl: Union[int, timedelta],
            sub_resource: Optional[str] = None,
    ) -> str:
        """Get query string authenticated URL."""
        return _signed_url(self, ttl, sub_resource)


Resource = Union[Service, Bucket, Object]
