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

"""Helper functions."""

from __future__ import absolute_import, annotations

import re
import urllib.parse
from typing import Mapping, Optional

REQUEST_STYLE_VIRTUAL_HOST = "virtualhost"
REQUEST_STYLE_PATH = "path"
REQUEST_STYLE_CNAME = "cname"
REQUEST_STYLES = (
    REQUEST_STYLE_VIRTUAL_HOST, REQUEST_STYLE_PATH, REQUEST_STYLE_CNAME,
)

AMZ_HEADER_PREFIX = "x-amz-"
METADATA_PREFIX = "x-amz-meta-"
ALLOWED_HEADERS = (
    "cache-control",
    "content-md5",
    "content-disposition",
    "content-encoding",
    "expires",
)

_BUCKET_NAME_REGEX = re.compile(r'^(?=[a-z0-9])[a-z0-9._-]{3,255}(?<!-)$',
                                re.IGNORECASE)
_DNS_BUCKET_NAME_REGEX = re.compile(
    r'^(?:[a-z0-9]|(?<![-.])\.|(?<!\.)-){3,63}(?<!-)$')
_LAX_DNS_BUCKET_NAME_REGEX = re.compile(
    r'^(?:[a-z0-9_]|(?<![-.])\.|(?<!\.)-){3,63}$')
_IPV4_REGEX = re.compile(
    r'^((25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])\.){3}'
    r'(25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])$')


def quote(
        resource: str,
        safe: str = "/",
        encoding: str | None = None,
        errors: str | None = None,
) -> str:
    """
    Wrapper to urllib.parse.quote() replacing back to '~' for older python
    versions.
    """
    return urllib.parse.quote(
        resource,
        safe=safe,
        encoding=encoding,
        errors=errors,
    ).replace("%7E", "~")


def rawurlencode(value: str) -> str:
    """Encode every reserved character including '/'."""
    return quote(value, safe="")


def queryencode(query: Mapping[str, object]) -> str:
    """Encode query parameters keeping insertion order."""
    return "&".join(
        f"{rawurlencode(str(key))}={rawurlencode(str(value))}"
        for key, value in query.items()
    )


def headers_to_strings(
        headers: Mapping[str, str],
        titled_key: bool = False,
) -> str:
    """Convert HTTP headers to multi-line string."""
    values = []
    for key, value in headers.items():
        key = key.title() if titled_key else key
        value = str(value)
        if titled_key and key.lower() == "authorization":
            value = re.sub(r":[^:]+$", ":*REDACTED*", value)
        values.append(f"{key}: {value}")
    return "\n".join(values)


def check_bucket_name(
        bucket_name: str,
        request_style: str = REQUEST_STYLE_VIRTUAL_HOST,
        dns_strict: bool = True,
):
    """
    Check whether bucket name is usable for the request style.

    Every bucket name must be 3 to 255 letters, digits, periods, dashes or
    underscores, start with a letter or digit, not end with a dash and not
    look like an IP address. Virtual host style requests additionally need
    a DNS compatible name; with `dns_strict` disabled underscores and a
    trailing dash are tolerated.
    """
    if not isinstance(bucket_name, str):
        raise TypeError("bucket name must be str type")

    if (
            not _BUCKET_NAME_REGEX.match(bucket_name) or
            _IPV4_REGEX.match(bucket_name)
    ):
        raise ValueError(f"invalid bucket name {bucket_name}")

    if request_style not in REQUEST_STYLES:
        raise ValueError(f"invalid request style {request_style}")

    if request_style == REQUEST_STYLE_VIRTUAL_HOST:
        regex = (
            _DNS_BUCKET_NAME_REGEX if dns_strict
            else _LAX_DNS_BUCKET_NAME_REGEX
        )
        if not regex.match(bucket_name):
            raise ValueError(
                f"invalid bucket name {bucket_name} when request style is "
                f"{REQUEST_STYLE_VIRTUAL_HOST}"
            )


def check_object_key(key: str):
    """Check whether object key is a non-empty string."""
    if not isinstance(key, str):
        raise TypeError("object key must be str type")
    if not key:
        raise ValueError("object key must not be empty")


def lower_keys(headers: Optional[Mapping[str, str]]) -> dict[str, str]:
    """Copy headers with lowercased names."""
    return {key.lower(): value for key, value in (headers or {}).items()}


def metadata_to_headers(metadata: Mapping[str, object]) -> dict[str, str]:
    """Convert user metadata to 'x-amz-meta-' prefixed headers."""
    return {
        METADATA_PREFIX + str(key).lower(): str(value)
        for key, value in metadata.items()
    }


def split_response_headers(
        headers: Mapping[str, str],
) -> tuple[dict[str, str], dict[str, str]]:
    """Split response headers into user metadata and allowed HTTP headers."""
    user_metadata = {}
    http_headers = {}
    for key, value in headers.items():
        key = key.lower()
        if key.startswith(METADATA_PREFIX):
            user_metadata[key[len(METADATA_PREFIX):]] = value.strip()
        elif key in ALLOWED_HEADERS:
            http_headers[key] = value
    return user_metadata, http_headers
