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
s3stream.signer
~~~~~~~~~~~~~~~

This module implements all helpers for AWS Signature version '2' support.

"""

from __future__ import absolute_import, annotations

import base64
import hashlib
import hmac
from typing import TYPE_CHECKING, Mapping, Optional

from .credentials import Credentials
from .error import AuthError
from .helpers import AMZ_HEADER_PREFIX, rawurlencode

if TYPE_CHECKING:
    from .resource import Resource

SIGN_V2_ALGORITHM = "AWS"


def get_canonical_resource(
        bucket_name: Optional[str] = None,
        key: Optional[str] = None,
) -> str:
    """Get canonical resource path of service root, bucket or object."""
    if bucket_name is None:
        return "/"
    path = "/" + rawurlencode(bucket_name) + "/"
    if key is not None:
        path += rawurlencode(key)
    return path


def _get_canonical_amz_headers(headers: Mapping[str, str]) -> str:
    """Get canonical 'x-amz-' headers."""
    amz_headers = {}
    for name, value in headers.items():
        name = name.lower()
        if name.startswith(AMZ_HEADER_PREFIX):
            amz_headers[name.rstrip()] = str(value).strip()
    return "".join(
        f"{name}:{value}\n" for name, value in sorted(amz_headers.items())
    )


def get_string_to_sign(
        method: str,
        canonical_resource: str,
        sub_resource: Optional[str],
        headers: Mapping[str, str],
) -> str:
    """Get string-to-sign."""
    headers = {name.lower(): value for name, value in headers.items()}

    # StringToSign =
    #   HTTP-Verb + '\n' +
    #   Content-MD5 + '\n' +
    #   Content-Type + '\n' +
    #   Date + '\n' +
    #   CanonicalizedAmzHeaders +
    #   CanonicalizedResource
    return (
        f"{method}\n"
        f"{headers.get('content-md5', '')}\n"
        f"{headers.get('content-type', '')}\n"
        f"{headers['date']}\n"
        f"{_get_canonical_amz_headers(headers)}"
        f"{canonical_resource}"
        f"{sub_resource or ''}"
    )


def sign_string(credentials: Credentials, string_to_sign: str) -> str:
    """Return base64 encoded HMAC-SHA1 digest of given string."""
    if credentials.is_anonymous:
        raise AuthError("Anonymous account cannot sign strings")

    hasher = hmac.new(
        str(credentials.secret_key).encode(),
        string_to_sign.encode(),
        hashlib.sha1,
    )
    return base64.b64encode(hasher.digest()).decode()


def get_signature(
        credentials: Credentials,
        method: str,
        resource: Resource,
        sub_resource: Optional[str],
        headers: Mapping[str, str],
) -> str:
    """Get signature of a request to the resource."""
    return sign_string(
        credentials,
        get_string_to_sign(
            method, resource.canonical_path, sub_resource, headers,
        ),
    )


def get_authorization(access_key: str, signature: str) -> str:
    """Get authorization."""
    return f"{SIGN_V2_ALGORITHM} {access_key}:{signature}"


def presign(
        credentials: Credentials,
        resource: Resource,
        expires: int,
        sub_resource: Optional[str] = None,
) -> str:
    """Do query string authentication of a GET request to the resource."""
    signature = get_signature(
        credentials, "GET", resource, sub_resource, {"date": str(expires)},
    )
    return (
        resource.url +
        (sub_resource + "&" if sub_resource else "?") +
        f"AWSAccessKeyId={rawurlencode(str(credentials.access_key))}"
        f"&Signature={rawurlencode(signature)}"
        f"&Expires={expires}"
    )
