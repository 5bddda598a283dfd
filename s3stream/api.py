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

# pylint: disable=too-many-arguments

"""
Simple Storage Service (aka S3) client to perform bucket and object
operations.
"""

from __future__ import absolute_import, annotations

from typing import Mapping, Optional, TextIO

import urllib3

from .config import Config
from .credentials import Credentials
from .http import BaseHTTPResponse, HttpClient
from .resource import Bucket, Resource, Service
from .signer import get_signature, sign_string


class S3:
    """
    Simple Storage Service (aka S3) account client.

    Args:
        access_key (Optional[str], default=None):
            Access key (aka user ID) of the account; None is anonymous.

        secret_key (Optional[str], default=None):
            Secret Key (aka password) of the account.

        config (Optional[Config], default=None):
            Client configuration; defaults to Config().

        http_client (Optional[urllib3.PoolManager], default=None):
            Customized HTTP client.

    Example::
        # Create client with anonymous access.
        client = S3()

        # Create client with access and secret key.
        client = S3("ACCESS-KEY", "SECRET-KEY")

        # Create client with path style requests to a local server.
        client = S3(
            "ACCESS-KEY", "SECRET-KEY",
            config=Config(endpoint="localhost:9000", request_style="path"),
        )
    """

    def __init__(
            self,
            access_key: Optional[str] = None,
            secret_key: Optional[str] = None,
            config: Optional[Config] = None,
            http_client: Optional[urllib3.PoolManager] = None,
    ):
        self._config = config or Config()
        self._credentials = Credentials(access_key, secret_key)
        self._http = HttpClient(self._credentials, self._config, http_client)

    def __repr__(self):
        return (
            f"{type(self).__name__}(endpoint={self._config.endpoint!r}, "
            f"anonymous={self.is_anonymous!r})"
        )

    @property
    def config(self) -> Config:
        """Get client configuration."""
        return self._config

    @property
    def credentials(self) -> Credentials:
        """Get account credentials."""
        return self._credentials

    @property
    def is_anonymous(self) -> bool:
        """Check whether this is an anonymous account."""
        return self._credentials.is_anonymous

    @property
    def service(self) -> Service:
        """Get reference to the service root."""
        return Service(self)

    def bucket(self, name: str) -> Bucket:
        """Get reference to a bucket."""
        return Bucket(self, name)

    def list_buckets(self) -> list[Bucket]:
        """
        List information of all accessible buckets.

        Returns:
            list[Bucket]: List of existing buckets.

        Example::
            buckets = client.list_buckets()
            for bucket in buckets:
                print(bucket.name, bucket.creation_date)
        """
        return self.service.list_buckets()

    def sign_string(self, string_to_sign: str) -> str:
        """Get base64 encoded HMAC-SHA1 digest of the string."""
        return sign_string(self._credentials, string_to_sign)

    def get_request_signature(
            self,
            method: str,
            resource: Resource,
            sub_resource: Optional[str],
            headers: Mapping[str, str],
    ) -> str:
        """Get signature of a request to the resource."""
        return get_signature(
            self._credentials, method, resource, sub_resource, headers,
        )

    def send_request(
            self,
            resource: Resource,
            sub_resource: Optional[str] = None,
            query: Optional[Mapping[str, object]] = None,
            method: str = "GET",
            headers: Optional[Mapping[str, str]] = None,
            body: Optional[bytes] = None,
    ) -> BaseHTTPResponse:
        """Send signed request to the resource; see HttpClient.send()."""
        return self._http.send(
            resource,
            sub_resource=sub_resource,
            query=query,
            method=method,
            headers=headers,
            body=body,
        )

    def trace_on(self, stream: TextIO):
        """
        Enable http trace.

        Args:
            stream (TextIO): Stream for writing HTTP call tracing.
        """
        self._http.trace_on(stream)

    def trace_off(self):
        """
        Disable HTTP trace.
        """
        self._http.trace_off()
