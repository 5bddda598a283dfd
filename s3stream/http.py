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

"""HTTP client to perform authenticated requests to S3 services."""

from __future__ import absolute_import, annotations

import os
import platform
from typing import TYPE_CHECKING, Mapping, Optional, TextIO

import certifi
import urllib3
from urllib3.exceptions import HTTPError
from urllib3.util import Timeout

from . import __title__, __version__, time
from .config import Config
from .credentials import Credentials
from .error import classify_response, classify_transport_error
from .helpers import headers_to_strings, lower_keys, queryencode
from .signer import get_authorization, get_signature

if TYPE_CHECKING:
    from .resource import Resource

try:
    from urllib3.response import BaseHTTPResponse  # type: ignore[attr-defined]
except ImportError:
    from urllib3.response import HTTPResponse as BaseHTTPResponse

_DEFAULT_USER_AGENT = (
    f"s3stream ({platform.system()}; {platform.machine()}) "
    f"{__title__}/{__version__}"
)


def build_url(
        resource: Resource,
        sub_resource: Optional[str] = None,
        query: Optional[Mapping[str, object]] = None,
) -> str:
    """
    Build absolute URL of the resource. The sub-resource takes the '?'
    separator; query parameters follow it.
    """
    url = resource.url
    if sub_resource:
        url += sub_resource
        if query:
            url += "&"
    elif query:
        url += "?"
    if query:
        url += queryencode(query)
    return url


class HttpClient:
    """HTTP client to perform authenticated requests to S3 services."""

    def __init__(
            self,
            credentials: Credentials,
            config: Config,
            http_client: Optional[urllib3.PoolManager] = None,
    ):
        # Validate http client has correct base class.
        if http_client and not isinstance(http_client, urllib3.PoolManager):
            raise TypeError(
                "HTTP client should be urllib3.PoolManager like object, "
                f"got {type(http_client).__name__}",
            )

        self._credentials = credentials
        self._config = config
        self._user_agent = _DEFAULT_USER_AGENT
        self._trace_stream: Optional[TextIO] = None

        # Load CA certificates from SSL_CERT_FILE file if set. Retrying is
        # done by send(), hence urllib3 retries are disabled.
        self._http = http_client or urllib3.PoolManager(
            timeout=Timeout(connect=config.timeout, read=config.timeout),
            maxsize=10,
            cert_reqs='CERT_REQUIRED' if config.cert_check else 'CERT_NONE',
            ca_certs=os.environ.get('SSL_CERT_FILE') or certifi.where(),
            retries=False,
        )

    def __del__(self):
        if hasattr(self, "_http"):  # Only required for unit test run
            self._http.clear()

    @property
    def credentials(self) -> Credentials:
        """Get credentials."""
        return self._credentials

    @property
    def config(self) -> Config:
        """Get configuration."""
        return self._config

    def trace_on(self, stream: TextIO):
        """Enable HTTP trace to the stream."""
        if not stream:
            raise ValueError('Input stream for trace output is invalid.')
        self._trace_stream = stream

    def trace_off(self):
        """Disable HTTP trace."""
        self._trace_stream = None

    def _build_headers(
            self,
            method: str,
            resource: Resource,
            sub_resource: Optional[str],
            headers: Optional[Mapping[str, str]],
            body: Optional[bytes],
    ) -> dict[str, str]:
        """Build signed headers."""
        headers = lower_keys(headers)
        headers["date"] = time.to_http_header(time.utcnow())
        headers["user-agent"] = self._user_agent
        if method in ("PUT", "POST"):
            headers["content-length"] = str(len(body or b""))

        # Sign request, unless this is an anonymous account.
        if not self._credentials.is_anonymous:
            signature = get_signature(
                self._credentials, method, resource, sub_resource, headers,
            )
            headers["authorization"] = get_authorization(
                str(self._credentials.access_key), signature,
            )
        return headers

    def _trace_request(self, method, url, headers, body):
        """Write request to trace stream."""
        if not self._trace_stream:
            return
        self._trace_stream.write("---------START-HTTP---------\n")
        self._trace_stream.write(f"{method} {url} HTTP/1.1\n")
        self._trace_stream.write(headers_to_strings(headers, titled_key=True))
        self._trace_stream.write("\n")
        if body:
            self._trace_stream.write("\n")
            self._trace_stream.write(
                body.decode(errors="replace")
                if isinstance(body, bytes) else str(body),
            )
            self._trace_stream.write("\n")
        self._trace_stream.write("\n")

    def _trace_response(self, response):
        """Write response to trace stream."""
        if not self._trace_stream:
            return
        self._trace_stream.write(f"HTTP/1.1 {response.status}\n")
        self._trace_stream.write(headers_to_strings(response.headers or {}))
        self._trace_stream.write("\n")
        if response.status >= 300 and response.data:
            self._trace_stream.write(response.data.decode(errors="replace"))
            self._trace_stream.write("\n")
        self._trace_stream.write("----------END-HTTP----------\n")

    def send(
            self,
            resource: Resource,
            sub_resource: Optional[str] = None,
            query: Optional[Mapping[str, object]] = None,
            method: str = "GET",
            headers: Optional[Mapping[str, str]] = None,
            body: Optional[bytes] = None,
    ) -> BaseHTTPResponse:
        """
        Send request to the resource.

        Args:
            resource (Resource):
                Service root, bucket or object.

            sub_resource (Optional[str], default=None):
                Sub-resource marker including its leading '?', e.g. '?acl'.

            query (Optional[Mapping[str, object]], default=None):
                Query parameters.

            method (str, default="GET"):
                HTTP method.

            headers (Optional[Mapping[str, str]], default=None):
                Request headers.

            body (Optional[bytes], default=None):
                Request body.

        Returns:
            BaseHTTPResponse:
                Response with status lower than 300.

        Raises:
            TransportError: if no response was received.
            ServiceError: or one of its subclasses for error responses.
        """
        headers = self._build_headers(
            method, resource, sub_resource, headers, body,
        )
        url = build_url(resource, sub_resource, query)

        response = None
        transport_error: Optional[HTTPError] = None
        for _ in range(self._config.max_retries + 1):
            self._trace_request(method, url, headers, body)
            try:
                response = self._http.urlopen(
                    method,
                    url,
                    body=body,
                    headers=headers,
                    preload_content=True,
                    redirect=False,
                )
            except HTTPError as exc:
                response, transport_error = None, exc
                if self._trace_stream:
                    self._trace_stream.write(f"ERROR: {exc}\n")
                continue
            self._trace_response(response)
            if response.status != 500:
                break

        if response is None:
            raise classify_transport_error(
                transport_error or HTTPError("no response"),
            ) from transport_error

        if response.status >= 300:
            raise classify_response(method, response)

        return response
