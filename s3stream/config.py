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

"""Client configuration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from .helpers import REQUEST_STYLE_VIRTUAL_HOST, check_bucket_name

BucketNameChecker = Callable[[str, str, bool], None]


@dataclass(frozen=True)
class Config:
    """
    Settings of an S3 account client.

    Args:
        endpoint (str, default="s3.amazonaws.com"):
            Hostname of the S3 service.

        secure (bool, default=False):
            Flag to use HTTPS instead of HTTP.

        request_style (str, default="virtualhost"):
            How bucket names are put into URLs; one of "virtualhost",
            "path" or "cname".

        max_retries (int, default=2):
            Number of immediate retries on transport failure or HTTP 500.

        max_keys (Optional[int], default=None):
            Page size hint of object listings; None lets the server choose.

        timeout (float, default=300):
            Connect and read timeout in seconds.

        cert_check (bool, default=True):
            Flag to enable server certificate validation.

        bucket_name_checker (BucketNameChecker):
            Callable validating a bucket name for a request style; called
            with (bucket_name, request_style, dns_strict) and raising
            ValueError on invalid names.
    """
    endpoint: str = "s3.amazonaws.com"
    secure: bool = False
    request_style: str = REQUEST_STYLE_VIRTUAL_HOST
    max_retries: int = 2
    max_keys: Optional[int] = None
    timeout: float = timedelta(minutes=5).seconds
    cert_check: bool = True
    bucket_name_checker: BucketNameChecker = check_bucket_name

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if self.max_keys is not None and self.max_keys <= 0:
            raise ValueError("max_keys must be positive")

    @property
    def scheme(self) -> str:
        """URL scheme of requests."""
        return "https" if self.secure else "http"
