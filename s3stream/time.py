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
Date and time conversions: RFC 1123 dates of HTTP headers, ISO-8601 dates
of XML documents and UNIX timestamps of stat records. Results are always
timezone aware UTC values.
"""

from __future__ import absolute_import, annotations

from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime


def _as_utc(value: datetime) -> datetime:
    """Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def from_iso8601utc(value: str | None) -> datetime | None:
    """Parse ISO-8601 date like '2009-10-12T17:50:30.000Z'."""
    if value is None:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return _as_utc(datetime.fromisoformat(value))


def from_http_header(value: str) -> datetime:
    """Parse RFC 1123 date like 'Fri, 26 Jun 2015 19:05:37 GMT'."""
    try:
        return _as_utc(parsedate_to_datetime(value))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"time data {value} does not match HTTP header format",
        ) from exc


def to_http_header(value: datetime) -> str:
    """Format date for the 'date' request header."""
    return format_datetime(_as_utc(value), usegmt=True)


def to_timestamp(value: datetime | None) -> int:
    """Convert to UNIX timestamp; None maps to 0."""
    if value is None:
        return 0
    return int(_as_utc(value).timestamp())
