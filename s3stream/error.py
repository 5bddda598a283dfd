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
s3stream.error
~~~~~~~~~~~~~~

This module provides custom exception classes for s3stream and maps HTTP
responses of the S3 service to them.

"""

from __future__ import absolute_import, annotations

from typing import Any, Optional
from xml.etree import ElementTree as ET

from urllib3.exceptions import HTTPError

from .xml import FromXmlT, findtext, unmarshal

# Error codes of a 403 response which are not about permissions: the local
# clock must be synchronized, or the request signature is computed wrongly.
_NON_ACCESS_DENIED_CODES = ("RequestTimeTooSkewed", "SignatureDoesNotMatch")

_BAD_RESPONSE_MESSAGE = "Bad response from server."


class S3Exception(Exception):
    """Base s3stream exception."""

    def __init__(
            self,
            message: str,
            status: Optional[int] = None,
            code: Optional[str] = None,
            response: Any = None,
    ):
        self._message = message
        self._status = status
        self._code = code
        self._response = response
        super().__init__(message)

    @property
    def message(self) -> str:
        """Get human readable message."""
        return self._message

    @property
    def status(self) -> Optional[int]:
        """Get HTTP status code."""
        return self._status

    @property
    def code(self) -> Optional[str]:
        """Get error code sent by the service."""
        return self._code

    @property
    def response(self) -> Any:
        """Get HTTP response."""
        return self._response

    def __reduce__(self):
        return type(self), (self._message, self._status, self._code)

    def __repr__(self):
        return (
            f"{type(self).__name__}(message={self._message!r}, "
            f"status={self._status!r}, code={self._code!r})"
        )


class AuthError(S3Exception):
    """Raised when a request cannot be signed."""


class TransportError(S3Exception):
    """Raised when the HTTP exchange fails without a response."""


class ServiceError(S3Exception):
    """Raised to indicate that S3 service returned an error response."""


class EndpointError(ServiceError):
    """Raised on permanent redirect, i.e. wrong endpoint is used."""


class AccessDeniedError(ServiceError):
    """Raised when S3 service refuses access to the resource."""


class NotFoundError(ServiceError):
    """Raised when the bucket or object does not exist."""


class ServerError(ServiceError):
    """
    Raised to indicate that S3 service returning HTTP server error or a
    response which cannot be understood.
    """


def is_xml_response(response) -> bool:
    """Check whether response content type is XML."""
    content_type = (response.headers or {}).get("content-type") or ""
    return content_type.split(";")[0].strip() in (
        "application/xml", "text/xml",
    )


def parse_document(response) -> ET.Element:
    """Parse XML body of response, or raise ServerError."""
    if not is_xml_response(response):
        raise ServerError(
            "Response was not of type application/xml",
            response.status, response=response,
        )
    try:
        return ET.fromstring(response.data or b"")
    except ET.ParseError as exc:
        raise ServerError(
            "Could not parse response XML", response.status,
            response=response,
        ) from exc


def parse_result(cls: type[FromXmlT], response) -> FromXmlT:
    """
    Parse XML body of response into an object of the class. A document
    missing required elements or holding malformed values raises
    ServerError.
    """
    element = parse_document(response)
    try:
        return unmarshal(cls, element)
    except ValueError as exc:
        raise ServerError(
            f"Malformed response XML: {exc}", response.status,
            response=response,
        ) from exc


def _parse_error(response) -> Optional[ET.Element]:
    """Parse error document of response if any."""
    if not response.data or not is_xml_response(response):
        return None
    try:
        return ET.fromstring(response.data)
    except ET.ParseError:
        return None


def _new_error(cls, response, element: Optional[ET.Element],
               message: Optional[str] = None):
    """Create error of given class with code and message of the document."""
    code = None
    if element is not None:
        code = findtext(element, "Code") or None
        message = message or findtext(element, "Message") or None
    return cls(
        message or _BAD_RESPONSE_MESSAGE,
        response.status,
        code,
        response,
    )


def classify_response(method: str, response) -> S3Exception:
    """Map an error response (status >= 300) to an exception."""
    status = response.status

    if status == 301:
        element = _parse_error(response)
        message = None
        if element is not None:
            message = (
                f"{findtext(element, 'Message') or ''} "
                f"Endpoint: {findtext(element, 'Endpoint') or ''}"
            )
        return _new_error(EndpointError, response, element, message)

    if status == 403 and method == "GET":
        try:
            element = parse_document(response)
        except ServerError as exc:
            return exc
        if findtext(element, "Code") in _NON_ACCESS_DENIED_CODES:
            return _new_error(ServiceError, response, element)
        return _new_error(AccessDeniedError, response, element)

    if status == 404:
        return _new_error(NotFoundError, response, _parse_error(response))

    if status >= 500:
        return _new_error(ServerError, response, _parse_error(response))

    return _new_error(ServiceError, response, _parse_error(response))


def classify_transport_error(exc: HTTPError) -> TransportError:
    """Map a urllib3 failure to TransportError."""
    return TransportError(str(exc) or type(exc).__name__)
