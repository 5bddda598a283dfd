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
XML documents of the S3 REST protocol. Lookups ignore namespaces, so that
both namespaced result documents and plain error documents are handled by
the same paths.
"""

from __future__ import annotations

from typing import Optional, TypeVar
from xml.etree import ElementTree as ET

from typing_extensions import Protocol

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"


def Element(  # pylint: disable=invalid-name
    tag: str,
    namespace: str = S3_NAMESPACE,
) -> ET.Element:
    """Create root element declaring the namespace as default."""
    element = ET.Element(tag)
    if namespace:
        element.set("xmlns", namespace)
    return element


def SubElement(  # pylint: disable=invalid-name
    parent: ET.Element, tag: str, text: Optional[str] = None
) -> ET.Element:
    """Append child element with optional text."""
    child = ET.SubElement(parent, tag)
    child.text = text
    return child


def localname(element: ET.Element) -> str:
    """Tag name of element without namespace."""
    _, _, name = element.tag.rpartition("}")
    return name


def _path(name: str) -> str:
    """Path matching each step in any or no namespace."""
    return "/".join("{*}" + step for step in name.split("/"))


def findall(element: ET.Element, name: str) -> list[ET.Element]:
    """Find all matching children ignoring namespaces."""
    return element.findall(_path(name))


def find(
        element: ET.Element,
        name: str,
        strict: bool = False,
) -> Optional[ET.Element]:
    """Find first matching child ignoring namespaces."""
    child = element.find(_path(name))
    if child is None and strict:
        raise ValueError(f"XML element <{name}> not found")
    return child


def findtext(
    element: ET.Element,
    name: str,
    strict: bool = False,
) -> Optional[str]:
    """
    Text of first matching child; empty element gives empty string and a
    missing one None, or ValueError if strict.
    """
    child = find(element, name, strict)
    if child is None:
        return None
    return child.text or ""


FromXmlT = TypeVar("FromXmlT", bound="FromXml")


class FromXml(Protocol):
    """Class constructible from an XML element."""

    @classmethod
    def fromxml(cls: type[FromXmlT], element: ET.Element) -> FromXmlT:
        """Create object by values from XML element."""


def unmarshal(cls: type[FromXmlT], element: ET.Element) -> FromXmlT:
    """Create object of the class from XML element."""
    return cls.fromxml(element)


def getbytes(element: ET.Element) -> bytes:
    """Serialize element to UTF-8 document with XML declaration."""
    return ET.tostring(element, encoding="UTF-8", xml_declaration=True)
