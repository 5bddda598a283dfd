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

"""Access control list of a bucket or an object."""

from __future__ import absolute_import, annotations

from dataclasses import dataclass
from enum import IntFlag
from typing import TYPE_CHECKING, Optional, Union

from .error import ServerError, parse_document
from .xml import (XSI_NAMESPACE, Element, SubElement, find, findall,
                  findtext, getbytes)

if TYPE_CHECKING:
    from .resource import Bucket, Object

ACL_PRIVATE = "private"
ACL_PUBLIC_READ = "public-read"
ACL_PUBLIC_READ_WRITE = "public-read-write"
ACL_AUTHENTICATED_READ = "authenticated-read"
CANNED_ACLS = (
    ACL_PRIVATE, ACL_PUBLIC_READ, ACL_PUBLIC_READ_WRITE,
    ACL_AUTHENTICATED_READ,
)

TYPE_CANONICAL_USER = "CanonicalUser"
TYPE_GROUP = "Group"
TYPE_AMAZON_CUSTOMER_BY_EMAIL = "AmazonCustomerByEmail"

URI_ALL_USERS = "http://acs.amazonaws.com/groups/global/AllUsers"
URI_AUTHENTICATED_USERS = (
    "http://acs.amazonaws.com/groups/global/AuthenticatedUsers"
)

# Canonical user ID of anonymous requests.
ID_ANONYMOUS = "65a011a29cdf8ec533ec3d1ccaae921c"


class Permission(IntFlag):
    """Permission flags of a grant."""
    READ = 1
    WRITE = 2
    READ_ACP = 4
    WRITE_ACP = 8
    FULL_CONTROL = 15


_PERMISSION_NAMES = {
    "READ": Permission.READ,
    "WRITE": Permission.WRITE,
    "READ_ACP": Permission.READ_ACP,
    "WRITE_ACP": Permission.WRITE_ACP,
    "FULL_CONTROL": Permission.FULL_CONTROL,
}
_PERMISSION_TAGS = {value: name for name, value in _PERMISSION_NAMES.items()}

# FULL_CONTROL first, so that remaining single flags are only emitted for
# grantees without full control.
_SAVE_ORDER = (
    Permission.FULL_CONTROL,
    Permission.READ,
    Permission.WRITE,
    Permission.READ_ACP,
    Permission.WRITE_ACP,
)


@dataclass(frozen=True)
class Grantee:
    """Grantee of an access control list."""
    type: str
    id: Optional[str] = None
    uri: Optional[str] = None
    email_address: Optional[str] = None
    display_name: Optional[str] = None

    def __post_init__(self):
        if self.type not in (
                TYPE_CANONICAL_USER, TYPE_GROUP, TYPE_AMAZON_CUSTOMER_BY_EMAIL,
        ):
            raise ValueError(f"invalid grantee type {self.type}")
        if self.type == TYPE_CANONICAL_USER and not self.id:
            raise ValueError("canonical user grantee must have ID")
        if self.type == TYPE_GROUP and not self.uri:
            raise ValueError("group grantee must have URI")
        if self.type == TYPE_AMAZON_CUSTOMER_BY_EMAIL and (
                not self.email_address
        ):
            raise ValueError("email grantee must have email address")

    @property
    def key(self) -> str:
        """Identity of the grantee; display name is not part of it."""
        if self.type == TYPE_CANONICAL_USER:
            return f"{self.type}:{self.id}"
        if self.type == TYPE_GROUP:
            return f"{self.type}:{self.uri}"
        return f"{self.type}:{self.email_address}"

    @classmethod
    def canonical_user(cls, id_: str, display_name: Optional[str] = None):
        """Create canonical user grantee."""
        return cls(TYPE_CANONICAL_USER, id=id_, display_name=display_name)

    @classmethod
    def group(cls, uri: str):
        """Create group grantee."""
        return cls(TYPE_GROUP, uri=uri)

    @classmethod
    def email(cls, email_address: str):
        """Create grantee by email address."""
        return cls(TYPE_AMAZON_CUSTOMER_BY_EMAIL, email_address=email_address)


ALL_USERS = Grantee.group(URI_ALL_USERS)
AUTHENTICATED_USERS = Grantee.group(URI_AUTHENTICATED_USERS)


class AccessControlList:
    """
    Access control list bound to a bucket or an object.

    Grants are kept as permission flags per grantee; load() replaces them
    with the list stored on the server, save() uploads them.
    """

    def __init__(self, resource: Union[Bucket, Object]):
        self._resource = resource
        self._owner_id: Optional[str] = None
        self._owner_name: Optional[str] = None
        self._grantees: dict[str, Grantee] = {}
        self._permissions: dict[str, Permission] = {}

    @property
    def resource(self) -> Union[Bucket, Object]:
        """Get the bucket or object this list applies to."""
        return self._resource

    @property
    def owner_id(self) -> Optional[str]:
        """Get canonical user ID of the owner."""
        return self._owner_id

    @property
    def owner_name(self) -> Optional[str]:
        """Get display name of the owner."""
        return self._owner_name

    def load(self):
        """Load access control list from the server."""
        response = self._resource.client.send_request(
            self._resource, sub_resource="?acl",
        )
        element = parse_document(response)

        owner = find(element, "Owner")
        if owner is not None:
            self._owner_id = findtext(owner, "ID")
            self._owner_name = findtext(owner, "DisplayName")

        self._grantees = {}
        self._permissions = {}
        grants = find(element, "AccessControlList")
        for grant in [] if grants is None else findall(grants, "Grant"):
            tag = find(grant, "Grantee")
            if tag is None:
                continue
            try:
                grantee = Grantee(
                    tag.get(f"{{{XSI_NAMESPACE}}}type") or "",
                    id=findtext(tag, "ID"),
                    uri=findtext(tag, "URI"),
                    email_address=findtext(tag, "EmailAddress"),
                    display_name=findtext(tag, "DisplayName"),
                )
            except ValueError as exc:
                raise ServerError(
                    str(exc), response.status, response=response,
                ) from exc
            name = findtext(grant, "Permission") or ""
            if name not in _PERMISSION_NAMES:
                raise ServerError(
                    f"Invalid permission {name}", response.status,
                    response=response,
                )
            self.set_permissions(
                grantee,
                self.get_permissions(grantee) | _PERMISSION_NAMES[name],
            )

    def save(self):
        """Upload access control list to the server."""
        root = Element("AccessControlPolicy")
        root.set("xmlns:xsi", XSI_NAMESPACE)
        owner = SubElement(root, "Owner")
        SubElement(owner, "ID", self._owner_id or "")
        if self._owner_name:
            SubElement(owner, "DisplayName", self._owner_name)
        grants = SubElement(root, "AccessControlList")
        for key, grantee in self._grantees.items():
            remaining = int(self._permissions[key])
            for flag in _SAVE_ORDER:
                if remaining & flag != flag:
                    continue
                remaining &= ~int(flag)
                grant = SubElement(grants, "Grant")
                tag = SubElement(grant, "Grantee")
                tag.set("xsi:type", grantee.type)
                if grantee.type == TYPE_CANONICAL_USER:
                    SubElement(tag, "ID", grantee.id)
                elif grantee.type == TYPE_GROUP:
                    SubElement(tag, "URI", grantee.uri)
                else:
                    SubElement(tag, "EmailAddress", grantee.email_address)
                SubElement(grant, "Permission", _PERMISSION_TAGS[flag])

        self._resource.client.send_request(
            self._resource,
            sub_resource="?acl",
            method="PUT",
            headers={"content-type": "application/xml"},
            body=getbytes(root),
        )

    def get_grantees(self) -> list[Grantee]:
        """Get grantees having any permission."""
        return list(self._grantees.values())

    def get_permissions(
            self,
            grantee: Grantee,
            implied: bool = False,
    ) -> Permission:
        """
        Get permissions of the grantee. If implied is set, permissions
        granted to the groups the grantee is a member of are included.
        """
        permissions = self._permissions.get(grantee.key, Permission(0))
        if implied:
            if not (
                    grantee.type == TYPE_CANONICAL_USER and
                    grantee.id == ID_ANONYMOUS
            ):
                permissions |= self._permissions.get(
                    AUTHENTICATED_USERS.key, Permission(0),
                )
            permissions |= self._permissions.get(
                ALL_USERS.key, Permission(0),
            )
        return permissions

    def set_permissions(self, grantee: Grantee, permissions: int):
        """Set permissions of the grantee; zero removes the grantee."""
        permissions = Permission(int(permissions) & Permission.FULL_CONTROL)
        if permissions:
            self._grantees[grantee.key] = grantee
            self._permissions[grantee.key] = permissions
        else:
            self._grantees.pop(grantee.key, None)
            self._permissions.pop(grantee.key, None)

    def copy_to(self, resource: Union[Bucket, Object]) -> AccessControlList:
        """Create a copy of this list bound to another resource."""
        acl = type(self)(resource)
        acl._owner_id = self._owner_id
        acl._owner_name = self._owner_name
        acl._grantees = dict(self._grantees)
        acl._permissions = dict(self._permissions)
        return acl
