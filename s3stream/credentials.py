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

"""Credential definitions to access S3 service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Credentials:
    """
    Represents access key and secret key of an account.

    An account without access key is anonymous; its requests are sent
    unsigned and it cannot sign strings.
    """

    access_key: Optional[str] = None
    secret_key: Optional[str] = None

    def __post_init__(self):
        if self.access_key and not self.secret_key:
            raise ValueError("secret key must be provided with access key")

    @property
    def is_anonymous(self) -> bool:
        """Check whether these credentials are anonymous."""
        return not self.access_key

    @classmethod
    def anonymous(cls) -> Credentials:
        """Create anonymous credentials."""
        return cls()
