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
s3stream - filesystem-style client for Amazon S3 compatible object storage

    >>> from s3stream import S3, S3FileSystem
    >>> client = S3("ACCESS-KEY", "SECRET-KEY")
    >>> for bucket in client.list_buckets():
    ...     print(bucket.name, bucket.creation_date)
    >>> fs = S3FileSystem(client)
    >>> with fs.open("s3://my-bucket/notes.txt", "w") as stream:
    ...     stream.write(b"hello")
    >>> fs.listdir("s3://my-bucket/")

:copyright: (C) 2008-2026 s3stream contributors
:license: Apache 2.0, see LICENSE for more details.
"""

__title__ = "s3stream"
__author__ = "s3stream contributors"
__version__ = "1.0.0"
__license__ = "Apache 2.0"
__copyright__ = "Copyright 2008-2026 s3stream contributors"

# pylint: disable=unused-import,useless-import-alias
from .api import S3 as S3
from .config import Config as Config
from .credentials import Credentials as Credentials
from .error import AccessDeniedError as AccessDeniedError
from .error import AuthError as AuthError
from .error import EndpointError as EndpointError
from .error import NotFoundError as NotFoundError
from .error import S3Exception as S3Exception
from .error import ServerError as ServerError
from .error import ServiceError as ServiceError
from .error import TransportError as TransportError
from .stream import S3FileSystem as S3FileSystem
from .stream import StreamOptions as StreamOptions
