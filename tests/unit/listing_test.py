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

from datetime import datetime, timezone
from unittest import TestCase

import mock

from s3stream import S3
from s3stream.error import ServerError
from s3stream.listing import ObjectIterator, Prefix
from s3stream.resource import Object

from .s3_mocks import MockConnection, MockResponse

BUCKET_URL = "http://bucket.s3.amazonaws.com/"
XML_HEADERS = {"Content-Type": "application/xml"}


def list_result(keys=(), prefixes=(), truncated=False, next_marker=None):
    contents = "".join(
        "<Contents>"
        f"<Key>{key}</Key>"
        "<LastModified>2009-10-12T17:50:30.000Z</LastModified>"
        "<ETag>&quot;fba9dede5f27731c9771645a39863328&quot;</ETag>"
        "<Size>434234</Size>"
        "<StorageClass>STANDARD</StorageClass>"
        "</Contents>"
        for key in keys
    )
    common_prefixes = "".join(
        f"<CommonPrefixes><Prefix>{prefix}</Prefix></CommonPrefixes>"
        for prefix in prefixes
    )
    marker = f"<NextMarker>{next_marker}</NextMarker>" if next_marker else ""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<ListBucketResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
        "<Name>bucket</Name><Prefix></Prefix><Marker></Marker>"
        f"{marker}"
        f"<IsTruncated>{'true' if truncated else 'false'}</IsTruncated>"
        f"{contents}{common_prefixes}"
        "</ListBucketResult>"
    ).encode()


def add_page(mock_server, query, content):
    mock_server.mock_add_request(
        MockResponse("GET", BUCKET_URL + query, {}, 200,
                     response_headers=XML_HEADERS, content=content),
    )


class ObjectIteratorTest(TestCase):
    @mock.patch('urllib3.PoolManager')
    def test_empty_listing(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "", list_result())
        bucket = S3().bucket("bucket")
        self.assertEqual(list(bucket.list_objects()), [])

    @mock.patch('urllib3.PoolManager')
    def test_hierarchical_listing(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "?delimiter=%2F",
                 list_result(["abc", "def"], ["ghi/"]))
        add_page(mock_server, "?delimiter=%2F&prefix=ghi%2F",
                 list_result(["ghi/jkl", "ghi/mno"]))

        iterator = S3().bucket("bucket").list_objects(delimiter="/")
        iterator.rewind()
        entries = []
        while iterator.valid():
            entries.append((iterator.key(), iterator.has_children()))
            if iterator.has_children():
                children = iterator.get_children()
            iterator.advance()
        self.assertEqual(
            entries, [("abc", False), ("def", False), ("ghi/", True)],
        )
        self.assertIsNone(iterator.current())

        self.assertEqual(children.prefix, "ghi/")
        self.assertEqual(children.delimiter, "/")
        self.assertEqual(
            [entry.key for entry in children], ["ghi/jkl", "ghi/mno"],
        )

    @mock.patch('urllib3.PoolManager')
    def test_entries_keep_document_order(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "?delimiter=%2F",
                 list_result(["zzz"], ["aaa/"]))
        entries = list(S3().bucket("bucket").list_objects(delimiter="/"))
        self.assertIsInstance(entries[0], Object)
        self.assertEqual(entries[0].key, "zzz")
        self.assertIsInstance(entries[1], Prefix)
        self.assertEqual(entries[1].prefix, "aaa/")

    @mock.patch('urllib3.PoolManager')
    def test_listing_entry_has_metadata(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "", list_result(["abc"]))
        (obj,) = list(S3().bucket("bucket").list_objects())
        self.assertEqual(obj.size, 434234)
        self.assertEqual(obj.etag, '"fba9dede5f27731c9771645a39863328"')
        self.assertEqual(
            obj.last_modified,
            datetime(2009, 10, 12, 17, 50, 30, tzinfo=timezone.utc),
        )
        self.assertTrue(obj.exists)

    @mock.patch('urllib3.PoolManager')
    def test_pages_continue_after_last_key(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "?max-keys=2",
                 list_result(["a", "b"], truncated=True))
        add_page(mock_server, "?max-keys=2&marker=b",
                 list_result(["c", "d"], truncated=True))
        add_page(mock_server, "?max-keys=2&marker=d", list_result(["e"]))

        iterator = ObjectIterator(S3().bucket("bucket"), max_keys=2)
        keys = [entry.key for entry in iterator]
        self.assertEqual(keys, ["a", "b", "c", "d", "e"])
        self.assertEqual(keys, sorted(keys))

    @mock.patch('urllib3.PoolManager')
    def test_next_marker_is_used_with_delimiter(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "?delimiter=%2F",
                 list_result(["a"], ["b/"], truncated=True, next_marker="b/"))
        add_page(mock_server, "?marker=b%2F&delimiter=%2F",
                 list_result(["c"]))
        keys = [
            iterator_key(entry)
            for entry in S3().bucket("bucket").list_objects(delimiter="/")
        ]
        self.assertEqual(keys, ["a", "b/", "c"])

    @mock.patch('urllib3.PoolManager')
    def test_empty_truncated_page_fetches_again(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "?delimiter=%2F",
                 list_result(truncated=True, next_marker="m"))
        add_page(mock_server, "?marker=m&delimiter=%2F", list_result(["n"]))
        iterator = S3().bucket("bucket").list_objects(delimiter="/")
        iterator.rewind()
        self.assertTrue(iterator.valid())
        self.assertEqual(iterator.key(), "n")

    @mock.patch('urllib3.PoolManager')
    def test_truncated_page_without_marker(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "", list_result(truncated=True))
        iterator = S3().bucket("bucket").list_objects()
        self.assertRaises(ServerError, iterator.rewind)

    @mock.patch('urllib3.PoolManager')
    def test_entry_without_key(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(
            mock_server, "",
            b'<ListBucketResult '
            b'xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
            b'<Name>bucket</Name><IsTruncated>false</IsTruncated>'
            b'<Contents><Size>1</Size></Contents>'
            b'</ListBucketResult>',
        )
        iterator = S3().bucket("bucket").list_objects()
        with self.assertRaises(ServerError) as context:
            iterator.rewind()
        self.assertEqual(context.exception.status, 200)

    @mock.patch('urllib3.PoolManager')
    def test_rewind_reuses_first_page(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "", list_result(["a", "b"]))
        iterator = S3().bucket("bucket").list_objects()
        self.assertEqual([entry.key for entry in iterator], ["a", "b"])
        self.assertEqual([entry.key for entry in iterator], ["a", "b"])
        self.assertEqual(len(mock_server.calls), 1)

    @mock.patch('urllib3.PoolManager')
    def test_rewind_after_second_page_restarts(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "", list_result(["a"], truncated=True))
        add_page(mock_server, "?marker=a", list_result(["b"]))
        add_page(mock_server, "", list_result(["a"], truncated=True))
        iterator = S3().bucket("bucket").list_objects()
        self.assertEqual([entry.key for entry in iterator], ["a", "b"])
        iterator.rewind()
        self.assertEqual(iterator.key(), "a")
        self.assertEqual(len(mock_server.calls), 3)

    @mock.patch('urllib3.PoolManager')
    def test_walk_is_depth_first(self, mock_connection):
        mock_server = MockConnection()
        mock_connection.return_value = mock_server
        add_page(mock_server, "?delimiter=%2F",
                 list_result(["abc"], ["ghi/"]))
        add_page(mock_server, "?delimiter=%2F&prefix=ghi%2F",
                 list_result(["ghi/jkl"], ["ghi/x/"]))
        add_page(mock_server, "?delimiter=%2F&prefix=ghi%2Fx%2F",
                 list_result(["ghi/x/y"]))
        walked = [
            iterator_key(entry)
            for entry in S3().bucket("bucket").list_objects(
                delimiter="/").walk()
        ]
        self.assertEqual(
            walked, ["abc", "ghi/", "ghi/jkl", "ghi/x/", "ghi/x/y"],
        )


def iterator_key(entry):
    return entry.prefix if isinstance(entry, Prefix) else entry.key
