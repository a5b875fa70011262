"""Tests for key types, TTL normalization and the response envelope."""

import pytest

from django_keybrowser.types import (
    ApiResponse,
    HashValue,
    KeyInfo,
    KeyType,
    ScanPage,
    ScanQuery,
    StreamEntry,
    StreamValue,
    StringValue,
    UnknownValue,
    ZSetEntry,
    ZSetValue,
    normalize_key_type,
    normalize_ttl,
    normalize_type_filter,
    value_from_dict,
    value_to_dict,
)


class TestNormalizeKeyType:
    """Test mapping raw type names onto KeyType."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("string", KeyType.STRING),
            ("HASH", KeyType.HASH),
            ("list", KeyType.LIST),
            ("set", KeyType.SET),
            ("zset", KeyType.ZSET),
            ("sortedset", KeyType.ZSET),
            ("stream", KeyType.STREAM),
            (b"hash", KeyType.HASH),
            ("none", KeyType.UNKNOWN),
            ("ReJSON-RL", KeyType.UNKNOWN),
            ("", KeyType.UNKNOWN),
            (None, KeyType.UNKNOWN),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_key_type(raw) is expected

    def test_unknown_filter_means_no_filter(self):
        assert normalize_type_filter("bogus") is None
        assert normalize_type_filter(None) is None
        assert normalize_type_filter("unknown") is None
        assert normalize_type_filter("SortedSet") is KeyType.ZSET


class TestNormalizeTtl:
    """TTL is None exactly when the store reports a negative value."""

    @pytest.mark.parametrize(("raw", "expected"), [(0, 0), (42, 42), ("17", 17), (-1, None), (-2, None), (None, None)])
    def test_normalize(self, raw, expected):
        assert normalize_ttl(raw) == expected


class TestKeyInfo:
    def test_to_dict_uses_camel_case(self):
        assert KeyInfo("a", KeyType.HASH, 5).to_dict() == {"key": "a", "type": "hash", "ttlSeconds": 5}

    def test_from_dict_normalizes_negative_ttl(self):
        info = KeyInfo.from_dict({"key": "a", "type": "sortedset", "ttlSeconds": -1})
        assert info == KeyInfo("a", KeyType.ZSET, None)


class TestScanPage:
    def test_empty_page_is_complete(self):
        assert ScanPage().is_complete

    def test_nonzero_cursor_is_not_complete(self):
        assert not ScanPage(cursor=7).is_complete

    def test_truncated_page_is_not_complete(self):
        assert not ScanPage(truncated=True).is_complete

    def test_from_dict_handles_missing_data(self):
        assert ScanPage.from_dict(None) == ScanPage()


class TestScanQuery:
    def test_to_params_omits_defaults(self):
        assert ScanQuery(page_size=0).to_params() == {}

    def test_to_params_encodes_everything(self):
        query = ScanQuery(pattern="a*", exact_key="k", type=KeyType.SET, page_size=10, cursor=5, exhaustive=True, db=3)
        assert query.to_params() == {
            "pattern": "a*",
            "exactKey": "k",
            "type": "set",
            "pageSize": "10",
            "cursor": "5",
            "exhaustive": "true",
            "db": "3",
        }


class TestKeyValue:
    """Test the tagged value union serialization."""

    def test_zset_serializes_entries(self):
        value = ZSetValue([ZSetEntry("m", 1.5)])
        assert value_to_dict(value) == {"type": "zset", "value": [{"member": "m", "score": 1.5}]}

    def test_stream_serializes_entries(self):
        value = StreamValue([StreamEntry("1-0", {"f": "v"})])
        assert value_to_dict(value) == {"type": "stream", "value": [{"id": "1-0", "values": {"f": "v"}}]}

    def test_null_string(self):
        assert value_to_dict(StringValue(None)) == {"type": "string", "value": None}

    def test_from_dict_hash(self):
        assert value_from_dict({"type": "hash", "value": {"a": 1}}) == HashValue({"a": "1"})

    def test_from_dict_unknown_type(self):
        assert value_from_dict({"type": "json", "value": {"a": 1}}) == UnknownValue({"a": 1})

    def test_from_dict_empty(self):
        assert value_from_dict(None) == UnknownValue()


class TestApiResponse:
    def test_ok_envelope(self):
        envelope = ApiResponse.ok(ScanPage(keys=(KeyInfo("a"),)))
        assert envelope.to_dict() == {
            "isSuccess": True,
            "message": "",
            "reasons": [],
            "data": {"keys": [{"key": "a", "type": "unknown", "ttlSeconds": None}], "cursor": 0, "truncated": False},
        }

    def test_fail_envelope_carries_reasons(self):
        envelope = ApiResponse.fail(False, "Failed.", "first", "second")
        assert envelope.to_dict() == {"isSuccess": False, "message": "Failed.", "reasons": ["first", "second"], "data": False}

    def test_value_data_is_serialized(self):
        assert ApiResponse.ok(StringValue("x")).to_dict()["data"] == {"type": "string", "value": "x"}
