import pytest

from i2kn_core.canonical import encode_record, parse_record
from i2kn_core.cid import compute_cid, is_cid, parse_cid
from i2kn_core.errors import EncodingError


def test_cid_ignores_field_order_and_extra_fields():
    a = {"id": 1, "name": "a", "content": "hello"}
    b = {"content": "hello", "name": "a", "id": 1}
    c = {"id": 1, "name": "a", "content": "hello", "cid": "bogus", "ts": "2024-01-01"}
    assert compute_cid(a) == compute_cid(b) == compute_cid(c)


def test_cid_ignores_source_whitespace():
    compact = parse_record('{"id":1,"name":"a","content":{"x":1,"y":[1,2]}}')
    spaced = parse_record('{ "content" : { "y" : [1, 2], "x" : 1 },\n  "name": "a", "id": 1 }')
    assert compute_cid(compact) == compute_cid(spaced)


def test_canonical_encoding_is_sorted_and_compact():
    assert encode_record({"name": "é", "id": 2, "content": {"b": 1, "a": 2}}) == \
        '{"content":{"a":2,"b":1},"id":2,"name":"é"}'.encode("utf-8")


def test_missing_fields_are_omitted():
    assert encode_record({"id": 1}) == b'{"id":1}'


def test_cid_changes_with_content():
    assert compute_cid({"id": 1, "name": "a", "content": "x"}) != \
        compute_cid({"id": 1, "name": "a", "content": "y"})


def test_cid_is_self_describing():
    text = compute_cid({"id": 1, "name": "a", "content": "hello"})
    assert text.startswith("b")
    cid = parse_cid(text)
    assert cid.version == 1
    assert cid.codec.name == "json"
    assert cid.hashfun.name == "sha2-256"
    assert is_cid(text)


@pytest.mark.parametrize("record", [
    {"id": b"raw-bytes"},
    {"content": float("nan")},
    {"content": {1: "a", "b": 2}},
    {"content": {"s": {1, 2}}},
])
def test_unencodable_values(record):
    with pytest.raises(EncodingError):
        compute_cid(record)


def test_parse_record_rejects_non_objects():
    with pytest.raises(EncodingError):
        parse_record("[1, 2]")
    with pytest.raises(EncodingError):
        parse_record("{not json")
    with pytest.raises(EncodingError):
        encode_record(["id", 1])


def test_is_cid_rejects_plain_names():
    for name in ("companies.db", "users.db", "notes", "", "nonexistent-cid"):
        assert not is_cid(name)
