"""
i2kn_core.canonical
-------------------
Canonical encoding of a record's identity fields.

Only ``id``, ``name`` and ``content`` take part; a previously computed ``cid``
or any storage metadata is dropped. Keys are sorted at every depth and the
output is compact UTF-8 JSON, so equal records give equal bytes no matter the
insertion order or the whitespace of the source text.
"""

from __future__ import annotations
from typing import Any, Dict, Mapping
import json

from .constants import RECORD_FIELDS
from .errors import EncodingError


def parse_record(text: str | bytes) -> Dict[str, Any]:
    try:
        obj = json.loads(text)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"record is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise EncodingError(f"record must be a JSON object, got {type(obj).__name__}")
    return obj


def identity_fields(record: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(record, Mapping):
        raise EncodingError(f"record must be a mapping, got {type(record).__name__}")
    # absent fields are left out rather than encoded as null
    return {k: record[k] for k in RECORD_FIELDS if k in record}


def encode_record(record: Mapping[str, Any]) -> bytes:
    body = identity_fields(record)
    try:
        text = json.dumps(
            body,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise EncodingError(f"record is not canonically encodable: {e}") from e
    return text.encode("utf-8")
