"""
i2kn_core.cid
-------------
Content identifiers for records: CIDv1 / json codec / sha2-256, base32 text.
"""

from __future__ import annotations
from typing import Any, Mapping

from multiformats import CID, multihash

from .canonical import encode_record
from .constants import CID_BASE, CID_CODEC, CID_HASH, CID_VERSION
from .errors import EncodingError


def cid_for_bytes(data: bytes, codec: str = CID_CODEC) -> CID:
    mh = multihash.digest(data, CID_HASH)
    return CID(CID_BASE, CID_VERSION, codec, mh)


def compute_cid(record: Mapping[str, Any]) -> str:
    """Pure: the same id/name/content always gives the same string."""
    return str(cid_for_bytes(encode_record(record)))


def parse_cid(text: str) -> CID:
    if not isinstance(text, str) or not text.isalnum():
        raise EncodingError(f"not a CID: {text!r}")
    try:
        return CID.decode(text)
    except Exception as e:
        # multibase, varint and multicodec lookups each raise their own types
        raise EncodingError(f"not a CID: {text!r} ({e})") from e


def is_cid(text: str) -> bool:
    try:
        parse_cid(text)
    except EncodingError:
        return False
    return True
