"""
i2kn_core.utils
---------------
Small helpers for base64 and compact JSON shared by the envelope codec
and the record store.
"""

from __future__ import annotations
import base64, json
from typing import Any, Dict

def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    # strict: reject characters outside the alphabet instead of dropping them
    return base64.b64decode(s.encode("ascii"), validate=True)


def compact_json(obj: Dict[str, Any]) -> str:
    # Insertion order preserved; this is the stored plaintext, not the hash input
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
