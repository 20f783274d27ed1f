"""
i2kn_core.envelope
------------------
Defines the Envelope class, the on-disk wrapper around one encrypted record.

Wire form (UTF-8 JSON, one file per CID):

    {"item": b64(ciphertext), "byPubkey": b64(marshalled public key), "cidPrev": cid|null,
     "sig": b64(signature), "nonce": b64(nonce)}

``nonce`` is only present when the record was encrypted with a per-message
nonce. No signer identity is stored; readers recompute it from ``byPubkey``.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional
import binascii, json

from .errors import DecryptionError, EnvelopeFormatError
from .utils import b64d, b64e

REQUIRED_FIELDS = ("item", "byPubkey", "sig")


@dataclass(frozen=True)
class Envelope:
    item: str                       # base64 ciphertext
    by_pubkey: str                  # base64 SubjectPublicKeyInfo DER
    sig: str                        # base64 signature over the plaintext
    cid_prev: Optional[str] = None
    nonce: Optional[str] = None     # base64, random-nonce envelopes only

    @classmethod
    def seal(cls, ciphertext: bytes, public_key: bytes, signature: bytes,
             cid_prev: Optional[str] = None, nonce: Optional[bytes] = None) -> "Envelope":
        return cls(
            item=b64e(ciphertext),
            by_pubkey=b64e(public_key),
            sig=b64e(signature),
            cid_prev=cid_prev,
            nonce=b64e(nonce) if nonce is not None else None,
        )

    # --- decoded views ---

    def ciphertext(self) -> bytes:
        try:
            return b64d(self.item)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError(f"ciphertext is not base64: {e}") from e

    def nonce_bytes(self) -> Optional[bytes]:
        if self.nonce is None:
            return None
        try:
            return b64d(self.nonce)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError(f"nonce is not base64: {e}") from e

    def public_key(self) -> bytes:
        try:
            return b64d(self.by_pubkey)
        except (binascii.Error, ValueError) as e:
            raise EnvelopeFormatError(f"byPubkey is not base64: {e}") from e

    def signature(self) -> bytes:
        # an undecodable signature is a failed verification, not a format error
        try:
            return b64d(self.sig)
        except (binascii.Error, ValueError):
            return b""

    # --- serialization ---

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "item": self.item,
            "byPubkey": self.by_pubkey,
            "cidPrev": self.cid_prev,
            "sig": self.sig,
        }
        if self.nonce is not None:
            d["nonce"] = self.nonce
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Envelope":
        if not isinstance(data, dict):
            raise EnvelopeFormatError("envelope must be a JSON object")
        missing = [k for k in REQUIRED_FIELDS if not isinstance(data.get(k), str)]
        if missing:
            raise EnvelopeFormatError(f"envelope missing fields: {', '.join(missing)}")
        cid_prev = data.get("cidPrev")
        nonce = data.get("nonce")
        if cid_prev is not None and not isinstance(cid_prev, str):
            raise EnvelopeFormatError("cidPrev must be a string or null")
        if nonce is not None and not isinstance(nonce, str):
            raise EnvelopeFormatError("nonce must be a string")
        return cls(
            item=data["item"],
            by_pubkey=data["byPubkey"],
            sig=data["sig"],
            cid_prev=cid_prev,
            nonce=nonce,
        )

    @classmethod
    def from_json(cls, text: str) -> "Envelope":
        try:
            data = json.loads(text)
        except ValueError as e:
            raise EnvelopeFormatError(f"envelope is not valid JSON: {e}") from e
        return cls.from_dict(data)
