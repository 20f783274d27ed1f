"""
i2kn_core.identity
------------------
Node identity and peer identity resolution.

The identity of a signer is its libp2p peer ID, computed from the marshalled
public key carried in every envelope. It is always recomputed from that key
and never read back from storage.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Union
import binascii

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from .errors import KeyMaterialError
from .keys import (
    SUPPORTED_KEYS, marshal_private_key, marshal_public_key, peer_id_from_marshalled,
    unmarshal_private_key,
)
from .utils import b64d

# first byte of a marshalled key (field 1, varint); DER always starts with 0x30
PROTOBUF_KEY_TAG = b"\x08"


def identity_from_public_key(public_key_bytes: bytes) -> str:
    """Peer ID for a marshalled libp2p public key."""
    return peer_id_from_marshalled(public_key_bytes)


def load_private_key(material: Union[str, bytes]):
    """
    Accepts a libp2p marshalled private key (raw or base64pad, as handed to
    ``init`` by the node launcher), PEM text or bytes, PKCS#8/PKCS#1 DER
    bytes, or base64-encoded DER.
    """
    if isinstance(material, str):
        text = material.strip()
        if text.startswith("-----BEGIN"):
            return _load_pem(text.encode("ascii"))
        try:
            data = b64d(text)
        except (binascii.Error, ValueError) as e:
            raise KeyMaterialError(f"private key is not base64: {e}") from e
    elif isinstance(material, (bytes, bytearray)):
        data = bytes(material)
        if data.lstrip().startswith(b"-----BEGIN"):
            return _load_pem(data)
    else:
        raise KeyMaterialError(f"private key must be str or bytes, got {type(material).__name__}")

    if data.startswith(PROTOBUF_KEY_TAG):
        return unmarshal_private_key(data)
    return _checked(_load(serialization.load_der_private_key, data))


def _load_pem(data: bytes):
    return _checked(_load(serialization.load_pem_private_key, data))


def _load(loader, data: bytes):
    try:
        return loader(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyMaterialError(f"cannot load private key: {e}") from e


def _checked(key):
    if not isinstance(key, SUPPORTED_KEYS):
        raise KeyMaterialError(f"unsupported key type: {type(key).__name__}")
    return key


@dataclass(frozen=True)
class NodeIdentity:
    private_key: object = field(repr=False)
    # marshalled libp2p keys; the private form also seeds the AES key/IV
    public_key_bytes: bytes = field(repr=False)
    private_key_bytes: bytes = field(repr=False)
    peer_id: str = ""

    @classmethod
    def from_private_key(cls, material) -> "NodeIdentity":
        key = material if isinstance(material, SUPPORTED_KEYS) else load_private_key(material)
        pub = marshal_public_key(key.public_key())
        return cls(
            private_key=key,
            public_key_bytes=pub,
            private_key_bytes=marshal_private_key(key),
            peer_id=identity_from_public_key(pub),
        )
