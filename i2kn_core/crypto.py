"""
i2kn_core.crypto
----------------
Cryptographic primitives for the record store:

- derive_key(): symmetric key + IV from the node's private key material
- CipherService: AES-256-CTR with a pluggable nonce strategy
- sign() / verify(): signatures over record plaintext (RSA, Ed25519, ECDSA),
  verified against a marshalled libp2p public key

There is no AEAD tag on record ciphertext. A wrong key decrypts to garbage
without error; signature and CID checks on load are what catch it.
"""

from __future__ import annotations
from typing import Optional, Tuple
import os

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .constants import AES_IV_SIZE, AES_KEY_SIZE, HKDF_INFO
from .errors import DecryptionError, KeyMaterialError
from .keys import unmarshal_public_key

# --------- Key derivation ----------
def derive_key(private_key_bytes: bytes, method: str = "hkdf") -> Tuple[bytes, bytes]:
    """
    Split private key material into a 32-byte AES key and a 16-byte IV.

    ``split`` slices the raw bytes directly (legacy on-disk layout);
    ``hkdf`` first expands them with HKDF-SHA256 so neither half carries
    protobuf/DER headers or public modulus bytes.
    """
    size = AES_KEY_SIZE + AES_IV_SIZE
    if method == "split":
        material = private_key_bytes
    elif method == "hkdf":
        hkdf = HKDF(algorithm=hashes.SHA256(), length=size, salt=None, info=HKDF_INFO)
        material = hkdf.derive(private_key_bytes)
    else:
        raise ValueError(f"Unknown key derivation: {method}")

    if len(material) < size:
        raise KeyMaterialError(f"need at least {size} bytes of key material, got {len(material)}")
    return material[:AES_KEY_SIZE], material[AES_KEY_SIZE:size]

# --------- Nonce strategies ----------
class NonceStrategy:
    name: str = "base"
    # whether the nonce must travel with the ciphertext
    persisted: bool = False

    def next_nonce(self, static_iv: bytes) -> bytes:
        raise NotImplementedError


class StaticNonce(NonceStrategy):
    """Reuses the derived IV for every message. Kept for legacy envelopes only."""
    name = "static"
    persisted = False

    def next_nonce(self, static_iv: bytes) -> bytes:
        return static_iv


class RandomNonce(NonceStrategy):
    name = "random"
    persisted = True

    def next_nonce(self, static_iv: bytes) -> bytes:
        return os.urandom(AES_IV_SIZE)


NONCE_STRATEGIES = {s.name: s for s in (StaticNonce, RandomNonce)}


def nonce_strategy(name: str) -> NonceStrategy:
    try:
        return NONCE_STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown nonce strategy: {name}") from None

# --------- AES-256-CTR ----------
class CipherService:
    def __init__(self, key: bytes, iv: bytes, strategy: Optional[NonceStrategy] = None):
        if len(key) != AES_KEY_SIZE or len(iv) != AES_IV_SIZE:
            raise KeyMaterialError("AES key must be 32 bytes and IV 16 bytes")
        self._key = key
        self._iv = iv
        self.strategy = strategy or RandomNonce()

    @classmethod
    def from_private_key_bytes(cls, private_key_bytes: bytes, method: str = "hkdf",
                               strategy: Optional[NonceStrategy] = None) -> "CipherService":
        key, iv = derive_key(private_key_bytes, method)
        return cls(key, iv, strategy)

    def encrypt(self, plaintext: bytes) -> Tuple[Optional[bytes], bytes]:
        """Returns (nonce, ciphertext); nonce is None when it must not be persisted."""
        nonce = self.strategy.next_nonce(self._iv)
        enc = Cipher(algorithms.AES(self._key), modes.CTR(nonce)).encryptor()
        ct = enc.update(plaintext) + enc.finalize()
        return (nonce if self.strategy.persisted else None), ct

    def decrypt(self, ciphertext: bytes, nonce: Optional[bytes] = None) -> bytes:
        if not ciphertext:
            raise DecryptionError("empty ciphertext")
        if nonce is None:
            nonce = self._iv
        if len(nonce) != AES_IV_SIZE:
            raise DecryptionError(f"nonce must be {AES_IV_SIZE} bytes, got {len(nonce)}")
        dec = Cipher(algorithms.AES(self._key), modes.CTR(nonce)).decryptor()
        return dec.update(ciphertext) + dec.finalize()

# --------- Sign / verify ----------
def sign(private_key, data: bytes) -> bytes:
    if isinstance(private_key, rsa.RSAPrivateKey):
        return private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return private_key.sign(data)
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return private_key.sign(data, ec.ECDSA(hashes.SHA256()))
    raise KeyMaterialError(f"unsupported signing key: {type(private_key).__name__}")


def verify(public_key_bytes: bytes, signature: bytes, data: bytes) -> bool:
    """Never raises: a bad key, a bad signature or a mismatch is just False."""
    try:
        pub = unmarshal_public_key(public_key_bytes)
    except KeyMaterialError:
        return False
    try:
        if isinstance(pub, rsa.RSAPublicKey):
            pub.verify(signature, data, padding.PKCS1v15(), hashes.SHA256())
        elif isinstance(pub, ed25519.Ed25519PublicKey):
            pub.verify(signature, data)
        elif isinstance(pub, ec.EllipticCurvePublicKey):
            pub.verify(signature, data, ec.ECDSA(hashes.SHA256()))
        else:
            return False
        return True
    except (InvalidSignature, ValueError):
        return False
