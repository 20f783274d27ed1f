"""
i2kn_core.keys
--------------
libp2p key marshalling and peer IDs.

Keys travel as the libp2p protobuf ``{Type, Data}`` messages:

    RSA        private: PKCS#1 DER          public: SubjectPublicKeyInfo DER
    Ed25519    private: seed || public (64) public: raw 32 bytes
    Secp256k1  private: raw 32-byte scalar  public: compressed point
    ECDSA      private: SEC1 DER            public: SubjectPublicKeyInfo DER

A peer ID is the multihash of the marshalled public key (identity hash when
it is 42 bytes or shorter, sha2-256 otherwise) in bare base58btc.
"""

from __future__ import annotations
from typing import Any

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError
from multiformats import multibase, multihash

from .errors import KeyMaterialError

RSA, ED25519, SECP256K1, ECDSA = 0, 1, 2, 3
KEY_TYPE_NAMES = {RSA: "RSA", ED25519: "Ed25519", SECP256K1: "Secp256k1", ECDSA: "ECDSA"}

# identity multihash is used up to this many bytes of marshalled public key
MAX_INLINE_KEY_LENGTH = 42

SUPPORTED_KEYS = (rsa.RSAPrivateKey, ed25519.Ed25519PrivateKey, ec.EllipticCurvePrivateKey)

# --------- protobuf messages (libp2p crypto.proto) ----------
def _build_messages():
    F = descriptor_pb2.FieldDescriptorProto
    fdp = descriptor_pb2.FileDescriptorProto(name="i2kn/keys.proto", package="i2kn.pb", syntax="proto2")
    key_type = fdp.enum_type.add(name="KeyType")
    for number, name in KEY_TYPE_NAMES.items():
        key_type.value.add(name=name, number=number)
    for msg_name in ("PublicKey", "PrivateKey"):
        msg = fdp.message_type.add(name=msg_name)
        msg.field.add(name="Type", number=1, label=F.LABEL_REQUIRED, type=F.TYPE_ENUM,
                      type_name=".i2kn.pb.KeyType")
        msg.field.add(name="Data", number=2, label=F.LABEL_REQUIRED, type=F.TYPE_BYTES)

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(fdp.SerializeToString())
    return (
        message_factory.GetMessageClass(pool.FindMessageTypeByName("i2kn.pb.PublicKey")),
        message_factory.GetMessageClass(pool.FindMessageTypeByName("i2kn.pb.PrivateKey")),
    )


PublicKeyPB, PrivateKeyPB = _build_messages()


def _parse(cls, data: bytes):
    msg = cls()
    try:
        msg.ParseFromString(data)
    except DecodeError as e:
        raise KeyMaterialError(f"not a marshalled key: {e}") from e
    return msg.Type, msg.Data

# --------- marshal ----------
def marshal_public_key(public_key) -> bytes:
    if isinstance(public_key, rsa.RSAPublicKey):
        key_type, data = RSA, _spki(public_key)
    elif isinstance(public_key, ed25519.Ed25519PublicKey):
        key_type, data = ED25519, public_key.public_bytes_raw()
    elif isinstance(public_key, ec.EllipticCurvePublicKey):
        if isinstance(public_key.curve, ec.SECP256K1):
            key_type = SECP256K1
            data = public_key.public_bytes(serialization.Encoding.X962,
                                           serialization.PublicFormat.CompressedPoint)
        else:
            key_type, data = ECDSA, _spki(public_key)
    else:
        raise KeyMaterialError(f"unsupported public key: {type(public_key).__name__}")
    return PublicKeyPB(Type=key_type, Data=data).SerializeToString()


def marshal_private_key(private_key) -> bytes:
    if isinstance(private_key, rsa.RSAPrivateKey):
        key_type, data = RSA, _traditional_der(private_key)
    elif isinstance(private_key, ed25519.Ed25519PrivateKey):
        key_type = ED25519
        data = private_key.private_bytes_raw() + private_key.public_key().public_bytes_raw()
    elif isinstance(private_key, ec.EllipticCurvePrivateKey):
        if isinstance(private_key.curve, ec.SECP256K1):
            key_type = SECP256K1
            data = private_key.private_numbers().private_value.to_bytes(32, "big")
        else:
            key_type, data = ECDSA, _traditional_der(private_key)
    else:
        raise KeyMaterialError(f"unsupported private key: {type(private_key).__name__}")
    return PrivateKeyPB(Type=key_type, Data=data).SerializeToString()


def _spki(public_key) -> bytes:
    return public_key.public_bytes(serialization.Encoding.DER,
                                   serialization.PublicFormat.SubjectPublicKeyInfo)


def _traditional_der(private_key) -> bytes:
    return private_key.private_bytes(serialization.Encoding.DER,
                                     serialization.PrivateFormat.TraditionalOpenSSL,
                                     serialization.NoEncryption())

# --------- unmarshal ----------
def unmarshal_public_key(data: bytes) -> Any:
    key_type, raw = _parse(PublicKeyPB, data)
    try:
        if key_type == RSA or key_type == ECDSA:
            key = serialization.load_der_public_key(raw)
        elif key_type == ED25519:
            key = ed25519.Ed25519PublicKey.from_public_bytes(raw)
        elif key_type == SECP256K1:
            key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), raw)
        else:
            raise KeyMaterialError(f"unsupported key type: {key_type}")
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyMaterialError(f"bad {KEY_TYPE_NAMES.get(key_type, key_type)} public key: {e}") from e
    return key


def unmarshal_private_key(data: bytes) -> Any:
    key_type, raw = _parse(PrivateKeyPB, data)
    try:
        if key_type == RSA or key_type == ECDSA:
            key = serialization.load_der_private_key(raw, password=None)
        elif key_type == ED25519:
            # seed first; older encodings append the public key twice
            key = ed25519.Ed25519PrivateKey.from_private_bytes(raw[:32])
        elif key_type == SECP256K1:
            key = ec.derive_private_key(int.from_bytes(raw, "big"), ec.SECP256K1())
        else:
            raise KeyMaterialError(f"unsupported key type: {key_type}")
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyMaterialError(f"bad {KEY_TYPE_NAMES.get(key_type, key_type)} private key: {e}") from e
    if not isinstance(key, SUPPORTED_KEYS):
        raise KeyMaterialError(f"unsupported key type: {type(key).__name__}")
    return key

# --------- peer IDs ----------
def peer_id_from_marshalled(public_key: bytes) -> str:
    hashfun = "identity" if len(public_key) <= MAX_INLINE_KEY_LENGTH else "sha2-256"
    mh = multihash.digest(public_key, hashfun)
    # peer IDs are bare base58btc, without the multibase "z" prefix
    return multibase.encode(mh, "base58btc")[1:]
