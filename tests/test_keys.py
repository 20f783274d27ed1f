import base64
import hashlib

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from multiformats import multibase

from i2kn_core.crypto import sign, verify
from i2kn_core.errors import KeyMaterialError
from i2kn_core.identity import NodeIdentity, load_private_key
from i2kn_core.keys import (
    ECDSA, RSA, SECP256K1, PublicKeyPB, marshal_private_key, marshal_public_key,
    peer_id_from_marshalled, unmarshal_private_key, unmarshal_public_key,
)

# base64pad protobuf-marshalled RSA private key, as handed to init by the node launcher
LAUNCHER_KEY = (
    "CAASpwkwggSjAgEAAoIBAQCZ8y9zRJUZCDzusYsXUoNL27BD6//9uWTzX1GljEjFShrwf6sg"
    "V76YwGT/kc4svdySzae+l/TxotI2/r1pk1vhOfg5gYqxQ3mmezu/Vu+tC0Djh6FaW/PJ5RuV"
    "/C2C407uTsd76osERV2bCzkIDSwjaOiq6cKctv+Se8CvQstouaMSDuYZPM1kJbrBqVix3gr+"
    "yCeAPOlVw82l9PEeri7xpeI9R7IMJq43NRnZAzsFhKbYvPhyRSIkQjcgrPic65NNplDb8fm/"
    "TlTjsPy5gbKqEH4J8T32BT+Z6AJi4w2ei0YoW6x5fKVvAMarNSBhxR0DCJAii3IPsVSjL7VW"
    "AibJAgMBAAECggEADNECEkaTYxIcgIKnYbms1JPliMIM/cKBdQFqeq3DISmaNItsY7TqWS0r"
    "O1uYHoFv64jTfjqIWdWESq/KdQ+fhpCc6ayvLzK+3e1EfBlwuqdFL6wK8srU8Onx8fqcj1j9"
    "KTnFwbs095YOxOmaReFS21/QfuoXGZTikf9bezvEU2N/5FRPLP7CAksaNsOk7pL5ma9HQs1K"
    "msiEZGmBeubyqJSXHPGub6iBlNhRRA7g3WJBuqf0+xrI9StPQbP1yBsdWe8QtFDtkRc/eoMW"
    "srLeGpGTBjonfRQkt4Nuj/8vuUlKH+9uSF1vvOO/UypW8GkFKA59tZu7D2Fwh6vnzaRhAQKB"
    "gQDSGNo6MtzO03EpgVOFx4aQ1QyND6HD22WRBWOOwNHSRks7LiGzLT5awAhS62/voyqbNlu5"
    "Dz4ul/IXU+uqbJmiA5rA9HA7R/+8iA9Lhm2MXM2PgMDXgJ4aFzBdMrOwPwFV/gbmsajHb0Hn"
    "xgOKuwbrxGaGW1zsDZQ0r0BOxsKoJQKBgQC7lelvB4ESySVXW3ZOrqmsnm47v/hb5xPz8z9H"
    "IihM7RQZGT78jkDauMZkAFZBDJ8njmgFb8z0TQ0Z7yNM3zLoCybXELh1jNo0bYdcGFquTgb8"
    "bwu4sysA7bCahF9svbVSFByNHBxO4A0f4nzvPCQH52B0MJeYQVbvenvP9wdA1QKBgQCGR8oa"
    "zm1gZ7X5ACaA56CzKugltGsAwlYtFVOnZsf0bGcjAP4bBfzHhdsMHFxjvla580k2g26L2yOp"
    "E0MZnuWmrkUXtGOTEBZ8yj10WQvlXV8oq/MVCaiDJnUL7B76s5pH+t8wTTaBmTN3TpDu91Ca"
    "GeIpV3WRjbA+6A/jCZhaXQKBgDxghiAMhEjtoS067RtqMIa0/7oPkfrSp6NvecCFh/8ql7t0"
    "WsejadB8hK6PRTPuwhNTTLvjPk6rtjnQtMX7WUFCxZ+XbCe5zEnvrw+/bwCHcMwzWcx7Lq4/"
    "0wYI8UXo0cG3Y3EvyRTCHLdUiO3fp6E7odoEAecpsLen7s4DLrx5AoGAJK1s5UnpGBeSlGJB"
    "kxsBuHPEYVP9gaMzrgcw0+vZKJJLFeAtJ+QsRQnztFE+y1SuzkwOcpeOlvSYEYV286BpkdhM"
    "i1V6Vd7paj7bUXltLEUlhJ8wGddnLz58OhBhsm812JIpX8BVx7EfvDzUGwrrRBLQ3bPNe/vq"
    "r2MjOrgQyYM="
)


def test_launcher_key_loads_as_rsa():
    key = load_private_key(LAUNCHER_KEY)
    assert isinstance(key, rsa.RSAPrivateKey)
    assert key.key_size == 2048
    assert marshal_private_key(key) == base64.b64decode(LAUNCHER_KEY)


def test_launcher_key_peer_id():
    ident = NodeIdentity.from_private_key(LAUNCHER_KEY)
    assert ident.private_key_bytes == base64.b64decode(LAUNCHER_KEY)
    assert ident.public_key_bytes[:2] == b"\x08\x00"
    digest = hashlib.sha256(ident.public_key_bytes).digest()
    assert multibase.decode("z" + ident.peer_id) == b"\x12\x20" + digest
    assert ident.peer_id.startswith("Qm") and len(ident.peer_id) == 46


@pytest.mark.parametrize("curve, key_type", [(ec.SECP256K1(), SECP256K1), (ec.SECP256R1(), ECDSA)])
def test_ec_keys_round_trip(curve, key_type):
    key = ec.generate_private_key(curve)
    pub = marshal_public_key(key.public_key())
    msg = PublicKeyPB()
    msg.ParseFromString(pub)
    assert msg.Type == key_type

    again = unmarshal_private_key(marshal_private_key(key))
    assert again.private_numbers() == key.private_numbers()
    assert verify(pub, sign(again, b"payload"), b"payload")


def test_secp256k1_public_key_is_compressed_and_inlined():
    key = ec.generate_private_key(ec.SECP256K1())
    pub = marshal_public_key(key.public_key())
    # 4 bytes of framing + 33-byte compressed point
    assert len(pub) == 37
    assert multibase.decode("z" + peer_id_from_marshalled(pub))[:2] == b"\x00\x25"
    assert unmarshal_public_key(pub).public_numbers() == key.public_key().public_numbers()


def test_rsa_public_key_round_trip(rsa_key):
    pub = marshal_public_key(rsa_key.public_key())
    msg = PublicKeyPB()
    msg.ParseFromString(pub)
    assert msg.Type == RSA
    assert unmarshal_public_key(pub).public_numbers() == rsa_key.public_key().public_numbers()


@pytest.mark.parametrize("data", [b"", b"\x08\x01", b"\x08\x01\x12\x03abc", b"\xff\xff\xff"])
def test_unmarshal_rejects_garbage(data):
    with pytest.raises(KeyMaterialError):
        unmarshal_public_key(data)
    with pytest.raises(KeyMaterialError):
        unmarshal_private_key(data)
