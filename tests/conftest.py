import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

from i2kn_core.node import create_repo, init_node
from i2kn_core.store import RecordStore


def pem(key) -> str:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def ed_key():
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture
def ctx(tmp_path, rsa_key):
    c = init_node(pem(rsa_key), {"home": str(tmp_path)})
    create_repo(c)
    return c


@pytest.fixture
def store(ctx):
    return RecordStore(ctx)
